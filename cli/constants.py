"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["list", "info", "get", "upload", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2B88D8 bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;43;136;216m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
 ██████╗ ██████╗ ██╗██╗   ██╗███████╗ ██████╗  █████╗ ████████╗███████╗
 ██╔══██╗██╔══██╗██║██║   ██║██╔════╝██╔════╝ ██╔══██╗╚══██╔══╝██╔════╝
 ██║  ██║██████╔╝██║██║   ██║█████╗  ██║  ███╗███████║   ██║   █████╗
 ██║  ██║██╔══██╗██║╚██╗ ██╔╝██╔══╝  ██║   ██║██╔══██║   ██║   ██╔══╝
 ██████╔╝██║  ██║██║ ╚████╔╝ ███████╗╚██████╔╝██║  ██║   ██║   ███████╗
 ╚═════╝ ╚═╝  ╚═╝╚═╝  ╚═══╝  ╚══════╝ ╚═════╝ ╚═╝  ╚═╝   ╚═╝   ╚══════╝
{RESET}"""

WELCOME_TITLE = "DriveGate CLI - Share-code access to a cloud drive"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "drivegate> "

HELP_TEXT = """Available commands:
  list <share-code>                   List the files of a shared folder
  info <file-id>                      Show a file's temporary download link
  get <file-id> [output_path]         Download a file (defaults to the current directory)
  upload <folder-id> <file> [...]     Upload local files into a folder
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  list 01ABCDEF2GHIJKLMNOP
  info 01QRSTUVWXYZ
  get 01QRSTUVWXYZ downloads/report.pdf
  upload 01ABCDEF2GHIJKLMNOP report.pdf 'holiday photos.zip'"""
