"""Custom completer for the DriveGate CLI with local file completion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS


class DriveGateCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local file path completion for the files of the 'upload' command
    - Local directory completion for the output path of the 'get' command
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        current_word = "" if is_typing_new_token else tokens[-1]
        position = len(tokens) if is_typing_new_token else len(tokens) - 1

        if command == "upload" and position >= 2:
            yield from self._complete_paths(current_word, directories_only=False)
        elif command == "get" and position == 2:
            yield from self._complete_paths(current_word, directories_only=True)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_paths(self, partial: str, directories_only: bool) -> Iterable[Completion]:
        """Complete entries of the directory named by the partial path."""
        if partial.endswith("/"):
            parent_text, prefix = partial, ""
        elif "/" in partial:
            parent_text, prefix = partial.rsplit("/", 1)
            parent_text += "/"
        else:
            parent_text, prefix = "", partial

        parent = Path(parent_text).expanduser() if parent_text else Path.cwd()
        if not parent.is_dir():
            return

        try:
            entries = sorted(parent.iterdir(), key=lambda p: p.name.lower())
        except OSError:
            return

        for entry in entries:
            if entry.name.startswith(".") and not prefix.startswith("."):
                continue
            if not entry.name.startswith(prefix):
                continue
            if directories_only and not entry.is_dir():
                continue
            suffix = "/" if entry.is_dir() else ""
            yield Completion(parent_text + entry.name + suffix, start_position=-len(partial))
