"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    GetCommand,
    InfoCommand,
    ListCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of List/Info/Get/Upload)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0].lower()

    if command_name == "list":
        return _parse_list(tokens[1:])
    elif command_name == "info":
        return _parse_info(tokens[1:])
    elif command_name == "get":
        return _parse_get(tokens[1:])
    elif command_name == "upload":
        return _parse_upload(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {tokens[0]}")


def _parse_list(args: list[str]) -> ListCommand:
    """Parse 'list <share-code>' command."""
    if len(args) != 1:
        raise ParseError("list requires exactly 1 argument: <share-code>")

    return ListCommand(share_code=args[0])


def _parse_info(args: list[str]) -> InfoCommand:
    """Parse 'info <file-id>' command."""
    if len(args) != 1:
        raise ParseError("info requires exactly 1 argument: <file-id>")

    return InfoCommand(file_id=args[0])


def _parse_get(args: list[str]) -> GetCommand:
    """Parse 'get <file-id> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("get requires 1 or 2 arguments: <file-id> [output_path]")

    output_path = args[1] if len(args) > 1 else None
    return GetCommand(file_id=args[0], output_path=output_path)


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <folder-id> <file> [<file> ...]' command."""
    if len(args) < 2:
        raise ParseError("upload requires a folder id and at least one file")

    return UploadCommand(folder_id=args[0], file_list=tuple(args[1:]))
