"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class ListCommand:
    """List the items of a shared folder."""

    share_code: str
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class InfoCommand:
    """Resolve a file's transient download URL."""

    file_id: str
    command: Literal["info"] = "info"


@dataclass(frozen=True)
class GetCommand:
    """Download a file by id."""

    file_id: str
    output_path: str | None = None
    command: Literal["get"] = "get"


@dataclass(frozen=True)
class UploadCommand:
    """Upload local files into a folder."""

    folder_id: str
    file_list: tuple[str, ...]
    command: Literal["upload"] = "upload"


CommandRequest = (
    ListCommand
    | InfoCommand
    | GetCommand
    | UploadCommand
)
