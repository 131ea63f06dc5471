"""Shared data type definitions (Credential, UploadSession, ChunkDescriptor, DriveItem)."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from common.constants import TOKEN_EXPIRY_MARGIN_SECONDS


@dataclass(frozen=True)
class Credential:
    """
    Bearer token issued by the identity endpoint.

    Attributes:
        token: Opaque access token
        expires_at: Epoch seconds at which the provider stops accepting the token
    """
    token: str
    expires_at: float

    def is_valid(self, now: float, margin: float = TOKEN_EXPIRY_MARGIN_SECONDS) -> bool:
        """Return True while the token is usable with the safety margin applied."""
        return now < self.expires_at - margin


@dataclass(frozen=True)
class UploadSession:
    """
    Short-lived upload endpoint minted for one file.
    """
    endpoint: str
    total_size: int
    file_name: str
    parent_folder_id: str


@dataclass(frozen=True)
class ChunkDescriptor:
    """
    Byte range of a single upload chunk, end offset exclusive.
    """
    start_offset: int
    end_offset: int
    sequence_index: int

    @property
    def size(self) -> int:
        return self.end_offset - self.start_offset


@dataclass
class TransferProgress:
    """Confirmed bytes of one upload attempt and the last percentage reported."""
    total_size: int
    confirmed_bytes: int = 0
    last_percentage: int = -1


@dataclass(frozen=True)
class DriveItem:
    """
    File or folder record returned by the drive listing.
    """
    id: str
    name: str
    size: int = 0
    mime_type: Optional[str] = None
    is_folder: bool = False
    child_count: Optional[int] = None
    download_url: Optional[str] = None
    thumbnails: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'DriveItem':
        """Build a DriveItem from a Graph drive-item dictionary."""
        folder = record.get('folder')
        file_facet = record.get('file')
        size = record.get('size')
        thumbnails = record.get('thumbnails')
        return cls(
            id=str(record.get('id', '')),
            name=str(record.get('name') or ''),
            size=size if isinstance(size, int) else 0,
            mime_type=file_facet.get('mimeType') if isinstance(file_facet, dict) else None,
            is_folder=folder is not None,
            child_count=folder.get('childCount') if isinstance(folder, dict) else None,
            download_url=record.get('@microsoft.graph.downloadUrl') or record.get('downloadUrl'),
            thumbnails=list(thumbnails) if isinstance(thumbnails, list) else [],
        )
