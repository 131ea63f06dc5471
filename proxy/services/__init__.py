"""Service layer for proxy operations."""

from proxy.services.file_service import FileService
from proxy.services.upload_service import UploadSessionNegotiator, sanitize_file_name

__all__ = [
    "FileService",
    "UploadSessionNegotiator",
    "sanitize_file_name",
]
