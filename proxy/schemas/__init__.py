"""Pydantic schemas for API requests and responses."""

from proxy.schemas.files import ListFilesResponse, ResolvedFile, ResolveFileResponse
from proxy.schemas.upload import CreateUploadSessionRequest, CreateUploadSessionResponse
from proxy.schemas.common import ErrorResponse

__all__ = [
    "ListFilesResponse",
    "ResolvedFile",
    "ResolveFileResponse",
    "CreateUploadSessionRequest",
    "CreateUploadSessionResponse",
    "ErrorResponse"
]
