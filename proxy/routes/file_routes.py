"""Folder listing and item resolution routes."""

from typing import Optional, Union

from fastapi import APIRouter, Depends, Query

from common.exceptions import ProxyError
from proxy.dependencies import get_file_service
from proxy.schemas.common import ErrorResponse
from proxy.schemas.files import ListFilesResponse, ResolvedFile, ResolveFileResponse
from proxy.services.file_service import FileService

router = APIRouter(prefix="/api", tags=["Files"])


@router.get(
    "/files",
    response_model=Union[ResolveFileResponse, ListFilesResponse],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
def get_files(
    itemId: Optional[str] = Query(None, description="Folder id (share code) to list"),
    fileId: Optional[str] = Query(None, description="File id to resolve"),
    file_service: FileService = Depends(get_file_service)
):
    """
    List a folder or resolve a single file.

    Parameters:
        - fileId: when present and non-blank, resolve this file's download URL
        - itemId: otherwise, list this folder's children (all pages)

    Returns:
        - {file: {id, downloadUrl}} for fileId
        - {files: [...]} for itemId

    Raises:
        - 400: Neither parameter given
        - 500: Graph API failure
    """
    if fileId and fileId.strip():
        resolved = file_service.resolve_item(fileId)
        return ResolveFileResponse(file=ResolvedFile(**resolved))

    if itemId and itemId.strip():
        return ListFilesResponse(files=file_service.list_folder(itemId))

    raise ProxyError("A required parameter (itemId or fileId) is missing.", status_code=400)
