"""Upload session negotiation route."""

from fastapi import APIRouter, Depends

from proxy.dependencies import get_upload_negotiator
from proxy.schemas.common import ErrorResponse
from proxy.schemas.upload import CreateUploadSessionRequest, CreateUploadSessionResponse
from proxy.services.upload_service import UploadSessionNegotiator

router = APIRouter(prefix="/api", tags=["Upload"])


@router.post(
    "/upload",
    response_model=CreateUploadSessionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
def create_upload_session(
    request: CreateUploadSessionRequest,
    negotiator: UploadSessionNegotiator = Depends(get_upload_negotiator)
):
    """
    Mint an upload session for a file in a folder.

    Parameters:
        - itemId: Folder to upload into
        - fileName: Name of the file; directory components are discarded

    Returns:
        - uploadUrl: Pre-authenticated endpoint for chunked PUTs

    Raises:
        - 400: Missing itemId or fileName
        - 4xx/5xx: Graph API rejection, message passed through
    """
    upload_url = negotiator.negotiate(request.itemId or '', request.fileName or '')
    return CreateUploadSessionResponse(uploadUrl=upload_url)
