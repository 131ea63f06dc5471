"""FastAPI dependencies that hand out the per-application services."""

from fastapi import Request

from proxy.services.file_service import FileService
from proxy.services.upload_service import UploadSessionNegotiator


def _require_configuration(request: Request) -> None:
    request.app.state.settings.require_complete()


def get_file_service(request: Request) -> FileService:
    """Return the application's FileService once configuration is verified."""
    _require_configuration(request)
    return request.app.state.file_service


def get_upload_negotiator(request: Request) -> UploadSessionNegotiator:
    """Return the application's UploadSessionNegotiator once configuration is verified."""
    _require_configuration(request)
    return request.app.state.upload_negotiator
