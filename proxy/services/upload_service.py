"""Upload session negotiation for the proxy."""

import re

from common.exceptions import SessionError
from common.logging_config import get_logger
from proxy.graph_client import GraphClient

logger = get_logger(__name__)

_SEPARATORS = re.compile(r'[\\/]')


def sanitize_file_name(file_name: str) -> str:
    """
    Keep only the final path component of a client-supplied file name.

    Raises:
        SessionError: If nothing usable remains
    """
    name = _SEPARATORS.split(file_name.strip())[-1].strip()
    if name in ('', '.', '..'):
        raise SessionError(f"Bad Request: invalid fileName '{file_name}'.", status_code=400)
    return name


class UploadSessionNegotiator:
    def __init__(self, graph: GraphClient):
        self.graph = graph

    def negotiate(self, folder_id: str, file_name: str) -> str:
        if not folder_id or not folder_id.strip() or not file_name or not file_name.strip():
            raise SessionError("Bad Request: Missing itemId or fileName in the request body.", status_code=400)

        folder_id = folder_id.strip()
        safe_name = sanitize_file_name(file_name)
        if safe_name != file_name:
            logger.warning(f"Sanitized upload file name '{file_name}' to '{safe_name}'")

        upload_url = self.graph.create_upload_session(folder_id, safe_name)
        logger.info(f"Upload session created for '{safe_name}' in folder {folder_id}")
        return upload_url
