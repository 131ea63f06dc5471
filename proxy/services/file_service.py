"""Folder listing and item resolution for the proxy."""

from typing import Any, Dict, List

from common.exceptions import ProxyError
from common.logging_config import get_logger
from proxy.graph_client import GraphClient

logger = get_logger(__name__)


class FileService:
    def __init__(self, graph: GraphClient):
        self.graph = graph

    def list_folder(self, item_id: str) -> List[Dict[str, Any]]:
        item_id = (item_id or '').strip()
        if not item_id:
            raise ProxyError("A required parameter (itemId or fileId) is missing.", status_code=400)
        return self.graph.list_children(item_id)

    def resolve_item(self, file_id: str) -> Dict[str, str]:
        file_id = (file_id or '').strip()
        if not file_id:
            raise ProxyError("A required parameter (itemId or fileId) is missing.", status_code=400)

        download_url = self.graph.resolve_download_url(file_id)
        logger.info(f"Resolved download location for file {file_id}")
        return {'id': file_id, 'downloadUrl': download_url}
