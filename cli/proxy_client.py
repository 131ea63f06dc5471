"""HTTP client for communicating with the backend proxy."""

import re
import uuid
from pathlib import Path
from typing import Callable, List, Optional

import httpx

from common.exceptions import ProxyError, SessionError
from common.logging_config import get_logger
from common.response_parser import extract_error_message, parse_response
from common.types import DriveItem, UploadSession
from cli.config import Config

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]

_CONTENT_DISPOSITION_NAME = re.compile(r'filename\*?=(?:UTF-8\'\')?"?([^";]+)"?', re.IGNORECASE)


class ProxyClient:
    """HTTP client for the proxy's listing, resolution and negotiation endpoints."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize proxy client.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport
        )
        self.request_id = None
        logger.info(f"Initialized ProxyClient [base_url={config.get_base_url()}]")

    def _request(self, method: str, endpoint: str, error_cls=ProxyError, **kwargs) -> httpx.Response:
        """
        Make a single HTTP request to the proxy.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            error_cls: Exception raised on network failure
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            error_cls: If the proxy cannot be reached or the request times out
        """
        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        try:
            response = self.session.request(method, endpoint, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Request timed out: {method} {endpoint} [request_id={self.request_id}]")
            raise error_cls("Request timed out. The proxy server may be overloaded.") from e
        except httpx.TransportError as e:
            logger.error(f"Network error: {method} {endpoint} error={e} [request_id={self.request_id}]")
            raise error_cls("Cannot connect to proxy server. Is it running?") from e

        logger.debug(
            f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
        )
        return response

    def list_folder(self, item_id: str) -> List[DriveItem]:
        """
        List the items of a shared folder.

        Args:
            item_id: Share code (folder item id)

        Returns:
            Items of every page in page order

        Raises:
            ProxyError: If the code is blank or the proxy reports a failure
            MalformedResponseError: If the success body holds no JSON
        """
        if not item_id or not item_id.strip():
            raise ProxyError("Please enter a valid share code.")

        response = self._request('GET', '/api/files', params={'itemId': item_id.strip()})
        if not response.is_success:
            message = extract_error_message(response, f"Server error, status code: {response.status_code}")
            raise ProxyError(message, status_code=response.status_code)

        data = parse_response(response)
        records = data.get('files', []) if isinstance(data, dict) else None
        if not isinstance(records, list) or not all(isinstance(record, dict) for record in records):
            raise ProxyError("The proxy returned no valid file data.")
        logger.info(f"Listed {len(records)} item(s) for share code {item_id}")
        return [DriveItem.from_record(record) for record in records]

    def resolve_file(self, file_id: str) -> DriveItem:
        """
        Resolve the transient download URL of a file.

        Args:
            file_id: File item id

        Returns:
            DriveItem with download_url set

        Raises:
            ProxyError: If the id is blank, the proxy fails, or no file data is returned
        """
        if not file_id or not file_id.strip():
            raise ProxyError("Please enter a valid file ID.")

        response = self._request('GET', '/api/files', params={'fileId': file_id.strip()})
        if not response.is_success:
            message = extract_error_message(response, f"Server error, status code: {response.status_code}")
            raise ProxyError(message, status_code=response.status_code)

        data = parse_response(response)
        record = data.get('file') if isinstance(data, dict) else None
        if not record or not isinstance(record, dict):
            raise ProxyError("The proxy returned no valid file data.")

        item = DriveItem.from_record(record)
        if not item.download_url:
            raise ProxyError("The proxy returned no download URL for the file.")
        return item

    def create_upload_session(self, folder_id: str, file_name: str, total_size: int) -> UploadSession:
        """
        Ask the proxy to negotiate an upload session.

        Args:
            folder_id: Folder to upload into
            file_name: Name of the file being uploaded
            total_size: File size in bytes

        Returns:
            UploadSession for the file

        Raises:
            SessionError: If the proxy cannot be reached or rejects the request
        """
        response = self._request(
            'POST', '/api/upload', error_cls=SessionError,
            json={'itemId': folder_id, 'fileName': file_name}
        )
        if not response.is_success:
            message = extract_error_message(response, 'Failed to create upload session.')
            raise SessionError(message, status_code=response.status_code)

        data = parse_response(response)
        upload_url = data.get('uploadUrl') if isinstance(data, dict) else None
        if not upload_url:
            raise SessionError('Failed to create upload session.')

        return UploadSession(
            endpoint=upload_url,
            total_size=total_size,
            file_name=file_name,
            parent_folder_id=folder_id,
        )

    def download(
        self,
        file_id: str,
        output_path: Optional[Path] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> Path:
        """
        Resolve a file and stream it to disk.

        Args:
            file_id: File item id
            output_path: Target file or directory (defaults to the current directory)
            on_progress: Called with (downloaded_bytes, total_bytes); total is 0 when unknown

        Returns:
            Path of the written file

        Raises:
            ProxyError: If resolution or the transfer fails
        """
        item = self.resolve_file(file_id)

        try:
            with self.session.stream('GET', item.download_url) as response:
                if not response.is_success:
                    response.read()
                    raise ProxyError(
                        f"Download failed with status {response.status_code}.",
                        status_code=response.status_code
                    )

                target = self._download_target(output_path, response, file_id)
                total = int(response.headers.get('Content-Length', 0) or 0)
                downloaded = 0

                with open(target, 'wb') as f:
                    for chunk in response.iter_bytes(chunk_size=64 * 1024):
                        f.write(chunk)
                        downloaded += len(chunk)
                        if on_progress:
                            on_progress(downloaded, total)
        except httpx.TransportError as e:
            logger.error(f"Download of {file_id} failed: {e}")
            raise ProxyError(f"Download interrupted: {e}") from e

        logger.info(f"Downloaded {file_id} to {target} ({downloaded} bytes)")
        return target

    @staticmethod
    def _download_target(output_path: Optional[Path], response: httpx.Response, file_id: str) -> Path:
        """Pick the output file, naming it after Content-Disposition when given a directory."""
        match = _CONTENT_DISPOSITION_NAME.search(response.headers.get('Content-Disposition', ''))
        filename = Path(match.group(1)).name if match else file_id

        if output_path is None:
            return Path.cwd() / filename
        if output_path.is_dir():
            return output_path / filename
        output_path.parent.mkdir(parents=True, exist_ok=True)
        return output_path

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
