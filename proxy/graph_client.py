"""HTTP client for the Microsoft Graph drive endpoints used by the proxy."""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from common.constants import DRIVE_ITEM_SELECT_FIELDS, GRAPH_BASE_URL, HTTP_TIMEOUT_SECONDS
from common.exceptions import ProxyError, SessionError
from common.logging_config import get_logger
from common.response_parser import graph_error_message, safe_parse_response
from proxy.config import GraphSettings
from proxy.credential_cache import CredentialCache

logger = get_logger(__name__)


def _encode(segment: str) -> str:
    """Percent-encode a single URL path segment."""
    return quote(segment, safe='')


class GraphClient:
    """
    Graph drive client authenticated with the cached application token.
    """

    def __init__(
        self,
        settings: GraphSettings,
        credentials: CredentialCache,
        http_client: httpx.Client,
        base_url: str = GRAPH_BASE_URL
    ):
        """
        Initialize Graph client.

        Args:
            settings: Graph application credentials (user_id selects the drive)
            credentials: Token cache shared by every outbound call
            http_client: Client used for Graph requests
            base_url: Graph API root
        """
        self._settings = settings
        self._credentials = credentials
        self._http = http_client
        self._base_url = base_url.rstrip('/')

    @property
    def items_url(self) -> str:
        return f"{self._base_url}/users/{_encode(self._settings.user_id)}/drive/items"

    def _auth_headers(self) -> Dict[str, str]:
        credential = self._credentials.obtain()
        return {'Authorization': f'Bearer {credential.token}'}

    def _send(self, method: str, url: str, error_cls, action: str, **kwargs) -> httpx.Response:
        """
        Send an authenticated request to Graph.

        Transport failures are raised as error_cls with status 500. A 401
        answer drops the cached token so the next call authenticates again.
        """
        headers = self._auth_headers()
        headers.update(kwargs.pop('headers', {}))
        try:
            response = self._http.request(
                method, url, headers=headers, timeout=HTTP_TIMEOUT_SECONDS, **kwargs
            )
        except httpx.TransportError as e:
            logger.error(f"Graph request failed while {action}: {type(e).__name__}: {e}")
            raise error_cls(f"Network error while {action}: {e}", status_code=500) from e

        logger.debug(f"Graph response: {method} {url} status={response.status_code}")
        if response.status_code == 401:
            self._credentials.invalidate()
        return response

    def list_children(self, item_id: str) -> List[Dict[str, Any]]:
        """
        List a folder's children, following @odata.nextLink until exhausted.

        Args:
            item_id: Folder item id

        Returns:
            Child records of every page, concatenated in page order

        Raises:
            ProxyError: If any page request fails
        """
        next_link: Optional[str] = (
            f"{self.items_url}/{_encode(item_id)}/children?$select={quote(DRIVE_ITEM_SELECT_FIELDS, safe='')}"
        )
        items: List[Dict[str, Any]] = []
        pages = 0

        while next_link:
            response = self._send(
                'GET', next_link, ProxyError, 'fetching files',
                headers={'Accept': 'application/json'}
            )
            body = safe_parse_response(response)

            if response.status_code != 200:
                message = graph_error_message(body, 'An unknown error occurred while fetching files.')
                raise ProxyError(f"Graph API Error: {message}", status_code=response.status_code)

            if not isinstance(body, dict):
                raise ProxyError("Graph API Error: page response is not a JSON object.", status_code=502)

            items.extend(body.get('value') or [])
            next_link = body.get('@odata.nextLink')
            pages += 1

        logger.info(f"Listed folder {item_id}: {len(items)} item(s) across {pages} page(s)")
        return items

    def resolve_download_url(self, file_id: str) -> str:
        """
        Capture the transient download location of a file.

        Graph answers /content with a 302 whose Location is a pre-authenticated URL.

        Args:
            file_id: File item id

        Returns:
            Download URL taken from the redirect

        Raises:
            ProxyError: If the response is not a redirect with a Location header
        """
        url = f"{self.items_url}/{_encode(file_id)}/content"
        response = self._send('GET', url, ProxyError, 'requesting file content', follow_redirects=False)

        if response.status_code == 302:
            location = response.headers.get('Location', '').strip()
            if not location:
                raise ProxyError('Redirect received, but could not find the Location header.', status_code=500)
            return location

        if response.text:
            fallback = f"Unexpected response from server (HTTP {response.status_code}): {response.text}"
        else:
            fallback = f"Received HTTP status {response.status_code} with an empty response body."
        message = graph_error_message(safe_parse_response(response), fallback)
        raise ProxyError(f"Graph API Error: {message}", status_code=500)

    def create_upload_session(self, folder_id: str, file_name: str) -> str:
        """
        Ask Graph for an upload session for a new file in a folder.

        Args:
            folder_id: Parent folder item id
            file_name: Sanitized file name

        Returns:
            uploadUrl of the new session

        Raises:
            SessionError: If Graph rejects the request or returns no uploadUrl
        """
        url = f"{self.items_url}/{_encode(folder_id)}:/{_encode(file_name)}:/createUploadSession"
        response = self._send(
            'POST', url, SessionError, 'creating upload session',
            json={}, headers={'Accept': 'application/json'}
        )
        body = safe_parse_response(response)

        if 200 <= response.status_code < 300:
            if isinstance(body, dict) and body.get('uploadUrl'):
                return body['uploadUrl']
            raise SessionError('Graph API did not return an uploadUrl.', status_code=500)

        message = graph_error_message(body, 'An unknown error occurred while creating the upload session.')
        raise SessionError(f"Graph API Error: {message}", status_code=response.status_code)
