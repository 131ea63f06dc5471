"""
Access-token cache for the Graph application identity.

One credential is kept per tenant. It is refreshed through the OAuth2
client-credentials grant when missing or within the expiry safety margin,
and a refresh replaces token and expiry together.
"""

import threading
import time
from typing import Callable, Dict, Optional

import httpx

from common.constants import (
    GRAPH_SCOPE,
    HTTP_TIMEOUT_SECONDS,
    LOGIN_BASE_URL,
    TOKEN_EXPIRY_MARGIN_SECONDS
)
from common.exceptions import AuthError
from common.logging_config import get_logger
from common.response_parser import safe_parse_response
from common.types import Credential
from proxy.config import GraphSettings

logger = get_logger(__name__)


class CredentialCache:
    """
    Thread-safe cache of bearer credentials keyed by tenant.

    Shared by every outbound Graph call of one proxy application.
    """

    def __init__(
        self,
        settings: GraphSettings,
        http_client: httpx.Client,
        clock: Callable[[], float] = time.time,
        margin_seconds: int = TOKEN_EXPIRY_MARGIN_SECONDS
    ):
        """
        Initialize credential cache.

        Args:
            settings: Graph application credentials
            http_client: Client used for the token request
            clock: Returns the current time in epoch seconds
            margin_seconds: Safety margin subtracted from the token lifetime
        """
        self._settings = settings
        self._http = http_client
        self._clock = clock
        self._margin = margin_seconds
        self._lock = threading.RLock()
        self._entries: Dict[str, Credential] = {}

    @property
    def token_url(self) -> str:
        return f"{LOGIN_BASE_URL}/{self._settings.tenant_id}/oauth2/v2.0/token"

    def peek(self) -> Optional[Credential]:
        """Return the cached credential without refreshing it."""
        with self._lock:
            return self._entries.get(self._settings.tenant_id)

    def obtain(self) -> Credential:
        """
        Return a valid credential, refreshing it when needed.

        Returns:
            Credential valid for at least the safety margin

        Raises:
            AuthError: If the identity endpoint cannot issue a token
        """
        tenant = self._settings.tenant_id
        with self._lock:
            cached = self._entries.get(tenant)
            if cached is not None and cached.is_valid(self._clock(), self._margin):
                return cached

            logger.info(f"Refreshing access token [tenant={tenant}]")
            credential = self._request_token()
            self._entries[tenant] = credential
            return credential

    def invalidate(self) -> None:
        """Drop the cached credential so the next obtain() refreshes it."""
        with self._lock:
            if self._entries.pop(self._settings.tenant_id, None) is not None:
                logger.info(f"Access token invalidated [tenant={self._settings.tenant_id}]")

    def _request_token(self) -> Credential:
        """Run the client-credentials grant against the identity endpoint."""
        issued_at = self._clock()
        form = {
            'client_id': self._settings.client_id,
            'client_secret': self._settings.client_secret,
            'scope': GRAPH_SCOPE,
            'grant_type': 'client_credentials',
        }

        try:
            response = self._http.post(self.token_url, data=form, timeout=HTTP_TIMEOUT_SECONDS)
        except httpx.TransportError as e:
            logger.error(f"Token request failed: {type(e).__name__}: {e}")
            raise AuthError(f"Error on token request: {e}", status_code=500) from e

        if response.status_code != 200:
            logger.error(f"Token request rejected: status={response.status_code}")
            raise AuthError("Authentication failed. Could not obtain access token.", status_code=500)

        body = safe_parse_response(response)
        if not isinstance(body, dict):
            raise AuthError("Authentication failed. Token response is not valid JSON.", status_code=500)

        token = body.get('access_token')
        try:
            lifetime = float(body['expires_in'])
        except (KeyError, TypeError, ValueError):
            lifetime = None

        if not token or lifetime is None:
            raise AuthError("Authentication failed. Token response lacks access_token or expires_in.", status_code=500)

        logger.debug(f"Access token issued, lifetime={lifetime:.0f}s")
        return Credential(token=token, expires_at=issued_at + lifetime)
