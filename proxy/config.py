"""Configuration settings for the backend proxy."""

import os
from dataclasses import dataclass

from common.constants import DEFAULT_PROXY_PORT
from common.exceptions import ConfigurationError


PROXY_HOST = os.environ.get("DRIVEGATE_PROXY_HOST", "0.0.0.0")

PROXY_PORT = int(os.environ.get("DRIVEGATE_PROXY_PORT", str(DEFAULT_PROXY_PORT)))


@dataclass(frozen=True)
class GraphSettings:
    """
    Microsoft Graph application credentials.

    The client secret never leaves the proxy process.
    """
    client_id: str
    client_secret: str
    tenant_id: str
    user_id: str

    def is_complete(self) -> bool:
        """Return True when every credential is set."""
        return all((self.client_id, self.client_secret, self.tenant_id, self.user_id))

    def require_complete(self) -> None:
        """
        Raises:
            ConfigurationError: If any credential is missing
        """
        if not self.is_complete():
            raise ConfigurationError(
                "Server configuration error: Microsoft Graph API credentials are not fully set.",
                status_code=500
            )


def load_graph_settings() -> GraphSettings:
    """
    Read Graph credentials from the environment.

    Returns:
        GraphSettings, possibly incomplete
    """
    return GraphSettings(
        client_id=os.environ.get("MS_GRAPH_CLIENT_ID", ""),
        client_secret=os.environ.get("MS_GRAPH_CLIENT_SECRET", ""),
        tenant_id=os.environ.get("MS_GRAPH_TENANT_ID", ""),
        user_id=os.environ.get("MS_GRAPH_USER_ID", ""),
    )
