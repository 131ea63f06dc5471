"""Exception taxonomy shared by the proxy and the client."""

from typing import Optional


class DriveGateError(Exception):
    """
    Base exception class for all DriveGate errors.

    Carries an optional HTTP status code so the proxy can map it to a response.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConfigurationError(DriveGateError):
    """
    Raised when the Graph API credentials are not fully configured.
    """
    pass


class AuthError(DriveGateError):
    """
    Raised when an access token cannot be obtained from the identity endpoint.
    """
    pass


class SessionError(DriveGateError):
    """
    Raised when an upload session cannot be negotiated.
    """
    pass


class TransferClientError(DriveGateError):
    """
    Raised when the storage provider rejects a chunk with a 4xx status.
    """
    pass


class TransferTransientError(DriveGateError):
    """
    Raised when a chunk keeps failing with network errors or 5xx statuses.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, attempts: int = 0):
        super().__init__(message, status_code)
        self.attempts = attempts


class UploadCancelledError(DriveGateError):
    """
    Raised when an upload is cancelled between two chunks.
    """
    pass


class ProxyError(DriveGateError):
    """
    Raised when folder listing or item resolution fails.
    """
    pass


class MalformedResponseError(DriveGateError):
    """
    Raised when a response body holds no valid JSON, even after trimming.
    """

    def __init__(self, message: str, excerpt: str = ""):
        super().__init__(message)
        self.excerpt = excerpt
