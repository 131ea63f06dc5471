"""Project-wide constants (chunk geometry, retry policy, provider endpoints)."""

ALIGNMENT_UNIT_BYTES: int = 320 * 1024  # Graph requires chunk sizes in 320 KiB multiples
UPLOAD_CHUNK_SIZE_BYTES: int = 128 * ALIGNMENT_UNIT_BYTES  # 40 MiB default chunk size

MAX_CHUNK_ATTEMPTS: int = 5
CHUNK_RETRY_BASE_DELAY_SECONDS: float = 2.0

TOKEN_EXPIRY_MARGIN_SECONDS: int = 300
HTTP_TIMEOUT_SECONDS: float = 30.0

MALFORMED_EXCERPT_LENGTH: int = 100

GRAPH_BASE_URL: str = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE: str = "https://graph.microsoft.com/.default"
LOGIN_BASE_URL: str = "https://login.microsoftonline.com"
DRIVE_ITEM_SELECT_FIELDS: str = "id,name,size,file,folder,@microsoft.graph.downloadUrl,thumbnails"

DEFAULT_PROXY_PORT: int = 8000
