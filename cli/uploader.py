"""
Chunked upload to a negotiated session endpoint.

A file is sent as an ordered series of byte-range PUTs, strictly one at a
time. A chunk that fails with a network error or a server error is re-sent
with the identical range; a 4xx answer aborts the whole upload. The
provider treats a re-submitted unconfirmed range as a no-op, which makes the
retry idempotent.

State machine:
    IDLE -> NEGOTIATING -> TRANSFERRING(i) -> {TRANSFERRING(i+1) | RETRYING(i) | FAILED | COMPLETED}
    RETRYING(i) -> {TRANSFERRING(i) | FAILED}
COMPLETED and FAILED are terminal.
"""

import time
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional

import httpx

from common.chunking import (
    EMPTY_CONTENT_RANGE,
    content_range,
    plan_chunks,
    progress_percentage,
    validate_chunk_size
)
from common.constants import (
    CHUNK_RETRY_BASE_DELAY_SECONDS,
    HTTP_TIMEOUT_SECONDS,
    MAX_CHUNK_ATTEMPTS,
    UPLOAD_CHUNK_SIZE_BYTES
)
from common.exceptions import (
    DriveGateError,
    MalformedResponseError,
    TransferClientError,
    TransferTransientError,
    UploadCancelledError
)
from common.logging_config import get_logger
from common.response_parser import parse_response
from common.types import ChunkDescriptor, TransferProgress, UploadSession
from cli.proxy_client import ProxyClient

logger = get_logger(__name__)

ProgressCallback = Callable[[int], None]


class UploadState(Enum):
    IDLE = "idle"
    NEGOTIATING = "negotiating"
    TRANSFERRING = "transferring"
    RETRYING = "retrying"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({UploadState.COMPLETED, UploadState.FAILED})

ALLOWED_TRANSITIONS = {
    UploadState.IDLE: {UploadState.NEGOTIATING, UploadState.TRANSFERRING, UploadState.FAILED},
    UploadState.NEGOTIATING: {UploadState.TRANSFERRING, UploadState.FAILED},
    UploadState.TRANSFERRING: {
        UploadState.TRANSFERRING,
        UploadState.RETRYING,
        UploadState.COMPLETED,
        UploadState.FAILED,
    },
    UploadState.RETRYING: {UploadState.TRANSFERRING, UploadState.FAILED},
    UploadState.COMPLETED: set(),
    UploadState.FAILED: set(),
}


@dataclass(frozen=True)
class StateTransition:
    """One recorded state change; chunk_index and attempt are set while a chunk is in flight."""
    state: UploadState
    chunk_index: Optional[int] = None
    attempt: int = 0


def default_upload_client(transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    """Client for chunk PUTs: bounded connect, unbounded body transfer."""
    return httpx.Client(
        timeout=httpx.Timeout(None, connect=HTTP_TIMEOUT_SECONDS),
        transport=transport
    )


class ChunkUploader:
    """
    Drives one upload attempt through the chunk state machine.

    An instance handles a single attempt; create a new one for every file.
    """

    def __init__(
        self,
        chunk_size: int = UPLOAD_CHUNK_SIZE_BYTES,
        max_attempts: int = MAX_CHUNK_ATTEMPTS,
        retry_base_delay: float = CHUNK_RETRY_BASE_DELAY_SECONDS,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize chunk uploader.

        Args:
            chunk_size: Bytes per chunk, a positive multiple of 320 KiB
            max_attempts: Total attempts per chunk before the upload fails
            retry_base_delay: Delay unit in seconds; attempt n waits n * retry_base_delay
            http_client: Client used for the PUTs (default: default_upload_client())
            sleep: Blocking sleep function, replaced in tests
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.chunk_size = validate_chunk_size(chunk_size)
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.session = http_client if http_client is not None else default_upload_client()
        self._sleep = sleep

        self.state = UploadState.IDLE
        self.history: List[StateTransition] = [StateTransition(UploadState.IDLE)]
        self.progress: Optional[TransferProgress] = None

    def _transition(self, state: UploadState, chunk_index: Optional[int] = None, attempt: int = 0) -> None:
        if state not in ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal upload state transition: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(StateTransition(state, chunk_index, attempt))
        logger.debug(f"Upload state -> {state.value} [chunk={chunk_index} attempt={attempt}]")

    def begin_negotiation(self) -> None:
        """Record that an upload session is being requested."""
        self._transition(UploadState.NEGOTIATING)

    def fail(self) -> None:
        """Move to FAILED unless the attempt already ended."""
        if self.state not in TERMINAL_STATES:
            self._transition(UploadState.FAILED)

    def _report(self, confirmed_bytes: int, on_progress: Optional[ProgressCallback]) -> None:
        """Advance confirmed bytes and emit the percentage; never goes backwards."""
        progress = self.progress
        progress.confirmed_bytes = max(progress.confirmed_bytes, confirmed_bytes)
        percentage = max(progress.last_percentage, progress_percentage(progress.confirmed_bytes, progress.total_size))
        progress.last_percentage = percentage
        if on_progress:
            on_progress(percentage)

    def transfer(
        self,
        session: UploadSession,
        source: BinaryIO,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, Any]:
        """
        Send a whole file to the session endpoint.

        Args:
            session: Negotiated upload session (total_size must match the source)
            source: Seekable binary file positioned anywhere
            on_progress: Called with the integer percentage after each confirmed chunk
            cancel_event: When set, the upload stops before the next chunk

        Returns:
            Parsed body of the provider's completion response

        Raises:
            TransferClientError: A chunk was rejected with a 4xx status
            TransferTransientError: A chunk failed on every attempt
            UploadCancelledError: cancel_event was set between chunks
        """
        self.progress = TransferProgress(total_size=session.total_size)
        logger.info(
            f"Uploading {session.file_name} ({session.total_size} bytes) "
            f"in chunks of {self.chunk_size} bytes"
        )

        try:
            if session.total_size == 0:
                return self._transfer_empty(session, on_progress)

            for chunk in plan_chunks(session.total_size, self.chunk_size):
                if cancel_event is not None and cancel_event.is_set():
                    raise UploadCancelledError(
                        f"Upload of {session.file_name} cancelled before chunk {chunk.sequence_index}."
                    )

                data = self._read_chunk(source, chunk)
                response = self._send_chunk(session, chunk, data)

                if response.status_code in (200, 201):
                    self._report(session.total_size, on_progress)
                    self._transition(UploadState.COMPLETED, chunk.sequence_index)
                    logger.info(f"Upload of {session.file_name} completed at chunk {chunk.sequence_index}")
                    return self._completion_body(response)

                self._report(chunk.end_offset, on_progress)

            raise DriveGateError(
                f"Upload of {session.file_name} finished without a completion response from the provider."
            )
        except Exception:
            self.fail()
            logger.error(
                f"Upload of {session.file_name} failed at {self.progress.confirmed_bytes}/{session.total_size} bytes"
            )
            raise

    def _transfer_empty(self, session: UploadSession, on_progress: Optional[ProgressCallback]) -> Dict[str, Any]:
        """Send the single completion request used for zero-length files."""
        self._transition(UploadState.TRANSFERRING, 0, 1)
        self._report(0, on_progress)

        try:
            response = self.session.put(
                session.endpoint,
                content=b'',
                headers={'Content-Range': EMPTY_CONTENT_RANGE, 'Content-Length': '0'}
            )
        except httpx.TransportError as e:
            raise TransferTransientError(f"Network error: {e}", attempts=1) from e

        self._raise_for_status(response, attempts=1)
        self._transition(UploadState.COMPLETED, 0)
        return self._completion_body(response)

    @staticmethod
    def _read_chunk(source: BinaryIO, chunk: ChunkDescriptor) -> bytes:
        source.seek(chunk.start_offset)
        data = source.read(chunk.size)
        if len(data) != chunk.size:
            raise DriveGateError(
                f"Source ended early: expected {chunk.size} bytes at offset {chunk.start_offset}, got {len(data)}."
            )
        return data

    @staticmethod
    def _raise_for_status(response: httpx.Response, attempts: int) -> None:
        status = response.status_code
        if response.is_success:
            return
        if 400 <= status < 500:
            raise TransferClientError(f"Client error: {status}. Upload aborted.", status_code=status)
        raise TransferTransientError(f"Server error: {status}.", status_code=status, attempts=attempts)

    def _send_chunk(self, session: UploadSession, chunk: ChunkDescriptor, data: bytes) -> httpx.Response:
        """
        PUT one chunk, retrying transient failures with the same byte range.

        Returns:
            The first 2xx response for the chunk
        """
        headers = {
            'Content-Range': content_range(chunk, session.total_size),
            'Content-Length': str(chunk.size),
        }
        last_error: Optional[TransferTransientError] = None

        for attempt in range(1, self.max_attempts + 1):
            self._transition(UploadState.TRANSFERRING, chunk.sequence_index, attempt)
            try:
                response = self.session.put(session.endpoint, content=data, headers=headers)
                self._raise_for_status(response, attempts=attempt)
                return response
            except httpx.TransportError as e:
                last_error = TransferTransientError(f"Network error: {type(e).__name__}: {e}", attempts=attempt)
            except TransferTransientError as e:
                last_error = e

            logger.warning(
                f"Attempt {attempt}/{self.max_attempts} for chunk {chunk.sequence_index} "
                f"starting at {chunk.start_offset} failed: {last_error}"
            )
            if attempt < self.max_attempts:
                self._transition(UploadState.RETRYING, chunk.sequence_index, attempt)
                self._sleep(attempt * self.retry_base_delay)

        raise TransferTransientError(
            f"Upload failed after {self.max_attempts} attempts.",
            status_code=last_error.status_code if last_error else None,
            attempts=self.max_attempts
        ) from last_error

    @staticmethod
    def _completion_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = parse_response(response)
        except MalformedResponseError as e:
            logger.warning(f"Upload completed but the completion body is unreadable: {e}")
            return {}
        return body if isinstance(body, dict) else {'value': body}


class UploadOrchestrator:
    """
    Negotiates a session through the proxy, then runs the chunk transmitter.
    """

    def __init__(
        self,
        proxy_client: ProxyClient,
        chunk_size: int = UPLOAD_CHUNK_SIZE_BYTES,
        max_attempts: int = MAX_CHUNK_ATTEMPTS,
        retry_base_delay: float = CHUNK_RETRY_BASE_DELAY_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.proxy_client = proxy_client
        self.chunk_size = validate_chunk_size(chunk_size)
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.session = default_upload_client(transport)
        self._sleep = sleep
        self.last_uploader: Optional[ChunkUploader] = None

    def new_uploader(self) -> ChunkUploader:
        uploader = ChunkUploader(
            chunk_size=self.chunk_size,
            max_attempts=self.max_attempts,
            retry_base_delay=self.retry_base_delay,
            http_client=self.session,
            sleep=self._sleep,
        )
        self.last_uploader = uploader
        return uploader

    def upload(
        self,
        folder_id: str,
        path: Path,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, Any]:
        """
        Upload a local file into a folder.

        Args:
            folder_id: Destination folder id
            path: Local file to upload
            on_progress: Receives non-decreasing integer percentages
            cancel_event: Checked between chunks

        Returns:
            Provider's completion body (the created drive item)
        """
        path = Path(path)
        total_size = path.stat().st_size
        uploader = self.new_uploader()

        uploader.begin_negotiation()
        try:
            session = self.proxy_client.create_upload_session(folder_id, path.name, total_size)
            source = open(path, 'rb')
        except Exception:
            uploader.fail()
            raise

        with source:
            return uploader.transfer(session, source, on_progress=on_progress, cancel_event=cancel_event)

    def close(self) -> None:
        """Close the HTTP session used for chunk PUTs."""
        self.session.close()
