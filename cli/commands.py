"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.exceptions import DriveGateError
from common.logging_config import get_logger
from cli.config import Config
from cli.models import GetCommand, InfoCommand, ListCommand, UploadCommand
from cli.proxy_client import ProxyClient
from cli.uploader import UploadOrchestrator
from cli.utils import ProgressLine, format_file_size, format_listing

logger = get_logger(__name__)

CONFIG_PATH = Path.home() / '.drivegate' / 'config.json'

_client: Optional[ProxyClient] = None
_orchestrator: Optional[UploadOrchestrator] = None


def get_client() -> ProxyClient:
    """
    Get or create global ProxyClient instance.

    Returns:
        ProxyClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new ProxyClient instance")
        _client = ProxyClient(Config(CONFIG_PATH))
    return _client


def get_orchestrator() -> UploadOrchestrator:
    """
    Get or create global UploadOrchestrator bound to the global ProxyClient.

    Returns:
        UploadOrchestrator instance
    """
    global _orchestrator
    if _orchestrator is None:
        client = get_client()
        _orchestrator = UploadOrchestrator(client, **client.config.get_upload_config())
    return _orchestrator


def handle_list(cmd: ListCommand, client: Optional[ProxyClient] = None) -> str:
    """
    Handle 'list' command.

    Args:
        cmd: ListCommand with share_code
        client: Optional ProxyClient for dependency injection (testing)

    Returns:
        Formatted folder listing or error message
    """
    logger.info(f"Executing list command: share_code={cmd.share_code}")
    if client is None:
        client = get_client()
    try:
        return format_listing(client.list_folder(cmd.share_code))
    except DriveGateError as e:
        return f"Error: {e.message}"


def handle_info(cmd: InfoCommand, client: Optional[ProxyClient] = None) -> str:
    """
    Handle 'info' command.

    Args:
        cmd: InfoCommand with file_id
        client: Optional ProxyClient for dependency injection (testing)

    Returns:
        Download link or error message
    """
    if client is None:
        client = get_client()
    try:
        item = client.resolve_file(cmd.file_id)
    except DriveGateError as e:
        return f"Error: {e.message}"
    return f"File ID: {item.id}\nDownload link (temporary): {item.download_url}"


def handle_get(cmd: GetCommand, client: Optional[ProxyClient] = None) -> str:
    """
    Handle 'get' command.

    Args:
        cmd: GetCommand with file_id and optional output_path
        client: Optional ProxyClient for dependency injection (testing)

    Returns:
        Saved path or error message
    """
    logger.info(f"Executing get command: file_id={cmd.file_id} output_path={cmd.output_path}")
    if client is None:
        client = get_client()

    line = ProgressLine(f"Downloading {cmd.file_id}")
    output = Path(cmd.output_path) if cmd.output_path else None
    try:
        target = client.download(cmd.file_id, output, on_progress=line.bytes)
    except DriveGateError as e:
        return f"Error: {e.message}"
    except OSError as e:
        return f"Error writing file: {e}"
    finally:
        line.finish()

    return f"Downloaded: {target.name} ({format_file_size(target.stat().st_size)})\nSaved to: {target.absolute()}"


def handle_upload(cmd: UploadCommand, orchestrator: Optional[UploadOrchestrator] = None) -> str:
    """
    Handle 'upload' command.

    Files are uploaded one after another; a failure does not stop the others.

    Args:
        cmd: UploadCommand with folder_id and file_list
        orchestrator: Optional UploadOrchestrator for dependency injection (testing)

    Returns:
        One result line per file
    """
    logger.info(f"Executing upload command: {len(cmd.file_list)} file(s) into {cmd.folder_id}")
    if orchestrator is None:
        orchestrator = get_orchestrator()

    results = []
    for file_path in cmd.file_list:
        path = Path(file_path).expanduser()
        if not path.exists():
            results.append(f"Error: File not found: {file_path}")
            continue
        if not path.is_file():
            results.append(f"Error: Not a file: {file_path}")
            continue

        line = ProgressLine(f"Uploading {path.name}")
        last = {'value': 0}

        def on_progress(percentage: int) -> None:
            last['value'] = percentage
            line.percentage(percentage)

        try:
            item = orchestrator.upload(cmd.folder_id, path, on_progress=on_progress)
        except DriveGateError as e:
            results.append(f"Error uploading {file_path}: {e.message} (stopped at {last['value']}%)")
            continue
        except OSError as e:
            results.append(f"Error reading {file_path}: {e}")
            continue
        finally:
            line.finish()

        item_id = item.get('id', 'unknown')
        results.append(f"Uploaded: {path.name} ({format_file_size(path.stat().st_size)}, ID: {item_id})")

    return '\n'.join(results) if results else "No files uploaded."
