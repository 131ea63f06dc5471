"""Tests for CLI command handlers."""

import httpx
import pytest
from unittest.mock import Mock
from cli.commands import (
    handle_get,
    handle_info,
    handle_list,
    handle_upload,
)
from cli.models import (
    GetCommand,
    InfoCommand,
    ListCommand,
    UploadCommand,
)
from cli.proxy_client import ProxyClient
from cli.uploader import UploadOrchestrator
from common.exceptions import ProxyError, TransferClientError
from common.types import DriveItem


def test_handle_list():
    """Test list command handler with mocked client."""
    mock_client = Mock(spec=ProxyClient)
    mock_client.list_folder.return_value = [
        DriveItem(id='f1', name='b.txt', size=2048),
        DriveItem(id='d1', name='Archive', is_folder=True, child_count=4),
        DriveItem(id='f2', name='a.txt', size=10),
    ]

    result = handle_list(ListCommand(share_code='share-1'), client=mock_client)

    mock_client.list_folder.assert_called_once_with('share-1')
    assert result.startswith('Found 3 item(s):')
    assert result.index('Archive') < result.index('a.txt') < result.index('b.txt')
    assert '[DIR]  Archive  (4 item(s))' in result
    assert '2.00 KiB' in result
    assert 'ID: f2' in result


def test_handle_list_empty_folder():
    mock_client = Mock(spec=ProxyClient)
    mock_client.list_folder.return_value = []

    assert handle_list(ListCommand(share_code='share-1'), client=mock_client) == 'The folder is empty.'


def test_handle_list_error():
    """Test list command reports proxy errors."""
    mock_client = Mock(spec=ProxyClient)
    mock_client.list_folder.side_effect = ProxyError('Graph API Error: Item not found', status_code=404)

    result = handle_list(ListCommand(share_code='missing'), client=mock_client)

    assert result == 'Error: Graph API Error: Item not found'


def test_handle_info():
    """Test info command shows the transient link."""
    mock_client = Mock(spec=ProxyClient)
    mock_client.resolve_file.return_value = DriveItem(id='f1', name='', download_url='https://dl.example/f1')

    result = handle_info(InfoCommand(file_id='f1'), client=mock_client)

    assert result == 'File ID: f1\nDownload link (temporary): https://dl.example/f1'


def test_handle_info_error():
    mock_client = Mock(spec=ProxyClient)
    mock_client.resolve_file.side_effect = ProxyError('Please enter a valid file ID.')

    assert handle_info(InfoCommand(file_id=' '), client=mock_client) == 'Error: Please enter a valid file ID.'


def test_handle_get(tmp_path):
    """Test get command reports the saved file."""
    saved = tmp_path / 'notes.txt'
    saved.write_bytes(b'x' * 2048)
    mock_client = Mock(spec=ProxyClient)
    mock_client.download.return_value = saved

    result = handle_get(GetCommand(file_id='f1', output_path=str(tmp_path)), client=mock_client)

    assert mock_client.download.call_args.args[:2] == ('f1', tmp_path)
    assert 'Downloaded: notes.txt (2.00 KiB)' in result
    assert str(saved.absolute()) in result


def test_handle_get_error():
    mock_client = Mock(spec=ProxyClient)
    mock_client.download.side_effect = ProxyError('Download failed with status 410.', status_code=410)

    assert handle_get(GetCommand(file_id='f1'), client=mock_client) == 'Error: Download failed with status 410.'


def test_handle_upload_success(sample_file):
    """Test upload reports the created item id."""
    orchestrator = Mock(spec=UploadOrchestrator)
    orchestrator.upload.return_value = {'id': 'new-item-1', 'name': 'test.txt'}

    result = handle_upload(UploadCommand(folder_id='folder-1', file_list=(str(sample_file),)), orchestrator=orchestrator)

    assert orchestrator.upload.call_args.args[:2] == ('folder-1', sample_file)
    assert result == 'Uploaded: test.txt (26 B, ID: new-item-1)'


def test_handle_upload_continues_after_failure(tmp_path, sample_file):
    """Test one failing file does not stop the rest."""
    missing = tmp_path / 'missing.bin'
    orchestrator = Mock(spec=UploadOrchestrator)

    def fake_upload(folder_id, path, on_progress=None):
        on_progress(0)
        on_progress(40)
        raise TransferClientError('Client error: 413. Upload aborted.', status_code=413)

    orchestrator.upload.side_effect = fake_upload

    result = handle_upload(
        UploadCommand(folder_id='folder-1', file_list=(str(missing), str(tmp_path), str(sample_file))),
        orchestrator=orchestrator
    )

    lines = result.split('\n')
    assert lines[0] == f'Error: File not found: {missing}'
    assert lines[1] == f'Error: Not a file: {tmp_path}'
    assert lines[2] == f'Error uploading {sample_file}: Client error: 413. Upload aborted. (stopped at 40%)'
    assert orchestrator.upload.call_count == 1


def test_handle_list_wrongly_shaped_proxy_body(temp_config):
    """Test a malformed proxy listing becomes an error line."""
    def handler(request):
        return httpx.Response(200, json={'files': {'id': 'a'}})

    client = ProxyClient(temp_config, transport=httpx.MockTransport(handler))

    result = handle_list(ListCommand(share_code='share-1'), client=client)

    assert result == 'Error: The proxy returned no valid file data.'
