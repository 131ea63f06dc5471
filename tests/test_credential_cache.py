"""Tests for the Graph access-token cache."""

from urllib.parse import parse_qs

import httpx
import pytest

from common.constants import GRAPH_SCOPE
from common.exceptions import AuthError
from proxy.credential_cache import CredentialCache


def token_transport(calls, lifetime=3600, status=200, body=None):
    """Mock identity endpoint issuing sequentially numbered tokens."""
    def handler(request):
        calls.append(request)
        if status != 200:
            return httpx.Response(status, json={'error': 'invalid_client'})
        if body is not None:
            return httpx.Response(200, text=body)
        return httpx.Response(200, json={
            'token_type': 'Bearer',
            'expires_in': lifetime,
            'access_token': f'token-{len(calls)}'
        })
    return httpx.MockTransport(handler)


@pytest.fixture
def calls():
    return []


@pytest.fixture
def cache(graph_settings, fake_clock, calls):
    client = httpx.Client(transport=token_transport(calls))
    return CredentialCache(graph_settings, client, clock=fake_clock)


def test_token_request_uses_client_credentials_grant(cache, calls):
    """The grant posts form-encoded credentials to the tenant token endpoint."""
    credential = cache.obtain()

    assert credential.token == 'token-1'
    request = calls[0]
    assert request.method == 'POST'
    assert str(request.url) == 'https://login.microsoftonline.com/tenant-abc/oauth2/v2.0/token'
    form = parse_qs(request.content.decode())
    assert form == {
        'client_id': ['client-123'],
        'client_secret': ['super-secret'],
        'scope': [GRAPH_SCOPE],
        'grant_type': ['client_credentials'],
    }


def test_expiry_is_issue_time_plus_lifetime(cache, fake_clock):
    """expires_at is measured from the time the request was issued."""
    start = fake_clock.now
    assert cache.obtain().expires_at == start + 3600


def test_cached_token_reused_within_margin(cache, fake_clock, calls):
    """Calls before T+L-300 reuse the cached credential."""
    first = cache.obtain()
    fake_clock.advance(3600 - 300 - 1)
    second = cache.obtain()

    assert second is first
    assert len(calls) == 1


def test_token_refreshed_at_margin(cache, fake_clock, calls):
    """At T+L-300 exactly, a new token is requested."""
    cache.obtain()
    fake_clock.advance(3600 - 300)
    refreshed = cache.obtain()

    assert refreshed.token == 'token-2'
    assert len(calls) == 2
    assert cache.peek() is refreshed


def test_invalidate_forces_refresh(cache, calls):
    """invalidate() drops the credential."""
    cache.obtain()
    cache.invalidate()

    assert cache.peek() is None
    assert cache.obtain().token == 'token-2'
    assert len(calls) == 2


def test_rejected_grant_raises_auth_error(graph_settings, fake_clock, calls):
    """A non-200 from the identity endpoint is an AuthError and nothing is cached."""
    client = httpx.Client(transport=token_transport(calls, status=401))
    cache = CredentialCache(graph_settings, client, clock=fake_clock)

    with pytest.raises(AuthError) as exc_info:
        cache.obtain()

    assert exc_info.value.message == "Authentication failed. Could not obtain access token."
    assert exc_info.value.status_code == 500
    assert cache.peek() is None


@pytest.mark.parametrize('body', [
    '{"token_type": "Bearer", "expires_in": 3600}',
    '{"access_token": "abc"}',
    '{"access_token": "abc", "expires_in": "soon"}',
    '<html>Service unavailable</html>',
])
def test_incomplete_token_response_raises(graph_settings, fake_clock, calls, body):
    """Token responses without a usable token or lifetime are rejected."""
    client = httpx.Client(transport=token_transport(calls, body=body))
    cache = CredentialCache(graph_settings, client, clock=fake_clock)

    with pytest.raises(AuthError):
        cache.obtain()


def test_network_error_raises_auth_error(graph_settings, fake_clock):
    """Transport failures surface as AuthError."""
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    cache = CredentialCache(graph_settings, client, clock=fake_clock)

    with pytest.raises(AuthError) as exc_info:
        cache.obtain()
    assert 'Error on token request' in exc_info.value.message
