import time

import pytest
import requests

from spotiproxy.token_state import TokenPair


@pytest.mark.unit
def test_ping(client):
    r = client.get('/')
    assert r.status_code == 200
    assert r.get_data(as_text=True) == 'pong'


@pytest.mark.unit
def test_healthz_reports_token_state(client, logged_in):
    r = client.get('/healthz')
    assert r.status_code == 200
    data = r.get_json()
    assert data["status"] == "ok"
    assert data["checks"]["session"] == "active"
    assert data["checks"]["authenticated"] is True
    assert data["checks"]["has_refresh_token"] is True
    # Tokens themselves never leave through the health probe
    assert "access-1" not in r.get_data(as_text=True)


@pytest.mark.unit
def test_healthz_after_logout_reports_empty_session(client, logged_in):
    client.get('/logout')
    checks = client.get('/healthz').get_json()["checks"]
    assert checks["session"] == "empty"
    assert checks["authenticated"] is False


@pytest.mark.unit
def test_metrics_endpoint_exposes_upstream_counters(client, spotify_stub, logged_in):
    client.get('/whoami')
    r = client.get('/metrics')
    assert r.status_code == 200
    body = r.get_data(as_text=True)
    assert 'spotiproxy_upstream_requests_total{operation="me",outcome="success"}' in body


@pytest.mark.unit
def test_request_id_and_cache_headers(client):
    r = client.get('/', headers={'X-Request-ID': 'req-123'})
    assert r.headers['X-Request-ID'] == 'req-123'
    assert r.headers['Cache-Control'] == 'no-store'

    generated = client.get('/').headers['X-Request-ID']
    assert generated and generated != 'req-123'


@pytest.mark.unit
def test_cache_control_can_be_disabled(make_app):
    r = make_app(CACHE_CONTROL='').test_client().get('/')
    assert 'Cache-Control' not in r.headers


@pytest.mark.unit
def test_cors_headers_present(client):
    r = client.get('/', headers={'Origin': 'http://frontend.example'})
    assert r.headers.get('Access-Control-Allow-Origin') in ('*', 'http://frontend.example')


@pytest.mark.unit
def test_middleware_refreshes_stale_token_before_handler(client, tokens, token_endpoint, spotify_stub):
    tokens.set(TokenPair("stale", "rt", time.time() - 10))
    token_endpoint.queue(body={"access_token": "fresh", "expires_in": 3600})

    r = client.get('/whoami')

    assert r.status_code == 200
    assert spotify_stub.tokens_seen == ["fresh"]
    assert r.get_json()["access_token"] == "fresh"
    assert r.get_json()["refresh_token"] == "rt"
    assert token_endpoint.requests[0]["auth"] == ("abc", "shh")


@pytest.mark.unit
def test_middleware_leaves_fresh_token_alone(client, token_endpoint, logged_in):
    client.get('/')
    client.get('/healthz')
    assert token_endpoint.requests == []


@pytest.mark.unit
def test_middleware_without_refresh_token_does_nothing(client, tokens, token_endpoint):
    tokens.set(TokenPair("only-access", None, None))
    assert client.get('/').status_code == 200
    assert token_endpoint.requests == []


@pytest.mark.unit
def test_middleware_failure_does_not_block_request(client, tokens, token_endpoint, spotify_stub):
    tokens.set(TokenPair("old", "rt", time.time() - 10))
    token_endpoint.queue(status_code=400, body={"error": "invalid_grant"})

    r = client.get('/whoami')

    assert r.status_code == 200
    assert spotify_stub.tokens_seen == ["old"]
    assert tokens.get().access_token == "old"


@pytest.mark.unit
def test_middleware_can_be_disabled(make_app, token_endpoint):
    app = make_app(TOKEN_REFRESH_ON_REQUEST=False)
    app.extensions["token_store"].set(TokenPair("old", "rt", time.time() - 10))
    assert app.test_client().get('/').status_code == 200
    assert token_endpoint.requests == []


@pytest.mark.unit
def test_preflight_skips_refresh(client, tokens, token_endpoint):
    tokens.set(TokenPair("old", "rt", None))
    client.options('/whoami', headers={
        'Origin': 'http://frontend.example',
        'Access-Control-Request-Method': 'GET',
    })
    assert token_endpoint.requests == []


@pytest.mark.unit
def test_middleware_network_failure_does_not_block_request(client, tokens, token_endpoint, spotify_stub):
    tokens.set(TokenPair("old", "rt", time.time() - 10))
    token_endpoint.fail_with(requests.ConnectionError("accounts service unreachable"))

    r = client.get('/whoami')

    assert r.status_code == 200
    assert r.get_json()["access_token"] == "old"
    assert spotify_stub.tokens_seen == ["old"]
    assert len(token_endpoint.requests) == 1
