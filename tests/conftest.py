import os
import sys
import time

import pytest

# Ensure project root is on sys.path so 'spotiproxy' and 'tests' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import stubs as test_stubs

TEST_SETTINGS = {
    "TESTING": True,
    "SPOTIPY_CLIENT_ID": "abc",
    "SPOTIPY_CLIENT_SECRET": "shh",
    "SPOTIPY_REDIRECT_URI": "http://x/cb",
    "ALBUM_SEARCH_STRATEGY": "album",
    "TOKEN_REFRESH_ON_REQUEST": True,
    "TOKEN_REFRESH_LEEWAY_SECONDS": 60,
    "UPSTREAM_TIMEOUT_SECONDS": 10.0,
    "CACHE_CONTROL": "no-store",
    "CORS_ALLOWED_ORIGINS": ["*"],
    "SPOTIFY_SCOPES": [
        "user-read-private",
        "user-read-email",
        "playlist-modify-private",
        "playlist-modify-public",
        "user-library-modify",
        "user-library-read",
        "user-follow-modify",
    ],
}


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep a developer's .env/shell settings out of the tests."""
    monkeypatch.setenv("SPOTIPY_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("SPOTIPY_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setenv("SPOTIPY_REDIRECT_URI", "http://localhost/callback")
    yield


@pytest.fixture
def spotify_stub():
    return test_stubs.SpotipyClientStub()


@pytest.fixture
def token_endpoint():
    return test_stubs.TokenEndpointStub()


@pytest.fixture
def make_app(spotify_stub, token_endpoint):
    import spotiproxy.app as app_module

    def _make(**overrides):
        settings = dict(TEST_SETTINGS)
        settings.update(overrides)
        return app_module.create_app(
            settings,
            spotify_factory=spotify_stub.factory,
            http_session=token_endpoint,
        )

    return _make


@pytest.fixture
def app(make_app):
    yield make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def tokens(app):
    return app.extensions["token_store"]


@pytest.fixture
def logged_in(tokens):
    """Store a fresh token pair so the refresh hook stays idle."""
    from spotiproxy.token_state import TokenPair

    pair = TokenPair("access-1", "refresh-1", time.time() + 3600)
    tokens.set(pair)
    return pair
