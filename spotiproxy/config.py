#!/usr/bin/env python
# spotiproxy/config.py
import os
from typing import List


DEFAULT_SCOPES = (
    "user-read-private,user-read-email,playlist-modify-private,"
    "playlist-modify-public,user-library-modify,user-library-read,"
    "user-follow-modify"
)


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    # Spotify OAuth client (required; the app refuses to start without them)
    SPOTIPY_CLIENT_ID = os.environ.get('SPOTIPY_CLIENT_ID')
    SPOTIPY_CLIENT_SECRET = os.environ.get('SPOTIPY_CLIENT_SECRET')
    SPOTIPY_REDIRECT_URI = os.environ.get('SPOTIPY_REDIRECT_URI')

    # Scopes requested on /login, in order
    SPOTIFY_SCOPES = _get_csv_list('SPOTIFY_SCOPES', DEFAULT_SCOPES)

    # Upstream calls
    UPSTREAM_TIMEOUT_SECONDS = max(1.0, _get_float('UPSTREAM_TIMEOUT_SECONDS', 10.0))
    # "album" searches albums by field filters, "track" keeps the free-text track query
    ALBUM_SEARCH_STRATEGY = (os.getenv('ALBUM_SEARCH_STRATEGY') or 'album').strip().lower()

    # Token keep-alive
    TOKEN_REFRESH_ON_REQUEST = _get_bool('TOKEN_REFRESH_ON_REQUEST', True)
    TOKEN_REFRESH_LEEWAY_SECONDS = max(0, _get_int('TOKEN_REFRESH_LEEWAY_SECONDS', 60))

    # HTTP surface
    PORT = _get_int('PORT', 5000)
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', '*')
    CACHE_CONTROL = os.getenv('CACHE_CONTROL', 'no-store')

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    # Relative to the working directory the server is started from
    LOG_DIR = os.getenv('LOG_DIR', 'log')
