#!/usr/bin/env python
"""
Adapter around the Spotify accounts service and Web API.

Token exchange and refresh go straight to the accounts service with
``requests`` so the raw token body can be relayed to callers. Everything
else goes through ``spotipy``. Upstream failures of either kind surface as
:class:`~spotiproxy.errors.UpstreamError`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence
from urllib.parse import quote

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from spotiproxy.errors import UpstreamError
from spotiproxy.observability.metrics import observe_upstream_call, record_token_refresh
from spotiproxy.settings import Credentials
from spotiproxy.token_state import TokenPair, TokenStore

logger = logging.getLogger(__name__)

ACCOUNTS_BASE_URL = "https://accounts.spotify.com"
AUTHORIZE_URL = f"{ACCOUNTS_BASE_URL}/authorize"
TOKEN_URL = f"{ACCOUNTS_BASE_URL}/api/token"

ALBUM_SEARCH_STRATEGIES = ("album", "track")

# Characters encodeURIComponent leaves alone on top of the RFC 3986 unreserved set
_URI_COMPONENT_SAFE = "!~*'()"

SpotifyFactory = Callable[[str, float], Any]


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def default_spotify_factory(access_token: str, timeout: float) -> spotipy.Spotify:
    """Build a spotipy client for one access token with retries disabled."""
    return spotipy.Spotify(
        auth=access_token,
        requests_timeout=timeout,
        retries=0,
        status_retries=0,
    )


def _album_search_query(artist: str, album: str) -> str:
    def _phrase(value: str) -> str:
        return '"' + value.replace('"', " ").strip() + '"'

    return f"artist:{_phrase(artist)} album:{_phrase(album)}"


def _describe_token_error(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason or "token request failed"
    if isinstance(body, dict):
        return str(body.get("error_description") or body.get("error") or response.reason)
    return response.reason or "token request failed"


class SpotifyClientAdapter:
    def __init__(
        self,
        credentials: Credentials,
        tokens: TokenStore,
        *,
        session: Optional[requests.Session] = None,
        spotify_factory: Optional[SpotifyFactory] = None,
        timeout: float = 10.0,
        album_search_strategy: str = "album",
    ):
        if album_search_strategy not in ALBUM_SEARCH_STRATEGIES:
            raise ValueError(
                f"album_search_strategy must be one of {ALBUM_SEARCH_STRATEGIES}, got {album_search_strategy!r}"
            )
        self.credentials = credentials
        self.tokens = tokens
        self._session = session or requests.Session()
        self._spotify_factory = spotify_factory or default_spotify_factory
        self._timeout = timeout
        self.album_search_strategy = album_search_strategy

    # ------------------------------------------------------------------
    # Upstream plumbing
    # ------------------------------------------------------------------
    @contextmanager
    def _upstream(self, operation: str) -> Iterator[None]:
        with observe_upstream_call(operation):
            try:
                yield
            except SpotifyException as exc:
                raise UpstreamError(exc.http_status, exc.msg, operation=operation) from exc
            except requests.RequestException as exc:
                raise UpstreamError(502, str(exc), operation=operation) from exc

    def _post_token(self, operation: str, form: Dict[str, str], auth=None) -> Dict[str, Any]:
        with self._upstream(operation):
            response = self._session.post(
                TOKEN_URL,
                data=form,
                auth=auth,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self._timeout,
            )
            if response.status_code >= 400:
                raise UpstreamError(response.status_code, _describe_token_error(response), operation=operation)
            try:
                body = response.json()
            except ValueError as exc:
                raise UpstreamError(502, "token endpoint returned a non-JSON body", operation=operation) from exc
            if not isinstance(body, dict):
                raise UpstreamError(502, "token endpoint returned an unexpected body", operation=operation)
            return body

    def _spotify(self, pair: TokenPair, operation: str):
        if not pair.access_token:
            raise UpstreamError(401, "no access token, log in first", operation=operation)
        return self._spotify_factory(pair.access_token, self._timeout)

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------
    def build_authorize_url(self, scopes: Optional[Sequence[str]] = None) -> str:
        """Authorization-code URL the user is sent to on /login."""
        scope_list = self.credentials.scopes if scopes is None else tuple(scopes)
        scope = " ".join(scope_list)
        return (
            AUTHORIZE_URL
            + "?response_type=code"
            + "&client_id=" + encode_uri_component(self.credentials.client_id)
            + ("&scope=" + encode_uri_component(scope) if scope else "")
            + "&redirect_uri=" + encode_uri_component(self.credentials.redirect_uri)
        )

    def exchange_code(self, code: str) -> Dict[str, Any]:
        """Trade an authorization code for tokens and return the raw token body."""
        body = self._post_token(
            "exchange_code",
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.credentials.redirect_uri,
                "client_id": self.credentials.client_id,
                "client_secret": self.credentials.client_secret,
            },
        )
        if not body.get("access_token"):
            raise UpstreamError(502, "token endpoint returned no access token", operation="exchange_code")
        self.tokens.set(TokenPair.from_token_response(body))
        logger.info("Access token obtained from authorization code")
        return body

    def _request_refresh(self, refresh_token: str) -> TokenPair:
        body = self._post_token(
            "refresh_token",
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            auth=(self.credentials.client_id, self.credentials.client_secret),
        )
        if not body.get("access_token"):
            raise UpstreamError(502, "token endpoint returned no access token", operation="refresh_token")
        return TokenPair.from_token_response(body, fallback_refresh_token=refresh_token)

    def refresh(self, refresh_token: str) -> TokenPair:
        """Refresh using ``refresh_token`` and store the resulting pair."""
        try:
            pair = self._request_refresh(refresh_token)
        except UpstreamError as exc:
            record_token_refresh("manual", "error")
            logger.warning("Could not refresh access token [%s %s]", exc.message, exc.status)
            raise
        self.tokens.set(pair)
        record_token_refresh("manual", "success")
        logger.info("The access token has been refreshed!")
        return pair

    def refresh_if_stale(self, leeway: float = 0.0) -> Optional[TokenPair]:
        """Refresh the stored pair when it is stale.

        The new pair is only stored if nobody replaced the pair while the
        refresh was in flight. Returns the stored pair, or ``None`` when no
        refresh happened or its result was discarded.
        """
        snapshot = self.tokens.get()
        if not snapshot.refresh_token or not snapshot.is_stale(leeway):
            return None
        try:
            pair = self._request_refresh(snapshot.refresh_token)
        except UpstreamError:
            record_token_refresh("middleware", "error")
            raise
        if not self.tokens.compare_and_set(snapshot, pair):
            record_token_refresh("middleware", "discarded")
            logger.info("Token state changed during refresh; discarding refreshed token")
            return None
        record_token_refresh("middleware", "success")
        logger.info("The access token has been refreshed!")
        return pair

    def reset(self) -> None:
        """Forget the local tokens. Spotify offers no revocation endpoint."""
        self.tokens.clear()

    # ------------------------------------------------------------------
    # Web API
    # ------------------------------------------------------------------
    def get_current_user(self) -> Dict[str, Any]:
        pair = self.tokens.get()
        client = self._spotify(pair, "me")
        with self._upstream("me"):
            profile = client.me()
        result = dict(profile or {})
        result["access_token"] = pair.access_token
        result["refresh_token"] = pair.refresh_token
        return result

    def search_album(self, artist: str, album: str) -> Dict[str, Any]:
        """Return the top search match for ``album`` by ``artist``, unchanged."""
        if self.album_search_strategy == "track":
            query, search_type = f"{artist} - {album}", "track"
        else:
            query, search_type = _album_search_query(artist, album), "album"
        client = self._spotify(self.tokens.get(), "search")
        with self._upstream("search"):
            return client.search(q=query, limit=1, offset=0, type=search_type)

    def add_saved_album(self, album_id: str) -> List[str]:
        album_ids = [album_id]
        client = self._spotify(self.tokens.get(), "save_album")
        with self._upstream("save_album"):
            client.current_user_saved_albums_add(albums=album_ids)
        return album_ids

    def remove_saved_album(self, album_id: str) -> List[str]:
        album_ids = [album_id]
        client = self._spotify(self.tokens.get(), "remove_album")
        with self._upstream("remove_album"):
            client.current_user_saved_albums_delete(albums=album_ids)
        return album_ids


__all__ = [
    "SpotifyClientAdapter",
    "default_spotify_factory",
    "encode_uri_component",
    "AUTHORIZE_URL",
    "TOKEN_URL",
    "ALBUM_SEARCH_STRATEGIES",
]
