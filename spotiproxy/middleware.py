"""Per-request access token keep-alive."""

from __future__ import annotations

from flask import Flask, request

from spotiproxy.errors import UpstreamError


def init_token_refresh(app: Flask) -> None:
    """Refresh a stale access token before each request.

    The refresh is best effort: failures are logged and the request carries
    on with whatever token is stored.
    """
    if not app.config.get("TOKEN_REFRESH_ON_REQUEST", True):
        app.logger.info("Per-request token refresh disabled by configuration.")
        return

    @app.before_request
    def _refresh_access_token():
        if request.method == "OPTIONS":
            return None
        leeway = float(app.config.get("TOKEN_REFRESH_LEEWAY_SECONDS", 60))
        try:
            app.extensions["spotify_adapter"].refresh_if_stale(leeway)
        except UpstreamError as exc:
            app.logger.warning(
                "Could not refresh access token [%s %s]",
                exc.message,
                exc.status,
                extra={"trigger": "middleware"},
            )
        return None


__all__ = ["init_token_refresh"]
