from __future__ import annotations

from flask import Blueprint, Response, jsonify

from spotiproxy import __version__, get_spotify_adapter

health_bp = Blueprint("health_bp", __name__)


@health_bp.route("/")
def ping():
    return Response("pong", mimetype="text/plain")


@health_bp.route("/healthz")
def healthz():
    pair = get_spotify_adapter().tokens.get()
    checks = {
        "session": "empty" if pair.is_empty else "active",
        "authenticated": bool(pair.access_token),
        "has_refresh_token": bool(pair.refresh_token),
        "access_token_expires_at": pair.expires_at,
    }
    return jsonify({"status": "ok", "version": __version__, "checks": checks}), 200
