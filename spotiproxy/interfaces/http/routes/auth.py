#!/usr/bin/env python
"""OAuth login, token exchange, refresh and identity endpoints."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, request

from spotiproxy import get_spotify_adapter
from spotiproxy.models import AuthorizationCodeRequest, RefreshRequest, parse_query


auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["GET"])
def login():
    return Response(get_spotify_adapter().build_authorize_url(), mimetype="text/plain")


@auth_bp.route("/logout", methods=["GET"])
def logout():
    get_spotify_adapter().reset()
    current_app.logger.info("User logout")
    return "", 204


@auth_bp.route("/get-access-token", methods=["GET"])
def get_access_token():
    params = parse_query(AuthorizationCodeRequest, request.args)
    body = get_spotify_adapter().exchange_code(params.code)
    return jsonify(body), 200


@auth_bp.route("/refresh", methods=["GET"])
def refresh():
    params = parse_query(RefreshRequest, request.args)
    pair = get_spotify_adapter().refresh(params.refresh_token)
    return jsonify({"access_token": pair.access_token, "refresh_token": pair.refresh_token}), 200


@auth_bp.route("/whoami", methods=["GET"])
def whoami():
    return jsonify(get_spotify_adapter().get_current_user()), 200


__all__ = ["auth_bp"]
