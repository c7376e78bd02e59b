"""Album search and saved-album library endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from spotiproxy import get_spotify_adapter
from spotiproxy.models import AlbumQuery, SavedAlbumRequest, parse_query


library_bp = Blueprint("library", __name__)


@library_bp.route("/get-album", methods=["GET"])
def get_album():
    params = parse_query(AlbumQuery, request.args)
    return jsonify(get_spotify_adapter().search_album(params.artist, params.album)), 200


@library_bp.route("/add-album", methods=["GET"])
def add_album():
    params = parse_query(SavedAlbumRequest, request.args)
    album_ids = get_spotify_adapter().add_saved_album(params.album_id)
    current_app.logger.info("Saved album %s", params.album_id)
    return jsonify({"success": True, "ids": album_ids}), 200


@library_bp.route("/remove-album", methods=["GET"])
def remove_album():
    params = parse_query(SavedAlbumRequest, request.args)
    album_ids = get_spotify_adapter().remove_saved_album(params.album_id)
    current_app.logger.info("Removed album %s", params.album_id)
    return jsonify({"success": True, "ids": album_ids}), 200


__all__ = ["library_bp"]
