"""Flask proxy exposing a small slice of the Spotify Web API."""

from flask import current_app

__version__ = "0.1.0"


def get_spotify_adapter():
    """The app's :class:`~spotiproxy.spotify_client.SpotifyClientAdapter`."""
    return current_app.extensions["spotify_adapter"]
