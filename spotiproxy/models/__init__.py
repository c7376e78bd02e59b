"""Request shapes accepted by the HTTP routes."""

from .queries import (  # noqa: F401
    AlbumQuery,
    AuthorizationCodeRequest,
    RefreshRequest,
    SavedAlbumRequest,
    parse_query,
)
