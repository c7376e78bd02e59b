#!/usr/bin/env python
"""
OAuth client credentials.

Credentials are read once from the Flask config when the app is created
and never change afterwards.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spotiproxy.errors import ConfigurationError

REQUIRED_KEYS: Tuple[str, ...] = (
    "SPOTIPY_CLIENT_ID",
    "SPOTIPY_CLIENT_SECRET",
    "SPOTIPY_REDIRECT_URI",
)


def _parse_scopes(value: Optional[object]) -> List[str]:
    """Normalize scope configuration into a unique ordered list."""
    if value is None:
        tokens: List[str] = []
    elif isinstance(value, str):
        tokens = [token.strip() for token in value.replace(",", " ").split()]
    elif isinstance(value, (list, tuple)):
        tokens = [str(token).strip() for token in value]
    else:
        tokens = [str(value).strip()]

    normalized: List[str] = []
    for token in tokens:
        if token and token not in normalized:
            normalized.append(token)
    return normalized


class Credentials(BaseModel):
    """Client id, secret and redirect URI registered with Spotify."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    redirect_uri: str = Field(min_length=1)
    scopes: Tuple[str, ...] = ()

    @field_validator("scopes", mode="before")
    @classmethod
    def _normalize_scopes(cls, value: Optional[object]) -> Tuple[str, ...]:
        return tuple(_parse_scopes(value))


def load_credentials(source: Mapping[str, Any]) -> Credentials:
    """Build credentials from a config mapping, failing on any missing key."""
    missing = [key for key in REQUIRED_KEYS if not str(source.get(key) or "").strip()]
    if missing:
        raise ConfigurationError(missing)
    return Credentials.model_validate(
        {
            "client_id": str(source["SPOTIPY_CLIENT_ID"]).strip(),
            "client_secret": str(source["SPOTIPY_CLIENT_SECRET"]).strip(),
            "redirect_uri": str(source["SPOTIPY_REDIRECT_URI"]).strip(),
            "scopes": source.get("SPOTIFY_SCOPES"),
        }
    )


__all__ = ["Credentials", "load_credentials", "REQUIRED_KEYS"]
