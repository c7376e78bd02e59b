"""Pydantic models validating query parameters before any upstream call."""

from __future__ import annotations

from typing import Dict, Mapping, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from spotiproxy.errors import RequestValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class _QueryModel(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class AuthorizationCodeRequest(_QueryModel):
    code: str = Field(min_length=1)


class RefreshRequest(_QueryModel):
    refresh_token: str = Field(min_length=1)


class AlbumQuery(_QueryModel):
    artist: str = Field(min_length=1, max_length=200)
    album: str = Field(min_length=1, max_length=200)


class SavedAlbumRequest(_QueryModel):
    # Spotify ids are base62
    album_id: str = Field(alias="id", min_length=1, max_length=64, pattern=r"^[0-9A-Za-z]+$")


def _field_name(model: Type[BaseModel], loc) -> str:
    if not loc:
        return "request"
    name = str(loc[0])
    field = model.model_fields.get(name)
    if field is not None and field.alias:
        return field.alias
    return name


def parse_query(model: Type[ModelT], args: Mapping[str, str]) -> ModelT:
    """Validate ``args`` against ``model`` or raise :class:`RequestValidationError`."""
    try:
        # MultiDict.get returns the first value for repeated keys
        return model.model_validate({key: args.get(key) for key in args})
    except ValidationError as exc:
        errors: Dict[str, str] = {}
        for error in exc.errors():
            errors.setdefault(_field_name(model, error.get("loc")), error.get("msg", "invalid"))
        raise RequestValidationError(errors) from exc


__all__ = [
    "AuthorizationCodeRequest",
    "RefreshRequest",
    "AlbumQuery",
    "SavedAlbumRequest",
    "parse_query",
]
