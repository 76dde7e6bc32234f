# Cache key construction for cached responses
# popcorn_api/services/cache_keys.py

"""
Deterministic cache keys.

A key is the text ``type=<kind>&name=value&...`` with the fields in the order
given by the caller, UTF-8 encoded and then base64 encoded. Field order is
part of the key and is never sorted. Id lists keep the caller's order too,
so ``["tt1", "tt2"]`` and ``["tt2", "tt1"]`` are cached separately.
Values and ids are percent-encoded, so separators inside them cannot
make two requests share a key.
"""

import base64
from enum import Enum
from typing import Any, Iterable, Sequence, Tuple
from urllib.parse import quote

from popcorn_api.models.movie import MovieQueryFilter

FIELD_SEPARATOR = "&"
ID_SEPARATOR = ","


class CacheKind(str, Enum):
    MOVIES = "movies"
    IDS = "ids"
    SIMILAR = "similar"
    LIGHT = "light"
    CAST = "cast"
    FULL = "full"


def _escape(value: str) -> str:
    return quote(value, safe="")


def _format_value(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if value is None:
        return ""
    return str(value)


def build_cache_key(kind: CacheKind, fields: Sequence[Tuple[str, Any]] = ()) -> str:
    """
    Encodes an operation kind and its ordered (name, value) fields into an opaque key.

    Args:
        kind: The operation the cached response belongs to.
        fields: Ordered (name, value) pairs; None is encoded as an empty value.
            Values are percent-encoded before joining.

    Returns:
        A base64 string safe to use as a Redis key.
    """
    parts = [f"type={kind.value}"]
    parts.extend(f"{name}={_escape(_format_value(value))}" for name, value in fields)
    raw = FIELD_SEPARATOR.join(parts)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cache_key(key: str) -> str:
    """Returns the readable text of a key, for logs and debugging."""
    return base64.b64decode(key.encode("ascii")).decode("utf-8")


def _filter_fields(query_filter: MovieQueryFilter) -> list:
    return [
        ("page", query_filter.page),
        ("limit", query_filter.limit),
        ("minimum_rating", query_filter.minimum_rating),
        ("query_term", query_filter.query_term),
        ("genre", query_filter.genre),
        ("sort_by", query_filter.sort_by),
    ]


def join_ids(imdb_ids: Iterable[str]) -> str:
    return ID_SEPARATOR.join(_escape(str(imdb_id)) for imdb_id in imdb_ids)


def movies_key(query_filter: MovieQueryFilter) -> str:
    return build_cache_key(CacheKind.MOVIES, _filter_fields(query_filter))


def ids_key(imdb_ids: Sequence[str]) -> str:
    return build_cache_key(CacheKind.IDS, [("imdb_ids", join_ids(imdb_ids))])


def similar_key(imdb_ids: Sequence[str], query_filter: MovieQueryFilter) -> str:
    return build_cache_key(
        CacheKind.SIMILAR,
        [("imdb_ids", join_ids(imdb_ids))] + _filter_fields(query_filter),
    )


def light_key(imdb_code: str) -> str:
    return build_cache_key(CacheKind.LIGHT, [("imdb_code", imdb_code)])


def cast_key(cast_imdb_code: str) -> str:
    return build_cache_key(CacheKind.CAST, [("imdb_code", cast_imdb_code)])


def full_key(imdb_code: str) -> str:
    return build_cache_key(CacheKind.FULL, [("imdb_code", imdb_code)])
