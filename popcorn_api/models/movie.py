# popcorn_api/models/movie.py

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from popcorn_api.utils.helpers import normalize_text, parse_int

DEFAULT_PAGE_SIZE = 20
MIN_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50
# Keeps the row offset well inside SQL Server's OFFSET range
MAX_PAGE = 1_000_000


class MovieSortKey(str, Enum):
    """Sort orders accepted by the `sort_by` query parameter."""
    TITLE = "title"
    YEAR = "year"
    RATING = "rating"
    PEERS = "peers"
    SEEDS = "seeds"
    DOWNLOAD_COUNT = "download_count"
    LIKE_COUNT = "like_count"
    DATE_ADDED = "date_added"

    @classmethod
    def parse(cls, value: Optional[str]) -> "MovieSortKey":
        """Unknown or missing values fall back to DATE_ADDED."""
        try:
            return cls(normalize_text(value))
        except ValueError:
            return cls.DATE_ADDED


# --- Request-scoped filter ---
class MovieQueryFilter(BaseModel):
    """
    Normalized filter and pagination values of a listing request.
    Constructed per request from raw query-string values; never persisted.
    """
    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=MIN_PAGE_SIZE, le=MAX_PAGE_SIZE)
    minimum_rating: int = 0
    query_term: str = ""
    genre: str = ""
    sort_by: MovieSortKey = MovieSortKey.DATE_ADDED

    @classmethod
    def from_params(
        cls,
        page: Any = None,
        limit: Any = None,
        minimum_rating: Any = None,
        query_term: Optional[str] = None,
        genre: Optional[str] = None,
        sort_by: Optional[str] = None,
    ) -> "MovieQueryFilter":
        """Clamps malformed or out-of-range values to safe defaults instead of rejecting them."""
        page_number = parse_int(page, 1)
        page_size = parse_int(limit, DEFAULT_PAGE_SIZE)
        return cls(
            page=min(max(page_number, 1), MAX_PAGE),
            limit=page_size if MIN_PAGE_SIZE <= page_size <= MAX_PAGE_SIZE else DEFAULT_PAGE_SIZE,
            minimum_rating=parse_int(minimum_rating, 0),
            query_term=normalize_text(query_term),
            genre=normalize_text(genre),
            sort_by=MovieSortKey.parse(sort_by),
        )

    @property
    def applies_rating(self) -> bool:
        """Zero disables the rating filter, and so does anything outside (0, 10)."""
        return 0 < self.minimum_rating < 10


# --- Response models (snake_case JSON) ---
class MovieLight(BaseModel):
    """Summary of a movie as returned by list endpoints."""
    title: str = ""
    year: int = 0
    rating: float = 0.0
    poster_image: str = ""
    imdb_code: str = ""
    genres: List[str] = Field(default_factory=list)
    # Only the paged listing reads torrent statistics
    peers: Optional[int] = None
    seeds: Optional[int] = None


class MovieLightResponse(BaseModel):
    """Envelope for movie lists: total matches plus the current page of items."""
    total_movies: int = 0
    movies: List[MovieLight] = Field(default_factory=list)


class TorrentMovie(BaseModel):
    url: str = ""
    hash: str = ""
    quality: str = ""
    seeds: int = 0
    peers: int = 0
    size: str = ""
    size_bytes: int = 0
    date_uploaded: str = ""
    date_uploaded_unix: int = 0


class Cast(BaseModel):
    name: str = ""
    character_name: str = ""
    small_image: str = ""
    imdb_code: str = ""


class Movie(BaseModel):
    """Full movie detail, including torrents, cast, genres and similar titles."""
    url: str = ""
    imdb_code: str = ""
    title: str = ""
    title_long: str = ""
    slug: str = ""
    year: int = 0
    rating: float = 0.0
    runtime: int = 0
    genres: List[str] = Field(default_factory=list)
    language: str = ""
    mpa_rating: str = ""
    download_count: int = 0
    like_count: int = 0
    description_intro: str = ""
    description_full: str = ""
    yt_trailer_code: str = ""
    date_uploaded: str = ""
    date_uploaded_unix: int = 0
    background_image: str = ""
    poster_image: str = ""
    torrents: List[TorrentMovie] = Field(default_factory=list)
    cast: List[Cast] = Field(default_factory=list)
    similar: List[str] = Field(default_factory=list)
