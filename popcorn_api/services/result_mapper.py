# Row -> response model conversion
# popcorn_api/services/result_mapper.py

"""
Null-safe conversion of catalog rows into response models.

Every column is read independently and falls back to its type's zero value
(``""``, ``0``, ``0.0``, ``[]``) when the database returns NULL, so a response
never carries a null.
"""

from typing import Any, Iterable, Mapping, Optional

from popcorn_api.data_access import models as orm
from popcorn_api.models.movie import Cast, Movie, MovieLight, MovieLightResponse, TorrentMovie
from popcorn_api.utils.helpers import split_names

TOTAL_COUNT_COLUMN = "TotalCount"


def _mapping(row: Any) -> Mapping[str, Any]:
    # SQLAlchemy Row objects expose a read-only mapping view
    return getattr(row, "_mapping", row)


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any) -> int:
    return 0 if value is None else int(value)


def _float(value: Any) -> float:
    return 0.0 if value is None else float(value)


def map_light_row(row: Any, with_torrent_stats: bool = False) -> MovieLight:
    """Converts one summary row (Title, Year, Rating, PosterImage, ImdbCode, GenreNames[, Peers, Seeds])."""
    columns = _mapping(row)
    movie = MovieLight(
        title=_str(columns.get("Title")),
        year=_int(columns.get("Year")),
        rating=_float(columns.get("Rating")),
        poster_image=_str(columns.get("PosterImage")),
        imdb_code=_str(columns.get("ImdbCode")),
        genres=split_names(columns.get("GenreNames")),
    )
    if with_torrent_stats:
        movie.peers = _int(columns.get("Peers"))
        movie.seeds = _int(columns.get("Seeds"))
    return movie


def map_light_rows(rows: Iterable[Any], with_torrent_stats: bool = False) -> MovieLightResponse:
    """
    Converts the rows of a windowed query into an envelope.

    Each row carries the same query-wide ``TotalCount``; the last one read is
    reported as the total.
    """
    movies = []
    total = 0
    for row in rows:
        movies.append(map_light_row(row, with_torrent_stats=with_torrent_stats))
        total = _int(_mapping(row).get(TOTAL_COUNT_COLUMN))
    return MovieLightResponse(total_movies=total, movies=movies)


def map_cast_rows(rows: Iterable[Any]) -> MovieLightResponse:
    """Converts the movies of a cast member; the total is the number of rows."""
    movies = [map_light_row(row) for row in rows]
    return MovieLightResponse(total_movies=len(movies), movies=movies)


def map_optional_light_row(row: Optional[Any]) -> Optional[MovieLight]:
    """Returns None when there is no row or the row has no external id."""
    if row is None:
        return None
    movie = map_light_row(row)
    return movie if movie.imdb_code else None


def map_torrent(torrent: orm.TorrentMovie) -> TorrentMovie:
    return TorrentMovie(
        url=_str(torrent.url),
        hash=_str(torrent.hash),
        quality=_str(torrent.quality),
        seeds=_int(torrent.seeds),
        peers=_int(torrent.peers),
        size=_str(torrent.size),
        size_bytes=_int(torrent.size_bytes),
        date_uploaded=_str(torrent.date_uploaded),
        date_uploaded_unix=_int(torrent.date_uploaded_unix),
    )


def map_cast(cast: orm.Cast) -> Cast:
    return Cast(
        name=_str(cast.name),
        character_name=_str(cast.character_name),
        small_image=_str(cast.small_image),
        imdb_code=_str(cast.imdb_code),
    )


def map_movie(movie: orm.Movie) -> Movie:
    """Converts an eager-loaded movie with its torrents, cast, genres and similar links."""
    return Movie(
        url=_str(movie.url),
        imdb_code=_str(movie.imdb_code),
        title=_str(movie.title),
        title_long=_str(movie.title_long),
        slug=_str(movie.slug),
        year=_int(movie.year),
        rating=_float(movie.rating),
        runtime=_int(movie.runtime),
        genres=[genre.name for genre in movie.genres if genre.name],
        language=_str(movie.language),
        mpa_rating=_str(movie.mpa_rating),
        download_count=_int(movie.download_count),
        like_count=_int(movie.like_count),
        description_intro=_str(movie.description_intro),
        description_full=_str(movie.description_full),
        yt_trailer_code=_str(movie.yt_trailer_code),
        date_uploaded=_str(movie.date_uploaded),
        date_uploaded_unix=_int(movie.date_uploaded_unix),
        background_image=_str(movie.background_image),
        poster_image=_str(movie.poster_image),
        torrents=[map_torrent(torrent) for torrent in movie.torrents],
        cast=[map_cast(cast) for cast in movie.cast],
        similar=[similar.tmdb_id for similar in movie.similars if similar.tmdb_id],
    )
