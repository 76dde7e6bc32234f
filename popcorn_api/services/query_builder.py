# Parameterized SQL construction for catalog queries
# popcorn_api/services/query_builder.py

"""
Builds the SQL statements behind the movie endpoints.

Each statement is a fixed template followed by optional predicate fragments.
A fragment is a (condition, template, binder) triple: when the condition holds
for the request filter, its template is appended to the WHERE clause and its
binder supplies the values for the template's placeholders. Caller input only
ever travels as bound parameters; id lists are bound as expanding parameters
(one placeholder per id).

The statements target SQL Server (CROSS APPLY, CONTAINS full-text predicates,
OFFSET/FETCH pagination).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.sql.elements import TextClause

from popcorn_api.models.movie import MovieQueryFilter, MovieSortKey
from popcorn_api.utils.helpers import calculate_skip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredicateFragment:
    """An optional `AND ...` clause and the parameters it binds."""
    condition: Callable[[MovieQueryFilter], bool]
    template: str
    binder: Callable[[MovieQueryFilter], Dict[str, Any]]


@dataclass
class BuiltQuery:
    """A SQL text with its bound parameters, ready for execution."""
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)
    expanding: Tuple[str, ...] = ()

    def to_statement(self) -> TextClause:
        statement = text(self.sql)
        if self.expanding:
            statement = statement.bindparams(*(bindparam(name, expanding=True) for name in self.expanding))
        return statement


def phrase(term: str) -> str:
    """Wraps a term in double quotes so CONTAINS matches it as an exact phrase."""
    return '"{0}"'.format(term.replace('"', '""'))


# --- Fragments ---

RATING_FRAGMENT = PredicateFragment(
    condition=lambda f: f.applies_rating,
    template="Movie.Rating >= :rating",
    binder=lambda f: {"rating": f.minimum_rating},
)

# Listing search also matches cast names and cast ids
LISTING_KEYWORDS_FRAGMENT = PredicateFragment(
    condition=lambda f: bool(f.query_term),
    template=(
        "(CONTAINS(Movie.Title, :keywords) OR CONTAINS(Cast.Name, :keywords) "
        "OR CONTAINS(Movie.ImdbCode, :keywords) OR CONTAINS(Cast.ImdbCode, :keywords))"
    ),
    binder=lambda f: {"keywords": phrase(f.query_term)},
)

SIMILAR_KEYWORDS_FRAGMENT = PredicateFragment(
    condition=lambda f: bool(f.query_term),
    template="(CONTAINS(Movie.Title, :keywords) OR CONTAINS(Movie.ImdbCode, :keywords))",
    binder=lambda f: {"keywords": phrase(f.query_term)},
)

GENRE_FRAGMENT = PredicateFragment(
    condition=lambda f: bool(f.genre),
    template="CONTAINS(Movie.GenreNames, :genre)",
    binder=lambda f: {"genre": f.genre},
)

LISTING_FRAGMENTS: Tuple[PredicateFragment, ...] = (RATING_FRAGMENT, LISTING_KEYWORDS_FRAGMENT, GENRE_FRAGMENT)
SIMILAR_FRAGMENTS: Tuple[PredicateFragment, ...] = (RATING_FRAGMENT, SIMILAR_KEYWORDS_FRAGMENT, GENRE_FRAGMENT)

SORT_CLAUSES: Dict[MovieSortKey, str] = {
    MovieSortKey.TITLE: "Movie.Title ASC",
    MovieSortKey.YEAR: "Movie.Year DESC",
    MovieSortKey.RATING: "Movie.Rating DESC",
    MovieSortKey.PEERS: "Torrent.Peers DESC",
    MovieSortKey.SEEDS: "Torrent.Seeds DESC",
    MovieSortKey.DOWNLOAD_COUNT: "Movie.DownloadCount DESC",
    MovieSortKey.LIKE_COUNT: "Movie.LikeCount DESC",
    MovieSortKey.DATE_ADDED: "Movie.DateUploadedUnix DESC",
}

# --- Templates ---

LIGHT_COLUMNS = "Movie.Title, Movie.Year, Movie.Rating, Movie.PosterImage, Movie.ImdbCode, Movie.GenreNames"

LISTING_COLUMNS = (
    "Movie.Title, Movie.Year, Movie.Rating, Movie.PosterImage, Movie.ImdbCode, Movie.GenreNames, "
    "Torrent.Peers, Torrent.Seeds, Movie.DateUploadedUnix, Movie.Id, Movie.DownloadCount, Movie.LikeCount"
)

# At most one torrent with a usable URL per movie
TORRENT_APPLY = """
    (
        SELECT TOP 1 Torrent.MovieId, Torrent.Peers, Torrent.Seeds
        FROM TorrentMovieSet AS Torrent
        WHERE Torrent.MovieId = Movie.Id AND Torrent.Url <> '' AND Torrent.Url IS NOT NULL
    ) Torrent"""

LISTING_BASE = f"""
    SELECT DISTINCT
        {LISTING_COLUMNS}, COUNT(*) OVER () AS TotalCount
    FROM
        MovieSet AS Movie
    CROSS APPLY{TORRENT_APPLY}
    INNER JOIN
        CastSet AS Cast
    ON Cast.MovieId = Movie.Id
    WHERE 1 = 1"""

# The window count must see one row per movie, not one per cast member
LISTING_GROUP_BY = f"GROUP BY {LISTING_COLUMNS}"

IDS_BASE = f"""
    SELECT DISTINCT
        {LIGHT_COLUMNS}, COUNT(*) OVER () AS TotalCount
    FROM
        MovieSet AS Movie
    WHERE
        Movie.ImdbCode IN :imdb_ids
    ORDER BY Movie.Rating DESC"""

SIMILAR_BASE = f"""
    SELECT DISTINCT
        {LISTING_COLUMNS}, COUNT(*) OVER () AS TotalCount
    FROM
        MovieSet AS Movie
    OUTER APPLY{TORRENT_APPLY}
    WHERE
        Movie.ImdbCode IN (
            SELECT Similar.TmdbId
            FROM Similar AS Similar
            INNER JOIN
            (
                SELECT Requested.Id
                FROM MovieSet AS Requested
                WHERE Requested.ImdbCode IN :imdb_ids
            ) Source
            ON Similar.MovieId = Source.Id
        )"""

LIGHT_BASE = f"""
    SELECT
        {LIGHT_COLUMNS}
    FROM
        MovieSet AS Movie
    WHERE
        Movie.ImdbCode = :imdb_code"""

CAST_BASE = f"""
    SELECT
        {LIGHT_COLUMNS}
    FROM
        MovieSet AS Movie
    INNER JOIN
        CastSet AS Cast
    ON
        Cast.MovieId = Movie.Id
    WHERE
        Cast.ImdbCode = :imdb_code"""

PAGINATION = "OFFSET :skip ROWS FETCH NEXT :take ROWS ONLY"


# --- Builders ---

def fold_predicates(
    fragments: Sequence[PredicateFragment], query_filter: MovieQueryFilter
) -> Tuple[List[str], Dict[str, Any]]:
    """Keeps the fragments whose condition holds, in order, and merges their parameters."""
    clauses: List[str] = []
    params: Dict[str, Any] = {}
    for fragment in fragments:
        if fragment.condition(query_filter):
            clauses.append(f"AND {fragment.template}")
            params.update(fragment.binder(query_filter))
    return clauses, params


def order_by(sort_by: MovieSortKey) -> str:
    return f"ORDER BY {SORT_CLAUSES.get(sort_by, SORT_CLAUSES[MovieSortKey.DATE_ADDED])}"


def pagination_params(query_filter: MovieQueryFilter) -> Dict[str, int]:
    return {
        "skip": calculate_skip(query_filter.page, query_filter.limit),
        "take": query_filter.limit,
    }


def _assemble(parts: Sequence[str]) -> str:
    return "\n".join(part.strip() for part in parts)


def build_listing_query(query_filter: MovieQueryFilter) -> BuiltQuery:
    """Paged, filterable, sortable listing of movies that have a usable torrent."""
    clauses, params = fold_predicates(LISTING_FRAGMENTS, query_filter)
    params.update(pagination_params(query_filter))
    sql = _assemble([LISTING_BASE, *clauses, LISTING_GROUP_BY, order_by(query_filter.sort_by), PAGINATION])
    logger.debug(f"Built listing query with {len(clauses)} optional predicate(s).")
    return BuiltQuery(sql=sql, params=params)


def build_ids_query(imdb_ids: Sequence[str]) -> BuiltQuery:
    """Movies whose external id is in `imdb_ids`, best rated first, unpaged."""
    return BuiltQuery(sql=_assemble([IDS_BASE]), params={"imdb_ids": list(imdb_ids)}, expanding=("imdb_ids",))


def build_similar_query(imdb_ids: Sequence[str], query_filter: MovieQueryFilter) -> BuiltQuery:
    """Paged listing of the titles marked similar to any movie in `imdb_ids`."""
    clauses, params = fold_predicates(SIMILAR_FRAGMENTS, query_filter)
    params["imdb_ids"] = list(imdb_ids)
    params.update(pagination_params(query_filter))
    sql = _assemble([SIMILAR_BASE, *clauses, order_by(query_filter.sort_by), PAGINATION])
    return BuiltQuery(sql=sql, params=params, expanding=("imdb_ids",))


def build_light_query(imdb_code: str) -> BuiltQuery:
    return BuiltQuery(sql=_assemble([LIGHT_BASE]), params={"imdb_code": imdb_code})


def build_cast_query(cast_imdb_code: str) -> BuiltQuery:
    """Every movie crediting the given cast member."""
    return BuiltQuery(sql=_assemble([CAST_BASE]), params={"imdb_code": cast_imdb_code})
