"""
Unit tests for the SQL statement builders.
"""

import pytest

from popcorn_api.models.movie import MovieQueryFilter, MovieSortKey
from popcorn_api.services import query_builder
from popcorn_api.services.query_builder import (
    PredicateFragment,
    build_cast_query,
    build_ids_query,
    build_light_query,
    build_listing_query,
    build_similar_query,
    fold_predicates,
    phrase,
)

PAGINATION = "OFFSET :skip ROWS FETCH NEXT :take ROWS ONLY"


def listing(**params) -> query_builder.BuiltQuery:
    params.setdefault("page", 1)
    return build_listing_query(MovieQueryFilter.from_params(**params))


class TestFoldPredicates:
    def test_only_true_conditions_are_kept_in_order(self):
        fragments = [
            PredicateFragment(lambda f: True, "A = :a", lambda f: {"a": 1}),
            PredicateFragment(lambda f: False, "B = :b", lambda f: {"b": 2}),
            PredicateFragment(lambda f: True, "C = :c", lambda f: {"c": 3}),
        ]
        clauses, params = fold_predicates(fragments, MovieQueryFilter())
        assert clauses == ["AND A = :a", "AND C = :c"]
        assert params == {"a": 1, "c": 3}


class TestListingQuery:
    def test_no_optional_predicates_by_default(self):
        query = listing()
        assert ":rating" not in query.sql
        assert "CONTAINS" not in query.sql
        assert query.params == {"skip": 0, "take": 20}

    @pytest.mark.parametrize("page, limit, skip", [(1, 20, 0), (2, 20, 20), (3, 50, 100), (5, 35, 140)])
    def test_offset_is_page_minus_one_times_page_size(self, page, limit, skip):
        query = listing(page=page, limit=limit)
        assert query.params["skip"] == skip
        assert query.params["take"] == limit
        assert query.sql.endswith(PAGINATION)

    def test_pagination_values_are_bound_not_inlined(self):
        query = listing(page=4, limit=25)
        assert "75" not in query.sql
        assert "25" not in query.sql

    @pytest.mark.parametrize("rating", [1, 5, 9])
    def test_rating_inside_range_is_applied(self, rating):
        query = listing(minimum_rating=rating)
        assert "AND Movie.Rating >= :rating" in query.sql
        assert query.params["rating"] == rating

    @pytest.mark.parametrize("rating", [0, 10, 11, -3, None, "abc"])
    def test_rating_outside_range_is_ignored(self, rating):
        query = listing(minimum_rating=rating)
        assert ":rating" not in query.sql
        assert "rating" not in query.params

    def test_query_term_is_bound_as_exact_phrase(self):
        query = listing(query_term="the matrix")
        assert query.params["keywords"] == '"the matrix"'
        assert "CONTAINS(Cast.Name, :keywords)" in query.sql
        assert "CONTAINS(Cast.ImdbCode, :keywords)" in query.sql
        assert "the matrix" not in query.sql

    def test_blank_query_term_is_ignored(self):
        query = listing(query_term="   ")
        assert "keywords" not in query.params

    def test_genre_predicate(self):
        query = listing(genre="Drama")
        assert "AND CONTAINS(Movie.GenreNames, :genre)" in query.sql
        assert query.params["genre"] == "Drama"

    def test_predicates_precede_grouping_and_sorting(self):
        query = listing(minimum_rating=7, query_term="x", genre="y")
        sql = query.sql
        assert sql.index(":rating") < sql.index(":keywords") < sql.index(":genre")
        assert sql.index(":genre") < sql.index("GROUP BY") < sql.index("ORDER BY") < sql.index("OFFSET")

    def test_group_by_covers_selected_columns(self):
        query = listing()
        assert f"GROUP BY {query_builder.LISTING_COLUMNS}" in query.sql
        assert "COUNT(*) OVER () AS TotalCount" in query.sql

    @pytest.mark.parametrize("sort_by, clause", [
        ("title", "ORDER BY Movie.Title ASC"),
        ("year", "ORDER BY Movie.Year DESC"),
        ("rating", "ORDER BY Movie.Rating DESC"),
        ("peers", "ORDER BY Torrent.Peers DESC"),
        ("seeds", "ORDER BY Torrent.Seeds DESC"),
        ("download_count", "ORDER BY Movie.DownloadCount DESC"),
        ("like_count", "ORDER BY Movie.LikeCount DESC"),
        ("date_added", "ORDER BY Movie.DateUploadedUnix DESC"),
    ])
    def test_sort_keys(self, sort_by, clause):
        assert clause in listing(sort_by=sort_by).sql

    @pytest.mark.parametrize("sort_by", [None, "", "popularity", "TITLE"])
    def test_unknown_sort_behaves_like_date_added(self, sort_by):
        assert listing(sort_by=sort_by).sql == listing(sort_by="date_added").sql

    def test_rating_scenario(self):
        query = listing(page=1, limit=20, minimum_rating=7, sort_by="rating")
        assert "Movie.Rating >= :rating" in query.sql
        assert "ORDER BY Movie.Rating DESC" in query.sql
        assert query.params == {"rating": 7, "skip": 0, "take": 20}


class TestIdsQuery:
    def test_ids_bound_as_expanding_list(self):
        query = build_ids_query(["tt1", "tt2"])
        assert query.params == {"imdb_ids": ["tt1", "tt2"]}
        assert query.expanding == ("imdb_ids",)
        assert "tt1" not in query.sql
        assert "ORDER BY Movie.Rating DESC" in query.sql
        assert "OFFSET" not in query.sql

    def test_statement_expands_one_placeholder_per_id(self):
        query = build_ids_query(["tt1", "tt2", "tt3"])
        statement = query.to_statement().bindparams(**query.params)
        compiled = statement.compile(compile_kwargs={"render_postcompile": True})
        for placeholder in (":imdb_ids_1", ":imdb_ids_2", ":imdb_ids_3"):
            assert placeholder in compiled.string
        assert "tt1" not in compiled.string


class TestSimilarQuery:
    def test_membership_is_a_similarity_subquery(self):
        query = build_similar_query(["tt1"], MovieQueryFilter.from_params(page=2))
        assert "FROM Similar AS Similar" in query.sql
        assert "Requested.ImdbCode IN :imdb_ids" in query.sql
        assert query.params == {"imdb_ids": ["tt1"], "skip": 20, "take": 20}
        assert query.expanding == ("imdb_ids",)

    def test_search_does_not_include_cast(self):
        query = build_similar_query(["tt1"], MovieQueryFilter.from_params(page=1, query_term="neo"))
        assert "(CONTAINS(Movie.Title, :keywords) OR CONTAINS(Movie.ImdbCode, :keywords))" in query.sql
        assert "Cast" not in query.sql

    def test_same_sorting_and_pagination_as_listing(self):
        query = build_similar_query(["tt1"], MovieQueryFilter.from_params(page=1, sort_by="seeds"))
        assert "ORDER BY Torrent.Seeds DESC" in query.sql
        assert query.sql.endswith(PAGINATION)


class TestSingleRecordQueries:
    def test_light_query(self):
        query = build_light_query("tt0133093")
        assert "Movie.ImdbCode = :imdb_code" in query.sql
        assert query.params == {"imdb_code": "tt0133093"}
        assert "OFFSET" not in query.sql

    def test_cast_query_joins_cast(self):
        query = build_cast_query("nm0000206")
        assert "Cast.ImdbCode = :imdb_code" in query.sql
        assert "INNER JOIN" in query.sql
        assert query.params == {"imdb_code": "nm0000206"}


def test_phrase_escapes_embedded_quotes():
    assert phrase('say "hi"') == '"say ""hi"""'


def test_every_sort_key_has_a_clause():
    assert set(query_builder.SORT_CLAUSES) == set(MovieSortKey)
