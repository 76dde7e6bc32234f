# popcorn_api/services/movie_service.py

import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

from popcorn_api.core.config import DEFAULT_CACHE_TTL_SECONDS
from popcorn_api.data_access.movie_repository import MovieRepository
from popcorn_api.data_access.redis_client import CacheRepository
from popcorn_api.models.movie import MovieLightResponse, MovieQueryFilter
from popcorn_api.services import cache_keys, query_builder, result_mapper

logger = logging.getLogger(__name__)


class MovieNotFoundError(Exception):
    """Raised when a single-record lookup matches no movie."""
    pass


def serialize(response) -> str:
    """Renders a response model as JSON, leaving out absent optional fields."""
    return response.model_dump_json(exclude_none=True)


EMPTY_LIGHT_RESPONSE = serialize(MovieLightResponse())


class MovieService:
    def __init__(
        self,
        repository: MovieRepository,
        cache: CacheRepository,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        log: Optional[logging.Logger] = None,
    ):
        """
        Initializes the Movie Service.

        Args:
            repository: Catalog access bound to the request's database session.
            cache: Response cache shared by all requests.
            ttl_seconds: Expiration applied to every cached response.
            log: Logger to report to; defaults to this module's logger.
        """
        self.repository = repository
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.logger = log or logger

    async def _get_or_compute(self, key: str, compute: Callable[[], Awaitable[str]]) -> str:
        """
        Serves `key` from the cache, or computes, stores and returns the payload.

        A cache read failure counts as a miss and a failed store is only logged;
        errors raised by `compute` (store failures, not-found) propagate and
        nothing is cached for them.
        """
        started = time.perf_counter()
        cached = await self.cache.get(key)
        if cached is not None:
            self.logger.debug(f"Served {cache_keys.decode_cache_key(key)} from cache.")
            return cached

        payload = await compute()
        if not await self.cache.set(key, payload, self.ttl_seconds):
            self.logger.warning(f"Response for {cache_keys.decode_cache_key(key)} was not cached.")

        elapsed_ms = (time.perf_counter() - started) * 1000
        self.logger.info(f"Computed {cache_keys.decode_cache_key(key)} in {elapsed_ms:.1f} ms.")
        return payload

    async def get_movies(self, query_filter: MovieQueryFilter) -> str:
        """Paged, filtered listing of movies."""
        async def compute() -> str:
            rows = await self.repository.fetch_rows(query_builder.build_listing_query(query_filter))
            return serialize(result_mapper.map_light_rows(rows, with_torrent_stats=True))

        return await self._get_or_compute(cache_keys.movies_key(query_filter), compute)

    async def get_movies_by_ids(self, imdb_ids: Sequence[str]) -> str:
        """Movies for a batch of external ids. An empty batch never touches the store or cache."""
        if not imdb_ids:
            return EMPTY_LIGHT_RESPONSE

        async def compute() -> str:
            rows = await self.repository.fetch_rows(query_builder.build_ids_query(imdb_ids))
            return serialize(result_mapper.map_light_rows(rows))

        return await self._get_or_compute(cache_keys.ids_key(imdb_ids), compute)

    async def get_similar(self, imdb_ids: Sequence[str], query_filter: MovieQueryFilter) -> str:
        """Paged listing of the titles similar to any of `imdb_ids`."""
        if not imdb_ids:
            return EMPTY_LIGHT_RESPONSE

        async def compute() -> str:
            rows = await self.repository.fetch_rows(query_builder.build_similar_query(imdb_ids, query_filter))
            return serialize(result_mapper.map_light_rows(rows, with_torrent_stats=True))

        return await self._get_or_compute(cache_keys.similar_key(imdb_ids, query_filter), compute)

    async def get_light(self, imdb_code: str) -> str:
        """
        Summary of a single movie.

        Raises:
            MovieNotFoundError: If no movie has this external id.
        """
        async def compute() -> str:
            rows = await self.repository.fetch_rows(query_builder.build_light_query(imdb_code))
            movie = result_mapper.map_optional_light_row(rows[0] if rows else None)
            if movie is None:
                self.logger.warning(f"Movie not found: {imdb_code}")
                raise MovieNotFoundError(f"Movie with IMDb code '{imdb_code}' not found.")
            return serialize(movie)

        return await self._get_or_compute(cache_keys.light_key(imdb_code), compute)

    async def get_from_cast(self, cast_imdb_code: str) -> str:
        """Every movie featuring a cast member; an unknown cast id yields an empty list."""
        async def compute() -> str:
            rows = await self.repository.fetch_rows(query_builder.build_cast_query(cast_imdb_code))
            return serialize(result_mapper.map_cast_rows(rows))

        return await self._get_or_compute(cache_keys.cast_key(cast_imdb_code), compute)

    async def get_movie(self, imdb_code: str) -> str:
        """
        Full detail of a single movie.

        Raises:
            MovieNotFoundError: If no movie has this external id.
        """
        async def compute() -> str:
            movie = await self.repository.fetch_movie(imdb_code)
            if movie is None:
                self.logger.warning(f"Movie not found: {imdb_code}")
                raise MovieNotFoundError(f"Movie with IMDb code '{imdb_code}' not found.")
            return serialize(result_mapper.map_movie(movie))

        return await self._get_or_compute(cache_keys.full_key(imdb_code), compute)
