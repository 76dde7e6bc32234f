"""
Shared pytest fixtures for the Popcorn API tests.

- An in-memory Redis stand-in that honours `ex` expirations against a
  controllable clock
- A mocked MovieRepository
- Row factories shaped like the catalog queries' result columns
"""

from typing import Any, Dict, Optional
from unittest.mock import AsyncMock

import pytest

from popcorn_api.data_access.movie_repository import MovieRepository
from popcorn_api.data_access.redis_client import CacheRepository
from popcorn_api.services.movie_service import MovieService


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """Implements the subset of redis.asyncio.Redis used by CacheRepository."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.store: Dict[str, Any] = {}
        self.get_calls = 0
        self.set_calls = 0

    async def get(self, key: str) -> Optional[str]:
        self.get_calls += 1
        entry = self.store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            del self.store[key]
            return None
        return value

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self.set_calls += 1
        self.store[key] = (value, self.clock() + ex if ex else None)
        return True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis(clock: FakeClock) -> FakeRedis:
    return FakeRedis(clock)


@pytest.fixture
def cache(fake_redis: FakeRedis) -> CacheRepository:
    return CacheRepository(fake_redis)


@pytest.fixture
def repository() -> AsyncMock:
    """
    Mock of MovieRepository.
    Returns no rows and no movie unless a test configures it.
    """
    mock = AsyncMock(spec=MovieRepository)
    mock.fetch_rows.return_value = []
    mock.fetch_movie.return_value = None
    return mock


@pytest.fixture
def movie_service(repository: AsyncMock, cache: CacheRepository) -> MovieService:
    return MovieService(repository=repository, cache=cache, ttl_seconds=86400)


def make_light_row(
    title: Optional[str] = "The Matrix",
    year: Optional[int] = 1999,
    rating: Optional[float] = 8.7,
    poster_image: Optional[str] = "https://img.example/matrix.jpg",
    imdb_code: Optional[str] = "tt0133093",
    genre_names: Optional[str] = "Action, Sci-Fi",
    **extra: Any,
) -> Dict[str, Any]:
    row = {
        "Title": title,
        "Year": year,
        "Rating": rating,
        "PosterImage": poster_image,
        "ImdbCode": imdb_code,
        "GenreNames": genre_names,
    }
    row.update(extra)
    return row


def make_listing_row(total_count: Optional[int] = 1, peers: Optional[int] = 12, seeds: Optional[int] = 40, **kwargs: Any):
    return make_light_row(TotalCount=total_count, Peers=peers, Seeds=seeds, **kwargs)


@pytest.fixture
def light_row():
    """Factory for summary rows (light, cast and batch queries)."""
    return make_light_row


@pytest.fixture
def listing_row():
    """Factory for listing/similar rows carrying torrent stats and the window total."""
    return make_listing_row
