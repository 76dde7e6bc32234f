# Catalog repository logic
# popcorn_api/data_access/movie_repository.py

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from popcorn_api.data_access.models import Movie
from popcorn_api.services.query_builder import BuiltQuery

logger = logging.getLogger(__name__)


class MovieRepository:
    """Read access to the movie catalog through one request-scoped session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        logger.debug("Initialized MovieRepository.")

    def _check_session(self):
        if self.session is None:
            logger.critical("Database session not available.")
            raise ConnectionError("Database session not available.")

    async def fetch_rows(self, query: BuiltQuery) -> List[Any]:
        """Executes a built statement and returns all of its rows."""
        self._check_session()
        try:
            result = await self.session.execute(query.to_statement(), query.params)
            rows = list(result.fetchall())
            logger.debug(f"Query returned {len(rows)} row(s).")
            return rows
        except SQLAlchemyError as e:
            logger.error(f"DB error executing catalog query: {e}", exc_info=True)
            raise

    async def fetch_movie(self, imdb_code: str) -> Optional[Movie]:
        """Loads one movie with its torrents, cast, genres and similar links."""
        self._check_session()
        statement = (
            select(Movie)
            .options(
                selectinload(Movie.torrents),
                selectinload(Movie.cast),
                selectinload(Movie.genres),
                selectinload(Movie.similars),
            )
            .where(Movie.imdb_code == imdb_code)
            .limit(1)
        )
        try:
            result = await self.session.execute(statement)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"DB error loading movie {imdb_code}: {e}", exc_info=True)
            raise
