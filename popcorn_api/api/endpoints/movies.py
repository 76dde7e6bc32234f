# popcorn_api/api/endpoints/movies.py

import logging
from typing import Awaitable, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from popcorn_api.api.deps import get_movie_service
from popcorn_api.models.movie import Movie, MovieLight, MovieLightResponse, MovieQueryFilter
from popcorn_api.services.movie_service import MovieNotFoundError, MovieService

logger = logging.getLogger(__name__)
router = APIRouter()

JSON_MEDIA_TYPE = "application/json"


def get_query_filter(
    page: str = Query(..., description="Page number (1-based). Malformed values fall back to 1."),
    limit: Optional[str] = Query(None, description="Items per page, 20 to 50. Anything else means 20."),
    minimum_rating: Optional[str] = Query(None, description="Minimum rating, 0 disables the filter."),
    query_term: Optional[str] = Query(None, description="Exact phrase searched in titles, cast and ids."),
    genre: Optional[str] = Query(None, description="Genre full-text filter."),
    sort_by: Optional[str] = Query(
        None,
        description="title, year, rating, peers, seeds, download_count, like_count or date_added (default).",
    ),
) -> MovieQueryFilter:
    """Binds the listing query parameters, normalizing rather than rejecting bad values."""
    return MovieQueryFilter.from_params(
        page=page,
        limit=limit,
        minimum_rating=minimum_rating,
        query_term=query_term,
        genre=genre,
        sort_by=sort_by,
    )


async def _respond(payload: Awaitable[str], description: str) -> Response:
    """Awaits a serialized payload and maps service errors to HTTP errors."""
    try:
        return Response(content=await payload, media_type=JSON_MEDIA_TYPE)
    except MovieNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error retrieving {description}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"An error occurred while retrieving {description}.",
        )


@router.get(
    "",  # GET /api/movies
    responses={200: {"model": MovieLightResponse}},
    summary="List Movies",
    description="Paged list of movies, optionally filtered by rating, search phrase and genre.",
)
async def list_movies(
    query_filter: MovieQueryFilter = Depends(get_query_filter),
    movie_service: MovieService = Depends(get_movie_service),
):
    return await _respond(movie_service.get_movies(query_filter), "movies")


@router.post(
    "/ids",  # POST /api/movies/ids
    responses={200: {"model": MovieLightResponse}},
    summary="Get Movies By IMDb Codes",
)
async def get_movies_by_ids(
    imdb_ids: List[str] = Body(..., description="IMDb codes of the movies to fetch."),
    movie_service: MovieService = Depends(get_movie_service),
):
    """Movies for a batch of IMDb codes, best rated first. The order of codes is part of the cache key."""
    return await _respond(movie_service.get_movies_by_ids(imdb_ids), "movies by ids")


@router.post(
    "/similar",  # POST /api/movies/similar
    responses={200: {"model": MovieLightResponse}},
    summary="List Similar Movies",
)
async def get_similar(
    imdb_ids: List[str] = Body(..., description="IMDb codes whose similar titles are listed."),
    query_filter: MovieQueryFilter = Depends(get_query_filter),
    movie_service: MovieService = Depends(get_movie_service),
):
    return await _respond(movie_service.get_similar(imdb_ids, query_filter), "similar movies")


@router.get(
    "/light/{imdb}",  # GET /api/movies/light/tt3640424
    responses={200: {"model": MovieLight}, 400: {"description": "Movie not found"}},
    summary="Get Movie Summary",
)
async def get_light(imdb: str, movie_service: MovieService = Depends(get_movie_service)):
    return await _respond(movie_service.get_light(imdb), f"movie {imdb}")


@router.get(
    "/cast/{cast_id}",  # GET /api/movies/cast/nm0000123
    responses={200: {"model": MovieLightResponse}},
    summary="List Movies Of A Cast Member",
)
async def get_from_cast(cast_id: str, movie_service: MovieService = Depends(get_movie_service)):
    return await _respond(movie_service.get_from_cast(cast_id), f"movies of cast {cast_id}")


@router.get(
    "/{imdb}",  # GET /api/movies/tt3640424
    responses={200: {"model": Movie}, 400: {"description": "Movie not found"}},
    summary="Get Movie Details",
)
async def get_movie(imdb: str, movie_service: MovieService = Depends(get_movie_service)):
    """Full movie detail with torrents, cast, genres and similar titles."""
    return await _respond(movie_service.get_movie(imdb), f"movie {imdb}")
