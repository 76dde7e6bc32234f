# Relational catalog schema (SQLAlchemy ORM)
# popcorn_api/data_access/models.py

"""
ORM mappings for the movie catalog tables.

The catalog is populated by an external ingestion process; this service only
reads it. Table and column names follow the existing SQL Server schema
(`MovieSet`, `TorrentMovieSet`, `CastSet`, `GenreSet`, `Similar`), while the
Python attributes are snake_case.
"""

from typing import List, Optional

from sqlalchemy import BigInteger, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class Movie(Base):
    """
    A catalog movie.

    Attributes:
        id: Internal primary key, used only for joins
        imdb_code: External identifier (e.g. 'tt0111161'), immutable catalog key
        genre_names: Comma separated genre names, indexed for full-text search
        date_uploaded_unix: Upload time as unix seconds, default sort key
    """
    __tablename__ = 'MovieSet'

    id: Mapped[int] = mapped_column('Id', Integer, primary_key=True)
    imdb_code: Mapped[Optional[str]] = mapped_column('ImdbCode', String(50), index=True)
    url: Mapped[Optional[str]] = mapped_column('Url', Text)
    title: Mapped[Optional[str]] = mapped_column('Title', Text)
    title_long: Mapped[Optional[str]] = mapped_column('TitleLong', Text)
    slug: Mapped[Optional[str]] = mapped_column('Slug', Text)
    year: Mapped[Optional[int]] = mapped_column('Year', Integer)
    rating: Mapped[Optional[float]] = mapped_column('Rating', Float)
    runtime: Mapped[Optional[int]] = mapped_column('Runtime', Integer)
    genre_names: Mapped[Optional[str]] = mapped_column('GenreNames', Text)
    language: Mapped[Optional[str]] = mapped_column('Language', String(50))
    mpa_rating: Mapped[Optional[str]] = mapped_column('MpaRating', String(20))
    download_count: Mapped[Optional[int]] = mapped_column('DownloadCount', Integer)
    like_count: Mapped[Optional[int]] = mapped_column('LikeCount', Integer)
    description_intro: Mapped[Optional[str]] = mapped_column('DescriptionIntro', Text)
    description_full: Mapped[Optional[str]] = mapped_column('DescriptionFull', Text)
    yt_trailer_code: Mapped[Optional[str]] = mapped_column('YtTrailerCode', String(50))
    date_uploaded: Mapped[Optional[str]] = mapped_column('DateUploaded', String(50))
    date_uploaded_unix: Mapped[Optional[int]] = mapped_column('DateUploadedUnix', BigInteger)
    background_image: Mapped[Optional[str]] = mapped_column('BackgroundImage', Text)
    poster_image: Mapped[Optional[str]] = mapped_column('PosterImage', Text)

    torrents: Mapped[List["TorrentMovie"]] = relationship("TorrentMovie", back_populates="movie")
    cast: Mapped[List["Cast"]] = relationship("Cast", back_populates="movie")
    genres: Mapped[List["Genre"]] = relationship("Genre", back_populates="movie")
    similars: Mapped[List["Similar"]] = relationship("Similar", back_populates="movie")

    def __repr__(self) -> str:
        return f"<Movie(id={self.id}, imdb_code='{self.imdb_code}', title='{self.title}')>"


class TorrentMovie(Base):
    """A torrent attached to a movie (many-to-one)."""
    __tablename__ = 'TorrentMovieSet'

    id: Mapped[int] = mapped_column('Id', Integer, primary_key=True)
    movie_id: Mapped[int] = mapped_column('MovieId', ForeignKey('MovieSet.Id'), index=True)
    url: Mapped[Optional[str]] = mapped_column('Url', Text)
    hash: Mapped[Optional[str]] = mapped_column('Hash', String(64))
    quality: Mapped[Optional[str]] = mapped_column('Quality', String(20))
    seeds: Mapped[Optional[int]] = mapped_column('Seeds', Integer)
    peers: Mapped[Optional[int]] = mapped_column('Peers', Integer)
    size: Mapped[Optional[str]] = mapped_column('Size', String(50))
    size_bytes: Mapped[Optional[int]] = mapped_column('SizeBytes', BigInteger)
    date_uploaded: Mapped[Optional[str]] = mapped_column('DateUploaded', String(50))
    date_uploaded_unix: Mapped[Optional[int]] = mapped_column('DateUploadedUnix', BigInteger)

    movie: Mapped["Movie"] = relationship("Movie", back_populates="torrents")


class Cast(Base):
    """A cast member credited on a movie (many-to-one)."""
    __tablename__ = 'CastSet'

    id: Mapped[int] = mapped_column('Id', Integer, primary_key=True)
    movie_id: Mapped[int] = mapped_column('MovieId', ForeignKey('MovieSet.Id'), index=True)
    name: Mapped[Optional[str]] = mapped_column('Name', Text)
    character_name: Mapped[Optional[str]] = mapped_column('CharacterName', Text)
    small_image: Mapped[Optional[str]] = mapped_column('SmallImage', Text)
    imdb_code: Mapped[Optional[str]] = mapped_column('ImdbCode', String(50), index=True)

    movie: Mapped["Movie"] = relationship("Movie", back_populates="cast")


class Genre(Base):
    __tablename__ = 'GenreSet'

    id: Mapped[int] = mapped_column('Id', Integer, primary_key=True)
    movie_id: Mapped[int] = mapped_column('MovieId', ForeignKey('MovieSet.Id'), index=True)
    name: Mapped[Optional[str]] = mapped_column('Name', String(100))

    movie: Mapped["Movie"] = relationship("Movie", back_populates="genres")


class Similar(Base):
    """
    Similarity link from a movie to another title.

    `tmdb_id` holds the target's external identifier, which is compared
    against `MovieSet.ImdbCode` by the similarity listing.
    """
    __tablename__ = 'Similar'

    id: Mapped[int] = mapped_column('Id', Integer, primary_key=True)
    movie_id: Mapped[int] = mapped_column('MovieId', ForeignKey('MovieSet.Id'), index=True)
    tmdb_id: Mapped[Optional[str]] = mapped_column('TmdbId', String(50))

    movie: Mapped["Movie"] = relationship("Movie", back_populates="similars")
