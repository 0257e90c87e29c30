"""SQLAlchemy ORM models backing the movie library."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base
from .models import MovieRating


class Collection(Base):
    """A user-defined named grouping of movies."""

    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    movies: Mapped[list["MovieCollection"]] = relationship(
        back_populates="collection", cascade="all, delete-orphan"
    )


class Movie(Base):
    """A movie imported from TMDB or created locally."""

    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    movie_id: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(255))
    tagline: Mapped[str | None] = mapped_column(String(512), nullable=True)
    overview: Mapped[str | None] = mapped_column(Text, nullable=True)
    runtime: Mapped[int | None] = mapped_column(Integer, nullable=True)
    release_date: Mapped[date] = mapped_column(Date)
    rating: Mapped[MovieRating] = mapped_column(
        Enum(MovieRating, native_enum=False, length=8), default=MovieRating.NR
    )
    vote_average: Mapped[float] = mapped_column(Float, default=0.0)
    poster: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    poster_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    backdrop: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    backdrop_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    trailer_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    cast: Mapped[list["MovieCast"]] = relationship(
        back_populates="movie",
        cascade="all, delete-orphan",
        order_by="MovieCast.position",
    )
    crew: Mapped[list["MovieCrew"]] = relationship(
        back_populates="movie",
        cascade="all, delete-orphan",
        order_by="MovieCrew.position",
    )
    collections: Mapped[list["MovieCollection"]] = relationship(
        back_populates="movie", cascade="all, delete-orphan"
    )


class MovieCast(Base):
    __tablename__ = "movie_cast"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    movie_pk: Mapped[int] = mapped_column(
        Integer, ForeignKey("movies.id", ondelete="CASCADE")
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    cast_id: Mapped[int] = mapped_column(Integer)
    department: Mapped[str | None] = mapped_column(String(120), nullable=True)
    name: Mapped[str] = mapped_column(String(255))
    character: Mapped[str | None] = mapped_column(String(512), nullable=True)
    image_url: Mapped[str] = mapped_column(String(512))

    movie: Mapped[Movie] = relationship(back_populates="cast")


class MovieCrew(Base):
    __tablename__ = "movie_crew"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    movie_pk: Mapped[int] = mapped_column(
        Integer, ForeignKey("movies.id", ondelete="CASCADE")
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    crew_id: Mapped[int] = mapped_column(Integer)
    department: Mapped[str | None] = mapped_column(String(120), nullable=True)
    name: Mapped[str] = mapped_column(String(255))
    job: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_url: Mapped[str] = mapped_column(String(512))

    movie: Mapped[Movie] = relationship(back_populates="crew")


class MovieCollection(Base):
    """Association between a movie and a collection."""

    __tablename__ = "movie_collections"
    __table_args__ = (
        UniqueConstraint("collection_id", "movie_pk", name="uq_movie_collection"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collections.id", ondelete="CASCADE")
    )
    movie_pk: Mapped[int] = mapped_column(
        Integer, ForeignKey("movies.id", ondelete="CASCADE")
    )
    order: Mapped[int] = mapped_column(Integer, default=0)

    collection: Mapped[Collection] = relationship(back_populates="movies")
    movie: Mapped[Movie] = relationship(back_populates="collections")
