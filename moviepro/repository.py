"""Persistence helpers for movies, credits and collections."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from .db_models import Collection, Movie, MovieCast, MovieCollection, MovieCrew
from .exceptions import DuplicateMovieError
from .models import DomainMovie, StoredCollection, StoredMovie
from .services.images import EncodedImage

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "title",
        "tagline",
        "overview",
        "runtime",
        "release_date",
        "rating",
        "vote_average",
        "trailer_url",
    }
)
REQUIRED_FIELDS = frozenset({"title", "release_date", "rating", "vote_average"})


class MovieRepository:
    """High level data access helpers for the movie library.

    Methods return detached read models so callers never touch lazy
    relationships outside of a session.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_by_tmdb_id(self, tmdb_id: int) -> StoredMovie | None:
        async with self._session_factory() as session:
            record = await self._load_movie(session, Movie.movie_id == tmdb_id)
            return StoredMovie.from_record(record) if record else None

    async def get_movie(self, movie_id: int) -> StoredMovie | None:
        """Return the local movie with cast and crew in their mapped order."""

        async with self._session_factory() as session:
            record = await self._load_movie(session, Movie.id == movie_id)
            return StoredMovie.from_record(record) if record else None

    async def list_movies(self, *, collection_id: int | None = None) -> list[StoredMovie]:
        async with self._session_factory() as session:
            stmt = select(Movie).order_by(Movie.title, Movie.id)
            if collection_id is not None:
                stmt = stmt.join(MovieCollection).where(
                    MovieCollection.collection_id == collection_id
                )
            result = await session.execute(stmt)
            return [
                StoredMovie.from_record(record, include_credits=False)
                for record in result.scalars().all()
            ]

    async def save(self, movie: DomainMovie) -> StoredMovie:
        """Persist a mapped movie together with its credits.

        A movie whose TMDB id is already stored raises
        :class:`DuplicateMovieError`.
        """

        record = Movie(
            movie_id=movie.movie_id,
            title=movie.title,
            tagline=movie.tagline,
            overview=movie.overview,
            runtime=movie.runtime,
            release_date=movie.release_date,
            rating=movie.rating,
            vote_average=movie.vote_average,
            poster=movie.poster or None,
            poster_type=movie.poster_type or None,
            backdrop=movie.backdrop or None,
            backdrop_type=movie.backdrop_type or None,
            trailer_url=movie.trailer_url,
            cast=[
                MovieCast(position=position, **entry.model_dump())
                for position, entry in enumerate(movie.cast)
            ],
            crew=[
                MovieCrew(position=position, **entry.model_dump())
                for position, entry in enumerate(movie.crew)
            ],
        )
        async with self._session_factory() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateMovieError(movie.movie_id) from exc
            logger.info("Stored movie %s (TMDB %s)", record.id, record.movie_id)
            return StoredMovie.from_record(record)

    async def update_movie(self, movie_id: int, **fields: Any) -> StoredMovie | None:
        """Overwrite the editable details of a local movie.

        Returns ``None`` when the movie does not exist. Unknown fields, or
        ``None`` for a required field, raise ``ValueError``.
        """

        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        cleared = sorted(
            name for name in REQUIRED_FIELDS if name in fields and fields[name] is None
        )
        if cleared:
            raise ValueError(f"Fields may not be empty: {', '.join(cleared)}")

        async with self._session_factory() as session:
            record = await self._load_movie(session, Movie.id == movie_id)
            if record is None:
                return None
            for name, value in fields.items():
                setattr(record, name, value)
            await session.commit()
            logger.info("Updated movie %s fields: %s", movie_id, sorted(fields))
            return StoredMovie.from_record(record)

    async def update_images(
        self,
        movie_id: int,
        *,
        poster: EncodedImage | None = None,
        backdrop: EncodedImage | None = None,
    ) -> StoredMovie | None:
        """Replace the stored poster and/or backdrop of a local movie."""

        async with self._session_factory() as session:
            record = await self._load_movie(session, Movie.id == movie_id)
            if record is None:
                return None
            if poster is not None:
                record.poster = poster.data
                record.poster_type = poster.content_type or None
            if backdrop is not None:
                record.backdrop = backdrop.data
                record.backdrop_type = backdrop.content_type or None
            await session.commit()
            return StoredMovie.from_record(record)

    async def delete_movie(self, movie_id: int) -> bool:
        async with self._session_factory() as session:
            record = await session.get(Movie, movie_id)
            if record is None:
                return False
            await session.delete(record)
            await session.commit()
            return True

    async def list_collections(self) -> list[StoredCollection]:
        async with self._session_factory() as session:
            result = await session.execute(select(Collection).order_by(Collection.name))
            return [StoredCollection.from_record(row) for row in result.scalars().all()]

    async def get_collection(self, collection_id: int) -> StoredCollection | None:
        async with self._session_factory() as session:
            record = await session.get(Collection, collection_id)
            return StoredCollection.from_record(record) if record else None

    async def create_collection(
        self, name: str, description: str | None = None
    ) -> StoredCollection:
        """Create a collection; duplicate names raise ``ValueError``."""

        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Collection name may not be blank")
        async with self._session_factory() as session:
            collection = Collection(name=cleaned, description=description)
            session.add(collection)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ValueError(f"Collection {cleaned!r} already exists") from exc
            return StoredCollection.from_record(collection)

    async def link_to_collection(self, movie_id: int, collection_id: int) -> bool:
        """Associate a movie with a collection.

        Returns ``False`` when the link already exists. Unknown movies or
        collections raise ``KeyError``.
        """

        async with self._session_factory() as session:
            if await session.get(Movie, movie_id) is None:
                raise KeyError(f"Movie {movie_id} not found")
            if await session.get(Collection, collection_id) is None:
                raise KeyError(f"Collection {collection_id} not found")
            return await self._link(session, movie_id, collection_id)

    async def link_to_named_collection(self, movie_id: int, name: str) -> bool:
        """Associate a movie with the collection called ``name``, creating it if needed."""

        async with self._session_factory() as session:
            result = await session.execute(select(Collection).where(Collection.name == name))
            collection = result.scalar_one_or_none()
            if collection is None:
                logger.info("Creating missing collection %r", name)
                collection = Collection(name=name)
                session.add(collection)
                await session.flush()
            return await self._link(session, movie_id, collection.id)

    @staticmethod
    async def _link(session: AsyncSession, movie_id: int, collection_id: int) -> bool:
        existing = await session.execute(
            select(MovieCollection.id).where(
                MovieCollection.movie_pk == movie_id,
                MovieCollection.collection_id == collection_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            return False
        position = await session.execute(
            select(func.count(MovieCollection.id)).where(
                MovieCollection.collection_id == collection_id
            )
        )
        session.add(
            MovieCollection(
                movie_pk=movie_id,
                collection_id=collection_id,
                order=position.scalar_one(),
            )
        )
        await session.commit()
        return True

    @staticmethod
    async def _load_movie(session: AsyncSession, condition) -> Movie | None:
        stmt = (
            select(Movie)
            .where(condition)
            .options(selectinload(Movie.cast), selectinload(Movie.crew))
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
