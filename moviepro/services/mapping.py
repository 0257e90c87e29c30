"""Mapping of TMDB payloads into the local movie domain."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, TypeVar

from ..config import Settings
from ..exceptions import MappingError
from ..models import MAX_CREDITS, CastEntry, CrewEntry, DomainMovie
from ..payloads import ActorDetail, CastMember, CrewMember, ExternalMovie
from ..utils import format_display_date, parse_api_date
from .builders import (
    build_cast_image,
    build_image_type,
    build_image_url,
    build_trailer_url,
)
from .images import ImageEncoder
from .rating import RatingResolver

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Not Available"

T = TypeVar("T", CastMember, CrewMember)


@dataclass(slots=True)
class MappingResult:
    """Outcome of a mapping attempt carrying either the movie or the error."""

    movie: DomainMovie | None = None
    error: MappingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.movie is not None

    def unwrap(self) -> DomainMovie:
        if self.error is not None:
            raise self.error
        if self.movie is None:
            raise MappingError("Mapping result holds neither a movie nor an error")
        return self.movie


def top_unique(
    members: Iterable[T],
    key: Callable[[T], Hashable],
    *,
    limit: int = MAX_CREDITS,
) -> list[T]:
    """Return the most popular member per ``key``, capped at ``limit``.

    Sorting is stable so members with equal popularity keep their input order.
    """

    ordered = sorted(members, key=lambda member: member.popularity or 0.0, reverse=True)
    seen: set[Hashable] = set()
    selected: list[T] = []
    for member in ordered:
        identity = key(member)
        if identity in seen:
            continue
        seen.add(identity)
        selected.append(member)
        if len(selected) >= limit:
            break
    return selected


def _cast_identity(member: CastMember) -> Hashable:
    # Credits without a cast_id fall back to their person id.
    if member.cast_id is None:
        return ("person", member.id)
    return member.cast_id


class TMDBMappingService:
    """Transforms TMDB movie and person payloads into normalized values."""

    def __init__(
        self,
        settings: Settings,
        image_encoder: ImageEncoder,
        rating_resolver: RatingResolver | None = None,
    ) -> None:
        self._settings = settings
        self._images = image_encoder
        self._ratings = rating_resolver or RatingResolver(
            country=settings.certification_country,
            unknown_policy=settings.unknown_certification_policy,
        )

    async def map_movie_detail(self, movie: ExternalMovie) -> DomainMovie:
        """Map ``movie`` or raise :class:`MappingError` wrapping the cause."""

        try:
            return await self._map_movie_detail(movie)
        except MappingError as exc:
            if exc.movie_id is None:
                exc.movie_id = movie.id
            raise
        except Exception as exc:
            raise MappingError(
                f"Could not map TMDB movie {movie.id}: {exc}",
                movie_id=movie.id,
                cause=exc,
            ) from exc

    async def try_map_movie_detail(self, movie: ExternalMovie) -> MappingResult:
        try:
            mapped = await self.map_movie_detail(movie)
        except MappingError as exc:
            logger.warning("Mapping failed for TMDB movie %s: %s", movie.id, exc)
            return MappingResult(error=exc)
        return MappingResult(movie=mapped)

    async def _map_movie_detail(self, movie: ExternalMovie) -> DomainMovie:
        release_date = parse_api_date(movie.release_date, field="release_date")
        rating = self._ratings.resolve(movie.release_dates)
        backdrop, poster = await asyncio.gather(
            self._encode_image(movie.backdrop_path, self._settings.default_backdrop_size),
            self._encode_image(movie.poster_path, self._settings.default_poster_size),
        )

        cast = [
            CastEntry(
                cast_id=member.id,
                department=member.known_for_department,
                name=member.name,
                character=member.character,
                image_url=self.build_cast_image(member.profile_path),
            )
            for member in top_unique(movie.credits.cast, key=_cast_identity)
        ]
        crew = [
            CrewEntry(
                crew_id=member.id,
                department=member.department,
                name=member.name,
                job=member.job,
                image_url=self.build_cast_image(member.profile_path),
            )
            for member in top_unique(movie.credits.crew, key=lambda member: member.id)
        ]

        logger.debug(
            "Mapped TMDB movie %s with %s cast and %s crew entries",
            movie.id,
            len(cast),
            len(crew),
        )
        return DomainMovie(
            movie_id=movie.id,
            title=movie.title,
            tagline=movie.tagline,
            overview=movie.overview,
            runtime=movie.runtime,
            release_date=release_date,
            rating=rating,
            vote_average=movie.vote_average,
            poster=poster,
            poster_type=build_image_type(movie.poster_path),
            backdrop=backdrop,
            backdrop_type=build_image_type(movie.backdrop_path),
            trailer_url=build_trailer_url(
                movie.videos.results, self._settings.base_youtube_path
            ),
            cast=cast,
            crew=crew,
        )

    def map_actor_detail(self, actor: ActorDetail) -> ActorDetail:
        """Return a display-ready copy of ``actor``.

        Empty text fields become ``"Not Available"`` and the birthday is
        reformatted as ``Jan 05, 1990``. Malformed birthdays raise
        :class:`~moviepro.exceptions.ParseError`.
        """

        birthday = NOT_AVAILABLE
        if actor.birthday:
            birthday = format_display_date(parse_api_date(actor.birthday, field="birthday"))

        return actor.model_copy(
            update={
                "profile_path": self.build_cast_image(actor.profile_path),
                "biography": actor.biography or NOT_AVAILABLE,
                "place_of_birth": actor.place_of_birth or NOT_AVAILABLE,
                "birthday": birthday,
            }
        )

    def build_cast_image(self, profile_path: str | None) -> str:
        return build_cast_image(
            profile_path,
            base_image_path=self._settings.base_image_path,
            size=self._settings.default_poster_size,
            default_image=self._settings.default_cast_image,
        )

    async def _encode_image(self, path: str | None, size: str) -> bytes:
        if not path:
            return b""
        url = build_image_url(self._settings.base_image_path, size, path)
        encoded = await self._images.encode_from_url(url)
        return encoded.data
