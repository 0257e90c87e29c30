"""Pydantic models describing the normalized movie domain."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from .utils import build_data_url

if TYPE_CHECKING:  # pragma: no cover - imported for annotations only
    from .db_models import Collection, Movie

MAX_CREDITS = 20


class MovieRating(str, Enum):
    """Coarse content rating derived from US certifications."""

    G = "G"
    PG = "PG"
    PG13 = "PG-13"
    R = "R"
    NC17 = "NC-17"
    NR = "NR"


class CastEntry(BaseModel):
    """A single acting credit attached to a movie."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    cast_id: int
    department: str | None = None
    name: str
    character: str | None = None
    image_url: str


class CrewEntry(BaseModel):
    """A single crew credit attached to a movie."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    crew_id: int
    department: str | None = None
    name: str
    job: str | None = None
    image_url: str


class DomainMovie(BaseModel):
    """Normalized movie produced from one TMDB payload.

    Two mappings of the same payload compare equal; the local database id is
    assigned only once the movie is persisted.
    """

    model_config = ConfigDict(frozen=True)

    movie_id: int
    title: str
    tagline: str | None = None
    overview: str | None = None
    runtime: int | None = None
    release_date: date
    rating: MovieRating = MovieRating.NR
    vote_average: float = 0.0
    poster: bytes = b""
    poster_type: str = ""
    backdrop: bytes = b""
    backdrop_type: str = ""
    trailer_url: str | None = None
    cast: list[CastEntry] = Field(default_factory=list)
    crew: list[CrewEntry] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-friendly representation with inline images."""

        payload = self.model_dump(mode="json", exclude={"poster", "backdrop"})
        payload["poster"] = build_data_url(self.poster, self.poster_type)
        payload["backdrop"] = build_data_url(self.backdrop, self.backdrop_type)
        return payload


class StoredMovie(BaseModel):
    """Read model for a persisted movie and its credits."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    movie_id: int
    title: str
    tagline: str | None = None
    overview: str | None = None
    runtime: int | None = None
    release_date: date
    rating: MovieRating
    vote_average: float
    trailer_url: str | None = None
    poster: str | None = None
    backdrop: str | None = None
    cast: list[CastEntry] = Field(default_factory=list)
    crew: list[CrewEntry] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: "Movie", *, include_credits: bool = True) -> "StoredMovie":
        return cls(
            id=record.id,
            movie_id=record.movie_id,
            title=record.title,
            tagline=record.tagline,
            overview=record.overview,
            runtime=record.runtime,
            release_date=record.release_date,
            rating=record.rating,
            vote_average=record.vote_average,
            trailer_url=record.trailer_url,
            poster=build_data_url(record.poster or b"", record.poster_type),
            backdrop=build_data_url(record.backdrop or b"", record.backdrop_type),
            cast=[CastEntry.model_validate(row) for row in record.cast]
            if include_credits
            else [],
            crew=[CrewEntry.model_validate(row) for row in record.crew]
            if include_credits
            else [],
        )


class StoredCollection(BaseModel):
    """Read model for a collection."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None

    @classmethod
    def from_record(cls, record: "Collection") -> "StoredCollection":
        return cls.model_validate(record)
