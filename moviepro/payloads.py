"""Pydantic models describing the TMDB API payloads consumed by the importer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TMDBModel(BaseModel):
    """Immutable base model that tolerates fields we do not care about."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class Genre(TMDBModel):
    id: int
    name: str


class ProductionCompany(TMDBModel):
    id: int
    name: str
    logo_path: str | None = None
    origin_country: str | None = None


class ProductionCountry(TMDBModel):
    iso_3166_1: str
    name: str


class SpokenLanguage(TMDBModel):
    iso_639_1: str
    name: str | None = None
    english_name: str | None = None


class Video(TMDBModel):
    """Single entry of the ``videos`` block appended to a movie detail."""

    id: str | None = None
    key: str | None = None
    name: str | None = None
    site: str | None = None
    size: int | None = None
    type: str | None = None
    official: bool | None = None
    iso_639_1: str | None = None
    iso_3166_1: str | None = None
    published_at: str | None = None


class Videos(TMDBModel):
    results: list[Video] = Field(default_factory=list)


class CastMember(TMDBModel):
    """Cast credit. ``cast_id`` identifies the credit, ``id`` the person."""

    id: int
    cast_id: int | None = None
    credit_id: str | None = None
    name: str = ""
    original_name: str | None = None
    character: str | None = None
    known_for_department: str | None = None
    profile_path: str | None = None
    popularity: float = 0.0
    gender: int | None = None
    adult: bool = False
    order: int | None = None


class CrewMember(TMDBModel):
    id: int
    credit_id: str | None = None
    name: str = ""
    original_name: str | None = None
    department: str | None = None
    job: str | None = None
    known_for_department: str | None = None
    profile_path: str | None = None
    popularity: float = 0.0
    gender: int | None = None
    adult: bool = False


class Credits(TMDBModel):
    cast: list[CastMember] = Field(default_factory=list)
    crew: list[CrewMember] = Field(default_factory=list)


class ReleaseDate(TMDBModel):
    """Certification record for one release within a country."""

    certification: str | None = None
    iso_639_1: str | None = None
    release_date: str | None = None
    type: int | None = None
    note: str | None = None


class CountryReleaseDates(TMDBModel):
    iso_3166_1: str
    release_dates: list[ReleaseDate] = Field(default_factory=list)


class ReleaseDates(TMDBModel):
    results: list[CountryReleaseDates] = Field(default_factory=list)


class ExternalMovie(TMDBModel):
    """Movie detail response with videos, credits and release dates appended."""

    id: int
    title: str = ""
    original_title: str | None = None
    original_language: str | None = None
    tagline: str | None = None
    overview: str | None = None
    homepage: str | None = None
    imdb_id: str | None = None
    status: str | None = None
    adult: bool = False
    video: bool = False
    runtime: int | None = None
    budget: int | None = None
    revenue: int | None = None
    popularity: float | None = None
    vote_average: float = 0.0
    vote_count: int | None = None
    release_date: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    belongs_to_collection: dict[str, object] | None = None
    genres: list[Genre] = Field(default_factory=list)
    production_companies: list[ProductionCompany] = Field(default_factory=list)
    production_countries: list[ProductionCountry] = Field(default_factory=list)
    spoken_languages: list[SpokenLanguage] = Field(default_factory=list)
    videos: Videos = Field(default_factory=Videos)
    credits: Credits = Field(default_factory=Credits)
    release_dates: ReleaseDates = Field(default_factory=ReleaseDates)


class MovieSummary(TMDBModel):
    """Entry of a TMDB movie list (popular, top rated, ...)."""

    id: int
    title: str = ""
    overview: str | None = None
    release_date: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    vote_average: float = 0.0
    popularity: float | None = None


class ActorDetail(TMDBModel):
    """Person detail. Normalisation returns a new instance via ``model_copy``."""

    id: int | None = None
    name: str = ""
    biography: str | None = None
    birthday: str | None = None
    deathday: str | None = None
    place_of_birth: str | None = None
    profile_path: str | None = None
    known_for_department: str | None = None
    imdb_id: str | None = None
    popularity: float | None = None
