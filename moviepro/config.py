"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


UnknownCertificationPolicy = Literal["error", "not_rated"]


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="MoviePro", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_language: str = Field(default="en-US", alias="TMDB_LANGUAGE")
    tmdb_timeout_seconds: float = Field(
        default=20.0, alias="TMDB_TIMEOUT", gt=0, le=300
    )

    base_image_path: str = Field(
        default="https://image.tmdb.org/t/p", alias="BASE_IMAGE_PATH"
    )
    default_poster_size: str = Field(default="w500", alias="DEFAULT_POSTER_SIZE")
    default_backdrop_size: str = Field(
        default="original", alias="DEFAULT_BACKDROP_SIZE"
    )
    default_cast_image: str = Field(
        default="/images/default_cast_image.png", alias="DEFAULT_CAST_IMAGE"
    )
    base_youtube_path: str = Field(
        default="https://www.youtube.com/watch?v=", alias="BASE_YOUTUBE_PATH"
    )
    image_timeout_seconds: float = Field(
        default=30.0, alias="IMAGE_TIMEOUT", gt=0, le=300
    )

    default_collection_name: str = Field(
        default="All", alias="DEFAULT_COLLECTION_NAME"
    )
    default_collection_description: str = Field(
        default="Every imported movie", alias="DEFAULT_COLLECTION_DESCRIPTION"
    )

    certification_country: str = Field(default="US", alias="CERTIFICATION_COUNTRY")
    unknown_certification_policy: UnknownCertificationPolicy = Field(
        default="error", alias="UNKNOWN_CERTIFICATION_POLICY"
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./moviepro.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("certification_country", mode="before")
    @classmethod
    def _normalise_country(cls, value: object) -> str:
        """Country codes are compared upper-case against TMDB's ISO 3166-1 codes."""

        text = str(value or "").strip().upper()
        if len(text) != 2:
            raise ValueError("CERTIFICATION_COUNTRY must be a two letter ISO code")
        return text

    @field_validator("base_image_path", mode="before")
    @classmethod
    def _strip_image_path(cls, value: object) -> str:
        return str(value or "").strip().rstrip("/")

    @field_validator("default_collection_name")
    @classmethod
    def _require_collection_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("DEFAULT_COLLECTION_NAME may not be blank")
        return cleaned

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
