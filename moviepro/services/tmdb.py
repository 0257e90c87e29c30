"""Client for fetching movie and person metadata from The Movie Database (TMDB)."""

from __future__ import annotations

import logging
from typing import Any, Literal

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..exceptions import MovieNotFoundError, RemoteMovieError
from ..payloads import ActorDetail, ExternalMovie, MovieSummary

logger = logging.getLogger(__name__)

MovieCategory = Literal["popular", "top_rated", "upcoming", "now_playing"]
MOVIE_CATEGORIES: tuple[str, ...] = ("popular", "top_rated", "upcoming", "now_playing")
DETAIL_APPENDS = "videos,credits,release_dates"


class TMDBClient:
    """Client responsible for retrieving raw TMDB payloads."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising TMDBClient")
        self._settings = settings
        self._client = http_client

    async def movie_detail(self, tmdb_id: int) -> ExternalMovie:
        """Return the movie detail with videos, credits and release dates."""

        payload = await self._get(
            f"/movie/{tmdb_id}",
            params={"append_to_response": DETAIL_APPENDS},
        )
        return self._validate(ExternalMovie, payload, f"movie {tmdb_id}")

    async def actor_detail(self, person_id: int) -> ActorDetail:
        payload = await self._get(f"/person/{person_id}")
        return self._validate(ActorDetail, payload, f"person {person_id}")

    async def movie_list(
        self, category: MovieCategory, count: int = 20
    ) -> list[MovieSummary]:
        """Collect up to ``count`` movies from one of TMDB's curated lists."""

        if category not in MOVIE_CATEGORIES:
            raise ValueError(f"Unsupported movie category: {category}")

        collected: list[MovieSummary] = []
        page = 1
        while len(collected) < count:
            payload = await self._get(f"/movie/{category}", params={"page": page})
            results = payload.get("results") or []
            for entry in results:
                if not isinstance(entry, dict):
                    continue
                try:
                    collected.append(MovieSummary.model_validate(entry))
                except ValidationError:
                    logger.debug("Skipping malformed TMDB list entry: %s", entry)
                if len(collected) >= count:
                    break
            total_pages = int(payload.get("total_pages") or 1)
            if not results or page >= total_pages:
                break
            page += 1
        return collected

    async def _get(
        self, endpoint: str, *, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        query: dict[str, Any] = {
            "api_key": self._settings.tmdb_api_key,
            "language": self._settings.tmdb_language,
        }
        if params:
            query.update(params)

        try:
            response = await self._client.get(endpoint, params=query)
        except httpx.HTTPError as exc:
            logger.warning("TMDB request to %s failed: %s", endpoint, exc)
            raise RemoteMovieError(f"TMDB request failed: {exc}") from exc

        if response.status_code == 404:
            raise MovieNotFoundError(
                f"TMDB has no resource at {endpoint}", status_code=404
            )
        if response.status_code >= 400:
            logger.warning(
                "TMDB request to %s failed with %s: %s",
                endpoint,
                response.status_code,
                response.text,
            )
            raise RemoteMovieError(
                f"TMDB responded with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteMovieError("TMDB returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise RemoteMovieError("TMDB returned an unexpected payload")
        return payload

    @staticmethod
    def _validate(model, payload: dict[str, Any], label: str):
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise RemoteMovieError(f"TMDB returned an invalid {label}: {exc}") from exc
