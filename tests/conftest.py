"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``moviepro``
# sits at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def build_movie_payload(**overrides: Any) -> dict[str, Any]:
    """Return a TMDB movie detail payload with appended blocks."""

    payload: dict[str, Any] = {
        "id": 603,
        "title": "The Matrix",
        "tagline": "Welcome to the Real World.",
        "overview": "A hacker learns the truth about his reality.",
        "runtime": 136,
        "vote_average": 8.2,
        "release_date": "1999-03-30",
        "poster_path": "/poster.jpg",
        "backdrop_path": "/backdrop.PNG",
        "genres": [{"id": 28, "name": "Action"}],
        "production_companies": [
            {"id": 79, "name": "Village Roadshow", "logo_path": None, "origin_country": "US"}
        ],
        "spoken_languages": [{"iso_639_1": "en", "name": "English", "english_name": "English"}],
        "videos": {
            "results": [
                {"type": "Featurette", "key": "feat1"},
                {"type": " Trailer ", "key": "abc123"},
            ]
        },
        "credits": {
            "cast": [
                {
                    "id": 6384,
                    "cast_id": 34,
                    "name": "Keanu Reeves",
                    "character": "Neo",
                    "known_for_department": "Acting",
                    "profile_path": "/keanu.jpg",
                    "popularity": 40.0,
                },
                {
                    "id": 2975,
                    "cast_id": 35,
                    "name": "Laurence Fishburne",
                    "character": "Morpheus",
                    "known_for_department": "Acting",
                    "profile_path": None,
                    "popularity": 20.0,
                },
            ],
            "crew": [
                {
                    "id": 9339,
                    "name": "Lilly Wachowski",
                    "department": "Directing",
                    "job": "Director",
                    "profile_path": "/lilly.jpg",
                    "popularity": 5.0,
                },
                {
                    "id": 9339,
                    "name": "Lilly Wachowski",
                    "department": "Writing",
                    "job": "Writer",
                    "profile_path": "/lilly.jpg",
                    "popularity": 5.0,
                },
            ],
        },
        "release_dates": {
            "results": [
                {
                    "iso_3166_1": "GB",
                    "release_dates": [{"certification": "15", "type": 3}],
                },
                {
                    "iso_3166_1": "US",
                    "release_dates": [
                        {"certification": "", "type": 1},
                        {"certification": "R", "type": 3, "iso_639_1": "en"},
                    ],
                },
            ]
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def movie_payload() -> Callable[..., dict[str, Any]]:
    return build_movie_payload
