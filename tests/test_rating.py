"""Tests for rating resolution from release certifications."""

from __future__ import annotations

import pytest

from moviepro.exceptions import MappingError, RatingResolutionError
from moviepro.models import MovieRating
from moviepro.payloads import ReleaseDates
from moviepro.services.rating import RatingResolver


def _release_dates(results: list[dict]) -> ReleaseDates:
    return ReleaseDates.model_validate({"results": results})


def test_us_certification_resolves() -> None:
    dates = _release_dates(
        [{"iso_3166_1": "US", "release_dates": [{"certification": "PG-13"}]}]
    )

    assert RatingResolver().resolve(dates) is MovieRating.PG13


def test_missing_country_is_not_rated() -> None:
    dates = _release_dates(
        [{"iso_3166_1": "DE", "release_dates": [{"certification": "16"}]}]
    )

    assert RatingResolver().resolve(dates) is MovieRating.NR


def test_blank_certifications_are_not_rated() -> None:
    dates = _release_dates(
        [
            {
                "iso_3166_1": "US",
                "release_dates": [{"certification": ""}, {"certification": None}],
            }
        ]
    )

    assert RatingResolver().resolve(dates) is MovieRating.NR


def test_first_non_empty_certification_wins() -> None:
    dates = _release_dates(
        [
            {
                "iso_3166_1": "US",
                "release_dates": [
                    {"certification": ""},
                    {"certification": "nc-17"},
                    {"certification": "G"},
                ],
            }
        ]
    )

    assert RatingResolver().resolve(dates) is MovieRating.NC17


def test_target_country_is_configurable() -> None:
    dates = _release_dates(
        [
            {"iso_3166_1": "US", "release_dates": [{"certification": "R"}]},
            {"iso_3166_1": "CA", "release_dates": [{"certification": "PG"}]},
        ]
    )

    assert RatingResolver(country="ca").resolve(dates) is MovieRating.PG


def test_unknown_certification_raises_by_default() -> None:
    dates = _release_dates(
        [{"iso_3166_1": "US", "release_dates": [{"certification": "TV-MA"}]}]
    )

    with pytest.raises(RatingResolutionError) as excinfo:
        RatingResolver().resolve(dates)

    assert isinstance(excinfo.value, MappingError)
    assert excinfo.value.certification == "TV-MA"


def test_unknown_certification_can_fall_back() -> None:
    dates = _release_dates(
        [{"iso_3166_1": "US", "release_dates": [{"certification": "TV-MA"}]}]
    )

    resolver = RatingResolver(unknown_policy="not_rated")

    assert resolver.resolve(dates) is MovieRating.NR
