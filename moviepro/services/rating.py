"""Resolution of content ratings from TMDB release certifications."""

from __future__ import annotations

import logging

from ..config import UnknownCertificationPolicy
from ..exceptions import RatingResolutionError
from ..models import MovieRating
from ..payloads import ReleaseDates

logger = logging.getLogger(__name__)

# Keys are certifications upper-cased with hyphens and spaces removed.
CERTIFICATION_RATINGS: dict[str, MovieRating] = {
    "G": MovieRating.G,
    "PG": MovieRating.PG,
    "PG13": MovieRating.PG13,
    "R": MovieRating.R,
    "NC17": MovieRating.NC17,
    "NR": MovieRating.NR,
}


class RatingResolver:
    """Derive a :class:`MovieRating` from per-country certification records."""

    def __init__(
        self,
        *,
        country: str = "US",
        unknown_policy: UnknownCertificationPolicy = "error",
    ) -> None:
        self._country = country.upper()
        self._unknown_policy = unknown_policy

    def resolve(self, release_dates: ReleaseDates) -> MovieRating:
        certification = self.find_certification(release_dates)
        if certification is None:
            return MovieRating.NR
        return self.parse(certification)

    def find_certification(self, release_dates: ReleaseDates) -> str | None:
        """Return the first non-empty certification for the target country."""

        country = next(
            (
                entry
                for entry in release_dates.results
                if entry.iso_3166_1 == self._country
            ),
            None,
        )
        if country is None:
            return None
        return next(
            (
                record.certification
                for record in country.release_dates
                if record.certification and record.certification.strip()
            ),
            None,
        )

    def parse(self, certification: str) -> MovieRating:
        key = certification.replace("-", "").replace(" ", "").upper()
        rating = CERTIFICATION_RATINGS.get(key)
        if rating is not None:
            return rating
        if self._unknown_policy == "not_rated":
            logger.info(
                "Unknown certification %r treated as not rated", certification
            )
            return MovieRating.NR
        raise RatingResolutionError(certification)
