"""Exception hierarchy shared by the import pipeline."""

from __future__ import annotations


class MovieProError(Exception):
    """Base exception for MoviePro failures."""


class ParseError(MovieProError, ValueError):
    """Raised when a date string from TMDB cannot be parsed."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Could not parse {field} from {value!r}")
        self.field = field
        self.value = value


class EncodingError(MovieProError):
    """Raised when an image cannot be fetched or encoded."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class MappingError(MovieProError):
    """Raised when a TMDB payload cannot be mapped to a domain movie.

    ``cause`` carries the original failure so callers can decide whether
    to abort the import, skip the movie, or retry.
    """

    def __init__(
        self,
        message: str,
        *,
        movie_id: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.movie_id = movie_id
        self.cause = cause

    @property
    def kind(self) -> str:
        """Return the class name of the underlying failure."""

        source = self.cause if self.cause is not None else self
        return type(source).__name__


class RatingResolutionError(MappingError):
    """Raised when a certification string has no matching rating."""

    def __init__(self, certification: str) -> None:
        super().__init__(f"Unknown certification {certification!r}")
        self.certification = certification


class RemoteMovieError(MovieProError):
    """Raised when the TMDB API returns an error or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MovieNotFoundError(RemoteMovieError):
    """Raised when TMDB has no record for the requested identifier."""


class DuplicateMovieError(MovieProError):
    """Raised when a movie with the same TMDB id is already stored."""

    def __init__(self, movie_id: int) -> None:
        super().__init__(f"Movie with TMDB id {movie_id} already exists")
        self.movie_id = movie_id
