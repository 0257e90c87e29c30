"""String builders for trailer links, image URLs and image MIME types."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Iterable
from urllib.parse import urlparse

from ..payloads import Video
from ..utils import join_url


def build_trailer_url(videos: Iterable[Video], base_youtube_path: str) -> str | None:
    """Return the YouTube link for the first trailer with a key."""

    key = next(
        (
            video.key
            for video in videos
            if (video.type or "").strip().lower() == "trailer" and video.key
        ),
        None,
    )
    if not key:
        return None
    return f"{base_youtube_path}{key}"


def build_image_type(path: str | None) -> str:
    """Return ``image/<extension>`` for ``path`` or an empty string."""

    if not path:
        return ""
    suffix = PurePosixPath(urlparse(path).path).suffix
    return f"image/{suffix.lstrip('.').lower()}"


def build_image_url(base_image_path: str, size: str, path: str) -> str:
    return join_url(base_image_path, size, path)


def build_cast_image(
    profile_path: str | None,
    *,
    base_image_path: str,
    size: str,
    default_image: str,
) -> str:
    """Return the profile image URL or the placeholder when none exists."""

    if not profile_path:
        return default_image
    return build_image_url(base_image_path, size, profile_path)
