"""Fetching and encoding poster, backdrop and upload images."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from ..exceptions import EncodingError
from ..utils import build_data_url

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class EncodedImage:
    """Image bytes paired with the content type reported by the source."""

    data: bytes
    content_type: str = ""

    def to_data_url(self) -> str | None:
        return build_data_url(self.data, self.content_type)


class ImageEncoder:
    """Turns remote image URLs and raw uploads into storable bytes."""

    def __init__(self, http_client: httpx.AsyncClient, *, max_bytes: int = 10_000_000):
        self._client = http_client
        self._max_bytes = max_bytes

    async def encode(self, data: bytes, content_type: str | None = None) -> EncodedImage:
        """Encode an uploaded file's bytes."""

        if not isinstance(data, (bytes, bytearray)):
            raise EncodingError("Uploaded image must be raw bytes")
        if len(data) > self._max_bytes:
            raise EncodingError(
                f"Uploaded image exceeds {self._max_bytes} bytes"
            )
        return EncodedImage(data=bytes(data), content_type=content_type or "")

    async def encode_from_url(self, url: str) -> EncodedImage:
        """Download ``url`` and return its bytes and content type."""

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Image download failed for %s: HTTP %s", url, exc.response.status_code
            )
            raise EncodingError(
                f"Image download failed with HTTP {exc.response.status_code}",
                source=url,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Image download failed for %s: %s", url, exc)
            raise EncodingError(f"Image download failed: {exc}", source=url) from exc

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if content_type and not content_type.startswith("image/"):
            raise EncodingError(
                f"Expected an image but received {content_type}", source=url
            )
        if len(response.content) > self._max_bytes:
            raise EncodingError(f"Image exceeds {self._max_bytes} bytes", source=url)
        return EncodedImage(data=response.content, content_type=content_type)
