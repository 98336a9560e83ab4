"""Image fetcher for the import pipeline's ``Image URL`` fallback.

Supports ``http://`` / ``https://`` URLs (fetched with httpx) and inline
``data:`` URIs (decoded locally, no network). Only ``image/*`` content is
accepted, and bodies larger than ``max_bytes`` are abandoned mid-stream.
"""

import base64
import binascii
import logging
from urllib.parse import unquote_to_bytes

import httpx

from lablend.application.interfaces import FetchedImage, ImageFetcher

logger = logging.getLogger(__name__)

_DEFAULT_MIME = "application/octet-stream"


class ImageFetchError(Exception):
    """Raised when a fallback image cannot be retrieved or decoded."""


def _mime_of(content_type: str | None) -> str:
    return (content_type or "").split(";")[0].strip().lower() or _DEFAULT_MIME


def _require_image(mime_type: str, source: str) -> None:
    if not mime_type.startswith("image/"):
        raise ImageFetchError(f"{source} is {mime_type}, not an image")


class HttpxImageFetcher(ImageFetcher):
    """Infrastructure adapter — fetches images with httpx.

    An ``httpx.AsyncClient`` may be injected (tests use ``MockTransport``);
    otherwise a short-lived client is created per fetch.
    """

    def __init__(
        self,
        timeout: float = 15.0,
        max_bytes: int = 10 * 1024 * 1024,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._timeout = timeout
        self._max_bytes = max_bytes
        self._http_client = http_client

    def supports(self, source: str) -> bool:
        lowered = source.strip().lower()
        return lowered.startswith(("http://", "https://", "data:"))

    async def fetch(self, source: str) -> FetchedImage:
        source = source.strip()
        if source.lower().startswith("data:"):
            image = self._decode_data_uri(source)
            _require_image(image.mime_type, "data URI")
            self._check_size(len(image.content))
            return image
        return await self._fetch_url(source)

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)

    def _check_size(self, size: int) -> None:
        if size > self._max_bytes:
            raise ImageFetchError(f"image is {size} bytes, limit is {self._max_bytes}")

    async def _fetch_url(self, url: str) -> FetchedImage:
        """Stream ``url``; give up on the content type or size before buffering it all."""
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                mime_type = _mime_of(response.headers.get("content-type"))
                _require_image(mime_type, url)

                declared = response.headers.get("content-length", "")
                if declared.isdigit():
                    self._check_size(int(declared))

                content = bytearray()
                async for chunk in response.aiter_bytes():
                    content.extend(chunk)
                    self._check_size(len(content))
        except httpx.HTTPError as exc:
            raise ImageFetchError(f"could not fetch {url}: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

        logger.debug("Fetched image %s (%d bytes, %s)", url, len(content), mime_type)
        return FetchedImage(content=bytes(content), mime_type=mime_type)

    @staticmethod
    def _decode_data_uri(uri: str) -> FetchedImage:
        header, sep, payload = uri[len("data:"):].partition(",")
        if not sep:
            raise ImageFetchError("data URI has no payload")

        params = header.split(";")
        mime_type = _mime_of(params[0])
        try:
            if "base64" in params[1:]:
                content = base64.b64decode(payload, validate=True)
            else:
                content = unquote_to_bytes(payload)
        except (binascii.Error, ValueError) as exc:
            raise ImageFetchError(f"invalid data URI: {exc}") from exc

        return FetchedImage(content=content, mime_type=mime_type)
