"""Abstract interface (port) for fetching a row's fallback image by URL."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedImage:
    content: bytes
    mime_type: str


class ImageFetcher(ABC):

    @abstractmethod
    def supports(self, source: str) -> bool:
        """True for http(s) URLs and ``data:`` URIs."""
        ...

    @abstractmethod
    async def fetch(self, source: str) -> FetchedImage:
        """Fetch the image. Raises on network or decoding failure."""
        ...
