from .httpx_image_fetcher import HttpxImageFetcher

__all__ = ["HttpxImageFetcher"]
