"""Download media from URLs.

This module provides an httpx-based fetcher that streams a response body
into memory with a hard size limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from stickerfit.executor.exceptions import StickerfitError

if TYPE_CHECKING:
    from stickerfit.config.models import FetchConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_BYTES = 50 * 1024 * 1024


class FetchError(StickerfitError):
    """Raised when a URL cannot be downloaded."""


@dataclass(frozen=True)
class FetchedMedia:
    """Body and declared type of a downloaded resource."""

    data: bytes = field(repr=False)
    content_type: str
    url: str


class MediaFetcher:
    """HTTP client for downloading media.

    Can be used as a context manager; an injected client is never closed
    by the fetcher.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_bytes: int = DEFAULT_MAX_BYTES,
        user_agent: str = "stickerfit/0.1",
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Per-request timeout in seconds.
            max_bytes: Largest body accepted.
            user_agent: User-Agent header sent with requests.
            client: Pre-built client, mainly for tests.
        """
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, config: FetchConfig) -> MediaFetcher:
        return cls(
            timeout=config.timeout_seconds,
            max_bytes=config.max_bytes,
            user_agent=config.user_agent,
        )

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self._user_agent},
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> MediaFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch(self, url: str) -> FetchedMedia:
        """Download url into memory.

        Args:
            url: Absolute http(s) URL.

        Returns:
            FetchedMedia with the body and the response Content-Type.

        Raises:
            FetchError: On connection failure, timeout, HTTP error status,
                invalid URL, or a body larger than max_bytes.
        """
        client = self._get_client()
        try:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                self._check_declared_length(response)
                data = self._read_limited(response)
                content_type = response.headers.get("content-type", "")
                final_url = str(response.url)
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out downloading {url}: {e}") from e
        except httpx.ConnectError as e:
            raise FetchError(f"Cannot connect to {url}: {e}") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"HTTP {e.response.status_code} downloading {url}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"Failed to download {url}: {e}") from e

        logger.debug(
            "Fetched %s",
            final_url,
            extra={"content_type": content_type, "size_bytes": len(data)},
        )
        return FetchedMedia(data=data, content_type=content_type, url=final_url)

    def _check_declared_length(self, response: httpx.Response) -> None:
        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            raise FetchError(
                f"{response.url} is {declared} bytes, limit is {self.max_bytes}"
            )

    def _read_limited(self, response: httpx.Response) -> bytes:
        chunks: list[bytes] = []
        total = 0
        for chunk in response.iter_bytes():
            total += len(chunk)
            if total > self.max_bytes:
                raise FetchError(
                    f"{response.url} exceeds the {self.max_bytes} byte limit"
                )
            chunks.append(chunk)
        return b"".join(chunks)
