"""
HTTP fetching of the CSV export.

Provides a small urllib-based client with a request timeout and cache-busting
query parameter, plus a helper building public object-storage URLs.
"""

import asyncio
import socket
import ssl
import time
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit
from urllib.request import Request, urlopen

from .errors import FetchError


def storage_public_url(base_url: str, bucket: str, object_name: str) -> str:
    """Public URL of an object in a storage bucket (``/storage/v1/object/public``)."""
    return f"{base_url.rstrip('/')}/storage/v1/object/public/{quote(bucket)}/{quote(object_name)}"


def add_cache_buster(url: str, now: Optional[float] = None) -> str:
    """Append ``t=<epoch millis>`` to the query string, keeping existing parameters."""
    millis = int((time.time() if now is None else now) * 1000)
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "t"]
    query.append(("t", str(millis)))
    return urlunsplit(parts._replace(query=urlencode(query)))


class CsvFetcher:
    """Fetches the CSV export as text."""

    def __init__(self, url: str, timeout: float = 10.0, cache_bust: bool = True):
        """
        Initialize fetcher.

        Args:
            url: CSV location (relay /data endpoint or object-storage URL)
            timeout: Request timeout in seconds
            cache_bust: Append a per-request ``t`` query parameter
        """
        self.url = url
        self.timeout = timeout
        self.cache_bust = cache_bust
        self._ssl_context = ssl.create_default_context()

    def request_url(self) -> str:
        return add_cache_buster(self.url) if self.cache_bust else self.url

    def fetch_text(self) -> str:
        """
        Blocking fetch.

        Raises:
            FetchError: On HTTP errors, connection errors, timeouts or an
                undecodable body
        """
        url = self.request_url()
        req = Request(url, headers={"Accept": "text/csv, text/plain"}, method="GET")
        ssl_context = self._ssl_context if url.startswith("https://") else None

        try:
            with urlopen(req, timeout=self.timeout, context=ssl_context) as resp:
                raw = resp.read()
        except HTTPError as e:
            raise FetchError(f"HTTP {e.code} fetching {self.url}")
        except URLError as e:
            raise FetchError(f"failed to reach {self.url}: {e.reason}")
        except (socket.timeout, TimeoutError):
            raise FetchError(f"timed out after {self.timeout}s fetching {self.url}")

        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FetchError(f"CSV from {self.url} is not valid UTF-8: {e}")

    async def fetch(self) -> str:
        """Fetch without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.fetch_text)
