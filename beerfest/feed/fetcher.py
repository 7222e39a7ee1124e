"""
Feed fetchers.

HttpFeedFetcher retrieves the beer list over HTTP(S). When configured with
several URLs, each is fetched in turn and their ``producers`` arrays are
concatenated into one document; a URL that fails is logged and skipped.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Sequence

import requests

from ..config import Config
from ..errors import FetchError

logger = logging.getLogger(__name__)

PRODUCERS = "producers"


class HttpFeedFetcher:
    """Fetch the festival feed from one or more URLs."""

    def __init__(
        self,
        urls: Optional[Sequence[str]] = None,
        session: Optional[requests.Session] = None,
        default_timeout: Optional[float] = None,
    ):
        """
        Args:
            urls: Feed URLs. Defaults to Config.feed_urls()
            session: requests session (injectable for tests)
            default_timeout: Seconds per request when fetch() gets no timeout.
                             Defaults to Config.fetch_timeout()
        """
        self.urls = list(urls) if urls is not None else Config.feed_urls()
        if not self.urls:
            raise ValueError("At least one feed URL is required")
        self.session = session or requests.Session()
        self.default_timeout = (
            default_timeout if default_timeout is not None else Config.fetch_timeout()
        )

    def fetch(self, timeout: Optional[float] = None) -> bytes:
        """Fetch the feed. Raises FetchError on network failure or timeout."""
        timeout = timeout if timeout is not None else self.default_timeout
        if len(self.urls) == 1:
            return self._get(self.urls[0], timeout)
        return self._fetch_combined(timeout)

    def _get(self, url: str, timeout: float) -> bytes:
        logger.info(f"Fetching beer feed from {url}")
        try:
            response = self.session.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise FetchError(
                f"Timed out after {timeout}s fetching {url}",
                timeout=True,
                context={"url": url},
            ) from e
        except requests.RequestException as e:
            raise FetchError(
                f"Failed to fetch {url}: {e}",
                context={"url": url},
            ) from e
        return response.content

    def _fetch_combined(self, timeout: float) -> bytes:
        combined: list = []
        documents = 0
        first_body: Optional[bytes] = None
        last_error: Optional[FetchError] = None

        for url in self.urls:
            try:
                body = self._get(url, timeout)
            except FetchError as e:
                logger.warning(f"{e.message}, continuing with other URLs")
                last_error = e
                continue

            if first_body is None:
                first_body = body
            try:
                producers = json.loads(body).get(PRODUCERS)
            except (ValueError, AttributeError) as e:
                logger.warning(f"Failed to parse JSON from {url}: {e}")
                continue
            if not isinstance(producers, list):
                logger.warning(f"No '{PRODUCERS}' array in feed from {url}")
                continue

            combined.extend(producers)
            documents += 1
            logger.info(f"Added {len(producers)} producers from {url}")

        if documents == 0:
            if first_body is not None:
                # Let the parser report what is wrong with it
                return first_body
            raise FetchError(
                f"All {len(self.urls)} feed URLs failed",
                timeout=bool(last_error and last_error.timeout),
                context={"urls": self.urls},
            )

        logger.info(f"Combined {len(combined)} total producers from {documents} feeds")
        return json.dumps({PRODUCERS: combined}).encode("utf-8")


class FileFeedFetcher:
    """Read the feed from a local file (offline import, fixtures)."""

    def __init__(self, path: str):
        self.path = Path(path)

    def fetch(self, timeout: Optional[float] = None) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise FetchError(
                f"Failed to read feed file {self.path}: {e}",
                context={"path": str(self.path)},
            ) from e
