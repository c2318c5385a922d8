"""HTTP client for the ``/api/trending/{category}/`` endpoint of an instance."""

from __future__ import annotations

import logging
import time

import requests

from trendinghistory.config import DEFAULT_HTTP_TIMEOUT, DEFAULT_USER_AGENT
from trendinghistory.errors import BodyReadError, HTTPStatusError, RequestBuildError, TransportError
from trendinghistory.models import RawPayload

__all__ = ["MAX_RESPONSE_BYTES", "TRENDING_PATH", "TrendingFetcher", "trending_url"]

logger = logging.getLogger(__name__)

#: Bodies larger than this are cut off, not rejected.
MAX_RESPONSE_BYTES = 10 << 20
TRENDING_PATH = "/api/trending/{category}/"
CHUNK_SIZE = 64 * 1024

_BUILD_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidSchema,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidHeader,
    requests.exceptions.URLRequired,
)


def trending_url(host: str, category: str) -> str:
    return f"https://{host}" + TRENDING_PATH.format(category=category)


class TrendingFetcher:
    """Issue one GET per (host, category) and return the capped raw body."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        max_bytes: int = MAX_RESPONSE_BYTES,
    ) -> None:
        self._session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_bytes = max_bytes
        self._clock = time.monotonic

    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    def fetch(self, host: str, category: str) -> RawPayload:
        """Fetch the trending listing for ``category`` on ``host``.

        Raises one of :class:`RequestBuildError`, :class:`TransportError`,
        :class:`HTTPStatusError` or :class:`BodyReadError`. The request is
        attempted exactly once.
        """

        url = trending_url(host, category)
        deadline = self._clock() + self.timeout
        try:
            response = self._session.get(
                url,
                headers=self.headers(),
                timeout=self.timeout,
                stream=True,
            )
        except _BUILD_ERRORS as exc:
            raise RequestBuildError(host, category, f"build request {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(host, category, f"fetch {url}: {exc}") from exc

        try:
            if response.status_code != 200:
                raise HTTPStatusError(host, category, response.status_code, response.reason or "")
            data, truncated = self._read_body(response, host, category, deadline)
        finally:
            response.close()

        if truncated:
            logger.debug("Body for %s %s cut at %d bytes", host, category, self.max_bytes)
        return RawPayload(
            host=host,
            category=category,
            data=data,
            truncated=truncated,
            status_code=response.status_code,
        )

    def _read_body(
        self, response: requests.Response, host: str, category: str, deadline: float
    ) -> tuple[bytes, bool]:
        chunks: list[bytes] = []
        size = 0
        truncated = False
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                if self._clock() > deadline:
                    raise TransportError(
                        host, category, f"read body: exceeded {self.timeout:g}s timeout"
                    )
                remaining = self.max_bytes - size
                if len(chunk) > remaining:
                    chunks.append(chunk[:remaining])
                    size += remaining
                    truncated = True
                    break
                chunks.append(chunk)
                size += len(chunk)
        except requests.RequestException as exc:
            raise BodyReadError(host, category, f"read body: {exc}") from exc
        return b"".join(chunks), truncated
