"""
Feed Fetcher - Retrieve feed documents over HTTP(S).

Handles:
- URL validation before any network activity
- Browser-like request headers (many feed hosts reject bot user agents)
- Bounded total time, redirect cap and body size cap
- Classification of every outcome into a tagged result

The fetcher never raises and never retries. A failed fetch is reported as a
value and the next scheduled refresh is the retry.
"""

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urljoin

import aiohttp

from .url_validator import InvalidUrlError, validate_url

logger = logging.getLogger(__name__)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

FEED_ACCEPT = (
    "application/rss+xml, application/atom+xml, application/rdf+xml;q=0.9, "
    "application/xml;q=0.8, text/xml;q=0.8, */*;q=0.5"
)

REDIRECT_STATUSES = {301, 302, 303, 307, 308}


@dataclass
class FetchOk:
    """The feed body was retrieved."""
    url: str  # Final URL after redirects
    body: bytes
    status: int = 200
    content_type: str | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass
class HttpError:
    """The server answered with an error status."""
    status: int
    message: str

    @property
    def ok(self) -> bool:
        return False


@dataclass
class NetworkError:
    """Transport failure: DNS, TLS, connection reset, timeout, oversize body."""
    message: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return False


@dataclass
class InvalidUrl:
    """The URL was rejected before any request was made."""
    message: str

    @property
    def ok(self) -> bool:
        return False


FetchOutcome = FetchOk | HttpError | NetworkError | InvalidUrl


def describe_http_status(status: int, reason: str | None = None) -> str:
    """Build a user-facing message for an HTTP error status."""
    label = f"HTTP {status}" + (f" {reason}" if reason else "")
    if status == 403:
        return (
            f"{label}: the server is blocking automated clients. "
            "The site may not allow feed readers, or may only serve this "
            "feed to a web browser."
        )
    if status == 404:
        return f"{label}: no feed was found at this URL."
    if status == 410:
        return f"{label}: the feed has been permanently removed."
    if status == 429:
        return f"{label}: the server is rate limiting requests. It will be retried on the next refresh."
    if status >= 500:
        return f"{label}: the feed server reported an internal error."
    return f"{label}: the feed could not be retrieved."


class Fetcher:
    """Fetches feed documents with bounded time and size."""

    def __init__(
        self,
        timeout: int = 30,
        user_agent: str | None = None,
        max_redirects: int = 5,
        max_bytes: int = 10 * 1024 * 1024,
        block_private_networks: bool = True,
    ):
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.max_redirects = max_redirects
        self.max_bytes = max_bytes
        self.block_private_networks = block_private_networks
        self.headers = {
            "User-Agent": self.user_agent,
            "Accept": FEED_ACCEPT,
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def fetch(self, url: str) -> FetchOutcome:
        """
        Fetch a feed URL.

        Validation (including its DNS lookup) and the download share one
        timeout.

        Returns:
            FetchOk, HttpError, NetworkError or InvalidUrl. Never raises.
        """
        try:
            return await asyncio.wait_for(self._validate_and_fetch(url), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.info(f"Timed out fetching {url}")
            return NetworkError(
                message=f"Timed out after {self.timeout} seconds",
                timed_out=True,
            )
        except aiohttp.ClientError as e:
            logger.info(f"Network error fetching {url}: {e}")
            return NetworkError(message=f"Network error: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error fetching {url}")
            return NetworkError(message=f"Unexpected error: {e}")

    async def _validate_and_fetch(self, url: str) -> FetchOutcome:
        try:
            url = await self._validate(url)
        except InvalidUrlError as e:
            logger.info(f"Rejected feed URL {url!r}: {e}")
            return InvalidUrl(message=str(e))
        return await self._fetch(url)

    async def _validate(self, url: str) -> str:
        """Validate a URL, resolving DNS off the event loop when private hosts are blocked."""
        return await asyncio.to_thread(
            validate_url,
            url,
            block_private=self.block_private_networks,
            resolve_dns=self.block_private_networks,
        )

    async def _fetch(self, url: str) -> FetchOutcome:
        """Follow redirects by hand so every hop is validated."""
        current = url
        async with aiohttp.ClientSession(headers=self.headers) as session:
            for _ in range(self.max_redirects + 1):
                async with session.get(current, allow_redirects=False) as resp:
                    location = resp.headers.get("Location")
                    if resp.status in REDIRECT_STATUSES and location:
                        target = urljoin(str(resp.url), location)
                        try:
                            current = await self._validate(target)
                        except InvalidUrlError as e:
                            return InvalidUrl(message=f"Redirected to a disallowed URL: {e}")
                        logger.debug(f"Redirect {resp.status}: {resp.url} -> {current}")
                        continue

                    if resp.status >= 400:
                        return HttpError(
                            status=resp.status,
                            message=describe_http_status(resp.status, resp.reason),
                        )

                    body = await self._read_body(resp)
                    if body is None:
                        return NetworkError(
                            message=f"Response is larger than {self.max_bytes} bytes"
                        )

                    return FetchOk(
                        url=str(resp.url),
                        body=body,
                        status=resp.status,
                        content_type=resp.headers.get("Content-Type"),
                    )

        return NetworkError(message=f"Too many redirects (limit {self.max_redirects})")

    async def _read_body(self, resp: aiohttp.ClientResponse) -> bytes | None:
        """Read the body, returning None once it exceeds max_bytes."""
        if resp.content_length is not None and resp.content_length > self.max_bytes:
            return None

        body = bytearray()
        async for chunk in resp.content.iter_chunked(64 * 1024):
            body.extend(chunk)
            if len(body) > self.max_bytes:
                return None
        return bytes(body)
