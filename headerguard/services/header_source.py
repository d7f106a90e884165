"""Fetch a URL's response headers over HTTP."""

import logging

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from headerguard.config import settings
from headerguard.exceptions import HeaderFetchError

logger = logging.getLogger(__name__)

# Statuses telling us the server does not answer HEAD
HEAD_UNSUPPORTED = {405, 501}


class HttpHeaderSource:
    """
    Header source backed by httpx.

    Sends a HEAD request (falling back to GET when HEAD is refused),
    follows a bounded number of redirects and accepts any status code.
    Transport errors are retried a few times, then surfaced as
    HeaderFetchError.
    """

    def __init__(
        self,
        timeout: float | None = None,
        max_redirects: int | None = None,
        max_retries: int | None = None,
        user_agent: str | None = None,
        backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self.max_redirects = (
            max_redirects if max_redirects is not None else settings.max_redirects
        )
        self.max_retries = max(1, max_retries or settings.max_retries)
        self.user_agent = user_agent or settings.user_agent
        self.backoff = backoff
        self._transport = transport

    async def fetch(self, url: str) -> dict[str, str]:
        """
        Fetch response headers for ``url``.

        Returns:
            Header map keyed by lower-cased header name.

        Raises:
            HeaderFetchError: On timeouts, connection failures or redirect loops.
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=self.backoff, max=10),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    return await self._fetch_once(url)
        except httpx.TimeoutException as e:
            logger.error(f"Header fetch timeout for URL: {url}")
            raise HeaderFetchError(url, f"Timed out fetching headers from {url}") from e
        except httpx.HTTPError as e:
            logger.error(f"Header fetch failed for {url}: {type(e).__name__}: {e}")
            raise HeaderFetchError(
                url, f"Failed to fetch headers: {type(e).__name__}: {e}"
            ) from e

    async def _fetch_once(self, url: str) -> dict[str, str]:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            max_redirects=self.max_redirects,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        ) as client:
            response = await client.head(url)
            if response.status_code in HEAD_UNSUPPORTED:
                logger.debug(f"HEAD refused by {url}, retrying with GET")
                response = await client.get(url)

        logger.debug(f"Fetched {len(response.headers)} headers from {url}")
        return {key.lower(): value for key, value in response.headers.items()}
