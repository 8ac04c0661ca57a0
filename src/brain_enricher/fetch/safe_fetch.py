"""Hardened outbound HTTP for extractors.

Every request made on behalf of a saved item goes through ``SafeFetcher``:

- SSRF: the target (and every redirect hop) is checked against private ranges
  before a connection is made, unless the caller passes ``skip_ssrf_check``
  for a fixed, well-known API host.
- Timeout: the whole request-response cycle, redirects and body read
  included, runs inside one ``asyncio.timeout`` budget.
- Size: bodies are capped; ``Content-Length`` is checked first and the stream
  is abandoned as soon as the running total passes the cap.

No retries happen here. Retry policy belongs to the enrichment scheduler.
"""

import asyncio
import json as jsonlib
import logging
from typing import Any
from urllib.parse import urljoin, urlsplit

import httpx

from brain_enricher.config import Settings
from brain_enricher.exceptions import FetchError, FetchTimeoutError, ResponseTooLargeError
from brain_enricher.fetch.ssrf import check_ssrf

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_BODY_BYTES = 5 * 1024 * 1024  # 5 MiB
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; BrainEnricher/1.0)"

_REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

# Headers describing the wire encoding of the original stream. The body handed
# back to callers is already decoded, so these no longer apply.
_WIRE_HEADERS = frozenset({"content-encoding", "content-length", "transfer-encoding"})


class SafeFetcher:
    """SSRF-checked, time-boxed, size-capped HTTP client wrapper.

    Owns its ``httpx.AsyncClient`` unless one is injected. Use as an async
    context manager or call ``aclose()`` on shutdown.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._client = client if client is not None else httpx.AsyncClient()
        self._owns_client = client is None
        self.timeout = timeout
        self.max_body_bytes = max_body_bytes
        self.max_redirects = max_redirects
        self.user_agent = user_agent

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient | None = None
    ) -> "SafeFetcher":
        return cls(
            client,
            timeout=settings.fetch_timeout_seconds,
            max_body_bytes=settings.fetch_max_body_bytes,
            max_redirects=settings.fetch_max_redirects,
            user_agent=settings.fetch_user_agent,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "SafeFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        json: Any = None,
        timeout: float | None = None,
        max_body_bytes: int | None = None,
        skip_ssrf_check: bool = False,
    ) -> httpx.Response:
        """Fetch a URL and return a fully read, size-capped response.

        Non-2xx responses are returned as-is; callers decide what is fatal.

        Raises:
            SsrfBlockedError: Target or a redirect hop is a private address.
            FetchTimeoutError: The cycle exceeded ``timeout`` seconds.
            ResponseTooLargeError: The body exceeded ``max_body_bytes``.
            FetchError: Network failure, bad redirect, or too many redirects.
        """
        budget = timeout if timeout is not None else self.timeout
        limit = max_body_bytes if max_body_bytes is not None else self.max_body_bytes

        try:
            async with asyncio.timeout(budget):
                return await self._fetch(
                    url,
                    method=method,
                    headers=headers,
                    params=params,
                    json=json,
                    budget=budget,
                    limit=limit,
                    skip_ssrf_check=skip_ssrf_check,
                )
        except TimeoutError as exc:
            raise FetchTimeoutError(url, budget) from exc

    async def fetch_text(self, url: str, **options: Any) -> tuple[httpx.Response, str]:
        """Fetch a URL and return ``(response, body as text)``."""
        response = await self.fetch(url, **options)
        return response, response.text

    async def fetch_json(self, url: str, **options: Any) -> tuple[httpx.Response, Any]:
        """Fetch a URL and return ``(response, decoded JSON body)``.

        Raises FetchError if the body is not valid JSON.
        """
        response = await self.fetch(url, **options)
        try:
            data = jsonlib.loads(response.content) if response.content else None
        except ValueError as exc:
            raise FetchError(
                f"Invalid JSON from {url} (HTTP {response.status_code})", url=url
            ) from exc
        return response, data

    async def _fetch(
        self,
        url: str,
        *,
        method: str,
        headers: dict[str, str] | None,
        params: dict[str, str] | None,
        json: Any,
        budget: float,
        limit: int,
        skip_ssrf_check: bool,
    ) -> httpx.Response:
        request_headers = {"User-Agent": self.user_agent, **(headers or {})}
        target = url

        # Redirects are followed by hand so each hop gets its own SSRF check
        for _ in range(self.max_redirects + 1):
            if not skip_ssrf_check:
                await check_ssrf(target)

            request = self._client.build_request(
                method,
                target,
                headers=request_headers,
                params=params,
                json=json,
                timeout=budget,
            )
            try:
                response = await self._client.send(
                    request, stream=True, follow_redirects=False
                )
            except httpx.TimeoutException as exc:
                raise FetchTimeoutError(target, budget) from exc
            except httpx.HTTPError as exc:
                raise FetchError(f"Request failed for {target}: {exc}", url=target) from exc

            try:
                location = response.headers.get("location")
                if response.status_code in _REDIRECT_STATUSES and location:
                    target = urljoin(str(request.url), location)
                    if urlsplit(target).scheme not in ("http", "https"):
                        raise FetchError(f"Redirect to unsupported scheme: {target}", url=url)
                    params = None  # already baked into the redirect target
                    if response.status_code == 303 or (
                        response.status_code in (301, 302) and method == "POST"
                    ):
                        method, json = "GET", None
                    logger.debug("Following redirect %s -> %s", request.url, target)
                    continue

                body = await _read_limited(response, limit, target)
            except httpx.HTTPError as exc:
                raise FetchError(f"Reading response failed for {target}: {exc}", url=target) from exc
            finally:
                await response.aclose()

            return httpx.Response(
                status_code=response.status_code,
                headers=[
                    (k, v)
                    for k, v in response.headers.multi_items()
                    if k.lower() not in _WIRE_HEADERS
                ],
                content=body,
                request=request,
            )

        raise FetchError(f"Too many redirects fetching {url}", url=url)


async def _read_limited(response: httpx.Response, limit: int, url: str) -> bytes:
    """Read a streamed body, giving up as soon as it exceeds ``limit`` bytes."""
    declared = response.headers.get("content-length")
    if declared is not None:
        try:
            size = int(declared)
        except ValueError:
            size = None  # Malformed header -- enforce while streaming
        if size is not None and size > limit:
            raise ResponseTooLargeError(url, limit, size)

    chunks: list[bytes] = []
    total = 0
    async for chunk in response.aiter_bytes():
        total += len(chunk)
        if total > limit:
            raise ResponseTooLargeError(url, limit)
        chunks.append(chunk)
    return b"".join(chunks)
