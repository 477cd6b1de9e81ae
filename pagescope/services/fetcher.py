import asyncio
import ipaddress
import socket
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx

from pagescope.config import Settings, get_settings

ALLOWED_SCHEMES = {"http", "https"}


class ResponseTooLargeError(RuntimeError):
    """The response body exceeded the configured size ceiling."""


class TooManyRedirectsError(RuntimeError):
    """The redirect chain exceeded the configured number of hops."""


class RedirectBlockedError(RuntimeError):
    """A redirect pointed at a URL we are not allowed to fetch."""


async def _is_private_address(hostname: str) -> bool:
    """Return True if *hostname* resolves to a private, loopback, or link-local address."""
    try:
        infos = await asyncio.get_running_loop().getaddrinfo(hostname, None)
    except socket.gaierror:
        return False

    for info in infos:
        raw_ip = info[4][0]
        # Strip IPv6 zone IDs (e.g. "::1%eth0" → "::1")
        raw_ip = raw_ip.split("%")[0]
        try:
            addr = ipaddress.ip_address(raw_ip)
        except ValueError:
            continue
        if addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved:
            return True
    return False


def validate_url(url: str) -> str:
    """Raise ValueError unless *url* is an absolute http(s) URL; return its hostname."""
    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError("URL must have a valid hostname.")
    return hostname


async def _validate_target(url: str, block_private: bool) -> None:
    hostname = validate_url(url)
    if block_private and await _is_private_address(hostname):
        raise ValueError("Requests to private/internal addresses are not allowed.")


def _request_headers(settings: Settings) -> dict:
    return {
        "User-Agent": settings.user_agent,
        "Accept": settings.accept,
        "Accept-Language": settings.accept_language,
    }


async def fetch_url(
    url: str,
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Fetch *url* and return the response body as a string.

    The body is returned whatever its ``Content-Type``; malformed markup is
    the extractor's problem, not ours.  Redirects are followed manually so
    that every hop is validated before the next request is made.

    ``settings.fetch_timeout`` bounds both each network operation and the
    fetch as a whole, so a server trickling bytes cannot hold the request
    open indefinitely.

    Raises:
        ValueError: if *url* itself fails scheme / hostname / address validation.
        httpx.TimeoutException: if the fetch exceeds ``settings.fetch_timeout``.
        httpx.HTTPStatusError: if the final response is not a 2xx.
        httpx.RequestError: on any other transport failure.
        ResponseTooLargeError: if the body exceeds ``settings.max_content_size``.
        TooManyRedirectsError: if more than ``settings.max_redirects`` hops are needed.
        RedirectBlockedError: if a redirect points at a URL that fails validation.
    """
    settings = settings or get_settings()
    await _validate_target(url, settings.block_private_addresses)

    try:
        return await asyncio.wait_for(
            _fetch_body(url, settings, transport), timeout=settings.fetch_timeout
        )
    except asyncio.TimeoutError as exc:
        raise httpx.TimeoutException(
            f"Fetching {url} took longer than {settings.fetch_timeout}s."
        ) from exc


async def _fetch_body(
    url: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport],
) -> str:
    max_size = settings.max_content_size
    current_url = url
    async with httpx.AsyncClient(
        follow_redirects=False,
        timeout=settings.fetch_timeout,
        headers=_request_headers(settings),
        transport=transport,
    ) as client:
        for _ in range(settings.max_redirects + 1):
            async with client.stream("GET", current_url) as response:
                if response.is_redirect:
                    location = response.headers.get("location", "")
                    try:
                        next_url = urljoin(current_url, location)
                        await _validate_target(next_url, settings.block_private_addresses)
                    except ValueError as exc:
                        raise RedirectBlockedError(f"Redirect to {location!r} refused: {exc}") from exc
                    current_url = next_url
                    continue

                response.raise_for_status()

                content_length = response.headers.get("content-length")
                if content_length and content_length.isdigit() and int(content_length) > max_size:
                    raise ResponseTooLargeError("Response body exceeds the maximum allowed size.")

                chunks = []
                total = 0
                async for chunk in response.aiter_bytes():
                    total += len(chunk)
                    if total > max_size:
                        raise ResponseTooLargeError("Response body exceeds the maximum allowed size.")
                    chunks.append(chunk)

                return b"".join(chunks).decode(errors="replace")

    raise TooManyRedirectsError("Too many redirects.")
