"""Remote crate index fetcher.

All network I/O for doc search goes through a single Fetcher instance shared
across lookups. The Fetcher receives an httpx.AsyncClient via constructor
injection; the server lifespan owns the client lifecycle.
"""

from __future__ import annotations

import ipaddress
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlparse

import httpx
import structlog

from togglebot import __version__, searchindex
from togglebot.config import FetcherSettings
from togglebot.errors import DocSearchError, ErrorCode

if TYPE_CHECKING:
    from togglebot.models.index import CrateIndex

log = structlog.get_logger()

PRIVATE_NETWORKS: list[ipaddress.IPv4Network | ipaddress.IPv6Network] = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
]


def build_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    settings = settings or FetcherSettings()
    return httpx.AsyncClient(
        follow_redirects=False,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": f"togglebot/{__version__}"},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def _base_domain(hostname: str) -> str:
    """Return the last two DNS labels: ``'static.docs.rs'`` → ``'docs.rs'``."""
    parts = hostname.rstrip(".").split(".")
    return ".".join(parts[-2:]) if len(parts) >= 2 else hostname


def build_allowlist(settings: FetcherSettings) -> frozenset[str]:
    """Build the SSRF domain allowlist from the fetcher settings.

    Combines ``allowed_domains`` with the base domains of the configured
    docs.rs and std documentation hosts.
    """
    base_domains = {_base_domain(domain) for domain in settings.allowed_domains}
    for url in [settings.docs_rs_url, settings.std_docs_url]:
        hostname = urlparse(url).hostname or ""
        if hostname:
            base_domains.add(_base_domain(hostname))
    return frozenset(base_domains)


def is_url_allowed(url: str, allowlist: frozenset[str]) -> bool:
    """Check whether a URL points at an allowed documentation host.

    Private IP ranges are blocked unconditionally, regardless of allowlist.
    """
    parsed = urlparse(url)
    hostname = parsed.hostname or ""

    try:
        addr = ipaddress.ip_address(hostname)
        if any(addr in net for net in PRIVATE_NETWORKS):
            return False
    except ValueError:
        pass  # hostname is a domain name, not an IP; proceed to allowlist check

    return _base_domain(hostname) in allowlist


class Fetcher:
    """Downloads rustdoc pages and turns them into crate indexes."""

    def __init__(self, client: httpx.AsyncClient, settings: FetcherSettings | None = None) -> None:
        self._client = client
        self._settings = settings or FetcherSettings()
        self._allowlist = build_allowlist(self._settings)

    async def download(self, url: str) -> str:
        """Fetch a URL and return its body as text.

        Raises DocSearchError on disallowed hosts, network errors, redirect
        chains longer than ``max_redirects`` and non-2xx responses (404 is
        reported as PAGE_NOT_FOUND).
        """
        response = await self._get(url)
        return response.text

    async def fetch_index(self, crate_name: str, version: str | None = None) -> CrateIndex:
        """Fetch and transform the search index of ``crate_name``.

        Raises DocSearchError(CRATE_NOT_FOUND) when the documentation host
        does not know the crate.
        """
        version = version or self._settings.version
        start = searchindex.start_search(
            crate_name,
            version,
            docs_rs_url=self._settings.docs_rs_url,
            std_url=self._settings.std_docs_url,
        )

        try:
            page = await self._get(start.url)
        except DocSearchError as exc:
            if exc.code == ErrorCode.PAGE_NOT_FOUND:
                raise DocSearchError(
                    code=ErrorCode.CRATE_NOT_FOUND,
                    message=f"Crate {crate_name!r} has no documentation at {start.url}",
                ) from exc
            raise

        located = start.find_index(page.text, page_url=str(page.url))

        try:
            content = await self.download(located.url)
        except DocSearchError as exc:
            if exc.code == ErrorCode.PAGE_NOT_FOUND:
                raise DocSearchError(
                    code=ErrorCode.FETCH_FAILED,
                    message=f"Search index for {crate_name!r} missing at {located.url}",
                ) from exc
            raise

        index = located.transform_index(content)
        log.info(
            "index_fetched",
            crate=crate_name,
            version=version,
            url=located.url,
            items=len(index.mapping),
        )
        return index

    async def _get(self, url: str) -> httpx.Response:
        """GET with per-hop allowlist validation and a bounded redirect chain."""
        max_redirects = self._settings.max_redirects
        current_url = url

        try:
            for hop in range(max_redirects + 1):
                if not is_url_allowed(current_url, self._allowlist):
                    log.warning("fetch_blocked", url=current_url, reason="not_in_allowlist")
                    raise DocSearchError(
                        code=ErrorCode.URL_NOT_ALLOWED,
                        message=f"URL not in allowlist: {current_url}",
                    )

                response = await self._client.get(current_url)

                if response.is_redirect and "location" in response.headers:
                    if hop == max_redirects:
                        raise DocSearchError(
                            code=ErrorCode.FETCH_FAILED,
                            message=f"Too many redirects fetching {url}",
                        )
                    current_url = urljoin(current_url, response.headers["location"])
                    continue

                if not response.is_success:
                    if response.status_code == 404:
                        raise DocSearchError(
                            code=ErrorCode.PAGE_NOT_FOUND,
                            message=f"HTTP 404 fetching {url}",
                        )
                    raise DocSearchError(
                        code=ErrorCode.FETCH_FAILED,
                        message=f"HTTP {response.status_code} fetching {url}",
                        recoverable=True,
                    )

                log.debug(
                    "fetch_complete",
                    url=url,
                    status_code=response.status_code,
                    content_length=len(response.content),
                )
                return response

        except DocSearchError:
            raise
        except httpx.HTTPError as exc:
            raise DocSearchError(
                code=ErrorCode.FETCH_FAILED,
                message=f"Network error fetching {url}: {exc}",
                recoverable=True,
            ) from exc

        # Unreachable but satisfies the type checker
        raise DocSearchError(code=ErrorCode.FETCH_FAILED, message="Redirect loop")
