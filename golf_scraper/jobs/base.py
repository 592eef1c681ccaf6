"""
HTTP page fetching shared by the site jobs.
"""

from typing import Any, Dict, Optional

import httpx
from bs4 import BeautifulSoup

from ..enumeration import Unit
from ..errors import TransientFetchError
from ..models import FetchResult

DEFAULT_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/120.0 Safari/537.36'
    ),
    'Accept-Language': 'ko-KR,ko;q=0.9,en;q=0.8',
}


def text_of(node, selector: str, default: str = '') -> str:
    """Stripped text of the first match of selector under node."""
    found = node.select_one(selector)
    if found is None:
        return default
    return found.get_text(' ', strip=True)


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'html.parser')


class HttpPageFetcher:
    """
    Async context manager owning an httpx client.

    Subclasses implement fetch_unit(unit) -> FetchResult. Network errors
    and HTTP error statuses become TransientFetchError so the engine retries.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=DEFAULT_HEADERS,
                follow_redirects=True,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_html(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """GET a page and return its body text."""
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise TransientFetchError(f"{url}: {type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            raise TransientFetchError(f"{url}: HTTP {response.status_code}")
        return response.text

    async def fetch_unit(self, unit: Unit) -> FetchResult:
        raise NotImplementedError
