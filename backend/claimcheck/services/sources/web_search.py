"""
Web Search client (Serper-compatible).

WHAT THIS DOES:
Last-resort evidence source. When the encyclopedia could not verify a
claim, the verifier searches the web for the raw claim text and matches
the combined snippets against it.

CREDENTIAL GATE:
Without SEARCH_API_KEY the client is disabled and search() returns []
immediately, without touching the network.

REQUEST:
    POST {search_api_url}
    X-API-KEY: <key>
    {"q": "<query>", "num": 5}

RESPONSE (relevant part):
    {"organic": [{"title": ..., "snippet": ..., "link": ...}, ...]}

USAGE:
    client = WebSearchClient()
    if client.enabled:
        results = await client.search("Einstein Nobel Prize 1921")
"""

import logging
from dataclasses import dataclass

import httpx

from claimcheck.config import Settings, get_settings

logger = logging.getLogger(__name__)

MAX_RESULTS = 5


@dataclass
class WebSearchResult:
    """One organic search hit."""

    title: str
    snippet: str
    url: str


class WebSearchClient:
    """Optional web search provider. Never raises from search()."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        settings = settings or get_settings()
        self.api_key = settings.search_api_key or None
        self.api_url = settings.search_api_url
        self.timeout = settings.search_timeout
        self.user_agent = settings.user_agent

        self._client = http_client

    @property
    def enabled(self) -> bool:
        """True when a search credential is configured."""
        return self.api_key is not None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def search(self, query: str) -> list[WebSearchResult]:
        """
        Search the web and return up to 5 results.

        Returns [] when disabled, on any failure, or when nothing matched.
        """
        if not self.enabled or not query.strip():
            return []

        client = await self._get_client()

        try:
            response = await client.post(
                self.api_url,
                json={"q": query, "num": MAX_RESULTS},
                headers={
                    "X-API-KEY": self.api_key,
                    "User-Agent": self.user_agent,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Web search failed: {e}")
            return []
        except ValueError as e:
            logger.warning(f"Web search response was not JSON: {e}")
            return []

        organic = data.get("organic") if isinstance(data, dict) else None
        if not isinstance(organic, list):
            logger.warning("Web search response has no 'organic' result list")
            return []

        results = []
        for item in organic:
            if not isinstance(item, dict):
                continue
            title = item.get("title")
            url = item.get("link")
            if not isinstance(title, str) or not title or not isinstance(url, str) or not url:
                continue
            snippet = item.get("snippet")
            results.append(WebSearchResult(
                title=title,
                snippet=snippet if isinstance(snippet, str) else "",
                url=url,
            ))
            if len(results) >= MAX_RESULTS:
                break

        logger.info(f"Web search '{query[:60]}' returned {len(results)} results")
        return results

    async def close(self):
        """Close the HTTP client (call when done)."""
        if self._client:
            await self._client.aclose()
            self._client = None
