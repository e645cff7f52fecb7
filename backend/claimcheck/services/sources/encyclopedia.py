"""
Wikipedia API client.

WHAT THIS DOES:
Fetches the lead-section summary of an encyclopedia article for an entity,
so the semantic matcher can compare a claim against it.

HOW IT WORKS:
Wikipedia exposes two endpoints we need:
1. REST summary — /page/summary/{title}, returns {title, extract, content_urls}
2. Action API search — action=query&list=search, ranked full-text search

lookup_summary() tries the exact title first. Only if that fails (404,
timeout, empty extract) does it search and fetch the top-ranked title.

FAILURE MODEL:
Every network/HTTP/decoding error is caught here, logged, and treated as
"this step failed". Callers only ever see a summary or None.

USAGE:
    client = EncyclopediaClient()
    summary = await client.lookup_summary("Eiffel Tower")
    if summary:
        print(summary.title, summary.url)
    await client.close()
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from claimcheck.config import Settings, get_settings

logger = logging.getLogger(__name__)

ARTICLE_URL_BASE = "https://en.wikipedia.org/wiki"

SEARCH_RESULT_LIMIT = 3

QUOTE_CHARS = "\"'“”‘’`"


@dataclass
class EncyclopediaSummary:
    """The lead-section extract of one article."""

    extract: str
    url: str
    title: str


def normalize_title(entity: str) -> str:
    """
    Turn an entity string into a Wikipedia title path segment.

    Example:
        normalize_title('"Eiffel Tower" ')  # 'Eiffel_Tower'
    """
    return entity.strip().strip(QUOTE_CHARS).strip().replace(" ", "_")


def _as_dict(value) -> dict:
    """The value itself if it is a JSON object, else an empty one."""
    return value if isinstance(value, dict) else {}


class EncyclopediaClient:
    """
    Async client for Wikipedia summaries with a search fallback.

    The httpx client can be injected (tests use httpx.MockTransport);
    otherwise one is created lazily with the configured timeout and
    User-Agent header.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        settings = settings or get_settings()
        self.rest_base = settings.encyclopedia_rest_base.rstrip("/")
        self.search_url = settings.encyclopedia_search_url
        self.timeout = settings.encyclopedia_timeout
        self.user_agent = settings.user_agent

        self._client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    # =========================================================================
    # LOOKUP: direct title first, search second
    # =========================================================================

    async def lookup_summary(self, entity: str) -> EncyclopediaSummary | None:
        """
        Find the summary for an entity.

        Args:
            entity: Lookup key, e.g. "Eiffel Tower" or "Albert Einstein"

        Returns:
            EncyclopediaSummary, or None if neither the direct fetch nor
            the search fallback produced a non-empty extract
        """
        title = normalize_title(entity)
        if not title:
            return None

        # Step 1: exact title
        summary = await self.fetch_summary(title)
        if summary:
            return summary

        # Step 2: ranked search, then fetch the top hit
        titles = await self.search_titles(entity.strip().strip(QUOTE_CHARS))
        if not titles:
            logger.info(f"No encyclopedia article found for '{entity}'")
            return None

        return await self.fetch_summary(normalize_title(titles[0]))

    async def fetch_summary(self, title: str) -> EncyclopediaSummary | None:
        """
        Fetch the REST summary for an exact (already normalized) title.

        Success requires a non-empty `extract` field.
        """
        client = await self._get_client()
        url = f"{self.rest_base}/page/summary/{quote(title, safe='')}"

        try:
            response = await client.get(
                url,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                follow_redirects=True,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Encyclopedia summary for '{title}' failed: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Encyclopedia summary for '{title}' was not JSON: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Encyclopedia summary for '{title}' is not a JSON object")
            return None

        extract = data.get("extract")
        if not isinstance(extract, str) or not extract.strip():
            logger.debug(f"Encyclopedia summary for '{title}' has no extract")
            return None

        desktop = _as_dict(_as_dict(data.get("content_urls")).get("desktop"))
        page_url = desktop.get("page")
        if not isinstance(page_url, str) or not page_url:
            page_url = f"{ARTICLE_URL_BASE}/{quote(title, safe='')}"

        page_title = data.get("title")
        if not isinstance(page_title, str) or not page_title.strip():
            page_title = title.replace("_", " ")

        return EncyclopediaSummary(extract=extract.strip(), url=page_url, title=page_title)

    async def search_titles(self, query: str) -> list[str]:
        """
        Full-text search; returns up to 3 ranked article titles.

        Returns an empty list on any failure.
        """
        client = await self._get_client()

        params = {
            "action": "query",
            "list": "search",
            "srsearch": query,
            "srlimit": SEARCH_RESULT_LIMIT,
            "format": "json",
        }

        try:
            response = await client.get(
                self.search_url,
                params=params,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Encyclopedia search for '{query}' failed: {e}")
            return []
        except ValueError as e:
            logger.warning(f"Encyclopedia search for '{query}' was not JSON: {e}")
            return []

        if not isinstance(data, dict):
            logger.warning(f"Encyclopedia search for '{query}' is not a JSON object")
            return []

        results = _as_dict(data.get("query")).get("search")
        if not isinstance(results, list):
            logger.warning(f"Encyclopedia search for '{query}' has no result list")
            return []

        titles = [
            r["title"] for r in results
            if isinstance(r, dict) and isinstance(r.get("title"), str) and r["title"].strip()
        ]

        logger.info(f"Encyclopedia search '{query}' returned {len(titles)} titles")
        return titles[:SEARCH_RESULT_LIMIT]

    async def close(self):
        """Close the HTTP client (call when done)."""
        if self._client:
            await self._client.aclose()
            self._client = None
