# Evidence Sources
#
# Providers that turn a query into evidence snippets with URLs:
# - EncyclopediaClient: Wikipedia summary lookup with a search fallback
# - WebSearchClient: optional, credential-gated web search
from claimcheck.services.sources.encyclopedia import EncyclopediaClient, EncyclopediaSummary
from claimcheck.services.sources.web_search import WebSearchClient, WebSearchResult

__all__ = [
    "EncyclopediaClient",
    "EncyclopediaSummary",
    "WebSearchClient",
    "WebSearchResult",
]
