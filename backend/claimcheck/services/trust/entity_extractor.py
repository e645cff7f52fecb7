"""
Entity Extractor Service.

WHAT THIS DOES:
Turns a claim into the best encyclopedia lookup key (main_entity) plus up
to 3 alternate search terms. The verifier queries the encyclopedia with the
main entity first and falls back to the alternates.

HOW IT WORKS:
1. AI path: ask the model for the best page title and 2-3 alternates as JSON
2. Heuristic path (no key, timeout, bad JSON): proper-noun runs

EXAMPLE:
    Claim: "In 1921, Einstein won the Nobel Prize in Physics"

    Heuristic result:
    main_entity  = "Nobel Prize"
    search_terms = ["Einstein", "Physics"]

This component never raises: an empty claim yields an empty main entity,
which the verifier treats as "no evidence found".

USAGE:
    extractor = EntityExtractor()
    entities = await extractor.extract("The Eiffel Tower was built in 1889")
"""

import logging
import re
from dataclasses import dataclass, field

from claimcheck.config import Settings
from claimcheck.exceptions import MalformedResponseError, ProviderError
from claimcheck.services.llm_client import CompletionClient, parse_json_object

logger = logging.getLogger(__name__)

MAX_SEARCH_TERMS = 3

EXTRACTION_PROMPT = """You are helping look up a factual claim in Wikipedia.

Identify the single best Wikipedia article title to check this claim, plus 2-3 alternative article titles that could also contain the relevant fact.

Claim: "{claim}"

Respond with ONLY a JSON object, no explanation:
{{"mainEntity": "Best Article Title", "searchTerms": ["Alternative One", "Alternative Two"]}}"""

# Capitalized words that are never a lookup key on their own:
# pronouns, articles, conjunctions, prepositions and common verbs
STOPWORDS = frozenset({
    "a", "an", "the", "this", "that", "these", "those",
    "i", "he", "she", "it", "we", "you", "they", "his", "her", "its",
    "our", "your", "their", "him", "them", "who", "whom", "which", "what",
    "and", "or", "but", "nor", "so", "yet", "for", "if", "then", "because",
    "of", "in", "on", "at", "to", "by", "with", "from", "as", "into", "about",
    "after", "before", "during", "while", "when", "where", "there", "here",
    "is", "was", "were", "are", "be", "been", "being", "am",
    "has", "have", "had", "do", "does", "did",
    "will", "would", "can", "could", "should", "may", "might", "must", "shall",
    "not", "also", "however", "although", "many", "some", "most", "every",
    "built", "made", "won", "became", "born", "died", "founded", "created",
    "discovered", "invented", "wrote", "received", "located", "known",
    "called", "named", "said", "according",
})

# Topics that have their own encyclopedia page and often anchor a claim
TOPIC_KEYWORDS = (
    "Nobel Prize",
    "Pulitzer Prize",
    "Academy Award",
    "Grammy Award",
    "Olympic Games",
    "World Cup",
    "World War",
    "Theory of relativity",
    "Quantum mechanics",
    "Evolution",
    "Physics",
    "Chemistry",
    "Medicine",
    "Literature",
    "Mathematics",
    "Biology",
    "Economics",
    "Astronomy",
)


@dataclass
class EntityExtractionResult:
    """Lookup key for a claim plus ordered alternates (at most 3)."""

    main_entity: str
    search_terms: list[str] = field(default_factory=list)


# =============================================================================
# HEURISTIC PATH
# =============================================================================

def _clean_token(token: str) -> str:
    return "".join(ch for ch in token if ch.isalpha())


def _is_candidate(token: str) -> bool:
    return (
        len(token) > 2
        and token[0].isupper()
        and token.lower() not in STOPWORDS
    )


def _proper_noun_runs(tokens: list[str]) -> list[str]:
    """Merge consecutive candidate tokens into runs, in order of appearance."""
    runs = []
    current: list[str] = []

    for token in tokens:
        if _is_candidate(token):
            current.append(token)
            continue
        if current:
            runs.append(" ".join(current))
            current = []
    if current:
        runs.append(" ".join(current))

    unique = []
    for run in runs:
        if len(run) <= 2 or run.lower() in STOPWORDS:
            continue
        if run not in unique:
            unique.append(run)
    return unique


def _append_topic_keywords(claim: str, main_entity: str, terms: list[str]) -> list[str]:
    lowered = claim.lower()
    present = {main_entity.lower(), *(t.lower() for t in terms)}

    for keyword in TOPIC_KEYWORDS:
        if len(terms) >= MAX_SEARCH_TERMS:
            break
        if keyword.lower() in present:
            continue
        if re.search(rf"\b{re.escape(keyword.lower())}\b", lowered):
            terms.append(keyword)
            present.add(keyword.lower())

    return terms


def extract_entities_heuristic(claim: str) -> EntityExtractionResult:
    """
    Deterministic entity extraction from capitalization.

    Rules:
    - Tokens keep letters only; a candidate starts uppercase, is longer
      than 2 characters and is not a stopword
    - Consecutive candidates form a run; the longest run (first one on
      ties) is the main entity, the others (longest first) alternates
    - No runs at all: the first three words longer than 3 characters
    - Topic keywords found in the claim are appended (max 3 alternates)
    """
    # Tokens that clean to "" (numbers, punctuation) stay in place and break runs
    tokens = [_clean_token(t) for t in claim.split()]

    if not any(tokens):
        return EntityExtractionResult(main_entity="", search_terms=[])

    runs = _proper_noun_runs(tokens)

    if runs:
        # max() returns the first maximal element, so ties keep claim order
        main_entity = max(runs, key=len)
        rest = [r for r in runs if r != main_entity]
        terms = sorted(rest, key=len, reverse=True)[:MAX_SEARCH_TERMS]
    else:
        main_entity = " ".join([t for t in tokens if len(t) > 3][:3])
        terms = []

    terms = _append_topic_keywords(claim, main_entity, terms)

    return EntityExtractionResult(main_entity=main_entity, search_terms=terms[:MAX_SEARCH_TERMS])


# =============================================================================
# EXTRACTOR
# =============================================================================

class EntityExtractor:
    """
    Finds what to look up for a claim.

    Pipeline position:
    Claim → [EntityExtractor] → main entity + alternates → EncyclopediaClient
    """

    def __init__(
        self,
        settings: Settings | None = None,
        llm: CompletionClient | None = None,
    ):
        self.llm = llm or CompletionClient(settings)

    async def extract(self, claim: str) -> EntityExtractionResult:
        """
        Extract the main entity and alternates for a claim.

        Never raises; AI failures are absorbed by the heuristic path.
        """
        if not claim or not claim.strip():
            return EntityExtractionResult(main_entity="", search_terms=[])

        result = await self._extract_with_ai(claim)
        if result is None:
            result = extract_entities_heuristic(claim)

        logger.info(
            f"Entities for '{claim[:60]}': main='{result.main_entity}', "
            f"alternates={result.search_terms}"
        )
        return result

    async def _extract_with_ai(self, claim: str) -> EntityExtractionResult | None:
        """Ask the model for lookup titles. Returns None on any failure."""
        if not self.llm.enabled:
            return None

        try:
            text = await self.llm.complete(
                EXTRACTION_PROMPT.format(claim=claim),
                max_tokens=150,
            )
            data = parse_json_object(text)
            return self._validate(data)
        except ProviderError as e:
            logger.warning(f"AI entity extraction failed, using heuristic: {e}")
            return None

    def _validate(self, data: dict) -> EntityExtractionResult:
        main_entity = data.get("mainEntity")
        if not isinstance(main_entity, str) or not main_entity.strip():
            raise MalformedResponseError("mainEntity missing or empty")

        raw_terms = data.get("searchTerms") or []
        if not isinstance(raw_terms, list):
            raise MalformedResponseError("searchTerms is not a list")

        terms = [t.strip() for t in raw_terms if isinstance(t, str) and t.strip()]
        return EntityExtractionResult(
            main_entity=main_entity.strip(),
            search_terms=terms[:MAX_SEARCH_TERMS],
        )


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def extract_entities(claim: str) -> EntityExtractionResult:
    """
    Convenience function to extract lookup entities for a claim.

    Example:
        entities = await extract_entities("Einstein was born in 1879")
    """
    extractor = EntityExtractor()
    return await extractor.extract(claim)
