"""
Semantic Matcher Service.

WHAT THIS DOES:
Decides whether a piece of source content supports, contradicts, or is
neutral toward a claim, with a 0-100 confidence and a short explanation.

TWO PATHS:
- AI path: the model reads the claim and up to 2000 characters of the
  source and answers in strict JSON
- Keyword path: deterministic word/number overlap, used whenever the AI
  path is unavailable or answers with something unparseable

KEYWORD SCORING:
    confidence = round(match_ratio × 60 + number_bonus + 10), clamped 0-100

    match_ratio  = weighted share of the claim's important words found in
                   the source (words longer than 6 chars count double)
    number_bonus = share of claim numbers found in the source × 25,
                   plus 15 for every matching 4-digit year

EXAMPLE:
    Claim:  "Einstein was born in 1879"
    Source: "Albert Einstein (14 March 1879 – 18 April 1955) was a physicist"

    important words: einstein (×2), born, 1879 → 3 of 4 weight matched
    numbers: 1879 matched, and it is a year → 25 + 15
    confidence = round(0.75 × 60 + 40 + 10) = 95 → supports

The keyword path never returns "contradicts": low overlap means the source
does not talk about the claim, not that it refutes it.

USAGE:
    matcher = SemanticMatcher()
    result = await matcher.match(claim, summary.extract, "Wikipedia: Eiffel Tower")
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Literal

from claimcheck.config import Settings
from claimcheck.exceptions import MalformedResponseError, ProviderError
from claimcheck.services.llm_client import CompletionClient, parse_json_object

logger = logging.getLogger(__name__)

MAX_SOURCE_CHARS = 2000

SUPPORTS_THRESHOLD = 50
RELATED_THRESHOLD = 30

MATCHING_PROMPT = """You are a fact-checking system. Decide whether the source text supports, contradicts, or is neutral toward the claim.

DEFINITIONS:
- supports: the source states the claim is true (same facts, names, dates, numbers)
- contradicts: the source states something incompatible with the claim (different date, person, place, number)
- neutral: the source is related but does not settle the claim either way

CLAIM: "{claim}"

SOURCE ({source_label}):
{content}

Respond with ONLY a JSON object, no explanation outside it:
{{"verdict": "supports" | "contradicts" | "neutral", "confidence": 0-100, "explanation": "one short sentence"}}"""

# Words too common to count as evidence of a match
STOPWORDS = frozenset({
    "that", "this", "with", "from", "have", "were", "been", "which",
    "their", "there", "about", "into", "also", "than", "they", "them",
    "these", "those", "what", "when", "where", "will", "would", "could",
    "should", "after", "before", "while", "being", "other", "some",
})

WORD_PATTERN = re.compile(r"[a-z0-9]+")
NUMBER_PATTERN = re.compile(r"\d+")

# Type alias for verdict
MatchVerdict = Literal["supports", "contradicts", "neutral"]

VALID_VERDICTS = ("supports", "contradicts", "neutral")


@dataclass
class MatchResult:
    """The matcher's judgment of one source against one claim."""

    verdict: MatchVerdict
    confidence: int
    explanation: str


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


# =============================================================================
# KEYWORD PATH
# =============================================================================

def important_words(text: str) -> list[str]:
    """Lowercased tokens longer than 3 characters, minus stopwords, de-duplicated."""
    words = []
    for word in WORD_PATTERN.findall(text.lower()):
        if len(word) > 3 and word not in STOPWORDS and word not in words:
            words.append(word)
    return words


def keyword_confidence(claim: str, source_content: str) -> int:
    """
    Deterministic 0-100 overlap score between a claim and a source.

    See the module docstring for the formula.
    """
    claim_lower = claim.lower()
    source_lower = source_content.lower()

    total_weight = 0
    matched_weight = 0
    for word in important_words(claim_lower):
        weight = 2 if len(word) > 6 else 1
        total_weight += weight
        if word in source_lower:
            matched_weight += weight

    match_ratio = matched_weight / total_weight if total_weight else 0.0

    claim_numbers = NUMBER_PATTERN.findall(claim_lower)
    source_numbers = set(NUMBER_PATTERN.findall(source_lower))

    number_bonus = 0.0
    if claim_numbers:
        matched_numbers = [n for n in claim_numbers if n in source_numbers]
        year_bonus = 15 * sum(1 for n in matched_numbers if len(n) == 4)
        number_bonus = len(matched_numbers) / len(claim_numbers) * 25 + year_bonus

    return _clamp(_round_half_up(match_ratio * 60 + number_bonus + 10))


def match_by_keywords(claim: str, source_content: str, source_label: str) -> MatchResult:
    """Keyword/number-overlap verdict. Never returns "contradicts"."""
    confidence = keyword_confidence(claim, source_content)

    if confidence >= SUPPORTS_THRESHOLD:
        return MatchResult(
            verdict="supports",
            confidence=confidence,
            explanation=f"Key terms and figures from the claim appear in {source_label}",
        )
    if confidence >= RELATED_THRESHOLD:
        return MatchResult(
            verdict="neutral",
            confidence=confidence,
            explanation=f"Related but unverified: {source_label} only partially overlaps the claim",
        )
    return MatchResult(
        verdict="neutral",
        confidence=confidence,
        explanation=f"Insufficient evidence in {source_label}",
    )


# =============================================================================
# MATCHER
# =============================================================================

class SemanticMatcher:
    """
    Claim ↔ source judgment with an AI path and a keyword fallback.

    Pipeline position:
    EncyclopediaClient / WebSearchClient → content → [SemanticMatcher] → ClaimVerifier
    """

    def __init__(
        self,
        settings: Settings | None = None,
        llm: CompletionClient | None = None,
    ):
        self.llm = llm or CompletionClient(settings)

    async def match(self, claim: str, source_content: str, source_label: str) -> MatchResult:
        """
        Judge one source against one claim.

        Args:
            claim: The claim text
            source_content: Encyclopedia extract or combined search snippets
            source_label: Display name used in prompts and explanations

        Returns:
            MatchResult; never raises
        """
        result = await self._match_with_ai(claim, source_content, source_label)
        if result is None:
            result = match_by_keywords(claim, source_content, source_label)

        logger.info(
            f"Match '{claim[:50]}' vs {source_label}: "
            f"{result.verdict} ({result.confidence})"
        )
        return result

    async def _match_with_ai(
        self,
        claim: str,
        source_content: str,
        source_label: str,
    ) -> MatchResult | None:
        """Ask the model for a verdict. Returns None on any failure."""
        if not self.llm.enabled:
            return None

        prompt = MATCHING_PROMPT.format(
            claim=claim,
            source_label=source_label,
            content=source_content[:MAX_SOURCE_CHARS],
        )

        try:
            text = await self.llm.complete(prompt, max_tokens=200)
            return self._validate(parse_json_object(text))
        except ProviderError as e:
            logger.warning(f"AI matching failed, using keyword analysis: {e}")
            return None

    def _validate(self, data: dict) -> MatchResult:
        verdict = str(data.get("verdict", "")).strip().lower()
        if verdict not in VALID_VERDICTS:
            raise MalformedResponseError(f"Unknown verdict: {data.get('verdict')!r}")

        confidence = data.get("confidence")
        if (
            isinstance(confidence, bool)
            or not isinstance(confidence, (int, float))
            or not math.isfinite(confidence)
        ):
            raise MalformedResponseError(f"Non-numeric confidence: {confidence!r}")

        explanation = data.get("explanation")
        if not isinstance(explanation, str):
            explanation = ""

        return MatchResult(
            verdict=verdict,
            confidence=_clamp(_round_half_up(confidence)),
            explanation=explanation.strip() or f"AI judged the claim as {verdict}",
        )
