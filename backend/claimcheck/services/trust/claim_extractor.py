"""
Claim Extractor Service.

WHAT THIS DOES:
Breaks a passage into atomic, verifiable claims. This is the first step of
every analysis.

WHY THIS MATTERS:
A passage is verified one claim at a time. Each extracted claim gets its
own lookup, its own evidence and its own verdict.

EXAMPLE:
    Passage: "The Eiffel Tower was built in 1889. It is located in Paris."

    Extracted claims:
    1. "The Eiffel Tower was built in 1889"
    2. "The Eiffel Tower is located in Paris"

STRUCTURED OUTPUT:
We use OpenAI's JSON mode and expect {"claims": ["...", "..."]}.
Without an API key, or when the call fails, the passage is split into
sentences instead.

USAGE:
    extractor = ClaimExtractor()
    claims = await extractor.extract(passage)
"""

import logging
import re

from claimcheck.config import Settings
from claimcheck.exceptions import ProviderError
from claimcheck.services.llm_client import CompletionClient, parse_json_object

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """You are a claim extraction system. Your job is to break down text into atomic, verifiable factual claims.

RULES:
1. Extract EVERY factual claim from the text
2. Each claim should be a single, verifiable statement
3. Claims should be complete sentences that stand alone (resolve pronouns)
4. Skip opinions, questions and instructions

OUTPUT FORMAT (JSON):
{
  "claims": ["First claim", "Second claim"]
}

Extract claims from the following text:"""

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
TERMINAL_PUNCTUATION = ".!?;: "


def split_sentences(text: str) -> list[str]:
    """
    Deterministic fallback: one claim per sentence.

    Terminal punctuation is stripped so claims can be re-joined with ". ".
    """
    claims = []
    for sentence in SENTENCE_BOUNDARY.split(text.strip()):
        sentence = sentence.strip().rstrip(TERMINAL_PUNCTUATION).strip()
        if sentence:
            claims.append(sentence)
    return claims


class ClaimExtractor:
    """
    Extracts atomic claims from a passage.

    Pipeline position:
    Passage → [ClaimExtractor] → Claims → ClaimVerifier → ...
    """

    def __init__(
        self,
        settings: Settings | None = None,
        llm: CompletionClient | None = None,
    ):
        self.llm = llm or CompletionClient(settings)

    async def extract(self, text: str) -> list[str]:
        """
        Extract claim texts from a passage, in passage order.

        Returns an empty list for empty text.
        """
        if not text or not text.strip():
            return []

        logger.info(f"Extracting claims from passage ({len(text)} chars)")

        claims = await self._extract_with_ai(text)
        if claims is None:
            claims = split_sentences(text)

        logger.info(f"Extracted {len(claims)} claims")
        return claims

    async def _extract_with_ai(self, text: str) -> list[str] | None:
        """JSON-mode extraction. Returns None on any failure."""
        if not self.llm.enabled:
            return None

        try:
            response = await self.llm.complete(
                text,
                system=EXTRACTION_PROMPT,
                max_tokens=1000,
                json_mode=True,
            )
            data = parse_json_object(response)
        except ProviderError as e:
            logger.error(f"Claim extraction failed, splitting sentences: {e}")
            return None

        claims = data.get("claims")
        if not isinstance(claims, list):
            logger.error("Claim extraction returned no 'claims' list, splitting sentences")
            return None

        # Items may be plain strings or {"text": ...} objects
        texts = []
        for item in claims:
            if isinstance(item, dict):
                item = item.get("text")
            if isinstance(item, str) and item.strip():
                texts.append(item.strip())

        return texts or None


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def extract_claims(text: str) -> list[str]:
    """
    Convenience function to extract claims from a passage.

    Example:
        claims = await extract_claims("The Eiffel Tower was built in 1889.")
    """
    extractor = ClaimExtractor()
    return await extractor.extract(text)
