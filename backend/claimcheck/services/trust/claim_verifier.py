"""
Claim Verifier Service.

WHAT THIS DOES:
Checks ONE claim against external sources and produces its verdict
(VERIFIED / UNCERTAIN / HALLUCINATED), a 0-100 confidence, an explanation,
and the list of evidence it consulted.

PIPELINE (per claim, strictly sequential):
1. EntityExtractor → main entity + alternates
2. Encyclopedia lookup of the main entity → SemanticMatcher
3. Stop early if that gave VERIFIED with confidence ≥ 70
4. Still not VERIFIED: try up to 2 alternates the same way
5. Still not VERIFIED: one web search on the raw claim text (if enabled)
6. Resolve: best result so far, or UNCERTAIN (40) when nothing matched

VERDICT MAPPING (matcher → claim):
- supports    → VERIFIED if confidence ≥ 50, else UNCERTAIN
- contradicts → HALLUCINATED, confidence = 100 - matcher confidence
- neutral     → no result

Only the main-entity lookup may produce HALLUCINATED. Later steps can
only replace the best result with a more confident supports-derived one
(see prefer()). A claim nothing could be found for is UNCERTAIN, never
HALLUCINATED: absence of evidence is not evidence of fabrication.

USAGE:
    verifier = ClaimVerifier()
    result = await verifier.verify(Claim(id="c1", text="Einstein was born in 1879"))
"""

import logging
from dataclasses import dataclass

from claimcheck.config import Settings, get_settings
from claimcheck.models.schemas import (
    Claim,
    ClaimVerificationResult,
    EvidenceItem,
    EvidenceVerdict,
    Verdict,
)
from claimcheck.services.llm_client import CompletionClient
from claimcheck.services.sources.encyclopedia import EncyclopediaClient
from claimcheck.services.sources.web_search import WebSearchClient
from claimcheck.services.trust.entity_extractor import EntityExtractor
from claimcheck.services.trust.semantic_matcher import MatchResult, SemanticMatcher

logger = logging.getLogger(__name__)

VERIFIED_THRESHOLD = 50
CONCLUSIVE_THRESHOLD = 70

MAX_ALTERNATES = 2
MAX_WEB_SNIPPETS = 5
MAX_WEB_EVIDENCE = 3
WEB_TITLE_MAX_CHARS = 60

WEB_SOURCE_LABEL = "Web Search Results"

UNRESOLVED_CONFIDENCE = 40
UNRESOLVED_EXPLANATION = (
    "Could not find sufficient sources to verify this claim. "
    "Manual review recommended."
)

EVIDENCE_VERDICTS = {
    "supports": EvidenceVerdict.SUPPORTS,
    "contradicts": EvidenceVerdict.CONTRADICTS,
    "neutral": EvidenceVerdict.RELATED,
}


@dataclass(frozen=True)
class VerdictCandidate:
    """A tentative claim verdict derived from one matcher result."""

    verdict: Verdict
    confidence: int
    explanation: str
    supports_derived: bool


# =============================================================================
# BEST-RESULT ACCUMULATION
# =============================================================================

def candidate_from_match(match: MatchResult) -> VerdictCandidate | None:
    """Map a matcher result to a tentative claim verdict (None for neutral)."""
    if match.verdict == "supports":
        verdict = Verdict.VERIFIED if match.confidence >= VERIFIED_THRESHOLD else Verdict.UNCERTAIN
        return VerdictCandidate(
            verdict=verdict,
            confidence=match.confidence,
            explanation=match.explanation,
            supports_derived=True,
        )
    if match.verdict == "contradicts":
        return VerdictCandidate(
            verdict=Verdict.HALLUCINATED,
            confidence=100 - match.confidence,
            explanation=match.explanation,
            supports_derived=False,
        )
    return None


def prefer(
    current: VerdictCandidate | None,
    candidate: VerdictCandidate | None,
) -> VerdictCandidate | None:
    """
    Reducer for follow-up lookups (alternates, web search).

    The candidate wins only if it is supports-derived and strictly more
    confident than the current best (a missing best counts as 0).
    """
    if candidate is None or not candidate.supports_derived:
        return current
    baseline = current.confidence if current is not None else 0
    return candidate if candidate.confidence > baseline else current


def is_verified(result: VerdictCandidate | None) -> bool:
    return result is not None and result.verdict == Verdict.VERIFIED


def is_conclusive(result: VerdictCandidate | None) -> bool:
    """VERIFIED with confidence ≥ 70: no further sources are consulted."""
    return is_verified(result) and result.confidence >= CONCLUSIVE_THRESHOLD


# =============================================================================
# VERIFIER
# =============================================================================

class ClaimVerifier:
    """
    Runs the per-claim verification pipeline.

    Pipeline position:
    Claims → [ClaimVerifier] (one task per claim) → TrustScorer

    Collaborators are injectable so tests can substitute fakes; by default
    they are built from the settings, sharing one CompletionClient.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        entity_extractor: EntityExtractor | None = None,
        encyclopedia: EncyclopediaClient | None = None,
        web_search: WebSearchClient | None = None,
        matcher: SemanticMatcher | None = None,
    ):
        settings = settings or get_settings()
        llm = None
        if entity_extractor is None or matcher is None:
            llm = CompletionClient(settings)

        self.entity_extractor = entity_extractor or EntityExtractor(settings, llm=llm)
        self.encyclopedia = encyclopedia or EncyclopediaClient(settings)
        self.web_search = web_search or WebSearchClient(settings)
        self.matcher = matcher or SemanticMatcher(settings, llm=llm)

    async def verify(self, claim: Claim) -> ClaimVerificationResult:
        """
        Verify one claim.

        Returns:
            ClaimVerificationResult with a non-empty evidence list
        """
        evidence: list[EvidenceItem] = []

        # Step 1: what to look up
        entities = await self.entity_extractor.extract(claim.text)

        # Step 2: main entity (the only step allowed to yield HALLUCINATED)
        best = await self._check_entity(claim.text, entities.main_entity, evidence)

        # Step 3: early exit
        if is_conclusive(best):
            logger.info(f"Claim {claim.id} verified by primary lookup ({best.confidence})")
            return self._resolve(claim, best, evidence)

        # Step 4: alternates
        if not is_verified(best):
            alternates = [
                term for term in entities.search_terms[:MAX_ALTERNATES]
                if term.lower() != entities.main_entity.lower()
            ]
            for term in alternates:
                candidate = await self._check_entity(claim.text, term, evidence)
                best = prefer(best, candidate)
                if is_conclusive(best):
                    break

        # Step 5: web search
        if not is_verified(best) and self.web_search.enabled:
            candidate = await self._check_web(claim.text, evidence)
            best = prefer(best, candidate)

        # Step 6: resolution
        return self._resolve(claim, best, evidence)

    async def _check_entity(
        self,
        claim_text: str,
        entity: str,
        evidence: list[EvidenceItem],
    ) -> VerdictCandidate | None:
        """Encyclopedia lookup + match for one entity; appends evidence when found."""
        if not entity:
            return None

        summary = await self.encyclopedia.lookup_summary(entity)
        if summary is None:
            return None

        label = f"Wikipedia: {summary.title}"
        match = await self.matcher.match(claim_text, summary.extract, label)

        evidence.append(EvidenceItem(
            source=label,
            verdict=EVIDENCE_VERDICTS[match.verdict],
            url=summary.url,
        ))
        return candidate_from_match(match)

    async def _check_web(
        self,
        claim_text: str,
        evidence: list[EvidenceItem],
    ) -> VerdictCandidate | None:
        """One web search, one match over the combined snippets."""
        results = await self.web_search.search(claim_text)
        if not results:
            return None

        combined = "\n".join(
            f"{r.title}: {r.snippet}" for r in results[:MAX_WEB_SNIPPETS]
        )
        match = await self.matcher.match(claim_text, combined, WEB_SOURCE_LABEL)

        for result in results[:MAX_WEB_EVIDENCE]:
            evidence.append(EvidenceItem(
                source=result.title[:WEB_TITLE_MAX_CHARS],
                verdict=EVIDENCE_VERDICTS[match.verdict],
                url=result.url,
            ))
        return candidate_from_match(match)

    def _resolve(
        self,
        claim: Claim,
        best: VerdictCandidate | None,
        evidence: list[EvidenceItem],
    ) -> ClaimVerificationResult:
        """Turn the best candidate (or its absence) into the final result."""
        if best is not None:
            return ClaimVerificationResult(
                claim_id=claim.id,
                text=claim.text,
                verdict=best.verdict,
                confidence=best.confidence,
                explanation=best.explanation,
                evidence=evidence or [
                    EvidenceItem(source="Wikipedia", verdict=EvidenceVerdict.NO_MATCH),
                ],
            )

        logger.info(f"Claim {claim.id} unresolved; {len(evidence)} sources consulted")
        return ClaimVerificationResult(
            claim_id=claim.id,
            text=claim.text,
            verdict=Verdict.UNCERTAIN,
            confidence=UNRESOLVED_CONFIDENCE,
            explanation=UNRESOLVED_EXPLANATION,
            evidence=evidence or [
                EvidenceItem(
                    source="No sources found - requires manual review",
                    verdict=EvidenceVerdict.NO_MATCH,
                ),
            ],
        )

    async def close(self):
        """Close the HTTP clients of the evidence sources."""
        await self.encyclopedia.close()
        await self.web_search.close()


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def verify_claim(claim: Claim) -> ClaimVerificationResult:
    """
    Convenience function to verify a single claim.

    Example:
        result = await verify_claim(Claim(id="c1", text="Paris is the capital of France"))
    """
    verifier = ClaimVerifier()
    try:
        return await verifier.verify(claim)
    finally:
        await verifier.close()
