"""
Analysis Pipeline — Orchestrates a full passage analysis.

WHAT THIS DOES:
Coordinates all services to turn a passage into a persisted AnalysisResult,
and serves the read accessors over stored results.

PIPELINE STAGES:
1. Extraction: ClaimExtractor → claim texts → Claim(c1..cN)
2. Verification: one ClaimVerifier task per claim, run concurrently
3. Scoring: TrustScorer over the results (in claim order)
4. Assembly: verified text = VERIFIED claims joined with ". "
5. Persistence: one write to the AnalysisStore

CONCURRENCY:
Claim tasks share no mutable state; asyncio.gather returns results in the
order the tasks were passed, so the stored record is deterministic no
matter which claim finishes first. Wall-clock cost is the slowest claim.

USAGE:
    pipeline = AnalysisPipeline(store=AnalysisStore(db))
    summary = await pipeline.analyze("The Eiffel Tower was built in 1889.")
    claims = await pipeline.get_claims(summary.analysis_id)
"""

import asyncio
import logging
from datetime import datetime, timezone
from uuid import uuid4

from claimcheck.config import Settings, get_settings
from claimcheck.exceptions import NotFoundError
from claimcheck.models.schemas import (
    AnalysisResult,
    AnalysisSummary,
    CitationCheck,
    Claim,
    ClaimEvidenceResponse,
    ClaimVerificationResult,
    Verdict,
    VerifiedTextResponse,
)
from claimcheck.services.analysis_store import AnalysisStore
from claimcheck.services.trust.claim_extractor import ClaimExtractor
from claimcheck.services.trust.claim_verifier import ClaimVerifier
from claimcheck.services.trust.trust_scorer import TrustScorer

logger = logging.getLogger(__name__)

VERIFIED_TEXT_SEPARATOR = ". "

CITATION_VALID_REASON = "Citation matches supporting source"
CITATION_INVALID_REASON = "Citation missing or contradicted"


class AnalysisPipeline:
    """
    Orchestrates claim extraction, verification, scoring and persistence.

    Collaborators are injectable; by default they are built from settings.
    """

    def __init__(
        self,
        store: AnalysisStore,
        settings: Settings | None = None,
        claim_extractor: ClaimExtractor | None = None,
        verifier: ClaimVerifier | None = None,
        scorer: TrustScorer | None = None,
    ):
        settings = settings or get_settings()
        self.store = store
        self.claim_extractor = claim_extractor or ClaimExtractor(settings)
        self.verifier = verifier or ClaimVerifier(settings)
        self.scorer = scorer or TrustScorer(settings)
        self.evidence_scan_limit = settings.evidence_scan_limit

    # =========================================================================
    # ANALYZE
    # =========================================================================

    async def analyze(self, text: str) -> AnalysisSummary:
        """
        Run the full pipeline on a passage and persist the result.

        Args:
            text: The passage to verify

        Returns:
            AnalysisSummary with the new analysis id, score and label
        """
        logger.info(f"Analysis starting ({len(text)} chars)")

        # Stage 1: Extraction
        claim_texts = await self.claim_extractor.extract(text)
        claims = [
            Claim(id=f"c{i + 1}", text=claim_text)
            for i, claim_text in enumerate(claim_texts)
        ]

        # Stage 2: Verification (fan-out / fan-in, order preserved)
        results = await self._verify_all(claims)

        # Stage 3: Scoring
        trust = self.scorer.score(results)

        # Stage 4: Assembly
        verified_text = VERIFIED_TEXT_SEPARATOR.join(
            r.text for r in results if r.verdict == Verdict.VERIFIED
        )

        analysis = AnalysisResult(
            id=uuid4().hex,
            original_text=text,
            trust_score=trust.score,
            label=trust.label,
            claims=results,
            verified_text=verified_text,
            created_at=datetime.now(timezone.utc).replace(tzinfo=None),
        )

        # Stage 5: Persistence
        await self.store.save(analysis)

        logger.info(
            f"Analysis {analysis.id} complete: score={trust.score}, "
            f"label='{trust.label.value}', claims={len(results)}"
        )

        return AnalysisSummary(
            analysis_id=analysis.id,
            trust_score=analysis.trust_score,
            label=analysis.label,
            summary=f"{len(results)} claims analyzed",
        )

    async def _verify_all(self, claims: list[Claim]) -> list[ClaimVerificationResult]:
        """Verify every claim concurrently; results come back in claim order."""
        if not claims:
            return []
        return list(await asyncio.gather(*(self.verifier.verify(c) for c in claims)))

    # =========================================================================
    # READ ACCESSORS
    # =========================================================================

    async def get_analysis(self, analysis_id: str) -> AnalysisResult:
        """Load an analysis or raise NotFoundError."""
        analysis = await self.store.get(analysis_id)
        if analysis is None:
            raise NotFoundError("analysis", analysis_id)
        return analysis

    async def get_claims(self, analysis_id: str) -> list[ClaimVerificationResult]:
        """The stored claim results of an analysis, in claim order."""
        analysis = await self.get_analysis(analysis_id)
        return analysis.claims

    async def get_verified_text(self, analysis_id: str) -> VerifiedTextResponse:
        """Verified text plus the texts of every claim that was not VERIFIED."""
        analysis = await self.get_analysis(analysis_id)
        removed = [c.text for c in analysis.claims if c.verdict != Verdict.VERIFIED]
        return VerifiedTextResponse(
            verified_text=analysis.verified_text,
            removed_claims=removed,
        )

    async def get_evidence(self, claim_id: str) -> ClaimEvidenceResponse:
        """
        Evidence and citation check for a claim id.

        Claim ids are position-based (c1, c2, ...) and repeat across
        analyses; the newest analysis containing the id wins. Only the most
        recent `evidence_scan_limit` analyses are scanned.
        """
        for analysis in await self.store.recent(self.evidence_scan_limit):
            for claim in analysis.claims:
                if claim.claim_id != claim_id:
                    continue

                valid = claim.verdict == Verdict.VERIFIED
                return ClaimEvidenceResponse(
                    claim_id=claim.claim_id,
                    status=claim.verdict,
                    evidence=claim.evidence,
                    citation_check=CitationCheck(
                        exists=len(claim.evidence) > 0,
                        valid=valid,
                        reason=CITATION_VALID_REASON if valid else CITATION_INVALID_REASON,
                    ),
                )

        raise NotFoundError("claim", claim_id)

    async def close(self):
        """Release the verifier's HTTP clients."""
        await self.verifier.close()
