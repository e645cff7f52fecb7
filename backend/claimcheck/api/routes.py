"""
API Routes — The endpoints around the verification pipeline.

ENDPOINTS:
- POST /api/verification/analyze                  → Analyze a passage
- GET  /api/verification/{id}/claims              → Per-claim results
- GET  /api/verification/claim/{claim_id}/evidence → Evidence for one claim
- GET  /api/verification/{id}/verified-text       → Verified vs removed text

ERRORS:
- Unknown analysis / claim id → 404 {"detail": "not_found"}
- Anything unexpected         → 500 {"detail": "Unexpected error"} (see main.py)
"""

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from claimcheck.database import get_db
from claimcheck.exceptions import NotFoundError
from claimcheck.models.schemas import (
    AnalysisSummary,
    AnalyzeRequest,
    ClaimEvidenceResponse,
    ClaimVerificationResult,
    VerifiedTextResponse,
)
from claimcheck.services.analysis_store import AnalysisStore
from claimcheck.services.pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/verification", tags=["verification"])


async def get_pipeline(db: AsyncSession = Depends(get_db)) -> AsyncIterator[AnalysisPipeline]:
    """Dependency that yields a pipeline bound to the request's session."""
    pipeline = AnalysisPipeline(store=AnalysisStore(db))
    try:
        yield pipeline
    finally:
        await pipeline.close()


def _not_found(e: NotFoundError) -> HTTPException:
    logger.info(f"Lookup failed: {e}")
    return HTTPException(status_code=404, detail="not_found")


# =============================================================================
# ANALYZE
# =============================================================================

@router.post("/analyze", response_model=AnalysisSummary)
async def analyze_text(
    request: AnalyzeRequest,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> AnalysisSummary:
    """
    Analyze a passage: extract claims, verify them, score the passage.

    Example:
        POST /api/verification/analyze
        {"text": "The Eiffel Tower was built in 1889 by Gustave Eiffel."}

        Returns {"analysisId": "...", "trustScore": 100,
                 "label": "High Confidence", "summary": "1 claims analyzed"}
    """
    return await pipeline.analyze(request.text)


# =============================================================================
# READ ACCESSORS
# =============================================================================

# NOTE: /claim/{claim_id}/evidence has three segments, so it never collides
# with /{analysis_id}/claims or /{analysis_id}/verified-text

@router.get("/claim/{claim_id}/evidence", response_model=ClaimEvidenceResponse)
async def get_claim_evidence(
    claim_id: str,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> ClaimEvidenceResponse:
    """
    Evidence and citation check for a claim, from the most recent analyses.

    Example:
        GET /api/verification/claim/c1/evidence
    """
    try:
        return await pipeline.get_evidence(claim_id)
    except NotFoundError as e:
        raise _not_found(e)


@router.get("/{analysis_id}/claims", response_model=list[ClaimVerificationResult])
async def get_claims(
    analysis_id: str,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> list[ClaimVerificationResult]:
    """Per-claim results of an analysis, in claim order."""
    try:
        return await pipeline.get_claims(analysis_id)
    except NotFoundError as e:
        raise _not_found(e)


@router.get("/{analysis_id}/verified-text", response_model=VerifiedTextResponse)
async def get_verified_text(
    analysis_id: str,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> VerifiedTextResponse:
    """The verified claims as text, plus the claims that were removed."""
    try:
        return await pipeline.get_verified_text(analysis_id)
    except NotFoundError as e:
        raise _not_found(e)
