"""
Analysis Store — Persistence for AnalysisResult records.

WHAT THIS DOES:
Saves each finished analysis as one row and reads it back as an immutable
AnalysisResult. Used by the AnalysisPipeline for both the write at the end
of analyze() and the read accessors behind the GET endpoints.

Records are never updated: re-analysing a passage creates a new record.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claimcheck.models.analysis import AnalysisRecord
from claimcheck.models.schemas import AnalysisResult, ClaimVerificationResult

logger = logging.getLogger(__name__)


class AnalysisStore:
    """
    Service for analysis storage operations.

    Handles:
    - Saving a finished analysis (single write)
    - Retrieving an analysis by id
    - Listing the most recent analyses (newest first)
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, result: AnalysisResult) -> AnalysisResult:
        """Persist an analysis. Returns the same result for chaining."""
        record = AnalysisRecord(
            id=result.id,
            original_text=result.original_text,
            trust_score=result.trust_score,
            label=result.label.value,
            claims=[claim.model_dump(mode="json") for claim in result.claims],
            verified_text=result.verified_text,
            created_at=result.created_at,
        )
        self.db.add(record)
        await self.db.commit()

        logger.info(f"Saved analysis {result.id} ({len(result.claims)} claims)")
        return result

    async def get(self, analysis_id: str) -> AnalysisResult | None:
        """Get an analysis by id, or None if it doesn't exist."""
        record = await self.db.get(AnalysisRecord, analysis_id)
        if record is None:
            return None
        return self._to_result(record)

    async def recent(self, limit: int = 50) -> list[AnalysisResult]:
        """The `limit` most recently created analyses, newest first."""
        result = await self.db.execute(
            select(AnalysisRecord)
            .order_by(AnalysisRecord.created_at.desc())
            .limit(limit)
        )
        return [self._to_result(record) for record in result.scalars()]

    def _to_result(self, record: AnalysisRecord) -> AnalysisResult:
        return AnalysisResult(
            id=record.id,
            original_text=record.original_text,
            trust_score=record.trust_score,
            label=record.label,
            claims=[ClaimVerificationResult.model_validate(c) for c in record.claims or []],
            verified_text=record.verified_text or "",
            created_at=record.created_at,
        )
