"""
SQLAlchemy model for the analysis_results table.

One row per analyze request. The per-claim results (verdict, confidence,
explanation, evidence) are stored as a JSON array; they are always read and
written together with their analysis.
"""

from datetime import datetime

from sqlalchemy import String, Text, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from claimcheck.database import Base


class AnalysisRecord(Base):
    """A persisted AnalysisResult."""

    __tablename__ = "analysis_results"

    # uuid4 hex, generated by the pipeline
    id: Mapped[str] = mapped_column(String(32), primary_key=True)

    original_text: Mapped[str] = mapped_column(Text)
    trust_score: Mapped[int] = mapped_column(Integer)
    label: Mapped[str] = mapped_column(String(50))

    # list[ClaimVerificationResult] dumped with snake_case keys
    claims: Mapped[list[dict]] = mapped_column(JSON, default=list)

    verified_text: Mapped[str] = mapped_column(Text, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime, index=True)

    def __repr__(self) -> str:
        return f"<AnalysisRecord id={self.id} score={self.trust_score} label={self.label}>"
