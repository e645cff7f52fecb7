"""
Pydantic schemas for verification results and API request/response bodies.

FLOW OVERVIEW:
==============
1. User sends AnalyzeRequest to POST /api/verification/analyze
2. ClaimExtractor splits the text into Claim objects (c1..cN)
3. ClaimVerifier produces one ClaimVerificationResult per claim
4. TrustScorer turns the verdicts into a trust score + label
5. The AnalysisResult is persisted and an AnalysisSummary is returned

All API-facing models serialize with camelCase aliases (claimId, trustScore,
...) while Python code uses snake_case attribute names.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads/writes camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# ENUMS
# =============================================================================

class Verdict(str, Enum):
    """Outcome of checking one claim against evidence."""

    VERIFIED = "VERIFIED"
    UNCERTAIN = "UNCERTAIN"
    HALLUCINATED = "HALLUCINATED"


class EvidenceVerdict(str, Enum):
    """The matcher's judgment of one evidence snippet, as displayed."""

    SUPPORTS = "Supports claim"
    CONTRADICTS = "Contradicts claim"
    RELATED = "Related content"
    NO_MATCH = "No match found"


class TrustLabel(str, Enum):
    """Passage-level label derived from the trust score."""

    HIGH_CONFIDENCE = "High Confidence"
    MODERATE_CONFIDENCE = "Moderate Confidence"
    REVIEW_RECOMMENDED = "Review Recommended"
    HIGH_RISK = "High Risk"


# =============================================================================
# VERIFICATION SCHEMAS
# =============================================================================
#
# WHEN USED:
# - Claim: Created by ClaimExtractor, consumed by ClaimVerifier
# - EvidenceItem: Appended by ClaimVerifier for every source it consults
# - ClaimVerificationResult: Output of ClaimVerifier, stored inside AnalysisResult
# - AnalysisResult: One persisted record per analyze request
#

class Claim(CamelModel):
    """
    One atomic factual assertion extracted from a passage.

    Example:
        Claim(id="c1", text="The Eiffel Tower was built in 1889")
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Position-based identifier (c1, c2, ...)")
    text: str


class EvidenceItem(CamelModel):
    """
    A source consulted for a claim plus the matcher's judgment of it.

    `source` is a display name and may embed the page title
    (e.g. "Wikipedia: Eiffel Tower").
    """

    model_config = ConfigDict(frozen=True)

    source: str
    verdict: EvidenceVerdict
    url: str | None = None


class ClaimVerificationResult(CamelModel):
    """
    Verdict for a single claim, with the evidence that led to it.

    The evidence list is never empty in a final result: when no source
    could be consulted, a placeholder entry explains that.
    """

    model_config = ConfigDict(frozen=True)

    claim_id: str = Field(description="The claim id this result belongs to")
    text: str
    verdict: Verdict
    confidence: int = Field(ge=0, le=100)
    explanation: str
    evidence: list[EvidenceItem] = Field(min_length=1)


class AnalysisResult(CamelModel):
    """
    The persisted outcome of one analyze request.

    Never mutated after creation; re-analysis produces a new record.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    original_text: str
    trust_score: int = Field(ge=0, le=100)
    label: TrustLabel
    claims: list[ClaimVerificationResult] = Field(default_factory=list)
    verified_text: str = ""
    created_at: datetime


# =============================================================================
# API SCHEMAS
# =============================================================================

class AnalyzeRequest(BaseModel):
    """
    Request body for POST /api/verification/analyze.

    Example:
        {"text": "The Eiffel Tower was built in 1889 by Gustave Eiffel."}
    """

    text: str = Field(min_length=1, description="The passage to verify")


class AnalysisSummary(CamelModel):
    """Response of POST /api/verification/analyze."""

    analysis_id: str
    trust_score: int
    label: TrustLabel
    summary: str


class VerifiedTextResponse(CamelModel):
    """Response of GET /api/verification/{id}/verified-text."""

    verified_text: str
    removed_claims: list[str]


class CitationCheck(BaseModel):
    """Whether a claim's citation exists and holds up."""

    exists: bool
    valid: bool
    reason: str


class ClaimEvidenceResponse(CamelModel):
    """Response of GET /api/verification/claim/{claim_id}/evidence."""

    claim_id: str
    status: Verdict
    evidence: list[EvidenceItem]
    citation_check: CitationCheck
