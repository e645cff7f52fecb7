# Database models and API schemas
from claimcheck.models.analysis import AnalysisRecord
from claimcheck.models.schemas import (
    AnalysisResult,
    Claim,
    ClaimVerificationResult,
    EvidenceItem,
    EvidenceVerdict,
    TrustLabel,
    Verdict,
)

__all__ = [
    "AnalysisRecord",
    "AnalysisResult",
    "Claim",
    "ClaimVerificationResult",
    "EvidenceItem",
    "EvidenceVerdict",
    "TrustLabel",
    "Verdict",
]
