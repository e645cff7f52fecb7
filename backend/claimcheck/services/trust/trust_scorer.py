"""
Trust Scorer Service.

WHAT THIS DOES:
Aggregates the per-claim verdicts of a passage into one 0-100 trust score
and a label.

CENTERED FORMULA (default):
    points: VERIFIED +1, UNCERTAIN +0.5, HALLUCINATED -0.5
    raw    = sum(points) / max(1, n) × 100
    final  = clamp(0, 100, 50 + raw / 2)

    A passage with no claims sits at 50. All-VERIFIED reaches 100;
    all-HALLUCINATED drops to 25.

    label (on the unrounded final score):
        > 75  High Confidence
        ≥ 50  Moderate Confidence
        ≥ 25  Review Recommended (an all-HALLUCINATED passage lands here)
        else  High Risk

LEGACY FORMULA (SCORING_MODE=legacy):
    points: VERIFIED +1, UNCERTAIN +0.5, anything else -1
    final  = clamp(0, 100, sum(points) / max(1, n) × 100)
    label: > 75 High Confidence, > 40 Review Recommended, else High Risk

USAGE:
    scorer = TrustScorer()
    result = scorer.score(claim_results)
    print(result.score, result.label)
"""

import logging
import math
from dataclasses import dataclass

from claimcheck.config import Settings, get_settings
from claimcheck.models.schemas import ClaimVerificationResult, TrustLabel, Verdict

logger = logging.getLogger(__name__)

CENTERED_POINTS = {
    Verdict.VERIFIED: 1.0,
    Verdict.UNCERTAIN: 0.5,
    Verdict.HALLUCINATED: -0.5,
}

LEGACY_POINTS = {
    Verdict.VERIFIED: 1.0,
    Verdict.UNCERTAIN: 0.5,
    Verdict.HALLUCINATED: -1.0,
}

SCORING_MODES = ("centered", "legacy")


@dataclass
class TrustScore:
    """Passage-level score."""

    score: int
    label: TrustLabel
    final_score: float
    """Unrounded score the label was derived from."""


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def centered_label(final_score: float) -> TrustLabel:
    if final_score > 75:
        return TrustLabel.HIGH_CONFIDENCE
    if final_score >= 50:
        return TrustLabel.MODERATE_CONFIDENCE
    if final_score >= 25:
        return TrustLabel.REVIEW_RECOMMENDED
    return TrustLabel.HIGH_RISK


def legacy_label(final_score: float) -> TrustLabel:
    if final_score > 75:
        return TrustLabel.HIGH_CONFIDENCE
    if final_score > 40:
        return TrustLabel.REVIEW_RECOMMENDED
    return TrustLabel.HIGH_RISK


class TrustScorer:
    """
    Computes the trust score of a passage.

    Pipeline position:
    ClaimVerifier results → [TrustScorer] → AnalysisResult
    """

    def __init__(self, settings: Settings | None = None, mode: str | None = None):
        settings = settings or get_settings()
        self.mode = mode or settings.scoring_mode
        if self.mode not in SCORING_MODES:
            raise ValueError(f"Unknown scoring mode: {self.mode!r} (expected one of {SCORING_MODES})")

    def score(self, results: list[ClaimVerificationResult]) -> TrustScore:
        """
        Score a list of claim results (may be empty).

        Returns:
            TrustScore with the rounded score, label and unrounded final score
        """
        if self.mode == "legacy":
            trust = self._score_legacy(results)
        else:
            trust = self._score_centered(results)

        logger.info(
            f"Trust score ({self.mode}): {trust.score} '{trust.label.value}' "
            f"over {len(results)} claims"
        )
        return trust

    def _score_centered(self, results: list[ClaimVerificationResult]) -> TrustScore:
        total = sum(CENTERED_POINTS[r.verdict] for r in results)
        raw_percentage = total / max(1, len(results)) * 100
        final_score = _clamp(50 + raw_percentage / 2)

        return TrustScore(
            score=math.floor(final_score + 0.5),
            label=centered_label(final_score),
            final_score=final_score,
        )

    def _score_legacy(self, results: list[ClaimVerificationResult]) -> TrustScore:
        total = sum(LEGACY_POINTS[r.verdict] for r in results)
        final_score = _clamp(total / max(1, len(results)) * 100)

        return TrustScore(
            score=math.floor(final_score + 0.5),
            label=legacy_label(final_score),
            final_score=final_score,
        )


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def calculate_trust_score(results: list[ClaimVerificationResult]) -> TrustScore:
    """
    Convenience function to score claim results with the configured mode.
    """
    scorer = TrustScorer()
    return scorer.score(results)
