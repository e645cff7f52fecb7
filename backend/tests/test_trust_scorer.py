"""
Tests for passage-level trust scoring.

Run with: pytest backend/tests/test_trust_scorer.py -v
"""

import pytest

from claimcheck.models.schemas import TrustLabel, Verdict
from claimcheck.services.trust.trust_scorer import TrustScorer, centered_label, legacy_label

from conftest import make_result

V, U, H = Verdict.VERIFIED, Verdict.UNCERTAIN, Verdict.HALLUCINATED


def results_for(*verdicts):
    return [make_result(f"c{i + 1}", f"claim {i + 1}", v) for i, v in enumerate(verdicts)]


@pytest.mark.parametrize("verdicts,score,label", [
    ((), 50, TrustLabel.MODERATE_CONFIDENCE),
    ((V, V, V), 100, TrustLabel.HIGH_CONFIDENCE),
    ((H, H), 25, TrustLabel.REVIEW_RECOMMENDED),
    ((U, U), 75, TrustLabel.MODERATE_CONFIDENCE),
    ((V, H), 63, TrustLabel.MODERATE_CONFIDENCE),
    ((V, U, U), 83, TrustLabel.HIGH_CONFIDENCE),
    ((U, H), 50, TrustLabel.MODERATE_CONFIDENCE),
    ((H, H, U), 42, TrustLabel.REVIEW_RECOMMENDED),
])
def test_centered_scoring(settings, verdicts, score, label):
    trust = TrustScorer(settings).score(results_for(*verdicts))

    assert trust.score == score
    assert trust.label == label


def test_all_hallucinated_is_review_recommended_not_high_risk(settings):
    trust = TrustScorer(settings).score(results_for(H))

    assert trust.final_score == 25
    assert trust.label == TrustLabel.REVIEW_RECOMMENDED


def test_label_uses_unrounded_score(settings):
    # 62.5 rounds up to 63 but the label comes from 62.5
    trust = TrustScorer(settings).score(results_for(V, H))

    assert trust.final_score == 62.5
    assert trust.score == 63


@pytest.mark.parametrize("final_score,label", [
    (100, TrustLabel.HIGH_CONFIDENCE),
    (75.1, TrustLabel.HIGH_CONFIDENCE),
    (75, TrustLabel.MODERATE_CONFIDENCE),
    (50, TrustLabel.MODERATE_CONFIDENCE),
    (49.9, TrustLabel.REVIEW_RECOMMENDED),
    (30, TrustLabel.REVIEW_RECOMMENDED),
    (25, TrustLabel.REVIEW_RECOMMENDED),
    (24.9, TrustLabel.HIGH_RISK),
    (0, TrustLabel.HIGH_RISK),
])
def test_centered_label_boundaries(final_score, label):
    assert centered_label(final_score) == label


@pytest.mark.parametrize("verdicts,score,label", [
    ((), 0, TrustLabel.HIGH_RISK),
    ((V, V), 100, TrustLabel.HIGH_CONFIDENCE),
    ((V, U), 75, TrustLabel.REVIEW_RECOMMENDED),
    ((U,), 50, TrustLabel.REVIEW_RECOMMENDED),
    ((V, V, H), 33, TrustLabel.HIGH_RISK),
    ((H, H), 0, TrustLabel.HIGH_RISK),
])
def test_legacy_scoring(settings, verdicts, score, label):
    trust = TrustScorer(settings, mode="legacy").score(results_for(*verdicts))

    assert trust.score == score
    assert trust.label == label


def test_legacy_label_has_no_moderate_band():
    assert legacy_label(60) == TrustLabel.REVIEW_RECOMMENDED
    assert legacy_label(40) == TrustLabel.HIGH_RISK


def test_mode_comes_from_settings(settings):
    settings.scoring_mode = "legacy"

    assert TrustScorer(settings).mode == "legacy"


def test_unknown_mode_is_rejected(settings):
    with pytest.raises(ValueError):
        TrustScorer(settings, mode="harmonic")
