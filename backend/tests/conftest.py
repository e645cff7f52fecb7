"""
Shared fixtures and fakes for the test suite.

Nothing here touches the network: AI calls go through FakeCompletionClient,
evidence sources are replaced by in-memory fakes, and the database is an
in-memory SQLite engine per test.
"""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from claimcheck.config import Settings
from claimcheck.database import Base
from claimcheck.exceptions import ProviderUnavailableError
from claimcheck.models.analysis import AnalysisRecord  # noqa: F401
from claimcheck.models.schemas import (
    Claim,
    ClaimVerificationResult,
    EvidenceItem,
    EvidenceVerdict,
    Verdict,
)
from claimcheck.services.sources.encyclopedia import EncyclopediaSummary
from claimcheck.services.trust.entity_extractor import EntityExtractionResult
from claimcheck.services.trust.semantic_matcher import MatchResult


# =============================================================================
# FAKES
# =============================================================================

class FakeCompletionClient:
    """Returns canned completions in order; raises once they run out."""

    def __init__(self, responses=None, error=None, enabled=True):
        self.responses = list(responses or [])
        self.error = error
        self.enabled = enabled
        self.prompts = []

    async def complete(self, prompt, system=None, max_tokens=300, json_mode=False):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if not self.responses:
            raise ProviderUnavailableError("no canned response left")
        return self.responses.pop(0)


class FakeEncyclopedia:
    """Summaries keyed by entity; `default` answers every other lookup."""

    def __init__(self, summaries=None, default=None):
        self.summaries = summaries or {}
        self.default = default
        self.lookups = []

    async def lookup_summary(self, entity):
        self.lookups.append(entity)
        return self.summaries.get(entity, self.default)

    async def close(self):
        pass


class FakeWebSearch:
    def __init__(self, results=None, enabled=True):
        self.results = results or []
        self.enabled = enabled
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        return list(self.results)

    async def close(self):
        pass


class FakeEntityExtractor:
    def __init__(self, main_entity, search_terms=None):
        self.result = EntityExtractionResult(main_entity, list(search_terms or []))

    async def extract(self, claim):
        return self.result


class FakeMatcher:
    """MatchResult per source label; unknown labels are neutral."""

    def __init__(self, results=None):
        self.results = results or {}
        self.calls = []

    async def match(self, claim, source_content, source_label):
        self.calls.append((claim, source_content, source_label))
        return self.results.get(
            source_label,
            MatchResult(verdict="neutral", confidence=20, explanation="unrelated"),
        )


class FakeClaimExtractor:
    def __init__(self, claims):
        self.claims = list(claims)

    async def extract(self, text):
        return list(self.claims)


class FakeVerifier:
    """
    Verdicts keyed by claim text; optional per-claim delay to shuffle
    completion order.
    """

    def __init__(self, verdicts=None, delays=None, error=None):
        self.verdicts = verdicts or {}
        self.delays = delays or {}
        self.error = error
        self.verified = []

    async def verify(self, claim: Claim) -> ClaimVerificationResult:
        await asyncio.sleep(self.delays.get(claim.text, 0))
        if self.error is not None:
            raise self.error
        self.verified.append(claim.id)
        verdict = self.verdicts.get(claim.text, Verdict.UNCERTAIN)
        return make_result(claim.id, claim.text, verdict)

    async def close(self):
        pass


# =============================================================================
# HELPERS
# =============================================================================

def make_summary(title, extract, url=None):
    return EncyclopediaSummary(
        extract=extract,
        url=url or f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}",
        title=title,
    )


def make_result(claim_id, text, verdict, confidence=None):
    evidence_verdict = {
        Verdict.VERIFIED: EvidenceVerdict.SUPPORTS,
        Verdict.HALLUCINATED: EvidenceVerdict.CONTRADICTS,
        Verdict.UNCERTAIN: EvidenceVerdict.RELATED,
    }[verdict]
    return ClaimVerificationResult(
        claim_id=claim_id,
        text=text,
        verdict=verdict,
        confidence=confidence if confidence is not None else {
            Verdict.VERIFIED: 90,
            Verdict.UNCERTAIN: 40,
            Verdict.HALLUCINATED: 15,
        }[verdict],
        explanation="test result",
        evidence=[EvidenceItem(
            source="Wikipedia: Test",
            verdict=evidence_verdict,
            url="https://en.wikipedia.org/wiki/Test",
        )],
    )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def settings():
    """Settings with every external credential disabled."""
    return Settings(
        _env_file=None,
        openai_api_key="",
        search_api_key="",
        scoring_mode="centered",
        evidence_scan_limit=50,
    )


@pytest.fixture
def disabled_llm():
    return FakeCompletionClient(enabled=False)


@pytest_asyncio.fixture
async def db_session():
    """A session on a fresh in-memory SQLite database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
