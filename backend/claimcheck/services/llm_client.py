"""
AI Completion Client.

WHAT THIS DOES:
Thin wrapper around the OpenAI chat completions API: prompt in, text out.
Every AI-assisted component (entity extraction, semantic matching, claim
extraction) goes through this one client.

FAILURE MODEL:
- No API key configured      → ProviderUnavailableError (no request is made)
- Timeout / network / non-2xx → ProviderUnavailableError
- Empty completion            → MalformedResponseError
- JSON helpers below          → MalformedResponseError on anything unparseable

Callers catch ProviderError and switch to their deterministic fallback.
There are no retries: the client is built with max_retries=0 so each step
costs at most one request.

USAGE:
    client = CompletionClient()
    text = await client.complete("Return JSON ...", json_mode=True)
    data = parse_json_object(text)
"""

import json
import logging
import re

from openai import AsyncOpenAI, OpenAIError

from claimcheck.config import Settings, get_settings
from claimcheck.exceptions import MalformedResponseError, ProviderUnavailableError

logger = logging.getLogger(__name__)

# ```json ... ``` or ``` ... ``` wrapping, as models like to add
CODE_FENCE_PATTERN = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


class CompletionClient:
    """
    Async text-completion client with a bounded timeout.

    The underlying AsyncOpenAI client can be injected (tests pass a fake).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: AsyncOpenAI | None = None,
    ):
        settings = settings or get_settings()
        self.model = settings.openai_model
        self.timeout = settings.ai_timeout

        self._client = client
        if self._client is None and settings.openai_api_key:
            self._client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=self.timeout,
                max_retries=0,
            )

    @property
    def enabled(self) -> bool:
        """True when an API key (or injected client) is available."""
        return self._client is not None

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int = 300,
        json_mode: bool = False,
    ) -> str:
        """
        Send one completion request and return the raw text.

        Args:
            prompt: User message content
            system: Optional system message
            max_tokens: Upper bound on the completion length
            json_mode: Ask the API for a JSON object response

        Raises:
            ProviderUnavailableError: not configured, timed out, or failed
            MalformedResponseError: the completion was empty
        """
        if self._client is None:
            raise ProviderUnavailableError("OpenAI API key not configured")

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.1,
                max_tokens=max_tokens,
                timeout=self.timeout,
                **kwargs,
            )
        except OpenAIError as e:
            raise ProviderUnavailableError(f"Completion request failed: {e}") from e

        if not response.choices:
            raise MalformedResponseError("Completion returned no choices")

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise MalformedResponseError("Completion returned empty content")

        return content


# =============================================================================
# JSON HELPERS
# =============================================================================

def strip_code_fences(text: str) -> str:
    """
    Remove a markdown code fence wrapping the whole response, if any.

    Example:
        strip_code_fences('```json\\n{"a": 1}\\n```')  # '{"a": 1}'
    """
    match = CODE_FENCE_PATTERN.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_json_object(text: str) -> dict:
    """
    Parse a completion as a JSON object, tolerating code fences.

    Raises:
        MalformedResponseError: not JSON, or JSON but not an object
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(data).__name__}")

    return data
