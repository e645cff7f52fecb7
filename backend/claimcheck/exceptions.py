"""
Error taxonomy.

Provider errors never leave the component that owns the fallback tier:
the entity extractor, matcher and claim extractor catch them and switch to
their deterministic path. NotFoundError is the only error surfaced to API
callers as a distinct condition; anything else becomes a generic 500.
"""


class ClaimCheckError(Exception):
    """Base class for all service errors."""


class ProviderError(ClaimCheckError):
    """An external provider (AI, encyclopedia, search) could not be used."""


class ProviderUnavailableError(ProviderError):
    """Network failure, timeout, non-2xx status or missing credential."""


class MalformedResponseError(ProviderError):
    """The provider answered, but not in the expected shape."""


class NotFoundError(ClaimCheckError):
    """Requested analysis or claim does not exist in the store."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")
