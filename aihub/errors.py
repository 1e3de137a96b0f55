"""
Error types raised by the generation pipeline.

- InvalidRequestError: rejected before any cache or network call
- DispatchFailure: one backend call failed; recovered by the orchestrator
- AllProvidersFailedError: primary and fallback both failed; terminal
- CacheUnavailable: key/value store error; always recovered locally
"""


class AIHubError(Exception):
    """Base class for all AI Hub errors."""


class InvalidRequestError(AIHubError):
    """The generation request cannot be processed (e.g. empty prompt)."""


class DispatchFailure(AIHubError):
    """
    A single backend call failed.

    Attributes:
        provider: Provider identifier the call was made against
        model_id: Catalog id (or fallback id) that was dispatched
        status_code: HTTP status when the backend answered, else None
        detail: Human-readable failure description
    """

    def __init__(
        self,
        provider: str,
        model_id: str,
        detail: str,
        status_code: int | None = None,
    ) -> None:
        self.provider = provider
        self.model_id = model_id
        self.detail = detail
        self.status_code = status_code
        status = f" (status {status_code})" if status_code is not None else ""
        super().__init__(f"{provider} dispatch for {model_id} failed{status}: {detail}")


class AllProvidersFailedError(AIHubError):
    """
    Both the primary and the fallback dispatch failed.

    Attributes:
        primary: Failure from the selected model
        fallback: Failure from the fixed fallback model
    """

    def __init__(self, primary: DispatchFailure, fallback: DispatchFailure) -> None:
        self.primary = primary
        self.fallback = fallback
        super().__init__("All available models failed to generate text")


class CacheUnavailable(AIHubError):
    """The key/value store could not be read or written."""
