"""
Dispatcher Handlers - Provider-specific chat-completion calls.

This module performs the actual API calls to model providers, hiding
provider differences behind a single dispatch interface:
- Groq is called through its own async SDK
- xAI, OpenAI, Anthropic, Mistral and Cohere are called through the
  OpenAI SDK against each provider's OpenAI-compatible endpoint

Every call is exactly one attempt: SDK clients are built with
max_retries=0 and no retry loop lives here. Retrying against another
backend is the orchestrator's job.

Key components:
- TokenUsage: Token consumption reported by the provider
- DispatchResult: Generated text plus call metadata
- ProviderClients: Lazy-initialized async SDK clients
- dispatch(): Call the backend serving a catalog descriptor
- dispatch_model_id(): Call a backend named only by "<provider>/<model>"
"""

import logging
import time
from dataclasses import dataclass, field

import groq
import openai
from groq import AsyncGroq
from openai import AsyncOpenAI

from aihub.config import Settings, get_settings
from aihub.errors import DispatchFailure
from aihub.registry.models import ModelDescriptor, ModelProvider

logger = logging.getLogger(__name__)

# OpenAI-compatible chat-completion endpoints; None means the SDK default.
PROVIDER_BASE_URLS: dict[ModelProvider, str | None] = {
    ModelProvider.OPENAI: None,
    ModelProvider.XAI: "https://api.x.ai/v1",
    ModelProvider.ANTHROPIC: "https://api.anthropic.com/v1/",
    ModelProvider.MISTRAL: "https://api.mistral.ai/v1",
    ModelProvider.COHERE: "https://api.cohere.ai/compatibility/v1",
}


@dataclass
class TokenUsage:
    """
    Token usage reported for a completion.

    Used for cost estimation based on the catalog's per-1K pricing.
    """

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        """Total tokens consumed (input + output)."""
        return self.input_tokens + self.output_tokens


@dataclass
class DispatchResult:
    """
    Result of a successful backend call.

    Attributes:
        text: First choice's message content, verbatim
        model_used: Model id that produced the text
        provider: Provider that executed inference
        latency_ms: Call duration in milliseconds
        tokens: Token usage for cost estimation
    """

    text: str
    model_used: str
    provider: str
    latency_ms: float
    tokens: TokenUsage = field(default_factory=TokenUsage)


class ProviderClients:
    """
    Lazy-initialized provider SDK clients.

    Clients are created on first use so that a provider without a
    configured credential only fails when it is actually dispatched to.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._clients: dict[ModelProvider, AsyncGroq | AsyncOpenAI] = {}

    def for_provider(self, provider: ModelProvider) -> AsyncGroq | AsyncOpenAI:
        """
        Get the client for a provider (lazy initialization).

        Args:
            provider: Provider to obtain a client for

        Returns:
            An async SDK client exposing chat.completions.create().

        Raises:
            DispatchFailure: If the provider's API key is not configured.
        """
        client = self._clients.get(provider)
        if client is not None:
            return client

        api_key = self._settings.api_key_for(provider.value)
        if api_key is None:
            raise DispatchFailure(
                provider=provider.value,
                model_id=provider.value,
                detail=f"{provider.value.upper()}_API_KEY is not configured",
            )

        timeout = self._settings.dispatch_timeout_seconds
        if provider is ModelProvider.GROQ:
            client = AsyncGroq(api_key=api_key, max_retries=0, timeout=timeout)
        else:
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=PROVIDER_BASE_URLS[provider],
                max_retries=0,
                timeout=timeout,
            )

        self._clients[provider] = client
        logger.debug(f"Initialized {provider.value} client")
        return client


# Global client instance (singleton pattern)
_clients: ProviderClients | None = None


def get_clients() -> ProviderClients:
    """
    Get the global provider clients instance.

    Returns:
        The singleton ProviderClients instance.
    """
    global _clients
    if _clients is None:
        _clients = ProviderClients()
    return _clients


def build_messages(prompt: str, system: str | None = None) -> list[dict[str, str]]:
    """
    Build the chat message list: optional system message, then the prompt.

    Args:
        prompt: User prompt
        system: Optional system instruction

    Returns:
        Ordered list of {"role", "content"} messages.
    """
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages


def _extract_text(response) -> str | None:
    """Return the first choice's content, or None if the body is malformed."""
    choices = getattr(response, "choices", None)
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str):
        return None
    return content


def _extract_usage(response) -> TokenUsage:
    usage = getattr(response, "usage", None)
    if usage is None:
        return TokenUsage()
    return TokenUsage(
        input_tokens=usage.prompt_tokens or 0,
        output_tokens=usage.completion_tokens or 0,
    )


async def _chat_completion(
    provider: ModelProvider,
    model_id: str,
    api_model_name: str,
    prompt: str,
    system: str | None,
) -> DispatchResult:
    """
    Perform one chat-completion call and normalize the outcome.

    Raises:
        DispatchFailure: On non-2xx status, network error or malformed body.
    """
    clients = get_clients()
    start_time = time.perf_counter()

    try:
        client = clients.for_provider(provider)
        response = await client.chat.completions.create(
            model=api_model_name,
            messages=build_messages(prompt, system),
        )
    except DispatchFailure as e:
        raise DispatchFailure(
            provider=provider.value, model_id=model_id, detail=e.detail
        ) from e
    except (openai.APIStatusError, groq.APIStatusError) as e:
        raise DispatchFailure(
            provider=provider.value,
            model_id=model_id,
            detail=e.message,
            status_code=e.status_code,
        ) from e
    except (openai.APIError, groq.APIError) as e:
        raise DispatchFailure(
            provider=provider.value, model_id=model_id, detail=str(e)
        ) from e

    latency_ms = (time.perf_counter() - start_time) * 1000

    text = _extract_text(response)
    if text is None:
        raise DispatchFailure(
            provider=provider.value,
            model_id=model_id,
            detail="Response contained no completion choice",
        )

    logger.info(
        f"{provider.value} dispatch completed: model={model_id}, "
        f"latency={latency_ms:.0f}ms"
    )

    return DispatchResult(
        text=text,
        model_used=model_id,
        provider=provider.value,
        latency_ms=latency_ms,
        tokens=_extract_usage(response),
    )


async def dispatch(
    model: ModelDescriptor, prompt: str, system: str | None = None
) -> DispatchResult:
    """
    Dispatch a prompt to the backend serving a catalog model.

    Args:
        model: Catalog descriptor; the id suffix is the API model name.
        prompt: User prompt.
        system: Optional system instruction.

    Returns:
        DispatchResult with the generated text.

    Raises:
        DispatchFailure: If the single attempt fails.
    """
    logger.info(f"Dispatching to {model.id} via {model.provider.value}")
    return await _chat_completion(
        model.provider, model.id, model.api_model_name, prompt, system
    )


async def dispatch_model_id(
    model_id: str, prompt: str, system: str | None = None
) -> DispatchResult:
    """
    Dispatch a prompt to a backend named by "<provider>/<modelName>".

    Used for the fixed fallback target, which need not be a catalog entry.

    Args:
        model_id: Provider-qualified model id (e.g. "xai/grok-1").
        prompt: User prompt.
        system: Optional system instruction.

    Returns:
        DispatchResult with the generated text.

    Raises:
        DispatchFailure: If the id names an unknown provider or the call fails.
    """
    provider_name, _, api_model_name = model_id.partition("/")
    try:
        provider = ModelProvider(provider_name)
    except ValueError:
        logger.error(f"Unknown provider: {provider_name}")
        raise DispatchFailure(
            provider=provider_name,
            model_id=model_id,
            detail=f"Unknown provider: {provider_name}",
        ) from None

    logger.info(f"Dispatching to {model_id} via {provider.value}")
    return await _chat_completion(provider, model_id, api_model_name, prompt, system)
