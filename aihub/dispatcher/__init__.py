"""
Dispatcher module: Provider-specific chat-completion calls.

Key exports:
- TokenUsage: Token consumption tracking for cost estimation
- DispatchResult: Generated text with call metadata
- ProviderClients: Lazy-initialized async SDK clients
- get_clients(): Get the global provider clients instance
- build_messages(): Chat message list for a prompt/system pair
- dispatch(): Call the backend serving a catalog descriptor
- dispatch_model_id(): Call a backend named by "<provider>/<model>"
"""

from aihub.dispatcher.handlers import (
    # Data classes
    TokenUsage,
    DispatchResult,
    # Provider clients
    ProviderClients,
    get_clients,
    # Dispatch functions
    build_messages,
    dispatch,
    dispatch_model_id,
)

__all__ = [
    "TokenUsage",
    "DispatchResult",
    "ProviderClients",
    "get_clients",
    "build_messages",
    "dispatch",
    "dispatch_model_id",
]
