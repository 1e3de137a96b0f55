"""
Router module: Model selection for generation requests.

Public API:
- FallbackStrategy: Ordering applied after filtering
- SelectionPreferences: Caller preferences for a request
- select_model(): Pure selection over a catalog snapshot
- select_for(): Selection against the global catalog
"""

from aihub.router.engine import (
    FallbackStrategy,
    SelectionPreferences,
    select_for,
    select_model,
)

__all__ = [
    "FallbackStrategy",
    "SelectionPreferences",
    "select_model",
    "select_for",
]
