"""
Orchestrator module: End-to-end generation with caching and fallback.

Public API:
- GenerationOrchestrator: Cache lookup, selection, primary and fallback dispatch
- get_orchestrator(): Get the global orchestrator
- generate_text(): Generate through the global orchestrator
- list_models(): List catalog entries by capability
- set_availability(): Mark a model available or unavailable
"""

from aihub.orchestrator.generation import (
    GenerationOrchestrator,
    generate_text,
    get_orchestrator,
    list_models,
    set_availability,
)

__all__ = [
    "GenerationOrchestrator",
    "get_orchestrator",
    "generate_text",
    "list_models",
    "set_availability",
]
