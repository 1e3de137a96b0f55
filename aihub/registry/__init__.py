"""
Registry module: Model catalog and descriptor metadata.

Public API:
- ModelProvider: Enum for inference providers
- ModelCapability: Enum of known capability tags
- ModelDescriptor: Immutable catalog entry
- ModelCatalog: Catalog with lookup, capability listing and availability updates
- get_model_catalog: Singleton accessor function
"""

from aihub.registry.models import (
    DEFAULT_MODEL_ID,
    ModelCapability,
    ModelCatalog,
    ModelDescriptor,
    ModelProvider,
    default_descriptors,
    get_model_catalog,
)

__all__ = [
    "DEFAULT_MODEL_ID",
    "ModelProvider",
    "ModelCapability",
    "ModelDescriptor",
    "ModelCatalog",
    "default_descriptors",
    "get_model_catalog",
]
