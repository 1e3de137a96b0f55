"""
AI Hub: Provider Selection and Resilient Dispatch

Chooses the best backend model for a text-generation request from a
heterogeneous catalog, serves cached results when permitted, dispatches
to the chosen provider and retries once against a fixed fallback backend.
"""

__version__ = "0.1.0"
