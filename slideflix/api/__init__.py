"""
HTTP API for SlideFlix.

Exposes the composition pipeline as ``POST /generate-video`` using FastAPI.
"""

# main is not imported here so 'python -m slideflix.api.main' runs cleanly

__all__ = []
