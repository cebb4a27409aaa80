"""
SlideFlix: two-slide crossfade video composition service.
"""

__version__ = "2.0.0"
