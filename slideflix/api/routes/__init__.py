"""
SlideFlix API Routes
"""

from . import health, videos

__all__ = ['health', 'videos']
