"""
SlideFlix Test Suite

This package contains all tests for the SlideFlix project:
- unit/: Unit tests for individual components
- api/: FastAPI routes and error handlers
- integration/: End-to-end encodes against a real ffmpeg
"""
