"""
Integration Tests

Tests that run the whole pipeline with a real ffmpeg binary:
- crossfade output duration and geometry
- logo overlay and logo degradation
- timeout handling and workspace cleanup
"""
