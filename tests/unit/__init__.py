"""
Unit Tests

Tests for individual components and functions:
- filter_graph.py: crossfade graph construction and serialization
- encoder.py: process lifecycle, timeouts and diagnostics
- service.py: orchestration and workspace cleanup
"""
