"""Fuzz testing for insightengine.

This package contains:
- test_pipeline_property: engine, validator and port over generated documents

Python 3.13+.
"""
