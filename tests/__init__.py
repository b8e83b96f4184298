# tests/__init__.py
"""
SkyDB test suite

Run:
    pytest
"""
