"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .backend_factory import BackendTestFactory, CountingFetcher

__all__ = ["BackendTestFactory", "CountingFetcher"]
