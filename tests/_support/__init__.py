"""
Test support utilities for migrator tests.

Helpers that don't fit as pytest fixtures but are shared across test
files live in ``tests._support.db``.
"""
