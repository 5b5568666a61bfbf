"""
ReQL SDK Test Suite.

This package contains:
- unit/: Unit tests (no external dependencies)
- integration/: Submission engine against scripted in-memory transports
- e2e/: End-to-end tests (live server, opt-in)
"""
