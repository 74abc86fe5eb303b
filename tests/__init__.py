"""
Test suite for the surebet engine.

This package contains tests for all modules including:
- Surebet stake distribution tests
- Calculator reducer and session tests
- Key-value database layer tests
- Saved bet and share link tests
- Validation module tests
- Type safety tests
"""
