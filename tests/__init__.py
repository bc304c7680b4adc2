"""
Test utilities package.

Prefer per-test monkeypatch/fixtures over global patching.
"""
