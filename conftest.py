"""Pytest configuration and fixtures for hopscp tests.

CRITICAL: Keeps the developer's real connection settings out of tests.
"""

import pytest

# Environment variables the hopscp CLI reads
HOPSCP_ENV_VARS = (
    "ACTION_TIMEOUT",
    "TIMEOUT",
    "DIRECTION",
    "HOST",
    "PORT",
    "USERNAME",
    "KEY",
    "FINGERPRINT",
    "PROXY_HOST",
    "PROXY_PORT",
    "PROXY_USERNAME",
    "PROXY_KEY",
    "PROXY_FINGERPRINT",
    "SOURCE",
    "TARGET",
    "HOPSCP_CONFIG",
)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Clear hopscp settings from the environment for every test.

    A developer shell (or CI job) exporting HOST, KEY, SOURCE etc. would
    otherwise leak real hosts and keys into CLI tests.
    """
    for name in HOPSCP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
