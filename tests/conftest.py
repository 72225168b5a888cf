"""pytest configuration and shared fixtures."""

import logging

import pytest

from dynkit import Types


@pytest.fixture
def registry():
    """Fresh, empty type registry (keeps the module-level ``types`` untouched)."""
    return Types()


@pytest.fixture
def logger():
    """Dedicated logger so tests can inject it and capture its records."""
    log = logging.getLogger("dynkit.tests")
    log.setLevel(logging.DEBUG)
    return log


@pytest.fixture
def sample_doc():
    """Nested configuration-like document with stringly-typed leaves."""
    return {
        "server": {
            "host": "localhost",
            "ports": ["80", "443"],
        },
        "limits": {"rate": "2.5", "burst": 10},
        "flags": ["true", "0", "F"],
    }
