"""
Pytest configuration and fixtures for dead link monitor tests.
"""

import logging
import os

import pytest
from hypothesis import HealthCheck, settings, Verbosity

# Configure Hypothesis for faster test runs
# The autouse environment fixture is function scoped; it holds no per-example state
SUPPRESSED = [HealthCheck.function_scoped_fixture]

settings.register_profile(
    "fast", max_examples=10, deadline=5000, verbosity=Verbosity.quiet, suppress_health_check=SUPPRESSED
)
settings.register_profile(
    "thorough", max_examples=100, deadline=30000, verbosity=Verbosity.normal, suppress_health_check=SUPPRESSED
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "fast"))


ENV_PREFIX = "DEAD_LINK_"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep configuration overrides from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
    yield


def pytest_configure(config):
    """Configure pytest with custom settings."""
    logging.getLogger("dead_link_monitor").setLevel(logging.DEBUG)
    logging.getLogger("business").setLevel(logging.DEBUG)
    logging.getLogger("hypothesis").setLevel(logging.WARNING)


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Mark property-based tests
        if "properties" in item.fspath.basename:
            item.add_marker(pytest.mark.property)

        if "integration" in item.fspath.basename:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
