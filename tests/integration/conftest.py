"""
Integration test configuration.

Flows marked ``@pytest.mark.slow`` wait through real retry backoff; they
are skipped when CI=true.
"""

import os

import pytest


def running_in_ci() -> bool:
    return os.getenv("CI", "").lower() == "true"


@pytest.fixture(autouse=True)
def skip_slow_flows_in_ci(request):
    if running_in_ci() and request.node.get_closest_marker("slow"):
        pytest.skip("Real-clock backoff flows are skipped in CI")
