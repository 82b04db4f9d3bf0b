"""
Integration Test Configuration

Live tests call the real provider and need OPENAI_API_KEY. They are skipped
when the key is absent and, when marked slow, in CI (CI=true).
"""

import os

import pytest


@pytest.fixture
def is_ci_environment() -> bool:
    return os.getenv("CI", "").lower() == "true"


@pytest.fixture(autouse=True)
def skip_slow_tests_in_ci(request, is_ci_environment):
    if is_ci_environment and request.node.get_closest_marker("slow"):
        pytest.skip("Skipping slow test in CI environment")


@pytest.fixture
def openai_api_key() -> str:
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        pytest.skip("OPENAI_API_KEY not set")
    return key
