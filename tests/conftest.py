"""
Pytest fixtures and config.
"""

import sys

import hypothesis
import pytest

from crtchallenge import Challenge


IS_PYPY = hasattr(sys, "pypy_version_info")

# pypy can take a while to generate data, so don't fail the test due to health checks.
if IS_PYPY:
    base_settings = hypothesis.settings(
        suppress_health_check=(hypothesis.HealthCheck.too_slow,)
    )
else:
    base_settings = hypothesis.settings()
hypothesis.settings.register_profile("dev", parent=base_settings, max_examples=10)
hypothesis.settings.register_profile("ci", parent=base_settings, max_examples=100)


@pytest.fixture(scope="session")
def secret() -> bytes:
    return b"topsecret"


@pytest.fixture
def example_challenge() -> Challenge:
    return Challenge(
        unique_data=bytes(20),
        valid_from=1000,
        valid_to=2000,
        fingerprint=bytes(6),
        server_name="srv",
        user_name="alice",
    )


@pytest.fixture
def serialized_challenge(example_challenge: Challenge, secret: bytes) -> bytes:
    return example_challenge.serialize(secret)
