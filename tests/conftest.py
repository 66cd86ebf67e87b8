import logging

import pytest

from realtime_broker.auth.jwt_verifier import reset_jwt_verifier


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


@pytest.fixture(autouse=True)
def reset_verifier():
    reset_jwt_verifier()
    yield
    reset_jwt_verifier()


@pytest.fixture
def jwt_env(monkeypatch):
    """Provide JWT signing configuration through the environment."""
    values = {
        "BFF_JWT_SECRET": "unit-test-secret-0123456789abcdef-xyz",
        "BFF_JWT_AUDIENCE": "test-audience",
        "BFF_JWT_ISSUER": "test-issuer",
    }
    for key, value in values.items():
        monkeypatch.setenv(key, value)
    return values
