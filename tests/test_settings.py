"""
Unit tests for environment-backed settings.
"""

import pytest

from realtime_broker.config.constants import DEFAULT_REALTIME_MODEL, DEFAULT_RESPONSES_MODEL
from realtime_broker.config.settings import (
    OpenAIConfig,
    cors_allow_origin,
    creative_log_path,
    dev_tokens_allowed,
    openai_key_configured,
    relay_auth_required,
)
from realtime_broker.errors import ConfigError


def test_openai_config_defaults():
    config = OpenAIConfig.from_env({"OPENAI_API_KEY": "sk-test"})
    assert config.api_key == "sk-test"
    assert config.realtime_model == DEFAULT_REALTIME_MODEL
    assert config.responses_model == DEFAULT_RESPONSES_MODEL
    assert config.project_id is None


def test_openai_config_overrides():
    config = OpenAIConfig.from_env(
        {
            "OPENAI_API_KEY": "sk-test",
            "OPENAI_REALTIME_MODEL": "rt-model",
            "OPENAI_RESPONSES_MODEL": "resp-model",
            "OPENAI_PROJECT_ID": "proj_1",
        }
    )
    assert config.realtime_model == "rt-model"
    assert config.responses_model == "resp-model"
    assert config.project_id == "proj_1"


def test_openai_config_requires_key():
    with pytest.raises(ConfigError, match="OPENAI_API_KEY"):
        OpenAIConfig.from_env({})


def test_openai_key_configured():
    assert openai_key_configured({"OPENAI_API_KEY": "sk"}) is True
    assert openai_key_configured({"OPENAI_API_KEY": ""}) is False


@pytest.mark.parametrize(
    "env,expected",
    [
        ({}, "*"),
        ({"CORS_ALLOW_ORIGIN": "  "}, "*"),
        ({"CORS_ALLOW_ORIGIN": "https://app.example.com"}, "https://app.example.com"),
    ],
)
def test_cors_allow_origin(env, expected):
    assert cors_allow_origin(env) == expected


@pytest.mark.parametrize(
    "env,expected",
    [
        ({}, True),
        ({"ENVIRONMENT": "staging"}, True),
        ({"ENVIRONMENT": "production"}, False),
        ({"ENVIRONMENT": "production", "BFF_ALLOW_DEV_TOKENS": "true"}, True),
        ({"ENVIRONMENT": "production", "BFF_ALLOW_DEV_TOKENS": "yes"}, False),
    ],
)
def test_dev_tokens_allowed(env, expected):
    assert dev_tokens_allowed(env) is expected


def test_creative_log_path():
    assert creative_log_path({}) == "logs/creative_sandbox.log"
    assert creative_log_path({"CREATIVE_SANDBOX_LOG": "/tmp/c.log"}) == "/tmp/c.log"


@pytest.mark.parametrize(
    "env,expected",
    [
        ({}, False),
        ({"BFF_REQUIRE_AUTH": "true"}, True),
        ({"BFF_REQUIRE_AUTH": "1"}, False),
    ],
)
def test_relay_auth_required(env, expected):
    assert relay_auth_required(env) is expected
