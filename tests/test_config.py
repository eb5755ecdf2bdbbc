"""
Unit tests for startup configuration (no environment mutation needed).
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import dataclasses

import pytest

from config import (
    CAUSALITY_TEMPERATURE,
    INTERACTION_TEMPERATURE,
    GatewayConfig,
    is_api_key_configured,
    load_config,
)


def test_missing_key():
    assert is_api_key_configured({}) is False
    assert is_api_key_configured({"ANTHROPIC_API_KEY": ""}) is False
    assert is_api_key_configured({"ANTHROPIC_API_KEY": "   "}) is False


def test_present_key():
    assert is_api_key_configured({"ANTHROPIC_API_KEY": "sk-ant-test"}) is True


def test_model_override():
    cfg = load_config({"ANTHROPIC_API_KEY": "k", "ICSR_MODEL": "claude-test"})
    assert cfg.model == "claude-test"
    assert cfg.api_key == "k"


def test_config_is_immutable():
    cfg = GatewayConfig(api_key="k")
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.api_key = "other"


def test_task_temperatures():
    assert CAUSALITY_TEMPERATURE == 0.2
    assert INTERACTION_TEMPERATURE == 0.3


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-q"]))
