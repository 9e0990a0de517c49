"""Unit tests for tailoring configuration."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.tailoring.config import (
    DEFAULT_RULES_DIR,
    TailoringConfig,
    get_tailoring_config,
    reset_tailoring_config,
)

# Keys to remove for isolated tests
ENV_KEYS_TO_REMOVE = [
    "TAILORING_LLM_PROVIDER",
    "TAILORING_LLM_MODEL",
    "TAILORING_LLM_API_KEY",
    "TAILORING_LLM_BASE_URL",
    "TAILORING_LLM_REASONING_EFFORT",
    "TAILORING_RULES_DIR",
    "TAILORING_MAX_KEYWORDS_PER_BULLET",
]


@pytest.fixture
def isolated_env():
    """Remove tailoring env vars for isolated testing."""
    # Save original values
    saved = {k: os.environ.pop(k, None) for k in ENV_KEYS_TO_REMOVE}
    reset_tailoring_config()
    yield
    # Restore original values
    for k, v in saved.items():
        if v is not None:
            os.environ[k] = v
        elif k in os.environ:
            del os.environ[k]
    reset_tailoring_config()


class TestTailoringConfig:
    """Tests for TailoringConfig settings."""

    def teardown_method(self):
        """Reset config singleton after each test."""
        reset_tailoring_config()

    def test_default_values(self, isolated_env):
        """Test default configuration values."""
        config = TailoringConfig(_env_file=None)

        # LLM settings
        assert config.llm_provider == "openai"
        assert config.llm_model == "gpt-4o"
        assert config.llm_api_key is None
        assert config.llm_reasoning_effort is None
        assert config.llm_max_retries == 1

        # Rule set
        assert config.rules_dir == DEFAULT_RULES_DIR
        assert (config.rules_dir / "impact.yaml").exists()
        assert config.max_condition_depth == 8

        # Compilation
        assert config.max_keywords_per_bullet == 2
        assert config.why_fit_max_bullets == 4
        assert config.pure_ai_token_estimate == 12000

    def test_rules_dir_accepts_string(self, isolated_env):
        config = TailoringConfig(_env_file=None, rules_dir="custom/rules")

        assert config.rules_dir == Path("custom/rules")

    def test_env_overrides(self, isolated_env):
        """Environment variables with the TAILORING_ prefix override defaults."""
        with patch.dict(
            os.environ,
            {
                "TAILORING_LLM_PROVIDER": "anthropic",
                "TAILORING_MAX_KEYWORDS_PER_BULLET": "3",
                "TAILORING_RULES_DIR": "/tmp/rules",
            },
        ):
            config = TailoringConfig(_env_file=None)

        assert config.llm_provider == "anthropic"
        assert config.max_keywords_per_bullet == 3
        assert config.rules_dir == Path("/tmp/rules")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"llm_timeout": 0},
            {"llm_max_retries": -1},
            {"max_condition_depth": 0},
            {"max_keywords_per_bullet": -1},
        ],
    )
    def test_rejects_out_of_range_values(self, isolated_env, overrides):
        with pytest.raises(ValidationError):
            TailoringConfig(_env_file=None, **overrides)


class TestTailoringConfigSingleton:
    """Tests for the config singleton helpers."""

    def teardown_method(self):
        reset_tailoring_config()

    def test_get_returns_same_instance(self, isolated_env):
        assert get_tailoring_config() is get_tailoring_config()

    def test_reset_creates_new_instance(self, isolated_env):
        first = get_tailoring_config()
        reset_tailoring_config()

        assert get_tailoring_config() is not first
