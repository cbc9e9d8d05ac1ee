"""Tests for config loading and validation."""

import pytest

from job_tracker.config import AppConfig, BatchConfig, LLMConfig, StorageConfig, load_config


class TestConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.llm.model == "claude-haiku-4-5-20251001"
        assert config.llm.max_tokens == 1000
        assert config.imports.default_year is None
        assert config.imports.default_title == "Software Engineer"
        assert config.batch.batch_size == 3
        assert config.batch.delay_seconds == 2.0

    def test_load_config_defaults(self, tmp_path):
        """Loading from non-existent path returns defaults."""
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config.llm.timeout == 120

    def test_load_config_from_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            "llm:\n  model: test-model\nimport:\n  default_year: 2024\nbatch:\n  batch_size: 5\n"
        )
        config = load_config(yaml_path)
        assert config.llm.model == "test-model"
        assert config.imports.default_year == 2024
        assert config.batch.batch_size == 5
        # Defaults for unspecified
        assert config.batch.delay_seconds == 2.0
        assert config.llm.max_retries == 3

    def test_empty_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text("")
        assert load_config(yaml_path) == AppConfig()

    def test_storage_resolved_path(self):
        resolved = StorageConfig(db_path="~/jobs.db").resolved_db_path
        assert "~" not in str(resolved)

    def test_frozen_config(self):
        config = LLMConfig()
        with pytest.raises(AttributeError):
            config.model = "changed"


class TestConfigValidation:
    @pytest.mark.parametrize(
        "yaml_text,field",
        [
            ("llm:\n  timeout: 0\n", "timeout"),
            ("llm:\n  max_tokens: 9000\n", "max_tokens"),
            ("llm:\n  max_retries: 0\n", "max_retries"),
            ("batch:\n  batch_size: 50\n", "batch_size"),
            ("batch:\n  delay_seconds: -1\n", "delay_seconds"),
            ("import:\n  default_year: 25\n", "default_year"),
        ],
    )
    def test_out_of_range_values(self, tmp_path, yaml_text, field):
        yaml_path = tmp_path / "bad.yaml"
        yaml_path.write_text(yaml_text)
        with pytest.raises(ValueError, match=field):
            load_config(yaml_path)

    def test_zero_delay_allowed(self):
        assert BatchConfig(delay_seconds=0).delay_seconds == 0
