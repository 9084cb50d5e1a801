"""Tests for configuration models."""

import json

import pytest
import pydantic

from asr_correct.config import (
    DEFAULT_PUNCTUATION_MARKS,
    CorrectorConfig,
    TokenizerConfig,
    build_config,
    load_config,
    save_config,
)
from asr_correct.errors import ConfigurationError, ResourceError


class TestTokenizerConfig:
    """Tests for TokenizerConfig model."""

    def test_defaults(self):
        """Test default tokenizer settings."""
        config = TokenizerConfig()

        assert config.word_separator == " "
        assert config.punctuation_marks == DEFAULT_PUNCTUATION_MARKS
        assert config.remove_punctuation is True
        assert config.lowercase is False
        assert "'" not in config.punctuation_marks
        assert "-" not in config.punctuation_marks

    def test_separator_must_be_single_character(self):
        """Test empty and multi-character separators are rejected."""
        with pytest.raises(ConfigurationError):
            TokenizerConfig(word_separator="")

        with pytest.raises(ConfigurationError):
            TokenizerConfig(word_separator="--")

    def test_separator_not_punctuation(self):
        """Test the separator cannot also be a punctuation mark."""
        with pytest.raises(ConfigurationError):
            TokenizerConfig(word_separator=",")

    def test_frozen(self):
        """Test settings cannot change after construction."""
        config = TokenizerConfig()

        with pytest.raises(pydantic.ValidationError):
            config.lowercase = True


class TestCorrectorConfig:
    """Tests for CorrectorConfig model."""

    def test_defaults(self):
        """Test default corrector settings."""
        config = CorrectorConfig()

        assert config.rejection_threshold == 0.5
        assert config.tokenizer == TokenizerConfig()
        assert config.log_corrections is True

    def test_negative_threshold(self):
        """Test a negative threshold is rejected."""
        with pytest.raises(ConfigurationError):
            CorrectorConfig(rejection_threshold=-0.1)

    def test_zero_threshold_allowed(self):
        """Test exact-match-only correction."""
        assert CorrectorConfig(rejection_threshold=0).rejection_threshold == 0


class TestBuildConfig:
    """Tests for build_config function."""

    def test_nested_data(self):
        """Test nested tokenizer settings."""
        config = build_config({"tokenizer": {"lowercase": True}, "rejection_threshold": 0.3})

        assert config.tokenizer.lowercase is True
        assert config.rejection_threshold == 0.3

    def test_overrides(self):
        """Test keyword overrides win over data."""
        config = build_config({"rejection_threshold": 0.3}, rejection_threshold=0.8)

        assert config.rejection_threshold == 0.8

    def test_unknown_field_wrapped(self):
        """Test pydantic validation errors become ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            build_config({"threshold": 0.3})

        assert "threshold" in exc_info.value.message

    def test_wrong_type_wrapped(self):
        """Test type errors become ConfigurationError."""
        with pytest.raises(ConfigurationError):
            build_config({"rejection_threshold": "high"})


class TestConfigFiles:
    """Tests for loading and saving configuration files."""

    def test_save_and_load(self, tmp_path):
        """Test a saved configuration loads back equal."""
        config = build_config({"tokenizer": {"word_separator": "_"}}, rejection_threshold=0.25)
        path = tmp_path / "config.json"

        save_config(path, config)

        assert load_config(path) == config
        assert json.loads(path.read_text())["rejection_threshold"] == 0.25

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ResourceError."""
        with pytest.raises(ResourceError):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test a malformed file raises ConfigurationError."""
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_invalid_utf8(self, tmp_path):
        """Test a file that is not UTF-8 text raises ConfigurationError."""
        path = tmp_path / "config.json"
        path.write_bytes(b'{"rejection_threshold": "\xff\xfe"}')

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        """Test invalid values in a file raise ConfigurationError."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"rejection_threshold": -1}))

        with pytest.raises(ConfigurationError):
            load_config(path)
