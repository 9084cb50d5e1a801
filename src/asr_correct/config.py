"""Configuration for the tokenizer and the corrector.

Configuration values are built once and passed explicitly to the
tokenizer, corpus and corrector. Invalid settings fail when the
configuration is built, never per correction call.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from asr_correct.errors import ConfigurationError, ResourceError

DEFAULT_PUNCTUATION_MARKS = ".,;:!?\"()[]{}<>/\\|`~@#$%^&*+="


class TokenizerConfig(BaseModel):
    """How raw text lines are turned into word tokens."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Single character placed between words
    word_separator: str = " "
    # Every character in this string is treated as a separator
    punctuation_marks: str = DEFAULT_PUNCTUATION_MARKS
    # Some pipelines feed already-normalized text and skip this step
    remove_punctuation: bool = True
    lowercase: bool = False

    @field_validator("word_separator")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ConfigurationError(
                f"Word separator must be a single character, got {value!r}",
                context={"word_separator": value},
            )
        return value

    @model_validator(mode="after")
    def _separator_not_punctuation(self) -> "TokenizerConfig":
        if self.word_separator in self.punctuation_marks:
            raise ConfigurationError(
                f"Word separator {self.word_separator!r} is also listed as a punctuation mark",
                context={"word_separator": self.word_separator},
            )
        return self


class CorrectorConfig(BaseModel):
    """Settings for the correction orchestrator."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    # Normalized distance above which the hypothesis is returned unchanged
    rejection_threshold: float = 0.5
    # Log every token replaced by the merge at INFO level
    log_corrections: bool = True

    @field_validator("rejection_threshold")
    @classmethod
    def _non_negative_threshold(cls, value: float) -> float:
        if value < 0:
            raise ConfigurationError(
                f"Rejection threshold must not be negative, got {value}",
                context={"rejection_threshold": value},
            )
        return value


def build_config(data: dict[str, Any] | None = None, **overrides: Any) -> CorrectorConfig:
    """Build a corrector configuration from plain data.

    Args:
        data: Nested configuration mapping (as found in a JSON file)
        **overrides: Top-level fields overriding ``data``

    Returns:
        Validated CorrectorConfig

    Raises:
        ConfigurationError: If any value is invalid
    """
    merged = {**(data or {}), **overrides}
    try:
        return CorrectorConfig(**merged)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e


def load_config(path: Path | str) -> CorrectorConfig:
    """Load a corrector configuration from a JSON file.

    Raises:
        ResourceError: If the file does not exist
        ConfigurationError: If the file is not valid JSON or holds invalid values
    """
    path = Path(path)
    if not path.exists():
        raise ResourceError(f"Config file not found: {path}", context={"path": str(path)})

    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigurationError(
                f"Config file is not valid JSON: {e}", context={"path": str(path)}
            ) from e

    return build_config(data)


def save_config(path: Path | str, config: CorrectorConfig) -> Path:
    """Save a corrector configuration to a JSON file with atomic write."""
    from asr_correct.store import atomic_write

    path = Path(path)
    atomic_write(path, json.dumps(config.model_dump(), indent=2))
    return path
