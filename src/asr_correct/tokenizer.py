"""Normalization and tokenization of raw text lines.

A line is normalized once (punctuation replaced by the word separator,
runs of separators collapsed) and then split into word tokens. The
normalized line is kept so sub-sequences can be re-joined with the
configured separator.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterator, overload

from asr_correct.config import TokenizerConfig
from asr_correct.errors import ValidationError

DEFAULT_TOKENIZER_CONFIG = TokenizerConfig()


@lru_cache(maxsize=32)
def _punctuation_table(punctuation_marks: str, separator: str) -> dict[int, str]:
    return str.maketrans({mark: separator for mark in punctuation_marks})


@lru_cache(maxsize=32)
def _separator_run(separator: str) -> re.Pattern[str]:
    return re.compile(re.escape(separator) + "{2,}")


def normalize(line: str, config: TokenizerConfig = DEFAULT_TOKENIZER_CONFIG) -> str:
    """Apply the configured normalization to a raw line.

    Every punctuation mark becomes the word separator and consecutive
    separators collapse into one. Leading and trailing separators are
    left in place; splitting drops the empty fields they produce.
    """
    if config.lowercase:
        line = line.lower()

    if not config.remove_punctuation:
        return line

    separator = config.word_separator
    line = line.translate(_punctuation_table(config.punctuation_marks, separator))
    return _separator_run(separator).sub(separator, line)


def split_tokens(normalized: str, separator: str) -> list[str]:
    """Split an already normalized line into its non-empty tokens.

    A line without any token yields a single empty token.
    """
    tokens = [token for token in normalized.split(separator) if token]
    return tokens or [""]


def tokenize(line: str, config: TokenizerConfig | None = None) -> list[str]:
    """Turn a raw text line into its word tokens.

    Args:
        line: Raw text line
        config: Tokenizer settings (defaults to space-separated words with
            punctuation removal)

    Returns:
        Ordered list of non-empty tokens, or ``[""]`` for a blank line

    Example:
        >>> tokenize("Hello,  world!!")
        ['Hello', 'world']
    """
    config = config or DEFAULT_TOKENIZER_CONFIG
    return split_tokens(normalize(line, config), config.word_separator)


class TokenSequence:
    """An immutable tokenized line.

    Behaves as a read-only sequence of its tokens. A blank line gives
    an empty sequence: ``len()`` is 0 and ``tokens`` is an empty tuple,
    even though ``tokenize`` reports it as a single empty token.

    Example:
        seq = TokenSequence("the cat, the hat")
        seq.tokens                 # ('the', 'cat', 'the', 'hat')
        str(seq.sub_sequence(1, 3))  # 'cat the'
    """

    __slots__ = ("_line", "_tokens", "_config")

    def __init__(self, line: str, config: TokenizerConfig | None = None):
        self._config = config or DEFAULT_TOKENIZER_CONFIG
        self._line = normalize(line, self._config)
        self._tokens = tuple(
            token for token in self._line.split(self._config.word_separator) if token
        )

    @classmethod
    def from_tokens(
        cls, tokens: list[str] | tuple[str, ...], config: TokenizerConfig | None = None
    ) -> "TokenSequence":
        """Build a sequence from tokens that are already split."""
        config = config or DEFAULT_TOKENIZER_CONFIG
        return cls(config.word_separator.join(tokens), config)

    @property
    def line(self) -> str:
        """The normalized line."""
        return self._line

    @property
    def tokens(self) -> tuple[str, ...]:
        return self._tokens

    @property
    def config(self) -> TokenizerConfig:
        return self._config

    @property
    def is_empty(self) -> bool:
        return not self._tokens

    def sub_sequence(self, begin: int, end: int) -> "TokenSequence":
        """Return the tokens in the half-open range ``[begin, end)``.

        The tokens are re-joined with the configured separator.
        ``begin >= end`` yields an empty sequence.

        Raises:
            ValidationError: If a non-empty range falls outside the sequence
        """
        if begin >= end:
            return TokenSequence("", self._config)

        if begin < 0 or end > len(self._tokens):
            raise ValidationError(
                f"Token range [{begin}, {end}) is outside a sequence of {len(self._tokens)} tokens",
                context={"begin": begin, "end": end, "length": len(self._tokens)},
            )

        return TokenSequence.from_tokens(self._tokens[begin:end], self._config)

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[str, ...]: ...

    def __getitem__(self, index):
        return self._tokens[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TokenSequence):
            return self._tokens == other._tokens
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._tokens)

    def __str__(self) -> str:
        return self._config.word_separator.join(self._tokens)

    def __repr__(self) -> str:
        return f"TokenSequence({str(self)!r})"


def sub_sequence(sequence: TokenSequence, begin: int, end: int) -> TokenSequence:
    """Extract the tokens ``[begin, end)`` of a sequence."""
    return sequence.sub_sequence(begin, end)
