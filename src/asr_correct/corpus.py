"""Reference corpus and vocabulary.

Both are read-only snapshots: built once by whoever loads the corpus and
then shared by every correction call without locking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from asr_correct.config import TokenizerConfig
from asr_correct.logging import get_logger
from asr_correct.tokenizer import DEFAULT_TOKENIZER_CONFIG, TokenSequence

logger = get_logger(__name__)

NO_DOCUMENT = -1


@dataclass(frozen=True)
class Sentence:
    """A trusted reference sentence.

    Attributes:
        tokens: Tokenized sentence
        document_id: Id of the document the sentence was taken from,
            ``NO_DOCUMENT`` when unknown
    """

    tokens: TokenSequence
    document_id: int = NO_DOCUMENT

    @property
    def text(self) -> str:
        return str(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)


class Corpus:
    """Ordered, immutable collection of reference sentences.

    Sentences are tokenized once when the corpus is built. Their order
    is the insertion order and decides ties during correction.
    """

    def __init__(
        self,
        sentences: Iterable[Sentence] = (),
        config: TokenizerConfig | None = None,
        name: str | None = None,
    ):
        self._sentences: tuple[Sentence, ...] = tuple(sentences)
        self._config = config or DEFAULT_TOKENIZER_CONFIG
        self.name = name

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        config: TokenizerConfig | None = None,
        document_ids: Sequence[int] | None = None,
        name: str | None = None,
    ) -> "Corpus":
        """Build a corpus from raw sentence lines.

        Blank lines are skipped. ``document_ids`` runs parallel to
        ``lines``; sentences past its end get ``NO_DOCUMENT``.
        """
        config = config or DEFAULT_TOKENIZER_CONFIG
        document_ids = document_ids or ()

        sentences = []
        skipped = 0
        for index, line in enumerate(lines):
            tokens = TokenSequence(line, config)
            if tokens.is_empty:
                skipped += 1
                continue
            document_id = document_ids[index] if index < len(document_ids) else NO_DOCUMENT
            sentences.append(Sentence(tokens, document_id))

        if skipped:
            logger.debug(f"Skipped {skipped} blank corpus lines", extra={"corpus": name})

        return cls(sentences, config, name)

    @property
    def config(self) -> TokenizerConfig:
        return self._config

    @property
    def sentences(self) -> tuple[Sentence, ...]:
        return self._sentences

    def words(self) -> set[str]:
        """Every distinct token appearing in the corpus."""
        return {token for sentence in self._sentences for token in sentence.tokens}

    def by_document(self, document_id: int) -> list[Sentence]:
        """Sentences taken from one document, in corpus order."""
        return [s for s in self._sentences if s.document_id == document_id]

    def __len__(self) -> int:
        return len(self._sentences)

    def __iter__(self) -> Iterator[Sentence]:
        return iter(self._sentences)

    def __getitem__(self, index: int) -> Sentence:
        return self._sentences[index]

    def __bool__(self) -> bool:
        return bool(self._sentences)

    def __repr__(self) -> str:
        return f"Corpus(name={self.name!r}, sentences={len(self._sentences)})"


class Vocabulary:
    """Immutable set of known words, matched case-insensitively.

    A hypothesis token missing from the vocabulary is treated as a
    likely recognition error.

    Example:
        vocabulary = Vocabulary(["i", "cats"])
        "Cats" in vocabulary    # True
        "lik" in vocabulary     # False
    """

    __slots__ = ("_words",)

    def __init__(self, words: Iterable[str] = ()):
        self._words: frozenset[str] = frozenset(w.lower() for w in words if w)

    @classmethod
    def from_corpus(cls, corpus: Corpus) -> "Vocabulary":
        """Vocabulary made of every word appearing in a corpus."""
        return cls(corpus.words())

    def union(self, words: Iterable[str]) -> "Vocabulary":
        """New vocabulary with extra words added."""
        return Vocabulary(self._words | {w.lower() for w in words if w})

    def unknown_words(self, corpus: Corpus) -> list[str]:
        """Corpus words missing from this vocabulary, sorted.

        These are the words a pronunciation dictionary would still need
        entries for.
        """
        return sorted({w.lower() for w in corpus.words()} - self._words)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.lower() in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._words))

    def __repr__(self) -> str:
        return f"Vocabulary(words={len(self._words)})"
