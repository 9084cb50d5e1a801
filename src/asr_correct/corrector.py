"""Correction of recognizer hypotheses against a trusted corpus.

The hypothesis is aligned with every reference sentence, the closest
reference is selected, and the two are merged token by token: tokens the
vocabulary does not know are taken as recognition errors and replaced by
the reference, known tokens are kept as recognized.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence, Union

from asr_correct.alignment import Alignment, EditKind, EditStep, alignment_distance
from asr_correct.config import CorrectorConfig
from asr_correct.corpus import Corpus, Sentence, Vocabulary
from asr_correct.errors import ConfigurationError
from asr_correct.logging import get_logger
from asr_correct.tokenizer import TokenSequence

logger = get_logger(__name__)

Hypothesis = Union[str, TokenSequence, Sequence[str]]


@dataclass(frozen=True)
class Correction:
    """A single token change made while merging.

    Attributes:
        original: Hypothesis token, None when a reference token was inserted
        corrected: Replacement token, None when the hypothesis token was dropped
        kind: Alignment step that caused the change
        position: Index of the hypothesis token (insertion point for insertions)
    """

    original: str | None
    corrected: str | None
    kind: EditKind
    position: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original": self.original,
            "corrected": self.corrected,
            "kind": self.kind.value,
            "position": self.position,
        }


@dataclass(frozen=True)
class ReferenceMatch:
    """The reference sentence closest to a hypothesis."""

    index: int
    sentence: Sentence
    alignment: Alignment[str]
    normalized_distance: float
    length_difference: int

    @property
    def distance(self) -> int:
        return self.alignment.distance

    @property
    def rank(self) -> tuple[float, int, int]:
        return (self.normalized_distance, self.length_difference, self.index)


@dataclass(frozen=True)
class CorrectionResult:
    """Outcome of correcting one hypothesis.

    Attributes:
        text: Corrected text; the raw hypothesis when nothing changed
        tokens: Corrected tokens
        hypothesis: Raw hypothesis as given
        reference: Reference sentence used for the merge, None on fallback
        reference_index: Position of the reference in the corpus
        distance: Edit distance to the reference
        normalized_distance: Distance divided by the reference length
        corrections: Token changes, in reading order
    """

    text: str
    tokens: tuple[str, ...]
    hypothesis: str
    reference: Sentence | None = None
    reference_index: int | None = None
    distance: int | None = None
    normalized_distance: float | None = None
    corrections: tuple[Correction, ...] = ()

    @property
    def applied(self) -> bool:
        """Whether any token of the hypothesis was changed."""
        return bool(self.corrections)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "text": self.text,
            "hypothesis": self.hypothesis,
            "reference": self.reference.text if self.reference else None,
            "reference_index": self.reference_index,
            "document_id": self.reference.document_id if self.reference else None,
            "distance": self.distance,
            "normalized_distance": self.normalized_distance,
            "applied": self.applied,
            "corrections": [c.to_dict() for c in self.corrections],
        }


class SentenceCorrector:
    """Corrects recognizer hypotheses using a reference corpus.

    The corrector holds no mutable state: once built it can be shared by
    any number of threads producing hypotheses.

    Example:
        corpus = Corpus.from_lines(["i like cats", "dogs bark"])
        corrector = SentenceCorrector(corpus, Vocabulary(["i", "cats"]))
        corrector.correct("i lik cats").text   # "i like cats"
    """

    def __init__(
        self,
        corpus: Corpus,
        vocabulary: Vocabulary | None = None,
        config: CorrectorConfig | None = None,
    ):
        """Initialize corrector.

        Args:
            corpus: Reference sentences, tokenized with ``config.tokenizer``
            vocabulary: Known words; defaults to the words of the corpus
            config: Corrector settings

        Raises:
            ConfigurationError: If the corpus was tokenized with other settings
        """
        self.config = config or CorrectorConfig(tokenizer=corpus.config)
        if corpus.config != self.config.tokenizer:
            raise ConfigurationError(
                "Corpus was tokenized with different settings than the corrector",
                context={"corpus": corpus.name},
            )

        self.corpus = corpus
        self.vocabulary = vocabulary if vocabulary is not None else Vocabulary.from_corpus(corpus)

    def correct(self, hypothesis: Hypothesis) -> CorrectionResult:
        """Correct one hypothesis.

        Falls back to the unchanged hypothesis when the corpus is empty or
        the closest reference is further than the rejection threshold.

        Args:
            hypothesis: Raw text, or tokens already split

        Returns:
            CorrectionResult
        """
        raw, tokens = self._prepare(hypothesis)

        if tokens.is_empty:
            return CorrectionResult(text="", tokens=(), hypothesis=raw)

        match = self.best_match(tokens.tokens)
        if match is None:
            logger.debug("Empty corpus, hypothesis left unchanged")
            return self._unchanged(raw, tokens)

        if match.normalized_distance > self.config.rejection_threshold:
            logger.debug(
                "Closest reference rejected",
                extra={
                    "reference_index": match.index,
                    "normalized_distance": round(match.normalized_distance, 4),
                    "threshold": self.config.rejection_threshold,
                },
            )
            return self._unchanged(raw, tokens)

        merged, corrections = self.merge(match.alignment)

        if corrections and self.config.log_corrections:
            logger.info(
                f"Corrected {len(corrections)} tokens",
                extra={
                    "reference_index": match.index,
                    "distance": match.distance,
                    "normalized_distance": round(match.normalized_distance, 4),
                },
            )

        text = self.config.tokenizer.word_separator.join(merged) if corrections else raw

        return CorrectionResult(
            text=text,
            tokens=tuple(merged),
            hypothesis=raw,
            reference=match.sentence,
            reference_index=match.index,
            distance=match.distance,
            normalized_distance=match.normalized_distance,
            corrections=tuple(corrections),
        )

    def correct_all(self, hypotheses: Iterable[Hypothesis]) -> list[CorrectionResult]:
        """Correct several hypotheses in order."""
        return [self.correct(hypothesis) for hypothesis in hypotheses]

    def best_match(self, tokens: Sequence[str]) -> ReferenceMatch | None:
        """Select the reference closest to the given tokens.

        References are ranked by edit distance divided by reference length,
        then by length difference, then by corpus order. A reference whose
        length difference alone already ranks it behind the current best is
        skipped without filling its matrix.

        Returns:
            The closest reference, or None for an empty corpus
        """
        tokens = tuple(tokens)
        best: ReferenceMatch | None = None
        skipped = 0

        for index, sentence in enumerate(self.corpus):
            reference_length = len(sentence)
            length_difference = abs(reference_length - len(tokens))

            # Edit distance is never below the length difference
            if best is not None and length_difference / max(1, reference_length) > best.normalized_distance:
                skipped += 1
                continue

            alignment = alignment_distance(tokens, sentence.tokens.tokens)
            candidate = ReferenceMatch(
                index=index,
                sentence=sentence,
                alignment=alignment,
                normalized_distance=alignment.distance / max(1, reference_length),
                length_difference=length_difference,
            )

            if best is None or candidate.rank < best.rank:
                best = candidate
                if alignment.distance == 0:
                    break

        if best is not None:
            logger.debug(
                "Selected reference",
                extra={
                    "reference_index": best.index,
                    "distance": best.distance,
                    "skipped": skipped,
                },
            )

        return best

    def merge(self, alignment: Alignment[str]) -> tuple[list[str], list[Correction]]:
        """Merge hypothesis and reference along an alignment.

        The alignment's source is the hypothesis, its destination the
        reference.

        - match: hypothesis token kept
        - substitution: reference token when the hypothesis token is unknown
        - deletion: unknown hypothesis token dropped, known one kept
        - insertion: reference token inserted when a hypothesis token on
          either side of the gap is unknown

        Returns:
            ``(tokens, corrections)``
        """
        hypothesis = alignment.source
        reference = alignment.destination
        steps = alignment.steps

        merged: list[str] = []
        corrections: list[Correction] = []
        consumed = 0

        for position, step in enumerate(steps):
            if step.kind is EditKind.MATCH:
                merged.append(hypothesis[step.source_index])

            elif step.kind is EditKind.SUBSTITUTION:
                original = hypothesis[step.source_index]
                if original in self.vocabulary:
                    merged.append(original)
                else:
                    replacement = reference[step.destination_index]
                    merged.append(replacement)
                    corrections.append(
                        Correction(original, replacement, step.kind, step.source_index)
                    )

            elif step.kind is EditKind.DELETION:
                original = hypothesis[step.source_index]
                if original in self.vocabulary:
                    merged.append(original)
                else:
                    corrections.append(Correction(original, None, step.kind, step.source_index))

            else:
                neighbours = _gap_neighbours(steps, position, hypothesis)
                if any(word not in self.vocabulary for word in neighbours):
                    inserted = reference[step.destination_index]
                    merged.append(inserted)
                    corrections.append(Correction(None, inserted, step.kind, consumed))

            if step.source_index is not None:
                consumed += 1

        return merged, corrections

    def _prepare(self, hypothesis: Hypothesis) -> tuple[str, TokenSequence]:
        tokenizer_config = self.config.tokenizer
        if isinstance(hypothesis, TokenSequence):
            if hypothesis.config != tokenizer_config:
                hypothesis = TokenSequence.from_tokens(hypothesis.tokens, tokenizer_config)
            return str(hypothesis), hypothesis
        if isinstance(hypothesis, str):
            return hypothesis, TokenSequence(hypothesis, tokenizer_config)
        tokens = TokenSequence.from_tokens(list(hypothesis), tokenizer_config)
        return str(tokens), tokens

    def _unchanged(self, raw: str, tokens: TokenSequence) -> CorrectionResult:
        return CorrectionResult(text=raw, tokens=tokens.tokens, hypothesis=raw)


def _gap_neighbours(
    steps: list[EditStep], position: int, hypothesis: Sequence[str]
) -> list[str]:
    """Hypothesis tokens on either side of an insertion gap."""
    neighbours = []
    for candidates in (reversed(steps[:position]), steps[position + 1:]):
        for step in candidates:
            if step.source_index is not None:
                neighbours.append(hypothesis[step.source_index])
                break
    return neighbours


def correct(
    hypothesis: Hypothesis,
    corpus: Corpus | Iterable[str],
    vocabulary: Vocabulary | Iterable[str],
    config: CorrectorConfig | None = None,
) -> str:
    """Correct a hypothesis against reference sentences.

    Convenience wrapper around SentenceCorrector for one-off calls; build a
    SentenceCorrector once when correcting many hypotheses.

    Args:
        hypothesis: Raw recognizer output
        corpus: Corpus, or raw reference sentences
        vocabulary: Known words
        config: Corrector settings

    Returns:
        Corrected text
    """
    if config is None:
        config = CorrectorConfig(tokenizer=corpus.config) if isinstance(corpus, Corpus) else CorrectorConfig()
    if not isinstance(corpus, Corpus):
        corpus = Corpus.from_lines(corpus, config.tokenizer)
    if not isinstance(vocabulary, Vocabulary):
        vocabulary = Vocabulary(vocabulary)

    return SentenceCorrector(corpus, vocabulary, config).correct(hypothesis).text
