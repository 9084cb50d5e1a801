"""Corpus directory storage.

A corpus directory holds:

- ``sentences.txt``: one reference sentence per line, as ``<s> ... </s>``
- ``document_ids.txt``: optional, one document id per sentence
- ``vocabulary.txt``: known words, one per line; pronunciation dictionary
  lines (``word W ER D``, alternates as ``word(2)``) contribute their word
- ``dictionary.dict``: pronunciation dictionary read when there is no
  ``vocabulary.txt``
- ``unknown_words.txt``: written on save, corpus words missing from the
  vocabulary

Loading hands back an immutable snapshot; nothing here is used while
correcting.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

from asr_correct.config import TokenizerConfig
from asr_correct.corpus import NO_DOCUMENT, Corpus, Vocabulary
from asr_correct.errors import ResourceError, StorageError
from asr_correct.logging import get_logger

logger = get_logger(__name__)

SENTENCES_FILE = "sentences.txt"
DOCUMENT_IDS_FILE = "document_ids.txt"
VOCABULARY_FILE = "vocabulary.txt"
DICTIONARY_FILE = "dictionary.dict"
UNKNOWN_WORDS_FILE = "unknown_words.txt"

SENTENCE_PATTERN = re.compile(r"<s> (.*) </s>")
ALTERNATE_PRONUNCIATION = re.compile(r"\(\d+\)$")


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    """Write data to a file atomically.

    Writes to a temporary file in the same directory, then renames it over
    the target so readers never see a partial file.

    Raises:
        StorageError: If the write fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    temp_path = None
    try:
        fd, temp_path = tempfile.mkstemp(suffix=".tmp", prefix=path.stem + "_", dir=path.parent)
        os.write(fd, data.encode(encoding))
        os.fsync(fd)
        os.close(fd)
        fd = None

        os.replace(temp_path, path)
        temp_path = None

    except OSError as e:
        raise StorageError(f"Failed to write {path}: {e}", context={"path": str(path)}) from e
    finally:
        if fd is not None:
            try:
                os.close(fd)
            except OSError:
                pass
        if temp_path is not None:
            try:
                os.unlink(temp_path)
            except OSError:
                pass


def _read_lines(path: Path) -> list[str]:
    try:
        with open(path, encoding="utf-8") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceError(f"Cannot read {path}: {e}", context={"path": str(path)}) from e


def parse_sentences(lines: list[str]) -> list[str]:
    """Extract sentence text from ``<s> ... </s>`` lines, ignoring others."""
    sentences = []
    for line in lines:
        match = SENTENCE_PATTERN.search(line)
        if match:
            sentences.append(match.group(1))
    return sentences


def parse_vocabulary(lines: list[str]) -> list[str]:
    """Extract words from a word list or a pronunciation dictionary."""
    words = []
    for line in lines:
        fields = line.split()
        if not fields or fields[0].startswith(";;;"):
            continue
        words.append(ALTERNATE_PRONUNCIATION.sub("", fields[0]))
    return words


def load_corpus(
    directory: Path | str,
    config: TokenizerConfig | None = None,
) -> tuple[Corpus, Vocabulary]:
    """Load a corpus directory.

    Args:
        directory: Corpus directory
        config: Tokenizer settings used for the sentences

    Returns:
        ``(corpus, vocabulary)``; the vocabulary is built from the corpus
        words when the directory has neither a vocabulary file nor a
        pronunciation dictionary

    Raises:
        ResourceError: If the directory or its sentences file is missing, or
            a corpus file cannot be read as UTF-8 text
    """
    directory = Path(directory)
    sentences_path = directory / SENTENCES_FILE
    if not sentences_path.exists():
        raise ResourceError(
            f"Corpus sentences not found: {sentences_path}",
            context={"directory": str(directory)},
        )

    sentences = parse_sentences(_read_lines(sentences_path))

    document_ids: list[int] = []
    ids_path = directory / DOCUMENT_IDS_FILE
    if ids_path.exists():
        for line in _read_lines(ids_path):
            line = line.strip()
            try:
                document_ids.append(int(line))
            except ValueError:
                document_ids.append(NO_DOCUMENT)

    corpus = Corpus.from_lines(sentences, config, document_ids=document_ids, name=directory.name)

    vocabulary_path = next(
        (
            directory / name
            for name in (VOCABULARY_FILE, DICTIONARY_FILE)
            if (directory / name).exists()
        ),
        None,
    )
    if vocabulary_path is not None:
        vocabulary = Vocabulary(parse_vocabulary(_read_lines(vocabulary_path)))
    else:
        logger.warning(
            "No vocabulary file, using corpus words",
            extra={"directory": str(directory)},
        )
        vocabulary = Vocabulary.from_corpus(corpus)

    logger.info(
        f"Loaded corpus {directory.name}",
        extra={"sentences": len(corpus), "vocabulary": len(vocabulary)},
    )
    return corpus, vocabulary


def save_corpus(directory: Path | str, corpus: Corpus, vocabulary: Vocabulary) -> Path:
    """Write a corpus directory, replacing its files atomically.

    Returns:
        The corpus directory
    """
    directory = Path(directory)

    sentences = "".join(f"<s> {sentence.text} </s>\n" for sentence in corpus)
    document_ids = "".join(f"{sentence.document_id}\n" for sentence in corpus)
    words = "".join(f"{word}\n" for word in vocabulary)
    unknown = "".join(f"{word}\n" for word in vocabulary.unknown_words(corpus))

    atomic_write(directory / SENTENCES_FILE, sentences)
    atomic_write(directory / DOCUMENT_IDS_FILE, document_ids)
    atomic_write(directory / VOCABULARY_FILE, words)
    atomic_write(directory / UNKNOWN_WORDS_FILE, unknown)

    return directory
