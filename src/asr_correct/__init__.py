"""asr-correct - Corpus-based correction of speech recognizer output.

Aligns a noisy recognizer hypothesis with the closest sentence of a
trusted reference corpus and replaces the words the vocabulary does not
know with the reference words:

1. Tokenizer: raw text lines to word tokens
2. Alignment: edit distance matrix and one optimal alignment path
3. Corrector: reference selection and hypothesis/reference merge
"""

from asr_correct.alignment import Alignment, EditKind, EditStep, alignment_distance, edit_distance
from asr_correct.config import CorrectorConfig, TokenizerConfig, build_config, load_config
from asr_correct.corpus import Corpus, Sentence, Vocabulary
from asr_correct.corrector import Correction, CorrectionResult, SentenceCorrector, correct
from asr_correct.errors import ConfigurationError, CorrectorError, ResourceError, ValidationError
from asr_correct.tokenizer import TokenSequence, sub_sequence, tokenize

__version__ = "0.1.0"

__all__ = [
    # Tokenizer
    "tokenize",
    "sub_sequence",
    "TokenSequence",
    # Alignment
    "alignment_distance",
    "edit_distance",
    "Alignment",
    "EditKind",
    "EditStep",
    # Corpus
    "Corpus",
    "Sentence",
    "Vocabulary",
    # Correction
    "correct",
    "SentenceCorrector",
    "CorrectionResult",
    "Correction",
    # Configuration
    "CorrectorConfig",
    "TokenizerConfig",
    "build_config",
    "load_config",
    # Errors
    "CorrectorError",
    "ConfigurationError",
    "ResourceError",
    "ValidationError",
]
