"""
GOOBITS Spoken Math - normalize spoken calculator input into arithmetic expressions.

This package provides:
- Multi-language normalization (en, es, fr, de, pt, it) of ASR transcripts
- Compound numbers, number words, fractions, decimals and percentage idioms
- A per-language compiled pattern cache
- Follow-up equations against the previous result ("plus 8", "15 percent of that")
"""

__version__ = "1.0.0"
__author__ = "GOOBITS Team"

from .core.config import ConfigurationError
from .normalization import (
    PatternCache,
    PreparedEquation,
    SpokenMathNormalizer,
    UnsupportedLanguageError,
    available_languages,
    get_compiled,
    normalize_spoken_math,
    resolve_language,
)

__all__ = [
    "ConfigurationError",
    "PatternCache",
    "PreparedEquation",
    "SpokenMathNormalizer",
    "UnsupportedLanguageError",
    "available_languages",
    "get_compiled",
    "normalize_spoken_math",
    "resolve_language",
]
