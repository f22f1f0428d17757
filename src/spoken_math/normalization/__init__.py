"""Spoken-math normalization: language registry, compiled patterns and the rewrite pipeline."""

from .constants import UnsupportedLanguageError
from .continuation import PreparedEquation, prepare_equation
from .expression_parser import ExpressionParser
from .language_patterns import LanguagePatterns, available_languages, load_language_patterns, resolve_language
from .normalizer import NormalizationPipeline, SpokenMathNormalizer, normalize_spoken_math
from .pattern_cache import CompiledLanguageRegex, PatternCache, get_compiled

__all__ = [
    "CompiledLanguageRegex",
    "ExpressionParser",
    "LanguagePatterns",
    "NormalizationPipeline",
    "PatternCache",
    "PreparedEquation",
    "SpokenMathNormalizer",
    "UnsupportedLanguageError",
    "available_languages",
    "get_compiled",
    "load_language_patterns",
    "normalize_spoken_math",
    "prepare_equation",
    "resolve_language",
]
