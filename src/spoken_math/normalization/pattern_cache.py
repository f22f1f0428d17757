#!/usr/bin/env python3
"""
Compiled pattern cache for spoken-math normalization.

Every language gets one :class:`CompiledLanguageRegex`: the ready-to-run
matchers derived from its :class:`LanguagePatterns`. Compilation happens on
first use and the result is reused for the lifetime of the process.

Key Features:
- Explicit cache object (inject one per normalizer, or use the module default)
- Lock-free reads, double-checked locking on compile
- Recompiles when the registry hands back a different LanguagePatterns
  (resources were reloaded)
- Hit/miss statistics for monitoring

Usage:
    from spoken_math.normalization.pattern_cache import get_compiled

    compiled = get_compiled("fr")
"""
from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, Optional, Pattern

from ..core.config import setup_logging
from .language_patterns import PHRASE_KEYS, LanguagePatterns, load_language_patterns

logger = setup_logging(__name__)

# Integer or decimal operand as it appears after decimal normalization
PHRASE_NUMBER = r"\d+(?:\.\d+)?"
# Operand before decimal normalization ran, so either separator is allowed
LOOSE_NUMBER = r"\d+(?:[.,]\d+)?"


# ==============================================================================
# MATCHERS
# ==============================================================================


def _form_regex(form: str) -> str:
    """Escape one surface form, letting ASR vary the spacing between its words."""
    return r"\s+".join(re.escape(part) for part in form.split())


def build_alternation(forms: Iterable[str]) -> str:
    """Longest-first alternation so multi-word forms win over their prefixes."""
    unique = sorted(set(forms), key=lambda f: (-len(f), f))
    return "|".join(_form_regex(form) for form in unique)


def _canonical_form(text: str) -> str:
    return " ".join(text.split())


class WordMatcher:
    """
    One operator category over a language's shared operator-word alternation.

    The shared pattern matches the longest surface form at each position, from
    any category. :meth:`sub` only rewrites matches that belong to this
    category, so "dividido por" (division) survives the multiplication pass
    for "por" intact.
    """

    __slots__ = ("pattern", "forms", "category")

    def __init__(self, pattern: Pattern[str], forms: FrozenSet[str], category: str):
        self.pattern = pattern
        self.forms = forms
        self.category = category

    def sub(
        self, replacement: str, text: str, where: Optional[Callable[[re.Match[str]], bool]] = None
    ) -> str:
        """Rewrite this category's forms; ``where`` further restricts which matches qualify."""

        def _replace(match: re.Match[str]) -> str:
            if _canonical_form(match.group(0)) in self.forms and (where is None or where(match)):
                return replacement
            return match.group(0)

        return self.pattern.sub(_replace, text)

    def search(self, text: str) -> bool:
        return any(_canonical_form(m.group(0)) in self.forms for m in self.pattern.finditer(text))

    def __repr__(self) -> str:
        return f"WordMatcher({self.category!r}, {len(self.forms)} forms)"


@dataclass(frozen=True)
class CompiledLanguageRegex:
    patterns: LanguagePatterns
    number_words: Optional[Pattern[str]] = None
    number_word_runs: Optional[Pattern[str]] = None
    phrase_add_to: Optional[Pattern[str]] = None
    phrase_subtract_from: Optional[Pattern[str]] = None
    phrase_multiply_by: Optional[Pattern[str]] = None
    phrase_divide_by: Optional[Pattern[str]] = None
    addition: Optional[WordMatcher] = None
    subtraction: Optional[WordMatcher] = None
    multiplication: Optional[WordMatcher] = None
    division: Optional[WordMatcher] = None
    percent_of: Optional[WordMatcher] = None
    percentage: Optional[WordMatcher] = None
    power: Optional[WordMatcher] = None
    sqrt: Optional[WordMatcher] = None
    open_paren: Optional[WordMatcher] = None
    close_paren: Optional[WordMatcher] = None
    decimal: Optional[WordMatcher] = None
    percent_suffix: Optional[Pattern[str]] = None
    percent_change: Optional[Pattern[str]] = None

    @property
    def language(self) -> str:
        return self.patterns.code


# ==============================================================================
# COMPILATION
# ==============================================================================

# Categories sharing one longest-first alternation. "percent of" is kept out
# so that the percentage pass still sees "percent" when percent-of is skipped.
_SHARED_CATEGORIES = (
    "addition",
    "subtraction",
    "multiplication",
    "division",
    "percentage",
    "power",
    "sqrt",
    "open_paren",
    "close_paren",
    "decimal",
)


def _compile_number_words(patterns: LanguagePatterns) -> tuple[Optional[Pattern[str]], Optional[Pattern[str]]]:
    if not patterns.numbers:
        return None, None
    words = build_alternation(patterns.numbers.keys())
    single = re.compile(rf"\b(?:{words})\b")
    runs = re.compile(rf"\b(?:{words})(?:\s+(?:{words}))*\b")
    return single, runs


def _compile_phrase(patterns: LanguagePatterns, key: str) -> Optional[Pattern[str]]:
    template = patterns.phrase(key)
    if template.is_empty():
        return None
    verbs = build_alternation(template.verbs)
    connectives = build_alternation(template.connectives)
    return re.compile(
        rf"\b(?:{verbs})\s+(?P<a>{PHRASE_NUMBER})\s+(?:{connectives})\s+(?P<b>{PHRASE_NUMBER})\b"
    )


def _compile_word_matchers(patterns: LanguagePatterns) -> Dict[str, Optional[WordMatcher]]:
    operations = patterns.operations
    matchers: Dict[str, Optional[WordMatcher]] = {}

    shared_forms = [form for category in _SHARED_CATEGORIES for form in getattr(operations, category)]
    shared = re.compile(rf"\b(?:{build_alternation(shared_forms)})\b") if shared_forms else None

    for category in _SHARED_CATEGORIES:
        forms = getattr(operations, category)
        matchers[category] = WordMatcher(shared, frozenset(forms), category) if forms else None

    if operations.percent_of:
        own = re.compile(rf"\b(?:{build_alternation(operations.percent_of)})\b")
        matchers["percent_of"] = WordMatcher(own, frozenset(operations.percent_of), "percent_of")
    else:
        matchers["percent_of"] = None

    return matchers


def _compile_percent_suffix(patterns: LanguagePatterns) -> Optional[Pattern[str]]:
    if not patterns.operations.percentage:
        return None
    words = build_alternation(patterns.operations.percentage)
    return re.compile(rf"(?P<number>{LOOSE_NUMBER})\s*(?:{words})\b")


def _compile_percent_change(patterns: LanguagePatterns) -> Optional[Pattern[str]]:
    operations = patterns.operations
    if not operations.addition and not operations.subtraction:
        return None
    words = build_alternation(operations.addition + operations.subtraction)
    return re.compile(
        rf"(?P<base>{LOOSE_NUMBER})\s+(?P<op>{words})\s+(?P<percent>{LOOSE_NUMBER})\s*%"
    )


def compile_language_patterns(patterns: LanguagePatterns) -> CompiledLanguageRegex:
    """Build every matcher for one language. Pure function of ``patterns``."""
    number_words, number_word_runs = _compile_number_words(patterns)
    phrases = {key: _compile_phrase(patterns, key) for key in PHRASE_KEYS}

    return CompiledLanguageRegex(
        patterns=patterns,
        number_words=number_words,
        number_word_runs=number_word_runs,
        phrase_add_to=phrases["add_to"],
        phrase_subtract_from=phrases["subtract_from"],
        phrase_multiply_by=phrases["multiply_by"],
        phrase_divide_by=phrases["divide_by"],
        percent_suffix=_compile_percent_suffix(patterns),
        percent_change=_compile_percent_change(patterns),
        **_compile_word_matchers(patterns),
    )


# ==============================================================================
# CACHE
# ==============================================================================


class PatternCache:
    """Per-language cache of CompiledLanguageRegex, safe for concurrent use."""

    def __init__(self, loader: Callable[[str], LanguagePatterns] = load_language_patterns):
        self._loader = loader
        self._entries: Dict[str, CompiledLanguageRegex] = {}
        self._lock = threading.Lock()
        self._stats = {'hits': 0, 'misses': 0, 'compilations': 0}

    def get(self, language: str) -> CompiledLanguageRegex:
        """
        Return the compiled pattern set for a supported language code.

        Raises:
            UnsupportedLanguageError: If the registry has no such language
        """
        patterns = self._loader(language)

        entry = self._entries.get(language)
        if entry is not None and entry.patterns is patterns:
            self._stats['hits'] += 1
            return entry

        with self._lock:
            # Double-check if another thread compiled it while we were waiting
            entry = self._entries.get(language)
            if entry is not None and entry.patterns is patterns:
                self._stats['hits'] += 1
                return entry

            self._stats['misses'] += 1
            entry = compile_language_patterns(patterns)
            self._entries[language] = entry
            self._stats['compilations'] += 1
            logger.debug(f"Compiled spoken-math patterns for '{language}'")
            return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_stats(self) -> dict[str, int]:
        with self._lock:
            return {**self._stats, 'size': len(self._entries)}

    def __contains__(self, language: object) -> bool:
        return language in self._entries

    def __len__(self) -> int:
        return len(self._entries)


_default_cache = PatternCache()


def get_default_cache() -> PatternCache:
    return _default_cache


def get_compiled(language: str) -> CompiledLanguageRegex:
    """Compiled pattern set for ``language`` from the process-wide cache."""
    return _default_cache.get(language)
