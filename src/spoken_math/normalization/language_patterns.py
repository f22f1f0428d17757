#!/usr/bin/env python3
"""
Language pattern registry.

Each supported language is described by a JSON table under ``resources/``
(number words, operator words, phrase templates, decimal separator style).
This module turns those tables into immutable :class:`LanguagePatterns`
records. Adding a language is a data-only change: drop ``<code>.json`` next
to the others.

The registry never falls back to another language; callers that accept
arbitrary locale tags use :func:`resolve_language` first.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from ..core.config import ConfigurationError, get_config
from .constants import UnsupportedLanguageError, get_available_languages, get_resources

DECIMAL_COMMA = "comma"
DECIMAL_PERIOD = "period"

PHRASE_KEYS = ("add_to", "subtract_from", "multiply_by", "divide_by")


@dataclass(frozen=True)
class OperatorWords:
    """Surface forms for each operator category in one language."""
    addition: Tuple[str, ...] = ()
    subtraction: Tuple[str, ...] = ()
    multiplication: Tuple[str, ...] = ()
    division: Tuple[str, ...] = ()
    percentage: Tuple[str, ...] = ()
    percent_of: Tuple[str, ...] = ()
    power: Tuple[str, ...] = ()
    sqrt: Tuple[str, ...] = ()
    open_paren: Tuple[str, ...] = ()
    close_paren: Tuple[str, ...] = ()
    decimal: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PhraseTemplate:
    """``<verb> A <connective> B`` with two numeric slots."""
    verbs: Tuple[str, ...] = ()
    connectives: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not self.verbs or not self.connectives


@dataclass(frozen=True)
class LanguagePatterns:
    code: str
    numbers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    operations: OperatorWords = field(default_factory=OperatorWords)
    phrases: Mapping[str, PhraseTemplate] = field(default_factory=lambda: MappingProxyType({}))
    decimal_separator: str = DECIMAL_PERIOD

    @property
    def uses_decimal_comma(self) -> bool:
        return self.decimal_separator == DECIMAL_COMMA

    def phrase(self, key: str) -> PhraseTemplate:
        return self.phrases.get(key, PhraseTemplate())


def _word_tuple(values: Any, where: str) -> Tuple[str, ...]:
    if values is None:
        return ()
    if not isinstance(values, (list, tuple)):
        raise ConfigurationError(f"{where} must be a list of strings")
    words = []
    for value in values:
        if not isinstance(value, str):
            raise ConfigurationError(f"{where} must only contain strings, got {value!r}")
        word = " ".join(value.lower().split())
        if word and word not in words:
            words.append(word)
    return tuple(words)


def _build_numbers(raw: Any, code: str) -> Mapping[str, str]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{code}.numbers must be an object")

    numbers: dict[str, str] = {}
    for word, digits in raw.items():
        digits = str(digits).strip()
        if not digits.isdigit():
            raise ConfigurationError(f"{code}.numbers['{word}'] must be a digit string, got {digits!r}")
        key = " ".join(word.lower().split())
        numbers[key] = digits
        # ASR output is joined across hyphens ("dix-sept" -> "dixsept")
        if "-" in key:
            numbers.setdefault(key.replace("-", ""), digits)
    return MappingProxyType(numbers)


def _build_operations(raw: Any, code: str) -> OperatorWords:
    if raw is None:
        return OperatorWords()
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{code}.operations must be an object")

    parentheses = raw.get("parentheses") or {}
    return OperatorWords(
        addition=_word_tuple(raw.get("addition"), f"{code}.operations.addition"),
        subtraction=_word_tuple(raw.get("subtraction"), f"{code}.operations.subtraction"),
        multiplication=_word_tuple(raw.get("multiplication"), f"{code}.operations.multiplication"),
        division=_word_tuple(raw.get("division"), f"{code}.operations.division"),
        percentage=_word_tuple(raw.get("percentage"), f"{code}.operations.percentage"),
        percent_of=_word_tuple(raw.get("percent_of"), f"{code}.operations.percent_of"),
        power=_word_tuple(raw.get("power"), f"{code}.operations.power"),
        sqrt=_word_tuple(raw.get("sqrt"), f"{code}.operations.sqrt"),
        open_paren=_word_tuple(parentheses.get("open"), f"{code}.operations.parentheses.open"),
        close_paren=_word_tuple(parentheses.get("close"), f"{code}.operations.parentheses.close"),
        decimal=_word_tuple(raw.get("decimal"), f"{code}.operations.decimal"),
    )


def _build_phrases(raw: Any, code: str) -> Mapping[str, PhraseTemplate]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{code}.phrases must be an object")

    phrases = {}
    for key in PHRASE_KEYS:
        template = raw.get(key)
        if not template:
            continue
        if not isinstance(template, dict):
            raise ConfigurationError(f"{code}.phrases.{key} must be an object")
        phrases[key] = PhraseTemplate(
            verbs=_word_tuple(template.get("verbs"), f"{code}.phrases.{key}.verbs"),
            connectives=_word_tuple(template.get("connectives"), f"{code}.phrases.{key}.connectives"),
        )
    return MappingProxyType(phrases)


def build_language_patterns(code: str, resources: dict[str, Any]) -> LanguagePatterns:
    """Build a LanguagePatterns record from a raw resource table."""
    separator = resources.get("decimal_separator", DECIMAL_PERIOD)
    if separator not in (DECIMAL_COMMA, DECIMAL_PERIOD):
        raise ConfigurationError(f"{code}.decimal_separator must be 'comma' or 'period', got {separator!r}")

    return LanguagePatterns(
        code=code,
        numbers=_build_numbers(resources.get("numbers"), code),
        operations=_build_operations(resources.get("operations"), code),
        phrases=_build_phrases(resources.get("phrases"), code),
        decimal_separator=separator,
    )


# Built records, keyed by the resource dict they came from so that
# clear_resource_caches() also invalidates them.
_PATTERNS: dict[str, tuple[dict[str, Any], LanguagePatterns]] = {}
_PATTERNS_LOCK = threading.Lock()


def load_language_patterns(code: str) -> LanguagePatterns:
    """
    Return the LanguagePatterns for a supported language code.

    Raises:
        UnsupportedLanguageError: If ``code`` has no resource table
    """
    resources = get_resources(code)
    cached = _PATTERNS.get(code)
    if cached is not None and cached[0] is resources:
        return cached[1]

    with _PATTERNS_LOCK:
        # Double-check if another thread built it while we were waiting
        cached = _PATTERNS.get(code)
        if cached is not None and cached[0] is resources:
            return cached[1]

        patterns = build_language_patterns(code, resources)
        _PATTERNS[code] = (resources, patterns)
        return patterns


def available_languages() -> list[str]:
    return get_available_languages()


def resolve_language(code: Optional[str], default: Optional[str] = None) -> str:
    """
    Map a locale tag onto a supported language code.

    "pt-BR" and "pt_BR" resolve to "pt"; unknown or empty tags resolve to
    ``default`` (or the configured default language).
    """
    fallback = default or get_config().default_language
    if not code:
        return fallback

    supported = available_languages()
    tag = code.strip().lower().replace("_", "-")
    if tag in supported:
        return tag
    base = tag.split("-", 1)[0]
    if base in supported:
        return base
    return fallback


__all__ = [
    "DECIMAL_COMMA",
    "DECIMAL_PERIOD",
    "LanguagePatterns",
    "OperatorWords",
    "PhraseTemplate",
    "UnsupportedLanguageError",
    "available_languages",
    "build_language_patterns",
    "load_language_patterns",
    "resolve_language",
]
