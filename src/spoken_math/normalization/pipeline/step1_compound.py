#!/usr/bin/env python3
"""
Step 1 of the normalization pipeline: compound numbers.

Collapses scale-word phrases into plain digits before any other numeric
handling, because every later step assumes bare numerals:

- "1\u00A0000\u00A0000"  -> "1000000"   (typographic grouping)
- "1 million 250,000"    -> "1250000"   (addition compound)
- "2 million 5 hundred"  -> "2000500"   (addend with its own small scale)
- "2.5 million"          -> "2500000"   (simple compound)
- "2 point 5 million"    -> "2500000"   (spoken decimal point)
- "3 billones"           -> "3000000000000" (long scale)

Plain spaces between digits are never grouping: "3 100 200" is three numbers.
"""
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Pattern

from ..constants import COMPOUND_MULTIPLIERS
from ..pattern_cache import build_alternation
from .base import RewriteStage

_MULTIPLIERS = build_alternation(COMPOUND_MULTIPLIERS.keys())

# Leading numeral: integer, decimal point, or a 1-2 digit decimal comma ("2,5 millones")
_LEADING_NUMBER = r"\d+(?:\.\d+|,\d{1,2}(?!\d))?"

GROUP_SEPARATOR_PATTERN = re.compile(r"[\u00A0\u202F]")
SPACE_GROUPED_DIGITS_PATTERN = re.compile(r"\b\d{1,3}(?:[\u00A0\u202F]\d{3})+\b")

SIMPLE_COMPOUND_PATTERN = re.compile(
    rf"(?P<number>{_LEADING_NUMBER})\s*(?P<multiplier>{_MULTIPLIERS})\b"
)


def _optional_alternation(forms: Iterable[str]) -> Optional[str]:
    forms = list(forms)
    return build_alternation(forms) if forms else None


def build_addition_pattern(
    hundreds: Iterable[str] = (), thousands: Iterable[str] = (), number_words: Iterable[str] = ()
) -> Pattern[str]:
    """
    "<number> <scale> <addend>" where the addend may carry its own hundred
    and thousand words ("250 thousand"). An addend followed by any other
    number word is part of a longer spoken number and is left alone.
    """
    addend_scales = ""
    hundred_words = _optional_alternation(hundreds)
    if hundred_words:
        addend_scales += rf"(?:\s+(?P<hundred>{hundred_words})\b)?"
    thousand_words = _optional_alternation(thousands)
    if thousand_words:
        addend_scales += rf"(?:\s+(?P<thousand>{thousand_words})\b)?"

    blocked = [r"[.,]\d", r"\s*[%/]", rf"\s*(?:{_MULTIPLIERS})\b"]
    spoken = _optional_alternation(number_words)
    if spoken:
        blocked.append(rf"\s+(?:{spoken})\b")

    return re.compile(
        rf"(?P<number>{_LEADING_NUMBER})\s*(?P<multiplier>{_MULTIPLIERS})\b"
        rf"\s+(?P<addend>\d{{1,3}}(?:,\d{{3}})+|\d+)\b{addend_scales}"
        rf"(?!{'|'.join(blocked)})"
    )


def build_spoken_decimal_pattern(decimal_words: Iterable[str]) -> Optional[Pattern[str]]:
    """Spoken decimal point right before a scale word: "2 point 5 million" reads as 2.5 million."""
    words = _optional_alternation(decimal_words)
    if words is None:
        return None
    return re.compile(
        rf"(?<![\d.,])(?P<whole>\d+)\s*\b(?:{words})\b\s*(?P<fraction>\d+)(?=\s*(?:{_MULTIPLIERS})\b)"
    )


def format_number(value: Decimal) -> str:
    """Plain digit string, no exponent, no trailing zeros."""
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), "f")


def _multiplier_value(word: str) -> Optional[int]:
    return COMPOUND_MULTIPLIERS.get(" ".join(word.split()))


def _leading_value(number: str) -> Decimal:
    return Decimal(number.replace(",", "."))


def _addend_value(match: re.Match[str]) -> Decimal:
    addend = Decimal(match.group("addend").replace(",", ""))
    groups = match.groupdict()
    if groups.get("hundred"):
        addend *= 100
    if groups.get("thousand"):
        addend *= 1000
    return addend


def _replace_addition_compound(match: re.Match[str]) -> str:
    multiplier = _multiplier_value(match.group("multiplier"))
    if multiplier is None:
        return match.group(0)
    try:
        addend = _addend_value(match)
        if addend >= multiplier:
            # "2 million 5000000" is two numbers, not one
            return match.group(0)
        value = _leading_value(match.group("number")) * multiplier + addend
    except InvalidOperation:
        return match.group(0)
    return format_number(value)


def _replace_simple_compound(match: re.Match[str]) -> str:
    multiplier = _multiplier_value(match.group("multiplier"))
    if multiplier is None:
        return match.group(0)
    try:
        value = _leading_value(match.group("number")) * multiplier
    except InvalidOperation:
        return match.group(0)
    return format_number(value)


def collapse_space_grouped_digits(text: str) -> str:
    return SPACE_GROUPED_DIGITS_PATTERN.sub(lambda m: GROUP_SEPARATOR_PATTERN.sub("", m.group(0)), text)


class CompoundResolver:
    """Compound rules bound to one language's decimal, hundred and thousand words."""

    def __init__(
        self,
        decimal_words: Iterable[str] = (),
        hundreds: Iterable[str] = (),
        thousands: Iterable[str] = (),
        number_words: Iterable[str] = (),
    ):
        number_words = list(number_words)
        self.spoken_decimal = build_spoken_decimal_pattern(decimal_words)
        self.addition = build_addition_pattern(hundreds, thousands, number_words)
        spoken = _optional_alternation(number_words)
        self.spoken_word_next = re.compile(rf"\s+(?:{spoken})\b") if spoken else None

    @classmethod
    def for_language(cls, compiled) -> CompoundResolver:
        numbers = compiled.patterns.numbers
        return cls(
            decimal_words=compiled.patterns.operations.decimal,
            hundreds=[word for word, value in numbers.items() if value == "100"],
            thousands=[word for word, value in numbers.items() if value == "1000"],
            number_words=numbers.keys(),
        )

    def resolve(self, text: str) -> str:
        if self.spoken_decimal is not None:
            text = self.spoken_decimal.sub(r"\g<whole>.\g<fraction>", text)
        text = collapse_space_grouped_digits(text)
        text = self.addition.sub(_replace_addition_compound, text)
        return SIMPLE_COMPOUND_PATTERN.sub(self._replace_simple_compound, text)

    def _replace_simple_compound(self, match: re.Match[str]) -> str:
        # "1 million two hundred" is one spoken number; the number-word step composes it
        number = match.group("number")
        if number.isdigit() and self.spoken_word_next is not None:
            if self.spoken_word_next.match(match.string, match.end()):
                return match.group(0)
        return _replace_simple_compound(match)


_PLAIN_RESOLVER = CompoundResolver()


def convert_compound_numbers(text: str) -> str:
    """Rewrite "<number> <scale word> [<addend>]" into a plain numeral, without a lexicon."""
    return _PLAIN_RESOLVER.resolve(text)


class CompoundNumberStage(RewriteStage):
    name = "compound_numbers"

    def __init__(self, compiled):
        super().__init__(compiled)
        self.resolver = CompoundResolver.for_language(compiled)

    def rewrite(self, text: str) -> str:
        return self.resolver.resolve(text)
