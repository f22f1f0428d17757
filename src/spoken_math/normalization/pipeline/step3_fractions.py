#!/usr/bin/env python3
"""
Step 3 of the normalization pipeline: fractions of a quantity.

- "1/2 of 80"          -> "((1/2) * 80)"
- "3 fourths of 100"   -> "((3/4) * 100)"
- "3 quarts de 100"    -> "((3/4) * 100)"

Fraction words come from one language-spanning table. A word that is not in
the table leaves the whole phrase as it was.
"""
from __future__ import annotations

import re

from ..constants import FRACTION_DENOMINATORS, OF_WORDS
from ..pattern_cache import build_alternation
from .base import RewriteStage

_OF = build_alternation(OF_WORDS)
# Grouping and decimal separators are left for the decimal step
_QUANTITY = r"\d+(?:[.,]\d+)*"

NUMERIC_FRACTION_PATTERN = re.compile(
    rf"\b(?P<numerator>\d+)\s*/\s*(?P<denominator>\d+)\s+(?:{_OF})\s+(?P<quantity>{_QUANTITY})"
)

WORD_FRACTION_PATTERN = re.compile(
    rf"\b(?P<numerator>\d+)\s+(?P<word>[^\W\d_]{{2,20}})\s+(?:{_OF})\s+(?P<quantity>{_QUANTITY})"
)


def _replace_numeric_fraction(match: re.Match[str]) -> str:
    return f"(({match.group('numerator')}/{match.group('denominator')}) * {match.group('quantity')})"


def _replace_word_fraction(match: re.Match[str]) -> str:
    denominator = FRACTION_DENOMINATORS.get(match.group("word"))
    if denominator is None:
        return match.group(0)
    return f"(({match.group('numerator')}/{denominator}) * {match.group('quantity')})"


def convert_fractions(text: str) -> str:
    text = NUMERIC_FRACTION_PATTERN.sub(_replace_numeric_fraction, text)
    return WORD_FRACTION_PATTERN.sub(_replace_word_fraction, text)


class FractionStage(RewriteStage):
    name = "fractions"

    def rewrite(self, text: str) -> str:
        return convert_fractions(text)
