#!/usr/bin/env python3
"""
Step 4 of the normalization pipeline: decimal and thousands separators.

Leaves every numeral with a period decimal point and no grouping, which is
what the percentage step and the evaluator expect. The order is
load-bearing: grouping commas are stripped before the remaining
"digits,digits" are read as decimals.
"""
from __future__ import annotations

import re

from .base import RewriteStage

UNICODE_SPACES_PATTERN = re.compile(r"[\u00A0\u202F\u2007]")
SPACED_DECIMAL_POINT_PATTERN = re.compile(r"(\d)\s*\.\s*(\d)")
COMMA_THOUSANDS_PATTERN = re.compile(r"\b\d{1,3}(?:,\d{3})+\b")
# "1.234.567" and "1.234,5" can only be grouping; a lone "1.234" stays a decimal
PERIOD_THOUSANDS_PATTERN = re.compile(r"\b\d{1,3}(?:(?:\.\d{3}){2,}\b|(?:\.\d{3})+(?=,\d))")
DECIMAL_COMMA_PATTERN = re.compile(r"\b(\d+),(\d+)\b")


def between_digits(match: re.Match[str]) -> bool:
    """A decimal word only counts with a digit on each side: "3 point 5", not "the point"."""
    before = match.string[: match.start()].rstrip()
    after = match.string[match.end() :].lstrip()
    return before[-1:].isdigit() and after[:1].isdigit()


class DecimalStage(RewriteStage):
    name = "decimals"

    def rewrite(self, text: str) -> str:
        text = UNICODE_SPACES_PATTERN.sub(" ", text)

        if self.compiled.decimal is not None:
            text = self.compiled.decimal.sub(".", text, where=between_digits)

        text = SPACED_DECIMAL_POINT_PATTERN.sub(r"\1.\2", text)
        text = COMMA_THOUSANDS_PATTERN.sub(lambda m: m.group(0).replace(",", ""), text)
        if self.compiled.patterns.uses_decimal_comma:
            text = PERIOD_THOUSANDS_PATTERN.sub(lambda m: m.group(0).replace(".", ""), text)

        return DECIMAL_COMMA_PATTERN.sub(r"\1.\2", text)
