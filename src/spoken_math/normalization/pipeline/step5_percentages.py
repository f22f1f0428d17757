#!/usr/bin/env python3
"""
Step 5 of the normalization pipeline: percentage phrases.

Rewrites the five calculator percentage idioms into explicit formulas:

- "X% of Y"               -> "(Y * X / 100)"
- "add X% to Y"           -> "(Y * (1 + X / 100))"
- "X + Y%"                -> "(X * (1 + Y / 100))"
- "subtract X% from Y"    -> "(Y * (1 - X / 100))"
- "X - Y%"                -> "(X * (1 - Y / 100))"

Spoken percent words are turned into "%" first ("10 percent" -> "10%",
"5 plus 3%" -> "5 + 3%") so the idioms also fire on spoken input.
Every occurrence is rewritten, not only the first.
"""
from __future__ import annotations

import re
from typing import Callable, Pattern

from ..constants import FROM_WORDS, OF_WORDS, PERCENT_ADD_VERBS, PERCENT_SUBTRACT_VERBS, TO_WORDS
from ..pattern_cache import build_alternation
from .base import RewriteStage

NUMBER_PATTERN = r"\d+(?:[ \u00A0\u202F]{0,10}[.,][ \u00A0\u202F]{0,10}\d+)?"
WS_PATTERN = r"[\s\u00A0\u202F]{1,20}"

_OF = f"(?:{build_alternation(OF_WORDS)})"
_TO = f"(?:{build_alternation(TO_WORDS)})"
_FROM = f"(?:{build_alternation(FROM_WORDS)})"
_ADD = f"(?:{build_alternation(PERCENT_ADD_VERBS)})"
_SUBTRACT = f"(?:{build_alternation(PERCENT_SUBTRACT_VERBS)})"

NUMBER_SPACES_PATTERN = re.compile(r"[ \u00A0\u202F]")


def clean_number_string(number: str) -> str:
    """Strip stray spaces and read a comma as the decimal point."""
    return NUMBER_SPACES_PATTERN.sub("", number).replace(",", ".")


# ==============================================================================
# PERCENTAGE IDIOMS
# ==============================================================================

PERCENT_OF_PATTERN = re.compile(
    rf"(?P<percent>{NUMBER_PATTERN})\s*%{WS_PATTERN}{_OF}{WS_PATTERN}(?P<base>{NUMBER_PATTERN})(?:{WS_PATTERN}%)?",
    re.IGNORECASE,
)
ADD_PERCENT_TO_PATTERN = re.compile(
    rf"\b{_ADD}{WS_PATTERN}(?P<percent>{NUMBER_PATTERN})\s*%{WS_PATTERN}{_TO}{WS_PATTERN}(?P<base>{NUMBER_PATTERN})",
    re.IGNORECASE,
)
PLUS_PERCENT_PATTERN = re.compile(
    rf"(?P<base>{NUMBER_PATTERN})\s*\+\s*(?P<percent>{NUMBER_PATTERN})\s*%",
    re.IGNORECASE,
)
SUBTRACT_PERCENT_FROM_PATTERN = re.compile(
    rf"\b{_SUBTRACT}{WS_PATTERN}(?P<percent>{NUMBER_PATTERN})\s*%{WS_PATTERN}{_FROM}{WS_PATTERN}(?P<base>{NUMBER_PATTERN})",
    re.IGNORECASE,
)
MINUS_PERCENT_PATTERN = re.compile(
    rf"(?P<base>{NUMBER_PATTERN})\s*-\s*(?P<percent>{NUMBER_PATTERN})\s*%",
    re.IGNORECASE,
)


def _percent_of(match: re.Match[str]) -> str:
    return f"({clean_number_string(match.group('base'))} * {clean_number_string(match.group('percent'))} / 100)"


def _increase(match: re.Match[str]) -> str:
    return f"({clean_number_string(match.group('base'))} * (1 + {clean_number_string(match.group('percent'))} / 100))"


def _decrease(match: re.Match[str]) -> str:
    return f"({clean_number_string(match.group('base'))} * (1 - {clean_number_string(match.group('percent'))} / 100))"


PERCENTAGE_RULES: tuple[tuple[str, Pattern[str], Callable[[re.Match[str]], str]], ...] = (
    ("percent_of", PERCENT_OF_PATTERN, _percent_of),
    ("add_percent_to", ADD_PERCENT_TO_PATTERN, _increase),
    ("plus_percent", PLUS_PERCENT_PATTERN, _increase),
    ("subtract_percent_from", SUBTRACT_PERCENT_FROM_PATTERN, _decrease),
    ("minus_percent", MINUS_PERCENT_PATTERN, _decrease),
)


def apply_percentage_operations(text: str) -> str:
    for _name, pattern, replace in PERCENTAGE_RULES:
        text = pattern.sub(replace, text)
    return text


# ==============================================================================
# STAGE
# ==============================================================================


class PercentageStage(RewriteStage):
    name = "percentages"

    def _spoken_percent(self, text: str) -> str:
        suffix = self.compiled.percent_suffix
        if suffix is not None:
            text = suffix.sub(lambda m: f"{m.group('number')}%", text)

        change = self.compiled.percent_change
        if change is not None:
            addition = self.compiled.addition
            text = change.sub(
                lambda m: "{} {} {}%".format(
                    m.group("base"),
                    "+" if addition is not None and " ".join(m.group("op").split()) in addition.forms else "-",
                    m.group("percent"),
                ),
                text,
            )
        return text

    def rewrite(self, text: str) -> str:
        return apply_percentage_operations(self._spoken_percent(text))
