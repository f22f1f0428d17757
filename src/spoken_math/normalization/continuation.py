#!/usr/bin/env python3
"""
Follow-up equations against the previous result.

A calculator conversation chains utterances: after "12 times 4", saying
"plus 8" means "48 + 8" and "15 percent of that" means "48 * 15 / 100".
This module turns a normalized transcript into the expression to evaluate,
given the last result (if any).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..core.config import setup_logging
from .constants import OF_WORDS, PREVIOUS_RESULT_WORDS
from .expression_parser import is_consumable
from .pattern_cache import build_alternation

logger = setup_logging(__name__)

# Dangling operators and separators at the end ("5 plus", "5 +", "12 =", "3?")
TRAILING_OPERATORS_PATTERN = re.compile(r"[+\-*/%=.,?!\s]+$")
LEADING_OPERATOR_PATTERN = re.compile(r"^[+\-*/%]")
BARE_NUMBER_PATTERN = re.compile(r"^\d+(?:\.\d+)?$")
# Normalized form of "<X> percent of <that>": the reference word is stripped, "X%" is left
LONE_PERCENT_PATTERN = re.compile(r"^(?P<percent>\d+(?:\.\d+)?)\s*%$")
PREVIOUS_RESULT_PATTERN = re.compile(
    rf"\b(?:{build_alternation(OF_WORDS)})\s+(?:{build_alternation(PREVIOUS_RESULT_WORDS)})\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class PreparedEquation:
    """What to hand the evaluator for one utterance."""
    transcript: str
    normalized: str
    expression: str
    uses_last_result: bool = False
    is_calculation: bool = False


def strip_trailing_operators(expression: str) -> str:
    return TRAILING_OPERATORS_PATTERN.sub("", expression.strip()).strip()


def is_calculation(expression: str) -> bool:
    """
    True when ``expression`` is worth evaluating.

    A bare number is something the user said, not a calculation; anything
    the grammar rejects cannot be evaluated.
    """
    expression = expression.strip()
    if not expression or BARE_NUMBER_PATTERN.match(expression):
        return False
    return is_consumable(expression)


def percent_of_previous(transcript: str, normalized: str, last_result: Optional[str]) -> Optional[str]:
    """``"<last> * X / 100"`` for "X percent of that", else None."""
    if last_result is None:
        return None
    match = LONE_PERCENT_PATTERN.match(normalized.strip())
    if match is None or PREVIOUS_RESULT_PATTERN.search(transcript) is None:
        return None
    return f"{last_result} * {match.group('percent')} / 100"


def prepare_equation(transcript: str, normalized: str, last_result: Optional[str] = None) -> PreparedEquation:
    """
    Build the expression for one utterance.

    Args:
        transcript: Raw transcript, used to spot references to the previous result
        normalized: Output of the normalizer for ``transcript``
        last_result: Previous result as the evaluator printed it, if any

    """
    expression = percent_of_previous(transcript, normalized, last_result)
    uses_last_result = expression is not None

    if expression is None:
        expression = strip_trailing_operators(normalized)
        if last_result is not None and LEADING_OPERATOR_PATTERN.match(expression):
            expression = f"{last_result} {expression}"
            uses_last_result = True

    if uses_last_result:
        logger.debug(f"Continuing from previous result {last_result}: '{expression}'")

    return PreparedEquation(
        transcript=transcript,
        normalized=normalized,
        expression=expression,
        uses_last_result=uses_last_result,
        is_calculation=is_calculation(expression),
    )
