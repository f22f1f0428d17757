#!/usr/bin/env python3
"""
Step 6 of the normalization pipeline: phrase templates and operator words.

Two-operand phrases go first ("subtract 3 from 10" -> "10 - 3"), then each
operator-word category is replaced by its symbol in a fixed order. All
categories of a language share one longest-first alternation, so a long
form from one category ("dividido por") is never split by a shorter form
from another ("por").
"""
from __future__ import annotations

import re
from typing import List, Optional, Pattern, Tuple

from ..pattern_cache import CompiledLanguageRegex
from .base import RewriteStage

# (compiled attribute, template over the "a" and "b" operands)
PHRASE_TEMPLATES: Tuple[Tuple[str, str], ...] = (
    ("phrase_add_to", "{a} + {b}"),
    ("phrase_subtract_from", "{b} - {a}"),
    ("phrase_multiply_by", "{a} * {b}"),
    ("phrase_divide_by", "{a} / {b}"),
)

# (compiled attribute, symbol), applied in this order
OPERATOR_SYMBOLS: Tuple[Tuple[str, str], ...] = (
    ("addition", " + "),
    ("subtraction", " - "),
    ("multiplication", " * "),
    ("division", " / "),
    ("percent_of", " * 0.01 * "),
    ("percentage", " % "),
    ("power", " ^ "),
    ("sqrt", " sqrt "),
    ("open_paren", " ( "),
    ("close_paren", " ) "),
)


def _phrase_replacer(template: str):
    def _replace(match: re.Match[str]) -> str:
        return template.format(a=match.group("a"), b=match.group("b"))

    return _replace


class OperatorStage(RewriteStage):
    name = "operators"

    def __init__(self, compiled: CompiledLanguageRegex):
        super().__init__(compiled)
        self._phrases: List[Tuple[Pattern[str], str]] = []
        for attribute, template in PHRASE_TEMPLATES:
            pattern: Optional[Pattern[str]] = getattr(compiled, attribute)
            if pattern is not None:
                self._phrases.append((pattern, template))

    def rewrite(self, text: str) -> str:
        for pattern, template in self._phrases:
            text = pattern.sub(_phrase_replacer(template), text)

        for attribute, symbol in OPERATOR_SYMBOLS:
            matcher = getattr(self.compiled, attribute)
            if matcher is None:
                continue
            # A literal "%" already says what "percent of" would
            if attribute == "percent_of" and "%" in text:
                continue
            text = matcher.sub(symbol, text)
        return text
