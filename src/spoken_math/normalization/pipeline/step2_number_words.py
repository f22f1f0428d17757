#!/usr/bin/env python3
"""
Step 2 of the normalization pipeline: spoken number words.

Decodes runs of number words from the language lexicon into digits,
composing adjacent words into one cardinal where they form one:

- "two hundred fifty"    -> "250"
- "five thousand two"    -> "5002"
- "5 hundred"            -> "500"
- "two three"            -> "2 3"
- "two point five million" -> "2500000"

A scale word ending a run that follows a decimal word stays a word, so the
compound rules scale the whole decimal instead of its fractional digits.
"""
from __future__ import annotations

import re
from typing import List, Mapping, Optional, Sequence

from ..constants import COMPOUND_MULTIPLIERS
from ..language_patterns import OperatorWords
from ..pattern_cache import build_alternation
from .base import RewriteStage
from .step1_compound import CompoundResolver

HUNDRED = 100
THOUSAND = 1000


def _is_tens(value: int) -> bool:
    return 20 <= value <= 90 and value % 10 == 0


class CardinalComposer:
    """Turns a sequence of word values into one or more cardinals.

    Accumulates the way a speaker reads a number: units and tens add up,
    "hundred" multiplies the running group, larger scales close the group
    into the total. A value that cannot extend the number being read starts
    a new one.
    """

    def __init__(self) -> None:
        self.total_val = 0
        self.current_val = 0
        self.previous: Optional[int] = None

    def _continues(self, value: int) -> bool:
        prev = self.previous
        if prev is None:
            return True
        if value >= THOUSAND:
            return prev < value
        if value == HUNDRED:
            return prev < HUNDRED and self.current_val < HUNDRED
        if prev >= HUNDRED:
            return value < prev
        return _is_tens(prev) and 1 <= value <= 9

    def _flush(self) -> int:
        number = self.total_val + self.current_val
        self.total_val = self.current_val = 0
        self.previous = None
        return number

    def compose(self, values: Sequence[int]) -> List[int]:
        numbers: List[int] = []
        for value in values:
            if not self._continues(value):
                numbers.append(self._flush())

            if value >= THOUSAND:
                multiplier = self.current_val if self.current_val > 0 else 1
                self.total_val += multiplier * value
                self.current_val = 0
            elif value == HUNDRED:
                multiplier = self.current_val if self.current_val > 0 else 1
                self.current_val = multiplier * HUNDRED
            else:
                self.current_val += value
            self.previous = value

        if self.previous is not None:
            numbers.append(self._flush())
        return numbers


def compose_cardinals(values: Sequence[int]) -> List[int]:
    return CardinalComposer().compose(values)


def _operator_forms(operations: OperatorWords) -> List[str]:
    return [form for forms in vars(operations).values() for form in forms]


class NumberWordStage(RewriteStage):
    name = "number_words"

    def __init__(self, compiled):
        super().__init__(compiled)
        self._numbers: Mapping[str, str] = compiled.patterns.numbers
        self._words = compiled.number_words
        self._runs: Optional[re.Pattern[str]] = None
        self._after_decimal: Optional[re.Pattern[str]] = None
        self._resolver = CompoundResolver.for_language(compiled)
        if compiled.number_word_runs is None:
            return

        # Operator forms spelled with a number word ("pour cent", "por ciento") stay words
        protected = [
            form
            for form in _operator_forms(compiled.patterns.operations)
            if any(part in self._numbers for part in form.split())
        ]
        alternatives = []
        if protected:
            alternatives.append(rf"\b(?P<protected>{build_alternation(protected)})\b")
        # A bare numeral directly before a scale word joins the run ("5 hundred")
        alternatives.append(
            rf"(?:(?<![\d.,])(?P<lead>\d+)\s+)?(?P<run>{compiled.number_word_runs.pattern})"
        )
        self._runs = re.compile("|".join(alternatives))

        decimal_words = compiled.patterns.operations.decimal
        if decimal_words:
            self._after_decimal = re.compile(rf"\b(?:{build_alternation(decimal_words)})\s+$")

    def _words_in(self, run: str) -> List[str]:
        return [" ".join(m.group(0).split()) for m in self._words.finditer(run)]

    def _follows_decimal_word(self, match: re.Match[str]) -> bool:
        if self._after_decimal is None:
            return False
        return self._after_decimal.search(match.string, 0, match.start()) is not None

    def _replace(self, match: re.Match[str]) -> str:
        if match.group("run") is None:
            return match.group(0)

        words = self._words_in(match.group("run"))
        values = [int(self._numbers[word]) for word in words]
        scale = ""
        if len(words) > 1 and words[-1] in COMPOUND_MULTIPLIERS and self._follows_decimal_word(match):
            scale = " " + words[-1]
            values.pop()
        prefix = ""
        lead = match.group("lead")
        if lead is not None:
            if values and values[0] >= HUNDRED:
                values.insert(0, int(lead))
            else:
                prefix = match.group(0)[: match.start("run") - match.start(0)]
        return prefix + " ".join(str(n) for n in compose_cardinals(values)) + scale

    def rewrite(self, text: str) -> str:
        if self._runs is None:
            return text
        return self._resolver.resolve(self._runs.sub(self._replace, text))
