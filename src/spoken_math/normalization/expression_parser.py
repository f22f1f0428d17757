#!/usr/bin/env python3
"""
Grammar for the canonical expression produced by the normalizer.

Accepts digits with an optional decimal part, ``+ - * / ^``, postfix ``%``,
unary signs, ``sqrt`` and parentheses. Used to decide whether a normalized
transcript is something the evaluator can consume; it does not evaluate.
"""
from __future__ import annotations

from typing import Optional

from pyparsing import Keyword, Literal, OpAssoc, ParseException, ParserElement, ParseResults, Regex, infix_notation, one_of

from ..core.config import setup_logging

logger = setup_logging(__name__)

ParserElement.enable_packrat()


class ExpressionParser:
    """pyparsing grammar over the canonical symbol set"""

    def __init__(self) -> None:
        number = Regex(r"\d+(?:\.\d+)?")

        self.parser = infix_notation(
            number,
            [
                (Literal("%"), 1, OpAssoc.LEFT),
                (Keyword("sqrt"), 1, OpAssoc.RIGHT),
                (Literal("^"), 2, OpAssoc.RIGHT),
                (one_of("+ -"), 1, OpAssoc.RIGHT),
                (one_of("* /"), 2, OpAssoc.LEFT),
                (one_of("+ -"), 2, OpAssoc.LEFT),
            ],
        )

    def parse(self, expression: str) -> Optional[ParseResults]:
        """Parse result for ``expression``, or None when it is not a complete expression."""
        try:
            return self.parser.parse_string(expression.strip(), parse_all=True)
        except ParseException as e:
            logger.debug(f"Not a consumable expression: '{expression}' ({e})")
            return None

    def is_consumable(self, expression: str) -> bool:
        return self.parse(expression) is not None


_parser: Optional[ExpressionParser] = None


def get_expression_parser() -> ExpressionParser:
    global _parser
    if _parser is None:
        _parser = ExpressionParser()
    return _parser


def is_consumable(expression: str) -> bool:
    return get_expression_parser().is_consumable(expression)
