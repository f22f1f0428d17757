#!/usr/bin/env python3
"""
Step 7 of the normalization pipeline: final cleanup.

Anything alphabetic that survived the earlier steps is filler ("what is",
"please") and is dropped. The only word allowed through is ``sqrt``.
"""
from __future__ import annotations

import re

from .base import RewriteStage

# Private-use code point: neither a letter nor anything ASR produces
SQRT_SENTINEL = "\uE000"

SQRT_PATTERN = re.compile(r"\bsqrt\b")
QUOTES_PATTERN = re.compile(r"[\u2019\u2018'\"`]+")
LETTERS_PATTERN = re.compile(r"[^\W\d_]+")
DOUBLE_PLUS_PATTERN = re.compile(r"\+(?:\s*\+)+")
WHITESPACE_PATTERN = re.compile(r"\s+")


def clean_expression(text: str) -> str:
    text = SQRT_PATTERN.sub(SQRT_SENTINEL, text)
    text = QUOTES_PATTERN.sub(" ", text)
    text = LETTERS_PATTERN.sub(" ", text)
    text = text.replace(SQRT_SENTINEL, " sqrt ")
    text = DOUBLE_PLUS_PATTERN.sub("+", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


class CleanupStage(RewriteStage):
    name = "cleanup"

    def rewrite(self, text: str) -> str:
        return clean_expression(text)
