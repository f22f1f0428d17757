#!/usr/bin/env python3
"""
Step 0 of the normalization pipeline: transcript preparation.

- Unicode NFC so accented words match the resource tables
- Lowercase (every resource table is lowercase)
- Join letters that ASR split with a hyphen ("dix-sept" -> "dixsept")
"""
from __future__ import annotations

import re
import unicodedata

from .base import RewriteStage

# Letter-hyphen-letter, Unicode aware. Digit ranges like "3-4" are left alone.
HYPHENATED_LETTERS_PATTERN = re.compile(r"(?<=[^\W\d_])-(?=[^\W\d_])")


def prepare_transcript(text: str) -> str:
    text = unicodedata.normalize("NFC", text).lower()
    return HYPHENATED_LETTERS_PATTERN.sub("", text)


class PrepareStage(RewriteStage):
    name = "prepare"

    def rewrite(self, text: str) -> str:
        return prepare_transcript(text)
