#!/usr/bin/env python3
"""Shared constants and the language resource loader for spoken-math normalization."""
from __future__ import annotations

# Standard library imports
import json
import os
import threading
from types import MappingProxyType
from typing import Any, Mapping

from ..core.config import ConfigurationError

# ==============================================================================
# I18N RESOURCE LOADER
# ==============================================================================

_RESOURCES: dict[str, dict[str, Any]] = {}  # Cache for loaded languages
_RESOURCE_PATH = os.path.join(os.path.dirname(__file__), "resources")
_LOCK = threading.Lock()  # For thread-safe lazy loading


class UnsupportedLanguageError(KeyError):
    """Raised when no resource file exists for a language code."""

    def __init__(self, language: str):
        super().__init__(language)
        self.language = language

    def __str__(self) -> str:
        return f"No spoken-math resources for language '{self.language}'"


def get_resources(language: str) -> dict[str, Any]:
    """
    Loads and caches language-specific resources from a JSON file.

    Args:
        language: Language code (e.g., 'en', 'es', 'fr')

    Returns:
        dict: Loaded language resources

    Raises:
        UnsupportedLanguageError: If there is no resource file for the language
        ConfigurationError: If the resource file is not valid JSON

    """
    if language in _RESOURCES:
        return _RESOURCES[language]

    with _LOCK:
        # Double-check if another thread loaded it while we were waiting
        if language in _RESOURCES:
            return _RESOURCES[language]

        filepath = os.path.join(_RESOURCE_PATH, f"{language}.json")
        try:
            with open(filepath, encoding="utf-8") as f:
                resources: dict[str, Any] = json.load(f)
        except FileNotFoundError:
            raise UnsupportedLanguageError(language) from None
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Error decoding JSON from {language}.json") from e

        _RESOURCES[language] = resources
        return resources


def get_available_languages() -> list[str]:
    """Language codes with a resource file, sorted."""
    if not os.path.isdir(_RESOURCE_PATH):
        return []
    return sorted(name[:-5] for name in os.listdir(_RESOURCE_PATH) if name.endswith(".json"))


def clear_resource_caches() -> None:
    """
    Clear loaded resources. Useful for testing or after shipping new translations.
    """
    with _LOCK:
        _RESOURCES.clear()


# ==============================================================================
# NUMERIC VOCABULARY
# ==============================================================================

# Scale words accepted after a numeral ("5 million", "2,5 millones").
# "billón" is long scale (10^12); "billion" is short scale (10^9).
COMPOUND_MULTIPLIERS: Mapping[str, int] = MappingProxyType({
    "million": 10**6, "millions": 10**6,
    "milliard": 10**6, "milliards": 10**6,
    "milliarde": 10**6, "milliarden": 10**6,
    "milhão": 10**6, "milhões": 10**6,
    "milione": 10**6, "milioni": 10**6,
    "millón": 10**6, "millones": 10**6,
    "millionen": 10**6,
    "billion": 10**9, "billions": 10**9,
    "mil millones": 10**9,
    "bilhão": 10**9, "bilhões": 10**9,
    "miliardo": 10**9, "miliardi": 10**9,
    "trillion": 10**12, "trillions": 10**12,
    "billón": 10**12, "billones": 10**12,
    "trilhão": 10**12, "trilhões": 10**12,
    "trillione": 10**12, "trillioni": 10**12,
})

# Fraction word -> denominator, across every supported language.
# Misspelled and misheard forms are intentional.
FRACTION_DENOMINATORS: Mapping[str, int] = MappingProxyType({
    # English
    "half": 2, "halves": 2, "halfs": 2,
    "third": 3, "thirds": 3, "thir": 3, "thirdith": 3, "thirdth": 3,
    "fourth": 4, "fourths": 4, "quarter": 4, "quarters": 4, "forth": 4, "forths": 4,
    "fifth": 5, "fifths": 5, "fith": 5, "fiths": 5,
    "sixth": 6, "sixths": 6, "sikth": 6, "sikths": 6,
    "seventh": 7, "sevenths": 7, "sevnth": 7, "sevnths": 7,
    "eighth": 8, "eighths": 8, "aith": 8, "aiths": 8, "eith": 8, "eiths": 8,
    "ninth": 9, "ninths": 9, "nith": 9, "niths": 9,
    "tenth": 10, "tenths": 10, "tinth": 10, "tinths": 10,
    # French
    "demi": 2, "demis": 2,
    "tiers": 3,
    "quart": 4, "quarts": 4,
    "cinquième": 5, "cinquièmes": 5,
    "sixième": 6, "sixièmes": 6,
    "septième": 7, "septièmes": 7,
    "huitième": 8, "huitièmes": 8,
    "neuvième": 9, "neuvièmes": 9,
    "dixième": 10, "dixièmes": 10,
    # Spanish, Portuguese, Italian
    "medio": 2, "medios": 2,
    "meio": 2, "meios": 2,
    "mezzo": 2, "mezzi": 2,
    "tercio": 3, "tercios": 3,
    "terço": 3, "terços": 3,
    "terzo": 3, "terzi": 3,
    "cuarto": 4, "cuartos": 4,
    "quarto": 4, "quartos": 4, "quarti": 4,
    "quinto": 5, "quintos": 5, "quinti": 5,
    "sexto": 6, "sextos": 6,
    "sesto": 6, "sesti": 6,
    "octavo": 8, "octavos": 8, "oitavo": 8, "oitavos": 8, "ottavo": 8, "ottavi": 8,
    "décimo": 10, "décimos": 10, "decimo": 10, "decimi": 10,
    # German
    "halb": 2, "halbe": 2,
    "drittel": 3,
    "viertel": 4,
    "fünftel": 5,
    "sechstel": 6,
    "achtel": 8,
    "zehntel": 10,
})

# ==============================================================================
# CONNECTIVE VOCABULARY (language-spanning)
# ==============================================================================

OF_WORDS = ("of", "de", "di", "von")
TO_WORDS = ("to", "à", "a", "zu")
FROM_WORDS = ("from", "de", "von", "da")
PERCENT_ADD_VERBS = (
    "add", "ajouter", "adicionar", "hinzufügen", "aggiungere",
    "sumar", "añadir", "agregar", "addieren", "sommare",
)
PERCENT_SUBTRACT_VERBS = (
    "subtract", "soustraire", "subtrair", "subtrahieren", "sottrarre",
    "restar", "abziehen",
)

# "15 percent of that", "20 % de eso" -> percentage of the previous result
PREVIOUS_RESULT_WORDS = (
    "that", "this", "it", "the result",
    "eso", "esto", "ello",
    "ça", "cela", "ceci",
    "das", "dem", "dies",
    "isso", "isto",
    "quello", "questo", "ciò",
)
