#!/usr/bin/env python3
"""Tests for the language registry and the compiled pattern cache."""

import dataclasses
from concurrent.futures import ThreadPoolExecutor

import pytest

from spoken_math.core.config import ConfigurationError
from spoken_math.normalization.constants import UnsupportedLanguageError, clear_resource_caches
from spoken_math.normalization.language_patterns import (
    build_language_patterns,
    load_language_patterns,
    resolve_language,
)
from spoken_math.normalization.normalizer import NormalizationPipeline
from spoken_math.normalization.pattern_cache import PatternCache, build_alternation, compile_language_patterns


class CountingLoader:
    """Registry loader that records how often it was asked."""

    def __init__(self, loader=load_language_patterns):
        self.loader = loader
        self.calls = 0

    def __call__(self, language):
        self.calls += 1
        return self.loader(language)


class TestPatternCache:
    def test_compiles_once_then_hits(self):
        cache = PatternCache(CountingLoader())

        first = cache.get("en")
        second = cache.get("en")

        assert first is second
        assert "en" in cache
        assert len(cache) == 1
        stats = cache.get_stats()
        assert stats["compilations"] == 1
        assert stats["misses"] == 1
        assert stats["hits"] == 1
        assert stats["size"] == 1

    def test_one_entry_per_language(self):
        cache = PatternCache()
        assert cache.get("en").language == "en"
        assert cache.get("fr").language == "fr"
        assert cache.get("en") is not cache.get("fr")
        assert cache.get_stats()["size"] == 2

    def test_recompiles_when_registry_returns_new_patterns(self):
        records = {"en": build_language_patterns("en", {"numbers": {"one": "1"}})}
        cache = PatternCache(lambda language: records[language])

        first = cache.get("en")
        records["en"] = build_language_patterns("en", {"numbers": {"two": "2"}})
        second = cache.get("en")

        assert second is not first
        assert second.patterns is records["en"]
        assert cache.get_stats()["compilations"] == 2

    def test_recompiles_after_resources_are_cleared(self):
        cache = PatternCache()
        first = cache.get("en")

        clear_resource_caches()
        second = cache.get("en")

        assert second is not first
        assert cache.get("en") is second

    def test_clear_empties_the_cache(self):
        cache = PatternCache()
        cache.get("en")
        cache.clear()
        assert len(cache) == 0
        assert "en" not in cache

    def test_concurrent_first_use_compiles_once(self):
        cache = PatternCache()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: cache.get("de"), range(32)))

        assert all(result is results[0] for result in results)
        assert cache.get_stats()["compilations"] == 1

    def test_unsupported_language(self):
        cache = PatternCache()

        with pytest.raises(UnsupportedLanguageError) as exc_info:
            cache.get("xx")

        assert exc_info.value.language == "xx"
        assert "xx" in str(exc_info.value)
        assert isinstance(exc_info.value, KeyError)
        assert "xx" not in cache


class TestLanguageRegistry:
    def test_records_are_immutable(self):
        patterns = load_language_patterns("en")

        with pytest.raises(dataclasses.FrozenInstanceError):
            patterns.code = "fr"
        with pytest.raises(TypeError):
            patterns.numbers["eleventy"] = "110"

    def test_same_record_until_resources_reload(self):
        assert load_language_patterns("fr") is load_language_patterns("fr")

    def test_hyphenated_number_words_get_a_joined_alias(self):
        numbers = load_language_patterns("fr").numbers
        assert numbers["dix-sept"] == "17"
        assert numbers["dixsept"] == "17"

    def test_decimal_separator_style(self):
        assert not load_language_patterns("en").uses_decimal_comma
        for language in ["es", "fr", "de", "pt", "it"]:
            assert load_language_patterns(language).uses_decimal_comma, language

    def test_resolve_language(self):
        test_cases = [
            ("en", "en"),
            ("pt-BR", "pt"),
            ("pt_BR", "pt"),
            ("FR", "fr"),
            ("xx", "en"),
            ("", "en"),
            (None, "en"),
        ]

        for tag, expected in test_cases:
            result = resolve_language(tag, default="en")
            assert result == expected, f"Tag {tag!r} should resolve to '{expected}', got '{result}'"

    def test_malformed_resources_raise_configuration_error(self):
        malformed = [
            {"numbers": ["one", "two"]},
            {"numbers": {"one": "uno"}},
            {"operations": {"addition": "plus"}},
            {"operations": {"addition": ["plus", 3]}},
            {"phrases": {"add_to": ["add"]}},
            {"decimal_separator": "semicolon"},
        ]

        for resources in malformed:
            with pytest.raises(ConfigurationError):
                build_language_patterns("xx", resources)


class TestCompilation:
    def test_alternation_is_longest_first(self):
        assert build_alternation(["por", "dividido por", "por ciento"]).startswith(r"dividido\s+por")

    def test_multi_word_forms_tolerate_extra_spaces(self, en_compiled):
        assert en_compiled.division.search("6 divided   by 3")

    def test_empty_resources_compile_without_matchers(self):
        compiled = compile_language_patterns(build_language_patterns("xx", {}))

        assert compiled.number_words is None
        assert compiled.addition is None
        assert compiled.phrase_add_to is None
        assert compiled.percent_suffix is None

        pipeline = NormalizationPipeline(compiled)
        assert pipeline.run("5 plus 3") == "5 3"
        assert pipeline.run("20% of 150") == "(150 * 20 / 100)"
