#!/usr/bin/env python3
"""
Spoken-math normalizer.

Turns an ASR transcript into a canonical arithmetic expression:

    "add ten percent to two hundred"  ->  "(200 * (1 + 10 / 100))"
    "trois quarts de 100"             ->  "((3/4) * 100)"

Architecture:
- NormalizationPipeline: the ordered list of rewrite stages for one language
- normalize_spoken_math(): entry point over an already compiled pattern set
- SpokenMathNormalizer: facade owning a PatternCache, keyed by language code

The pipeline never raises for string input. Unmatched text passes through
and is dropped by the final cleanup if it is alphabetic.
"""
from __future__ import annotations

from typing import Any, List, Optional, Tuple

# Local imports - core/config
from ..core.config import DEFAULT_MAX_TRANSCRIPT_LENGTH, ConfigLoader, get_config, setup_logging
from ..core.logging import LogContext

# Local imports - normalization components
from .continuation import PreparedEquation, prepare_equation
from .language_patterns import resolve_language
from .pattern_cache import CompiledLanguageRegex, PatternCache, get_default_cache
from .pipeline import RewriteStage, build_stages

logger = setup_logging(__name__)


def _coerce_transcript(transcript: Any) -> str:
    if transcript is None:
        return ""
    if isinstance(transcript, str):
        return transcript
    return str(transcript)


def apply_length_guard(transcript: str, max_length: int) -> Optional[str]:
    """
    Return the truncated, lowercased transcript when it is too long, else None.

    Oversized input is not normalized at all: the first ``max_length``
    characters are returned lowercased and no stage runs.
    """
    if len(transcript) > max_length:
        logger.warning(
            f"Transcript of {len(transcript)} characters exceeds {max_length}, skipping normalization"
        )
        return transcript[:max_length].lower()
    return None


class NormalizationPipeline:
    """Fixed-order rewrite stages for one language"""

    def __init__(self, compiled: CompiledLanguageRegex, stages: Optional[List[RewriteStage]] = None):
        self.compiled = compiled
        self.stages = stages if stages is not None else build_stages(compiled)

    @property
    def language(self) -> str:
        return self.compiled.language

    def _apply(self, stage: RewriteStage, text: str) -> str:
        try:
            return stage(text)
        except Exception as e:
            # Skip the failing stage, keep its input
            logger.error(f"Stage '{stage.name}' failed for language '{self.language}': {e}")
            return text

    def run(self, text: str) -> str:
        for stage in self.stages:
            before = text
            text = self._apply(stage, text)
            if text != before:
                logger.debug(f"{stage.name}: '{before}' -> '{text}'")
        return text

    def trace(self, text: str) -> List[Tuple[str, str]]:
        """Output of every stage, in order. Used for debugging rewrite order."""
        steps = []
        for stage in self.stages:
            text = self._apply(stage, text)
            steps.append((stage.name, text))
        return steps

    def __repr__(self) -> str:
        return f"NormalizationPipeline(language={self.language!r}, stages={[s.name for s in self.stages]})"


_PIPELINES: dict[str, NormalizationPipeline] = {}


def get_pipeline(compiled: CompiledLanguageRegex) -> NormalizationPipeline:
    """Pipeline for a compiled pattern set, rebuilt when the set is recompiled."""
    pipeline = _PIPELINES.get(compiled.language)
    if pipeline is None or pipeline.compiled is not compiled:
        pipeline = NormalizationPipeline(compiled)
        _PIPELINES[compiled.language] = pipeline
    return pipeline


def normalize_spoken_math(
    transcript: Any, compiled: CompiledLanguageRegex, max_length: Optional[int] = None
) -> str:
    """
    Normalize one transcript with an already compiled pattern set.

    Args:
        transcript: Raw ASR transcript (non-strings are coerced, None is "")
        compiled: Compiled pattern set for the transcript's language
        max_length: Length guard; defaults to DEFAULT_MAX_TRANSCRIPT_LENGTH.
            Config files are not consulted.

    Returns:
        Canonical expression over digits, ``.``, ``+ - * / % ^ ( )`` and ``sqrt``

    """
    text = _coerce_transcript(transcript)
    if max_length is None:
        max_length = DEFAULT_MAX_TRANSCRIPT_LENGTH

    guarded = apply_length_guard(text, max_length)
    if guarded is not None:
        return guarded

    return get_pipeline(compiled).run(text)


class SpokenMathNormalizer:
    """
    Language-aware normalizer facade.

    Holds a :class:`PatternCache` (the process default unless one is
    injected) and one pipeline per language.
    """

    def __init__(self, cache: Optional[PatternCache] = None, config: Optional[ConfigLoader] = None):
        self.cache = cache if cache is not None else get_default_cache()
        self.config = config if config is not None else get_config()
        self._pipelines: dict[str, NormalizationPipeline] = {}

    def pipeline(self, language: str) -> NormalizationPipeline:
        """
        Pipeline for a supported language code.

        Raises:
            UnsupportedLanguageError: If the language has no resources
        """
        compiled = self.cache.get(language)
        pipeline = self._pipelines.get(language)
        if pipeline is None or pipeline.compiled is not compiled:
            pipeline = NormalizationPipeline(compiled)
            self._pipelines[language] = pipeline
        return pipeline

    def normalize(self, transcript: Any, language: Optional[str] = None) -> str:
        """Normalize ``transcript``; unknown or missing language tags fall back to the default."""
        text = _coerce_transcript(transcript)
        guarded = apply_length_guard(text, self.config.max_transcript_length)
        if guarded is not None:
            return guarded

        code = resolve_language(language, default=self.config.default_language)
        with LogContext(language=code):
            return self.pipeline(code).run(text)

    def prepare(
        self, transcript: Any, language: Optional[str] = None, last_result: Optional[str] = None
    ) -> PreparedEquation:
        """Normalize and prepare a follow-up equation against ``last_result``."""
        text = _coerce_transcript(transcript)
        normalized = self.normalize(text, language)
        return prepare_equation(text, normalized, last_result=last_result)
