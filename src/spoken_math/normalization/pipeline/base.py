"""Base rewrite stage shared by every normalization step."""

from abc import ABC, abstractmethod

from ..pattern_cache import CompiledLanguageRegex


class RewriteStage(ABC):
    """One pure ``str -> str`` step of the normalization pipeline.

    Stages are built for a single language and never mutate the compiled
    patterns they are given.
    """

    name: str = "stage"

    def __init__(self, compiled: CompiledLanguageRegex):
        self.compiled = compiled

    @abstractmethod
    def rewrite(self, text: str) -> str:
        """Return the rewritten text. Unmatched input passes through unchanged."""
        pass

    def __call__(self, text: str) -> str:
        return self.rewrite(text)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(language={self.compiled.language!r})"
