"""Pytest setup and a rich end-of-run table of normalization mismatches."""
from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Set BEFORE importing spoken_math: module loggers read it at import time
os.environ.setdefault("LOG_LEVEL", "CRITICAL")

# Make the src layout importable without an editable install
sys.path.insert(0, str(Path(__file__).parent.parent.joinpath("src").resolve()))

console = Console()

MISMATCH_MESSAGE = re.compile(r"Input '([^']*)' should normalize to '([^']*)', got '([^']*)'")
USER_PROPERTY = "normalization_check"


@dataclass
class Mismatch:
    test: str
    text: str
    expected: str
    actual: str


@dataclass
class MismatchReport:
    """Normalization checks seen during the run; only mismatches are kept."""

    checked: int = 0
    mismatches: list[Mismatch] = field(default_factory=list)

    def add(self, test: str, text: str, expected: str, actual: str) -> None:
        self.checked += 1
        if expected != actual:
            self.mismatches.append(Mismatch(test.rsplit("::", 1)[-1], text, expected, actual))

    def render(self) -> None:
        if not self.mismatches:
            console.print(Panel.fit(f"[green]{self.checked} normalization checks, no mismatches[/green]"))
            return

        table = Table("Test", "Input", "Expected", "Actual", title="Normalization mismatches", header_style="bold")
        for row in self.mismatches:
            table.add_row(
                f"[cyan]{row.test}[/cyan]", repr(row.text), f"[green]{row.expected!r}[/green]", f"[red]{row.actual!r}[/red]"
            )
        console.print(table)
        console.print(f"[red]{len(self.mismatches)}[/red] of {self.checked} checks mismatched")


report = MismatchReport()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Collect recorded checks, or parse the assertion message when none were recorded."""
    outcome = yield
    result = outcome.get_result()
    if result.when != "call" or "normalization" not in item.nodeid:
        return

    recorded = [value for name, value in item.user_properties if name == USER_PROPERTY]
    for check in recorded:
        report.add(item.nodeid, *check)

    if not recorded and result.failed:
        found = MISMATCH_MESSAGE.search(str(result.longrepr))
        if found is not None:
            report.add(item.nodeid, *found.groups())


def pytest_sessionfinish(session, exitstatus):
    if report.checked:
        console.print()
        report.render()


def assert_normalized(input_text: str, expected: str, actual: str, item=None):
    """Assert equality, recording the check on ``item`` for the end-of-run table."""
    if item is not None:
        item.user_properties.append((USER_PROPERTY, (input_text, expected, actual)))
    assert expected == actual, f"Input '{input_text}' should normalize to '{expected}', got '{actual}'"


# ==============================================================================
# FIXTURES
# ==============================================================================


@pytest.fixture(scope="session")
def normalizer():
    """Session-wide normalizer on the default pattern cache."""
    from spoken_math.normalization.normalizer import SpokenMathNormalizer

    return SpokenMathNormalizer()


@pytest.fixture(scope="session")
def normalize(normalizer):
    """``normalize(text, language="en")`` with result caching for repeated inputs."""
    cache = {}

    def cached_normalize(text, language="en"):
        key = (text, language)
        if key not in cache:
            cache[key] = normalizer.normalize(text, language)
        return cache[key]

    return cached_normalize


@pytest.fixture
def compiled():
    """Factory for compiled pattern sets: ``compiled("fr")``."""
    from spoken_math.normalization.pattern_cache import get_compiled

    return get_compiled


@pytest.fixture
def en_compiled(compiled):
    return compiled("en")


@pytest.fixture
def fresh_config():
    """Drop the global config before and after the test."""
    from spoken_math.core.config import reset_config

    reset_config()
    yield
    reset_config()


@pytest.fixture
def check_normalized(request):
    """``check_normalized(input, expected, actual)`` recorded against the running test."""

    def _check(input_text: str, expected: str, actual: str):
        assert_normalized(input_text, expected, actual, item=request.node)

    return _check
