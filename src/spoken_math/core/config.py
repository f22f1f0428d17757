#!/usr/bin/env python3
"""
JSONC configuration for the spoken-math normalizer.

Lookup order, first hit wins:
1. the file named by ``SPOKEN_MATH_CONFIG``
2. ``spoken_math.jsonc`` or ``spoken_math.json`` in the working directory
3. the ``config.json`` shipped inside the package
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Iterator

# Length guard applied before any rewrite. Inputs beyond it are truncated and lowercased only.
DEFAULT_MAX_TRANSCRIPT_LENGTH = 1000
DEFAULT_LANGUAGE = "en"

CONFIG_ENV_VAR = "SPOKEN_MATH_CONFIG"
LOCAL_CONFIG_NAMES = ("spoken_math.jsonc", "spoken_math.json")
PACKAGED_CONFIG = Path(__file__).resolve().parent.parent / "config.json"

_LINE_COMMENT = re.compile(r"^\s*//.*$", re.MULTILINE)


class ConfigurationError(Exception):
    """A config file is missing, unreadable, or holds values the normalizer cannot use."""


def _candidate_paths() -> Iterator[Path]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        yield Path(env_path)
        return
    cwd = Path.cwd()
    for name in LOCAL_CONFIG_NAMES:
        local = cwd / name
        if local.exists():
            yield local
            return
    yield PACKAGED_CONFIG


def _read_jsonc(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    try:
        data = json.loads(_LINE_COMMENT.sub("", raw))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root in {path} must be an object, got {type(data).__name__}")
    return data


class ConfigLoader:
    """Settings tree read from one JSONC file, with dotted-path access."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        path = Path(config_path) if config_path is not None else next(_candidate_paths())
        self._config = _read_jsonc(path)
        self.config_file = str(path)
        self.project_dir = str(path.parent)
        self._check_normalizer_section()

    def _check_normalizer_section(self) -> None:
        length = self.max_transcript_length
        if isinstance(length, bool) or not isinstance(length, int) or length < 1:
            raise ConfigurationError(
                f"normalizer.max_transcript_length must be a positive integer, got {length!r}"
            )
        language = self.default_language
        if not isinstance(language, str) or not language:
            raise ConfigurationError(f"normalizer.default_language must be a non-empty string, got {language!r}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """Look up ``"section.key"``; ``default`` when any part is missing."""
        node: Any = self._config
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key_path: str, value: Any) -> None:
        """In-memory override; the file on disk is left alone."""
        *parents, leaf = key_path.split(".")
        node = self._config
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

    def __getitem__(self, key: str) -> Any:
        return self._config[key]

    @property
    def max_transcript_length(self) -> int:
        return self.get("normalizer.max_transcript_length", DEFAULT_MAX_TRANSCRIPT_LENGTH)

    @property
    def default_language(self) -> str:
        return self.get("normalizer.default_language", DEFAULT_LANGUAGE)

    @property
    def log_level(self) -> str:
        return str(self.get("logging.level", "WARNING")).upper()

    @property
    def log_to_console(self) -> bool:
        return bool(self.get("logging.console", True))

    @property
    def log_to_file(self) -> bool:
        return bool(self.get("logging.file", False))

    @property
    def log_dir(self) -> str:
        return str(Path(self.project_dir) / self.get("logging.directory", "logs"))


_config_loader: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Process-wide settings, loaded on first use."""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_config(config_path: str | Path | None = None) -> ConfigLoader:
    return ConfigLoader(config_path)


def reset_config() -> None:
    """Forget the cached settings so the next get_config() reads the files again."""
    global _config_loader
    _config_loader = None


# ==============================================================================
# LOGGING FACTORY
# ==============================================================================


def setup_logging(
    module_name: str,
    log_level: str | None = None,
    include_console: bool | None = None,
    include_file: bool | None = None,
) -> logging.LoggerAdapter:
    """
    Module logger wired to the configured level and outputs.

    Explicit arguments win over ``LOG_LEVEL``, which wins over the config file.
    """
    from .logging import get_logger

    config = get_config()
    return get_logger(
        name=module_name,
        log_level=log_level or os.environ.get("LOG_LEVEL", config.log_level),
        include_console=config.log_to_console if include_console is None else include_console,
        include_file=config.log_to_file if include_file is None else include_file,
        log_dir=config.log_dir,
    )
