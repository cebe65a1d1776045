"""
Configuration Management Module
Handles loading and validation of environment variables, rules and settings
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List

from dotenv import load_dotenv

from ..modules.link_data import Rule
from ..modules.scan_context import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_MAX_MATCHES_PER_DOCUMENT,
)


class ConfigurationError(ValueError):
    """Raised when the rule configuration cannot be read or has the wrong shape."""


@dataclass
class DebugConfig:
    """Configuration for debug output and logging"""
    enabled: bool
    file_logging: bool
    log_level: str
    log_file: str
    log_file_max_size: int  # megabytes
    log_format: str  # text, json


@dataclass
class ScanConfig:
    """Configuration for scan limits"""
    chunk_size: int
    debounce_ms: int
    max_matches_per_document: int


class Config:
    """Main configuration class"""

    def __init__(self, env_file: str = ".env"):
        """
        Initialize configuration from environment file

        Args:
            env_file: Path to environment file (default: .env)
        """
        load_dotenv(env_file)

        self.debug = self._load_debug_config()
        self.scan = self._load_scan_config()
        self.rules = self._load_rules()

    def _load_debug_config(self) -> DebugConfig:
        """Load debug configuration"""
        return DebugConfig(
            enabled=self._get_bool("PATTERNLINKS_DEBUG", False),
            file_logging=self._get_bool("PATTERNLINKS_FILE_LOGGING", False),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "logs/pattern-links-debug.log"),
            log_file_max_size=self._get_int("LOG_FILE_MAX_SIZE", 5),
            log_format=os.getenv("LOG_FORMAT", "text").lower(),
        )

    def _load_scan_config(self) -> ScanConfig:
        """Load scan limits"""
        return ScanConfig(
            chunk_size=self._get_int("CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            debounce_ms=self._get_int("DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS),
            max_matches_per_document=self._get_int(
                "MAX_MATCHES_PER_DOCUMENT", DEFAULT_MAX_MATCHES_PER_DOCUMENT
            ),
        )

    def _load_rules(self) -> List[Rule]:
        """
        Load rules from PATTERNLINKS_RULES (inline JSON) or from the JSON file
        named by PATTERNLINKS_RULES_FILE.

        Raises:
            ConfigurationError: If the JSON cannot be read or parsed.
        """
        inline = os.getenv("PATTERNLINKS_RULES")
        if inline:
            return parse_rules(self._parse_json(inline, "PATTERNLINKS_RULES"))

        rules_file = Path(os.getenv("PATTERNLINKS_RULES_FILE", "patternlinks.json"))
        if not rules_file.exists():
            return []
        return load_rules_file(str(rules_file))

    @staticmethod
    def _parse_json(content: str, source: str) -> Any:
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {source}: {e}") from e

    @staticmethod
    def _get_bool(key: str, default: bool = False) -> bool:
        """Convert environment variable to boolean"""
        value = os.getenv(key, str(default)).lower()
        return value in ('true', '1', 'yes', 'on')

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}") from e

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if configuration is valid

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.rules:
            raise ValueError(
                "No rules configured. Set PATTERNLINKS_RULES or PATTERNLINKS_RULES_FILE."
            )

        if self.scan.chunk_size <= 0:
            raise ValueError("CHUNK_SIZE must be positive")

        if self.scan.max_matches_per_document <= 0:
            raise ValueError("MAX_MATCHES_PER_DOCUMENT must be positive")

        if self.debug.log_format not in ("text", "json"):
            raise ValueError(f"LOG_FORMAT must be 'text' or 'json', got {self.debug.log_format!r}")

        return True


def parse_rules(data: Any) -> List[Rule]:
    """
    Turn decoded rule configuration into Rule objects.

    Accepts either a list of rule objects or ``{"rules": [...]}``.  Entries
    missing ``linkPattern`` or ``linkTarget`` are dropped.

    Raises:
        ConfigurationError: If *data* is neither shape.
    """
    if isinstance(data, dict):
        data = data.get("rules", [])
    if not isinstance(data, list):
        raise ConfigurationError("Rule configuration must be a list of rule objects")

    rules: List[Rule] = []
    for entry in data:
        rule = Rule.from_config(entry)
        if rule is not None:
            rules.append(rule)
    return rules


def load_rules_file(path: str) -> List[Rule]:
    """Read and parse a JSON rules file."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read rules file {path}: {e}") from e
    return parse_rules(Config._parse_json(content, path))

