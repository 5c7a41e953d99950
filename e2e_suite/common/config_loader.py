"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Base YAML configuration plus an optional per-environment overlay
    - Environment variable override (API_BASE_URL overrides api.base_url)
    - Conventional aliases (BASE_URL, TEST_USER, TEST_PASS)
    - Dot notation path access with default values
    - Typed `SuiteSettings` view consumed by fixtures

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from loguru import logger


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Default configuration file paths
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "config.yaml"

# Extra environment variable names accepted for a key, checked before the
# derived name (ui.base_url -> UI_BASE_URL).
ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "ui.base_url": ("BASE_URL",),
    "auth.username": ("TEST_USER",),
    "auth.password": ("TEST_PASS",),
}


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge `override` into a copy of `base`; nested mappings merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def coerce(value: str, reference: Any) -> Any:
    """
    Convert an environment string to the type of `reference`.

    Booleans accept true/1/yes/on. Numbers that do not parse stay strings.
    """
    if isinstance(reference, bool):
        return value.strip().lower() in ("true", "1", "yes", "on")
    for kind in (int, float):
        if isinstance(reference, kind):
            try:
                return kind(value)
            except ValueError:
                return value
    return value


def env_names(key: str) -> Tuple[str, ...]:
    """Environment variables consulted for `key`, aliases first."""
    return ENV_ALIASES.get(key, ()) + (key.upper().replace(".", "_"),)


def read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping")
    logger.debug(f"Loaded configuration from: {path}")
    return data


class ConfigLoader:
    """
    Process-wide configuration.

    Lookup order for `get("api.base_url")`:
        1. Environment variables (aliases first, then API_BASE_URL)
        2. config/<ENVIRONMENT>.yaml overlay
        3. config/config.yaml
        4. The caller's default

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("api.base_url", "http://localhost:3000/api")
        'https://staging.example.com/api'
        >>> config.get("runner.retries", 0)
        2
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        # One instance per process, so each xdist worker reads the files once.
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if self._initialized:
            return
        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        config = read_yaml(self._config_path)
        env = os.getenv("ENVIRONMENT") or os.getenv("ENV")
        overlay = self._config_path.parent / f"{env}.yaml" if env else None
        if overlay is not None and overlay.exists():
            config = deep_merge(config, read_yaml(overlay))
            logger.debug(f"Merged environment config: {overlay}")
        self._config = config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Value at a dot-notation path, or `default`.

        Environment strings are coerced to the type of `default`.
        """
        for name in env_names(key):
            raw = os.environ.get(name)
            if raw is not None:
                return raw if default is None else coerce(raw, default)

        node: Any = self._config
        for part in key.split("."):
            node = node.get(part) if isinstance(node, dict) else None
            if node is None:
                return default
        return node

    def get_section(self, section: str) -> Dict[str, Any]:
        return self._config.get(section, {})

    def reload(self) -> None:
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    @classmethod
    def reset(cls) -> None:
        """Forget the singleton so the next ConfigLoader() reads the files again."""
        cls._instance = None
        cls._config = {}


def _resolve_path(value: Any) -> Path:
    path = Path(value)
    return path if path.is_absolute() else PROJECT_ROOT / path


@dataclass(frozen=True)
class SuiteSettings:
    """Typed, immutable view of the configuration used by fixtures."""

    base_url: str = "http://localhost:3000"
    api_base_url: str = "http://localhost:3000/api"
    api_token: str = ""
    username: str = "admin@example.com"
    password: str = "password123"
    login_path: str = "/login"
    post_login_url: str = "**/dashboard"
    session_state_path: Path = PROJECT_ROOT / ".auth" / "session.json"
    browser: str = "chromium"
    headless: bool = True
    device: Optional[str] = None
    action_timeout: int = 15_000
    navigation_timeout: int = 30_000
    expect_timeout: int = 10_000
    trace: str = "on-first-retry"
    video: str = "on-first-retry"
    screenshot: str = "only-on-failure"
    artifacts_dir: Path = PROJECT_ROOT / "test-results"
    skip_if_unreachable: bool = True

    @property
    def login_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.login_path}"

    @classmethod
    def from_config(cls, config: ConfigLoader) -> "SuiteSettings":
        """Build settings from a ConfigLoader, falling back to demo-safe defaults."""
        defaults = cls()
        return cls(
            base_url=config.get("ui.base_url", defaults.base_url),
            api_base_url=config.get("api.base_url", defaults.api_base_url),
            api_token=config.get("api.token", defaults.api_token),
            username=config.get("auth.username", defaults.username),
            password=config.get("auth.password", defaults.password),
            login_path=config.get("auth.login_path", defaults.login_path),
            post_login_url=config.get("auth.post_login_url", defaults.post_login_url),
            session_state_path=_resolve_path(
                config.get("auth.session_state_path", defaults.session_state_path)
            ),
            browser=config.get("ui.browser", defaults.browser),
            headless=config.get("ui.headless", defaults.headless),
            device=config.get("ui.device") or None,
            action_timeout=config.get("ui.action_timeout", defaults.action_timeout),
            navigation_timeout=config.get("ui.navigation_timeout", defaults.navigation_timeout),
            expect_timeout=config.get("ui.expect_timeout", defaults.expect_timeout),
            trace=config.get("ui.trace", defaults.trace),
            video=config.get("ui.video", defaults.video),
            screenshot=config.get("ui.screenshot", defaults.screenshot),
            artifacts_dir=_resolve_path(config.get("ui.artifacts_dir", defaults.artifacts_dir)),
            skip_if_unreachable=config.get(
                "ui.skip_if_unreachable", defaults.skip_if_unreachable
            ),
        )


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "SuiteSettings",
    "DEFAULT_CONFIG_PATH",
    "PROJECT_ROOT",
]
