"""
================================================================================
Session Bootstrap
================================================================================

One real interactive login per test run, persisted as Playwright storage
state (cookies + localStorage) for every worker to restore.

The state file is a single-writer / many-reader handoff:
    - the first worker of a run takes the file lock, logs in and writes
      the state plus a run marker
    - later workers of the same run find the marker and only read
    - nothing writes the file again until the next run

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

from filelock import FileLock, Timeout
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from e2e_suite.common.config_loader import SuiteSettings
from e2e_suite.ui_testing.pages.login_page import LoginPage

from .browser_manager import BrowserManager


FAILED_MARKER_PREFIX = "failed:"

# Longest time a worker waits for another worker's login to finish (seconds)
DEFAULT_LOCK_TIMEOUT = 300


class SessionBootstrapError(Exception):
    """Raised when the one-time login did not complete. Aborts the run."""
    pass


class SessionStateError(Exception):
    """Raised when persisted session state is missing or unreadable."""
    pass


def load_session_state(path: Path) -> Dict[str, Any]:
    """
    Read and sanity-check a storage state file.

    Raises:
        SessionStateError: missing file, invalid JSON, or no cookies/origins
    """
    if not path.exists():
        raise SessionStateError(
            f"No persisted session at {path}. It is written by the session "
            f"bootstrap; do not run with --skip-session-bootstrap on a clean checkout."
        )
    try:
        state = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise SessionStateError(f"Unreadable session state {path}: {e}") from e
    if not isinstance(state, dict) or "cookies" not in state or "origins" not in state:
        raise SessionStateError(f"{path} is not a Playwright storage state file")
    return state


class SessionBootstrapper:
    """
    Performs and persists the one-time login.

    Usage:
        bootstrapper = SessionBootstrapper(settings)
        state_path = bootstrapper.ensure(run_id)   # safe from every worker
    """

    def __init__(
        self,
        settings: SuiteSettings,
        browser_type: Optional[str] = None,
        headless: Optional[bool] = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ):
        self.settings = settings
        self.browser_type = browser_type or settings.browser
        self.headless = settings.headless if headless is None else headless
        self.lock_timeout = lock_timeout

        self.state_path = settings.session_state_path
        self.marker_path = self.state_path.with_name(self.state_path.name + ".run")
        self.lock_path = self.state_path.with_name(self.state_path.name + ".lock")

    async def bootstrap(self) -> Path:
        """
        Log in once through the UI and save the storage state.

        Raises:
            SessionBootstrapError: navigation/submission failed or the
                post-login URL never appeared
        """
        manager = BrowserManager.from_settings(
            self.settings,
            browser_type=self.browser_type,
            headless=self.headless,
            device=None,
        )
        logger.info(f"Session bootstrap: logging in at {self.settings.login_url}")
        try:
            async with manager:
                context = await manager.new_context()
                page = await context.new_page()
                login_page = LoginPage(page, base_url=self.settings.base_url)
                await login_page.navigate()
                await login_page.login(
                    self.settings.username,
                    self.settings.password,
                    wait_for=self.settings.post_login_url,
                )
                return await manager.save_storage_state(context, self.state_path)
        except PlaywrightError as e:
            raise SessionBootstrapError(
                f"Login at {self.settings.login_url} did not complete: {e}"
            ) from e

    def _read_marker(self) -> str:
        try:
            return self.marker_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return ""

    def _write_marker(self, value: str) -> None:
        self.marker_path.write_text(value, encoding="utf-8")

    def ensure(self, run_id: str) -> Path:
        """
        Make sure the state file of run `run_id` exists, logging in at most once.

        Returns:
            Path of the storage state file

        Raises:
            SessionBootstrapError: login failed now or earlier in the same run,
                or another worker held the lock for too long
        """
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with FileLock(str(self.lock_path), timeout=self.lock_timeout):
                marker = self._read_marker()
                if marker == run_id and self.state_path.exists():
                    logger.debug(f"Reusing session state of run {run_id}")
                    return self.state_path
                if marker == f"{FAILED_MARKER_PREFIX}{run_id}":
                    raise SessionBootstrapError(
                        "Session bootstrap already failed in another worker of this run"
                    )

                try:
                    path = asyncio.run(self.bootstrap())
                except SessionBootstrapError:
                    self._write_marker(f"{FAILED_MARKER_PREFIX}{run_id}")
                    raise
                self._write_marker(run_id)
                logger.info(f"Session bootstrap complete for run {run_id}")
                return path
        except Timeout as e:
            raise SessionBootstrapError(
                f"Timed out after {self.lock_timeout}s waiting for {self.lock_path}"
            ) from e


__all__ = [
    "SessionBootstrapError",
    "SessionBootstrapper",
    "SessionStateError",
    "load_session_state",
]
