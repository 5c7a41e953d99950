"""
================================================================================
Failure Artifacts
================================================================================

Trace, video and screenshot capture for browser contexts.

Policies (per artifact kind):
    off                never capture
    on                 always capture and keep
    retain-on-failure  capture every attempt, keep only when the test failed
    on-first-retry     capture only on the first rerun, keep it
    only-on-failure    screenshots only: take one when the test failed

Captured files land under `<artifacts_dir>/<test id>/attempt-<n>/` and are
attached to the Allure report.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

import allure
import pytest
from loguru import logger
from playwright.async_api import BrowserContext, Error as PlaywrightError, Page

from e2e_suite.common.config_loader import SuiteSettings

from .browser_manager import BrowserManager


CAPTURE_POLICIES = ("off", "on", "retain-on-failure", "on-first-retry", "only-on-failure")

# Per-phase reports stored by `pytest_runtest_makereport` in the suite conftest
PHASE_REPORT_KEY = pytest.StashKey[Dict[str, pytest.TestReport]]()


def _check_policy(policy: str) -> str:
    if policy not in CAPTURE_POLICIES:
        raise ValueError(f"Unknown capture policy {policy!r}, expected one of {CAPTURE_POLICIES}")
    return policy


def should_record(policy: str, attempt: int) -> bool:
    """Whether a trace/video must be recorded for this attempt (1-based)."""
    policy = _check_policy(policy)
    if policy in ("on", "retain-on-failure"):
        return True
    if policy == "on-first-retry":
        return attempt == 2
    return False


def should_keep(policy: str, attempt: int, failed: bool) -> bool:
    """Whether a recorded trace/video is kept once the test finished."""
    if not should_record(policy, attempt):
        return False
    if policy == "retain-on-failure":
        return failed
    return True


def should_screenshot(policy: str, failed: bool) -> bool:
    policy = _check_policy(policy)
    return policy == "on" or (policy == "only-on-failure" and failed)


def node_failed(node: pytest.Item) -> bool:
    """True when the setup or call phase of `node` has failed so far."""
    reports = node.stash.get(PHASE_REPORT_KEY, {})
    return any(report.failed for report in reports.values())


def slugify(nodeid: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "-", nodeid).strip("-")[:150]


class ArtifactRecorder:
    """Applies the configured capture policies to one context of one test."""

    def __init__(self, settings: SuiteSettings, node: pytest.Item):
        self.settings = settings
        self.node = node
        self.attempt = getattr(node, "execution_count", 1)
        self.output_dir = settings.artifacts_dir / slugify(node.nodeid) / f"attempt-{self.attempt}"
        self._tracing = False
        self._pages: List[Page] = []

    def context_options(self) -> Dict[str, Any]:
        if should_record(self.settings.video, self.attempt):
            return {"record_video_dir": str(self.output_dir / "videos")}
        return {}

    async def start(self, context: BrowserContext) -> None:
        context.on("page", self._pages.append)
        if should_record(self.settings.trace, self.attempt):
            await context.tracing.start(screenshots=True, snapshots=True, sources=True)
            self._tracing = True

    async def finish(self, context: BrowserContext) -> None:
        """Collect artifacts while the context is still open."""
        failed = node_failed(self.node)

        if should_screenshot(self.settings.screenshot, failed):
            for index, page in enumerate(self._pages):
                if page.is_closed():
                    continue
                try:
                    png = await page.screenshot(full_page=True)
                except PlaywrightError as e:
                    logger.warning(f"Failed to capture screenshot: {e}")
                    continue
                allure.attach(
                    png,
                    name=f"screenshot-{index}",
                    attachment_type=allure.attachment_type.PNG,
                )

        if self._tracing:
            self._tracing = False
            if should_keep(self.settings.trace, self.attempt, failed):
                trace_path = self.output_dir / "trace.zip"
                trace_path.parent.mkdir(parents=True, exist_ok=True)
                await context.tracing.stop(path=str(trace_path))
                allure.attach.file(str(trace_path), name="trace", extension="zip")
                logger.info(f"Trace saved: {trace_path}")
            else:
                await context.tracing.stop()

    async def finish_videos(self) -> None:
        """Keep or delete recorded videos. Call after the context is closed."""
        failed = node_failed(self.node)
        keep = should_keep(self.settings.video, self.attempt, failed)
        for page in self._pages:
            video = page.video
            if video is None:
                continue
            try:
                if keep:
                    allure.attach.file(
                        str(await video.path()),
                        name="video",
                        attachment_type=allure.attachment_type.WEBM,
                    )
                else:
                    await video.delete()
            except PlaywrightError as e:
                logger.warning(f"Failed to process video: {e}")


@asynccontextmanager
async def recorded_context(
    manager: BrowserManager,
    settings: SuiteSettings,
    node: pytest.Item,
    storage_state: Optional[Path] = None,
) -> AsyncIterator[BrowserContext]:
    """
    Open a context with artifact capture and always close it afterwards.

    The context is closed whatever the test outcome; artifact errors are
    logged and never replace the test's own result.
    """
    recorder = ArtifactRecorder(settings, node)
    context = await manager.new_context(
        storage_state=storage_state,
        **recorder.context_options(),
    )
    try:
        await recorder.start(context)
        yield context
    finally:
        try:
            await recorder.finish(context)
        except PlaywrightError as e:
            logger.warning(f"Failed to collect artifacts: {e}")
        finally:
            await context.close()
        await recorder.finish_videos()


__all__ = [
    "ArtifactRecorder",
    "CAPTURE_POLICIES",
    "PHASE_REPORT_KEY",
    "node_failed",
    "recorded_context",
    "should_keep",
    "should_record",
    "should_screenshot",
]
