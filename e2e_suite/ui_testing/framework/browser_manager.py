"""
================================================================================
Browser Manager
================================================================================

One Playwright driver and one launched browser per worker and browser project.
Tests never share a context: each one gets a fresh context from
`new_context()`, optionally seeded from a saved session file, with the
configured device emulation and default timeouts already applied.

A project (`BrowserProject`) names a browser and an optional device; the
`ui.projects` list in the configuration is the default run matrix.

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Playwright,
)

from e2e_suite.common.config_loader import SuiteSettings


BROWSER_TYPES = ("chromium", "firefox", "webkit")

CHROMIUM_ARGS = [
    "--ignore-certificate-errors",
    "--disable-features=IsolateOrigins,site-per-process",
]

DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
    "viewport": {"width": 1920, "height": 1080},
    "ignore_https_errors": True,
}


class BrowserManager:
    """
    Owns a browser and every context opened from it.

    Usage:
        async with BrowserManager.from_settings(settings) as manager:
            context = await manager.new_context()
            page = await context.new_page()
            await page.goto("/dashboard")

        # Restore a saved login
        context = await manager.new_context(storage_state=".auth/session.json")
    """

    def __init__(
        self,
        browser_type: str = "chromium",
        headless: bool = True,
        device: Optional[str] = None,
        base_url: Optional[str] = None,
        action_timeout: Optional[int] = None,
        navigation_timeout: Optional[int] = None,
    ):
        """
        Args:
            browser_type: 'chromium', 'firefox' or 'webkit'
            headless: Launch without a visible window
            device: Playwright device descriptor name (e.g. 'Pixel 7')
            base_url: Resolves relative `page.goto()` targets
            action_timeout: Default ms for clicks, fills and waits
            navigation_timeout: Default ms for navigations
        """
        if browser_type not in BROWSER_TYPES:
            raise ValueError(
                f"Unsupported browser {browser_type!r}, expected one of {BROWSER_TYPES}"
            )
        self.browser_type = browser_type
        self.headless = headless
        self.device = device
        self.base_url = base_url
        self.action_timeout = action_timeout
        self.navigation_timeout = navigation_timeout

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    @classmethod
    def from_settings(
        cls,
        settings: SuiteSettings,
        browser_type: Optional[str] = None,
        **overrides: Any,
    ) -> "BrowserManager":
        options = {
            "headless": settings.headless,
            "device": settings.device,
            "base_url": settings.base_url,
            "action_timeout": settings.action_timeout,
            "navigation_timeout": settings.navigation_timeout,
        }
        options.update(overrides)
        return cls(browser_type=browser_type or settings.browser, **options)

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        self._playwright = await async_playwright().start()
        launch_options: Dict[str, Any] = {"headless": self.headless}
        if self.browser_type == "chromium":
            launch_options["args"] = CHROMIUM_ARGS

        try:
            self._browser = await getattr(self._playwright, self.browser_type).launch(**launch_options)
        except PlaywrightError:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless}, device={self.device})"
        )

    async def close(self) -> None:
        """Close leftover contexts, then the browser and the driver."""
        while self._contexts:
            context = self._contexts.pop()
            try:
                await context.close()
            except PlaywrightError as e:
                logger.warning(f"Failed to close browser context: {e}")

        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        logger.debug("Browser closed")

    def context_options(self, **options: Any) -> Dict[str, Any]:
        """Defaults, then the device descriptor, then `options`."""
        merged = dict(DEFAULT_CONTEXT_OPTIONS)
        if self.device:
            if self._playwright is None:
                raise RuntimeError("Browser not started. Call start() first.")
            try:
                descriptor = dict(self._playwright.devices[self.device])
            except KeyError:
                raise ValueError(f"Unknown device descriptor: {self.device!r}") from None
            descriptor.pop("default_browser_type", None)
            merged.update(descriptor)
        if self.base_url:
            merged["base_url"] = self.base_url
        merged.update(options)
        return merged

    async def new_context(
        self,
        storage_state: Optional[Union[str, Path]] = None,
        **options: Any,
    ) -> BrowserContext:
        """
        Open an isolated context (own cookies, localStorage and cache).

        Args:
            storage_state: Saved session file to seed the context from
            **options: Extra `Browser.new_context` options
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        if storage_state is not None:
            options["storage_state"] = str(storage_state)
            logger.debug(f"Restoring session state from: {storage_state}")

        context = await self._browser.new_context(**self.context_options(**options))
        if self.action_timeout is not None:
            context.set_default_timeout(self.action_timeout)
        if self.navigation_timeout is not None:
            context.set_default_navigation_timeout(self.navigation_timeout)

        self._contexts.append(context)
        context.on("close", lambda _: self._forget(context))
        return context

    def _forget(self, context: BrowserContext) -> None:
        if context in self._contexts:
            self._contexts.remove(context)

    async def save_storage_state(self, context: BrowserContext, path: Union[str, Path]) -> Path:
        """Write cookies and localStorage of `context` to `path`, creating parents."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        await context.storage_state(path=str(path))
        logger.info(f"Session state saved to: {path}")
        return path


@dataclass(frozen=True)
class BrowserProject:
    """A named browser plus optional device emulation that UI tests run in."""

    name: str
    browser: str = "chromium"
    device: Optional[str] = None

    def __post_init__(self):
        if self.browser not in BROWSER_TYPES:
            raise ValueError(
                f"Project {self.name!r}: unsupported browser {self.browser!r}, "
                f"expected one of {BROWSER_TYPES}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BrowserProject":
        """Build from a `ui.projects` entry; `name` defaults to the browser."""
        browser = data.get("browser", "chromium")
        return cls(
            name=str(data.get("name") or browser),
            browser=browser,
            device=data.get("device") or None,
        )


def select_projects(
    configured: Iterable[Dict[str, Any]] = (),
    names: Sequence[str] = (),
    browsers: Sequence[str] = (),
    device: Optional[str] = None,
    default_browser: str = "chromium",
    default_device: Optional[str] = None,
) -> List[BrowserProject]:
    """
    Resolve the projects of one run.

    Precedence:
        names            configured projects picked by name, in the given order
        browsers/device  one ad-hoc project per browser, all emulating `device`
        otherwise        every configured project, or one project of
                         `default_browser` and `default_device`
                         when none is configured

    Raises:
        ValueError: a name is not configured, or two projects share a name
    """
    projects = [BrowserProject.from_dict(entry) for entry in configured or ()]
    by_name: Dict[str, BrowserProject] = {}
    for project in projects:
        if project.name in by_name:
            raise ValueError(f"Duplicate browser project name: {project.name!r}")
        by_name[project.name] = project

    if names:
        unknown = [name for name in names if name not in by_name]
        if unknown:
            raise ValueError(
                f"Unknown browser project(s) {unknown}, configured: {list(by_name)}"
            )
        return [by_name[name] for name in dict.fromkeys(names)]

    if browsers or device:
        return [
            BrowserProject(
                name=f"{browser}-{device}" if device else browser,
                browser=browser,
                device=device,
            )
            for browser in dict.fromkeys(browsers or [default_browser])
        ]

    return projects or [
        BrowserProject(name=default_browser, browser=default_browser, device=default_device)
    ]


__all__ = [
    "BROWSER_TYPES",
    "BrowserManager",
    "BrowserProject",
    "select_projects",
]
