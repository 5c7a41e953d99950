"""
================================================================================
Core Fixtures
================================================================================

Configuration and browser lifecycle.

    config            session   ConfigLoader singleton
    suite_settings    session   SuiteSettings with --headed/--device applied
    browser_project   session   parametrized by ui.projects, --project, --browser (see conftest)
    browser_manager   session   Playwright + one browser per browser_project
    browser           session   the launched Browser
    context           function  isolated context with artifact capture
    page              function  new page in `context`

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import dataclasses

from playwright.async_api import expect

from e2e_suite.common.config_loader import ConfigLoader, SuiteSettings
from e2e_suite.ui_testing.framework.artifacts import recorded_context
from e2e_suite.ui_testing.framework.browser_manager import BrowserManager, BrowserProject

from .registry import FixtureSet


core = FixtureSet("core")


@core.fixture(scope="session")
def config() -> ConfigLoader:
    return ConfigLoader()


def apply_cli_overrides(settings: SuiteSettings, pytestconfig) -> SuiteSettings:
    """Apply --headed and --device on top of configured settings."""
    overrides = {}
    if pytestconfig.getoption("headed", default=False):
        overrides["headless"] = False
    device = pytestconfig.getoption("device", default=None)
    if device:
        overrides["device"] = device
    return dataclasses.replace(settings, **overrides) if overrides else settings


@core.fixture(scope="session")
def suite_settings(config, pytestconfig) -> SuiteSettings:
    """Settings from config files and environment, then command line overrides."""
    return apply_cli_overrides(SuiteSettings.from_config(config), pytestconfig)


@core.fixture(scope="session")
def browser_project(suite_settings) -> BrowserProject:
    """Single project from settings; conftest parametrizes the real matrix."""
    return BrowserProject(
        name=suite_settings.browser,
        browser=suite_settings.browser,
        device=suite_settings.device,
    )


@core.fixture(scope="session")
async def browser_manager(suite_settings, browser_project):
    """One browser per worker and browser project, closed at session end."""
    expect.set_options(timeout=suite_settings.expect_timeout)
    async with BrowserManager.from_settings(
        suite_settings,
        browser_type=browser_project.browser,
        device=browser_project.device,
    ) as manager:
        yield manager


@core.fixture(scope="session")
def browser(browser_manager):
    return browser_manager.browser


@core.fixture
async def context(browser_manager, suite_settings, request):
    async with recorded_context(browser_manager, suite_settings, request.node) as ctx:
        yield ctx


@core.fixture
async def page(context):
    return await context.new_page()


__all__ = ["apply_cli_overrides", "core"]
