"""
================================================================================
Auth Fixtures
================================================================================

Authenticated browser state for tests.

    session_state_path      validated path of the bootstrapped session
    storage_state_page      page in a new context restored from that session
    authenticated_context   restored context, for tests that open their own pages
    fresh_login_page        the test's `page` after a real login through the UI

Restoring never logs in again; the login happens once per run in the
session bootstrap (see e2e_suite/conftest.py).

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger
from playwright.async_api import Error as PlaywrightError

from e2e_suite.ui_testing.framework.artifacts import recorded_context
from e2e_suite.ui_testing.framework.session_bootstrap import load_session_state
from e2e_suite.ui_testing.pages.login_page import LoginPage

from .registry import FixtureSet


auth = FixtureSet("auth")

CLEAR_STORAGE_SCRIPT = "() => { window.localStorage.clear(); window.sessionStorage.clear(); }"


@auth.fixture(scope="session")
def session_state_path(suite_settings) -> Path:
    """
    Path of the persisted session state.

    Raises:
        SessionStateError: the bootstrap did not produce a usable file
    """
    path = suite_settings.session_state_path
    load_session_state(path)
    return path


@auth.fixture
async def authenticated_context(browser_manager, suite_settings, session_state_path, request):
    async with recorded_context(
        browser_manager,
        suite_settings,
        request.node,
        storage_state=session_state_path,
    ) as ctx:
        yield ctx


@auth.fixture
async def storage_state_page(browser_manager, suite_settings, session_state_path, request):
    """Already-authenticated page opened on the application root."""
    async with recorded_context(
        browser_manager,
        suite_settings,
        request.node,
        storage_state=session_state_path,
    ) as ctx:
        page = await ctx.new_page()
        await page.goto(suite_settings.base_url)
        yield page


@auth.fixture
async def fresh_login_page(page, suite_settings):
    """
    Log in through the login form on the test's own page.

    For tests of the login flow itself. Browser storage is cleared at
    teardown so nothing leaks into later use of the page.
    """
    login_page = LoginPage(page, base_url=suite_settings.base_url)
    await login_page.navigate()
    await login_page.login(
        suite_settings.username,
        suite_settings.password,
        wait_for=suite_settings.post_login_url,
    )
    yield page

    if page.is_closed():
        return
    try:
        await page.evaluate(CLEAR_STORAGE_SCRIPT)
    except PlaywrightError as e:
        logger.warning(f"Failed to clear browser storage: {e}")


__all__ = ["auth"]
