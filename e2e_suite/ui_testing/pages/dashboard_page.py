"""
================================================================================
Dashboard Page Object (Async / Playwright)
================================================================================
"""

from __future__ import annotations

import re

import allure
from playwright.async_api import Locator

from e2e_suite.ui_testing.framework.page_base import BasePage


class DashboardPage(BasePage):
    """Dashboard page object (async)."""

    URL_PATH = "/dashboard"

    STATS_API = "/api/dashboard/stats"

    @property
    def heading(self) -> Locator:
        return self.page.get_by_role("heading", name=re.compile(r"dashboard", re.IGNORECASE))

    @property
    def alert(self) -> Locator:
        return self.page.get_by_role("alert")

    @property
    def error_message(self) -> Locator:
        return self.page.get_by_text(re.compile(r"something went wrong", re.IGNORECASE))

    @property
    def user_avatar(self) -> Locator:
        return self.page.get_by_test_id("user-avatar")

    @property
    def banner(self) -> Locator:
        return self.page.get_by_role("banner")

    @property
    def logout_button(self) -> Locator:
        return self.page.get_by_role("button", name=re.compile(r"log ?out", re.IGNORECASE))

    @allure.step("Logout")
    async def logout(self) -> None:
        await self.logout_button.click()
        await self.page.wait_for_url(re.compile(r".*login"))
