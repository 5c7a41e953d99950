"""
================================================================================
Users Page Object (Async / Playwright)
================================================================================
"""

from __future__ import annotations

from playwright.async_api import Locator

from e2e_suite.ui_testing.framework.page_base import BasePage


class UsersPage(BasePage):
    """User list and user detail pages (async)."""

    URL_PATH = "/users"

    def user_entry(self, text: str) -> Locator:
        return self.page.get_by_text(text)

    async def open_user(self, user_id: str) -> None:
        await self.navigate_to(f"{self.URL_PATH}/{user_id}")
        await self.wait_for_page_load()
