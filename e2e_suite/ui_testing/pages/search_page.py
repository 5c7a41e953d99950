"""
================================================================================
Search Page Object (Async / Playwright)
================================================================================
"""

from __future__ import annotations

import allure
from playwright.async_api import Locator

from e2e_suite.ui_testing.framework.page_base import BasePage


class SearchPage(BasePage):
    """Search page with a debounced search box (async)."""

    URL_PATH = "/search"

    SEARCH_API = "/api/search"

    @property
    def search_box(self) -> Locator:
        return self.page.get_by_role("searchbox")

    @allure.step("Type search query '{query}'")
    async def type_query(self, query: str, delay: float = 50) -> None:
        """Type like a user, `delay` ms between keystrokes."""
        await self.search_box.press_sequentially(query, delay=delay)

    async def wait_for_debounce(self, settle_ms: float = 800) -> None:
        await self.page.wait_for_timeout(settle_ms)
