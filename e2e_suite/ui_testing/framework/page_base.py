"""
================================================================================
Base Page Object
================================================================================

Every page object wraps one Playwright page and knows its own path below the
application base URL. Locators are exposed as properties so assertions use
Playwright's web-first `expect` with the configured assertion timeout.

================================================================================
"""

from __future__ import annotations

from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Page


class BasePage:
    """
    Base class for all page objects.

    Usage:
        class ProductsPage(BasePage):
            URL_PATH = "/products"

            @property
            def empty_state(self):
                return self.page.get_by_text("No products found")
    """

    URL_PATH: str = "/"

    def __init__(self, page: Page, base_url: str):
        self.page = page
        self.base_url = base_url.rstrip("/")

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.URL_PATH}"

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def navigate(self, wait_until: str = "load") -> None:
        """
        Open this page.

        Args:
            wait_until: 'load', 'domcontentloaded', 'networkidle' or 'commit'
        """
        await self.navigate_to(self.URL_PATH, wait_until=wait_until)

    async def navigate_to(self, path: str, wait_until: str = "load") -> None:
        with allure.step(f"Navigate to {path}"):
            await self.page.goto(self.url_for(path), wait_until=wait_until)
            logger.debug(f"Navigated to: {self.page.url}")

    async def wait_for_page_load(
        self,
        state: str = "networkidle",
        timeout: Optional[int] = None,
    ) -> None:
        """Wait for a load state; `timeout` in ms, context default when None."""
        await self.page.wait_for_load_state(state, timeout=timeout)

    async def attach_screenshot(self, name: str, full_page: bool = False) -> bytes:
        """Screenshot the page and attach it to the current Allure step."""
        png = await self.page.screenshot(full_page=full_page)
        allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)
        logger.debug(f"Screenshot attached: {name}")
        return png


__all__ = ["BasePage"]
