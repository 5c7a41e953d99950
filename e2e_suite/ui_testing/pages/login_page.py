"""
================================================================================
Login Page Object (Async / Playwright)
================================================================================

Login form driven through accessible labels and roles, shared by the
session bootstrapper and the `fresh_login_page` fixture.

================================================================================
"""

from __future__ import annotations

import re
from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Locator

from e2e_suite.ui_testing.framework.page_base import BasePage


class LoginPage(BasePage):
    """Login page object (async)."""

    URL_PATH = "/login"

    @property
    def email_input(self) -> Locator:
        return self.page.get_by_label("Email")

    @property
    def password_input(self) -> Locator:
        return self.page.get_by_label("Password")

    @property
    def submit_button(self) -> Locator:
        return self.page.get_by_role("button", name=re.compile(r"log in", re.IGNORECASE))

    @property
    def error_message(self) -> Locator:
        return self.page.get_by_role("alert")

    @allure.step("Login (username={username})")
    async def login(
        self,
        username: str,
        password: str,
        wait_for: Optional[str] = "**/dashboard",
    ) -> None:
        """
        Submit the login form.

        Args:
            username: Email used as login
            password: Password
            wait_for: URL glob of the authenticated landing page. A timeout
                      waiting for it propagates to the caller.
        """
        if "/login" not in (self.page.url or ""):
            await self.navigate()

        await self.email_input.fill(username)
        await self.password_input.fill(password)
        await self.submit_button.click()

        if wait_for:
            await self.page.wait_for_url(wait_for)
            logger.debug(f"Logged in as {username}, landed on {self.page.url}")
