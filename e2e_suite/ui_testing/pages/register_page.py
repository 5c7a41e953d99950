"""
================================================================================
Registration Page Object (Async / Playwright)
================================================================================
"""

from __future__ import annotations

import re

import allure
from playwright.async_api import Locator

from e2e_suite.api_testing.framework.data_factory import UserRecord
from e2e_suite.ui_testing.framework.page_base import BasePage


class RegisterPage(BasePage):
    """Sign-up form page object (async)."""

    URL_PATH = "/register"

    ONBOARDING_URL = re.compile(r".*onboarding")

    @property
    def submit_button(self) -> Locator:
        return self.page.get_by_role("button", name=re.compile(r"create account", re.IGNORECASE))

    @property
    def duplicate_email_error(self) -> Locator:
        return self.page.get_by_text(re.compile(r"email already in use", re.IGNORECASE))

    def welcome_message(self, name: str) -> Locator:
        return self.page.get_by_text(f"Welcome, {name}")

    @allure.step("Register new user")
    async def register(self, user: UserRecord) -> None:
        """Fill every field of the form and submit it."""
        await self.page.get_by_label("Full Name").fill(user.name)
        await self.page.get_by_label("Email").fill(user.email)
        await self.page.get_by_label("Password", exact=True).fill(user.password)
        await self.page.get_by_label("Confirm Password").fill(user.password)
        await self.submit_button.click()
