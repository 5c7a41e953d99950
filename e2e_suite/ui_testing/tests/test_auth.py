"""
================================================================================
Authentication UI Tests (Async / Playwright)
================================================================================

Covers the three ways a test gets an authenticated browser:
  - storage_state_page: restored from the bootstrapped session (most tests)
  - fresh_login_page: real login through the form (login flow tests)
  - authenticated_context: restored context for multi-tab scenarios

================================================================================
"""

import re

import allure
import pytest
from playwright.async_api import expect

from e2e_suite.ui_testing.pages.dashboard_page import DashboardPage
from e2e_suite.ui_testing.pages.login_page import LoginPage


pytestmark = [pytest.mark.asyncio(loop_scope="session"), pytest.mark.auth]


@allure.epic("UI Testing")
@allure.feature("Authentication")
class TestSessionRestore:
    """Dashboard access through the restored session."""

    @allure.story("Session Restore")
    @allure.title("Restored session lands on the dashboard")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.P0
    @pytest.mark.smoke
    async def test_restored_session_lands_on_dashboard(self, storage_state_page):
        await expect(storage_state_page).to_have_url(re.compile(r".*dashboard"))

    @allure.story("Session Restore")
    @allure.title("User avatar is shown when logged in")
    @pytest.mark.P1
    async def test_user_avatar_visible(self, storage_state_page, suite_settings):
        dashboard = DashboardPage(storage_state_page, base_url=suite_settings.base_url)
        await expect(dashboard.user_avatar).to_be_visible()

    @allure.story("Session Restore")
    @allure.title("Header shows the logged-in username")
    @pytest.mark.P1
    async def test_header_shows_username(self, storage_state_page, suite_settings):
        dashboard = DashboardPage(storage_state_page, base_url=suite_settings.base_url)
        await expect(dashboard.banner).to_contain_text(suite_settings.username)

    @allure.story("Isolation")
    @allure.title("Two restored contexts are authenticated and independent")
    @pytest.mark.P1
    async def test_restored_contexts_are_independent(
        self,
        storage_state_page,
        authenticated_context,
        suite_settings,
    ):
        other = await authenticated_context.new_page()
        await other.goto(f"{suite_settings.base_url}/dashboard")

        with allure.step("Both contexts are authenticated"):
            for page in (storage_state_page, other):
                await expect(
                    DashboardPage(page, base_url=suite_settings.base_url).user_avatar
                ).to_be_visible()

        with allure.step("Storage written in one context is invisible in the other"):
            assert storage_state_page.context is not authenticated_context
            await other.evaluate("() => window.localStorage.setItem('e2e-isolation', '1')")
            leaked = await storage_state_page.evaluate(
                "() => window.localStorage.getItem('e2e-isolation')"
            )
            assert leaked is None


@allure.epic("UI Testing")
@allure.feature("Authentication")
class TestLoginFlow:
    """Real login per test."""

    @allure.story("Happy Path")
    @allure.title("Login with valid credentials lands on dashboard")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.P0
    @pytest.mark.smoke
    async def test_login_lands_on_dashboard(self, fresh_login_page, suite_settings):
        dashboard = DashboardPage(fresh_login_page, base_url=suite_settings.base_url)
        await expect(fresh_login_page).to_have_url(re.compile(r".*dashboard"))
        await expect(dashboard.heading).to_be_visible()

    @allure.story("Happy Path")
    @allure.title("User can log out after fresh login")
    @pytest.mark.P1
    async def test_logout_after_login(self, fresh_login_page, suite_settings):
        dashboard = DashboardPage(fresh_login_page, base_url=suite_settings.base_url)
        await dashboard.logout()
        await expect(fresh_login_page).to_have_url(re.compile(r".*login"))

    @allure.story("Negative Path")
    @allure.title("Login fails with invalid credentials")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.P0
    async def test_invalid_credentials_show_error(self, login_page: LoginPage, random_string):
        await login_page.navigate()
        await login_page.login(
            username=f"nobody.{random_string(8)}@qa.example.com",
            password=random_string(16),
            wait_for=None,
        )

        await expect(login_page.error_message).to_be_visible()
        assert "/dashboard" not in login_page.page.url


@allure.epic("UI Testing")
@allure.feature("Authentication")
class TestMultiTab:

    @allure.story("Multi-tab")
    @allure.title("New tabs share the authenticated session")
    @pytest.mark.P2
    async def test_tabs_share_session(self, authenticated_context, suite_settings):
        dashboard_tab = await authenticated_context.new_page()
        settings_tab = await authenticated_context.new_page()

        await dashboard_tab.goto(f"{suite_settings.base_url}/dashboard")
        await settings_tab.goto(f"{suite_settings.base_url}/settings")

        await expect(
            dashboard_tab.get_by_role("heading", name=re.compile(r"dashboard", re.IGNORECASE))
        ).to_be_visible()
        await expect(
            settings_tab.get_by_role("heading", name=re.compile(r"settings", re.IGNORECASE))
        ).to_be_visible()
