"""
Page object fixtures wrapping the test's `page`.
"""

from __future__ import annotations

from e2e_suite.ui_testing.pages import (
    DashboardPage,
    LoginPage,
    ProductsPage,
    RegisterPage,
    SearchPage,
    UsersPage,
)

from .registry import FixtureSet


pages = FixtureSet("pages")


@pages.fixture
def login_page(page, suite_settings) -> LoginPage:
    return LoginPage(page, base_url=suite_settings.base_url)


@pages.fixture
def dashboard_page(page, suite_settings) -> DashboardPage:
    return DashboardPage(page, base_url=suite_settings.base_url)


@pages.fixture
def products_page(page, suite_settings) -> ProductsPage:
    return ProductsPage(page, base_url=suite_settings.base_url)


@pages.fixture
def register_page(page, suite_settings) -> RegisterPage:
    return RegisterPage(page, base_url=suite_settings.base_url)


@pages.fixture
def search_page(page, suite_settings) -> SearchPage:
    return SearchPage(page, base_url=suite_settings.base_url)


@pages.fixture
def users_page(page, suite_settings) -> UsersPage:
    return UsersPage(page, base_url=suite_settings.base_url)


__all__ = ["pages"]
