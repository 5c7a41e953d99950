"""
================================================================================
Products Page Objects (Async / Playwright)
================================================================================

Product list with its empty state, and the new-product form.

================================================================================
"""

from __future__ import annotations

import re

import allure
from playwright.async_api import Locator

from e2e_suite.api_testing.framework.data_factory import ProductRecord
from e2e_suite.ui_testing.framework.page_base import BasePage


class ProductsPage(BasePage):
    """Product list page object (async)."""

    URL_PATH = "/products"

    PRODUCTS_API = "/api/products"

    @property
    def empty_state(self) -> Locator:
        return self.page.get_by_text("No products found")

    def product_row(self, name: str) -> Locator:
        return self.page.get_by_text(name)


class NewProductPage(BasePage):
    """New product form (async)."""

    URL_PATH = "/products/new"

    @property
    def success_message(self) -> Locator:
        return self.page.get_by_text("Product saved successfully")

    @allure.step("Create product")
    async def create(self, product: ProductRecord) -> None:
        await self.page.get_by_label("Product Name").fill(product.name)
        await self.page.get_by_label("SKU").fill(product.sku)
        await self.page.get_by_label("Price").fill(str(product.price))
        await self.page.get_by_label("Description").fill(product.description)
        await self.page.get_by_role(
            "button", name=re.compile(r"save product", re.IGNORECASE)
        ).click()
