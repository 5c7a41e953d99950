"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for application pages.

Each page class encapsulates:
    - Element locators
    - Page-specific actions

Author: Automation Team
License: MIT
================================================================================
"""

from .dashboard_page import DashboardPage
from .login_page import LoginPage
from .products_page import NewProductPage, ProductsPage
from .register_page import RegisterPage
from .search_page import SearchPage
from .users_page import UsersPage

__all__ = [
    "DashboardPage",
    "LoginPage",
    "NewProductPage",
    "ProductsPage",
    "RegisterPage",
    "SearchPage",
    "UsersPage",
]
