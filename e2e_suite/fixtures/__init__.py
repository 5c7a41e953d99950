"""
================================================================================
Suite Fixtures
================================================================================

Every fixture the suites can request, merged into one registry and
exported by `e2e_suite/conftest.py`.

    core      config, suite_settings, browser_project, browser_manager,
              browser, context, page
    auth      session_state_path, storage_state_page, authenticated_context,
              fresh_login_page
    api       api_client, authed_api_client, api_cleanup
    data      data_factory, test_user, test_product, timestamp, random_string
    network   network_interceptors, mock_network, block_analytics, network_logs
    pages     login_page, dashboard_page, products_page, register_page,
              search_page, users_page

A name defined by two sets fails at import time.

Author: Automation Team
License: MIT
================================================================================
"""

from .api import api
from .auth import auth
from .core import core
from .data import data
from .network import network
from .pages import pages
from .registry import (
    FixtureCollisionError,
    FixtureCycleError,
    FixtureError,
    FixtureLookupError,
    FixtureRegistry,
    FixtureScope,
    FixtureSet,
    merge_fixture_sets,
)

FIXTURE_SETS = (core, auth, api, data, network, pages)

registry = merge_fixture_sets(*FIXTURE_SETS)

__all__ = [
    "FIXTURE_SETS",
    "FixtureCollisionError",
    "FixtureCycleError",
    "FixtureError",
    "FixtureLookupError",
    "FixtureRegistry",
    "FixtureScope",
    "FixtureSet",
    "merge_fixture_sets",
    "registry",
]
