"""
================================================================================
API Testing Pytest Configuration
================================================================================

API scenarios are skipped when the API does not answer and
`api.skip_if_unreachable` is true (default).

Clients and cleanup come from the suite registry:
    - api_client / authed_api_client: per-test HttpClient
    - api_cleanup: deletes registered resources after the test

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import pytest
from loguru import logger

from e2e_suite.api_testing.framework.http_client import is_reachable
from e2e_suite.common.config_loader import ConfigLoader, SuiteSettings


@pytest.fixture(scope="session")
def api_reachable(suite_settings: SuiteSettings) -> bool:
    reachable = is_reachable(suite_settings.api_base_url)
    if not reachable:
        logger.warning(f"API not reachable at {suite_settings.api_base_url}")
    return reachable


@pytest.fixture(scope="session", autouse=True)
def _require_api(api_reachable: bool, config: ConfigLoader, suite_settings: SuiteSettings) -> None:
    if not api_reachable and config.get("api.skip_if_unreachable", True):
        pytest.skip(f"API not reachable at {suite_settings.api_base_url}")
