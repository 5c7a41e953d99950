"""
================================================================================
UI Testing Pytest Configuration
================================================================================

UI scenarios need a running application. When it does not answer and
`ui.skip_if_unreachable` is true, every UI test here is skipped instead
of failing on its first navigation. The check is a session-scoped autouse
fixture so it runs before the session fixtures that need the application.

Browser, context, page, auth and page-object fixtures come from the suite
registry (e2e_suite/fixtures).

================================================================================
"""

import pytest
from loguru import logger

from e2e_suite.api_testing.framework.http_client import is_reachable
from e2e_suite.common.config_loader import SuiteSettings


@pytest.fixture(scope="session")
def application_reachable(suite_settings: SuiteSettings) -> bool:
    """Probe the application once per worker."""
    reachable = is_reachable(suite_settings.base_url)
    if not reachable:
        logger.warning(f"Application under test not reachable at {suite_settings.base_url}")
    return reachable


@pytest.fixture(scope="session", autouse=True)
def _require_application(application_reachable: bool, suite_settings: SuiteSettings) -> None:
    if not application_reachable and suite_settings.skip_if_unreachable:
        pytest.skip(f"Application not reachable at {suite_settings.base_url}")
