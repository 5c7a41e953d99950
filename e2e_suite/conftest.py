"""
================================================================================
Suite Pytest Configuration
================================================================================

Wires the fixture registry and the run-level hooks into pytest.

Hooks:
    - pytest_configure: markers, logging, run id shared by xdist workers
    - pytest_generate_tests: browser project matrix (ui.projects, --project, --browser)
    - pytest_collection_modifyitems: api/ui/unit markers from the test path
    - pytest_collection_finish: one-time session bootstrap (login)
    - pytest_runtest_makereport: per-phase reports for artifact policies

Fixtures:
    Everything in e2e_suite.fixtures.registry, published below.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import uuid
from typing import List

import pytest
from loguru import logger

from e2e_suite.api_testing.framework.http_client import is_reachable
from e2e_suite.common.config_loader import ConfigLoader, SuiteSettings
from e2e_suite.common.log_config import init_logger
from e2e_suite.fixtures import registry
from e2e_suite.fixtures.core import apply_cli_overrides
from e2e_suite.ui_testing.framework.artifacts import PHASE_REPORT_KEY
from e2e_suite.ui_testing.framework.browser_manager import BrowserProject, select_projects
from e2e_suite.ui_testing.framework.session_bootstrap import (
    SessionBootstrapError,
    SessionBootstrapper,
)


RUN_ID_KEY = pytest.StashKey[str]()

# Fixtures that read the persisted login
SESSION_STATE_FIXTURES = frozenset(
    {"session_state_path", "storage_state_page", "authenticated_context"}
)

SUITE_MARKERS = {
    "api": "api_testing",
    "ui": "ui_testing",
    "unit": "unit",
}


# ================================================================================
# Pytest Configuration
# ================================================================================

def pytest_configure(config):
    """Register markers, initialize logging and fix the run id."""
    # Priority markers
    config.addinivalue_line("markers", "P0: Critical priority tests - must pass for deployment")
    config.addinivalue_line("markers", "P1: High priority tests - important functionality")
    config.addinivalue_line("markers", "P2: Medium priority tests - edge cases and minor features")
    config.addinivalue_line("markers", "P3: Low priority tests - extensive validation")

    # Test type markers
    config.addinivalue_line("markers", "smoke: Quick verification tests")
    config.addinivalue_line("markers", "regression: Full regression test suite")
    config.addinivalue_line("markers", "e2e: End-to-end tests simulating user flows")

    # Domain markers
    config.addinivalue_line("markers", "api: API-specific tests")
    config.addinivalue_line("markers", "ui: UI-specific tests")
    config.addinivalue_line("markers", "unit: Framework tests without a browser or server")

    # Feature markers
    config.addinivalue_line("markers", "auth: Tests related to authentication")
    config.addinivalue_line("markers", "network: Tests using stubbed or logged network traffic")
    config.addinivalue_line("markers", "data: Data-driven tests using generated records")

    init_logger()

    # Workers of one xdist run share PYTEST_XDIST_TESTRUNUID
    config.stash[RUN_ID_KEY] = os.environ.get("PYTEST_XDIST_TESTRUNUID") or uuid.uuid4().hex


def _configured_settings(config) -> SuiteSettings:
    return apply_cli_overrides(SuiteSettings.from_config(ConfigLoader()), config)


def _selected_projects(config) -> List[BrowserProject]:
    loader = ConfigLoader()
    try:
        return select_projects(
            loader.get("ui.projects", []),
            names=config.getoption("project", default=None) or (),
            browsers=config.getoption("browser", default=None) or (),
            device=config.getoption("device", default=None),
            default_browser=loader.get("ui.browser", "chromium"),
            default_device=loader.get("ui.device"),
        )
    except ValueError as e:
        raise pytest.UsageError(str(e)) from e


def pytest_generate_tests(metafunc):
    """Run every browser-using test once per selected browser project."""
    if "browser_project" in metafunc.fixturenames:
        projects = _selected_projects(metafunc.config)
        metafunc.parametrize(
            "browser_project",
            projects,
            ids=[project.name for project in projects],
            scope="session",
        )


def pytest_collection_modifyitems(config, items):
    """Auto-add the suite marker matching the directory of each test."""
    for item in items:
        parts = item.path.parts
        for marker, directory in SUITE_MARKERS.items():
            if directory in parts:
                item.add_marker(getattr(pytest.mark, marker))


@pytest.hookimpl(trylast=True)
def pytest_collection_finish(session):
    """
    Log in once before any test runs when a selected test needs session state.

    Every xdist worker calls this; the file lock in SessionBootstrapper
    lets exactly one of them log in. A failed login ends the run.
    """
    config = session.config
    if config.option.collectonly or config.getoption("skip_session_bootstrap", default=False):
        return
    if not any(
        SESSION_STATE_FIXTURES.intersection(getattr(item, "fixturenames", ()))
        for item in session.items
    ):
        return

    settings = _configured_settings(config)
    if settings.skip_if_unreachable and not is_reachable(settings.base_url):
        logger.warning(
            f"{settings.base_url} is unreachable; skipping session bootstrap "
            f"(UI tests will be skipped)"
        )
        return

    bootstrapper = SessionBootstrapper(settings, browser_type=_selected_projects(config)[0].browser)
    try:
        bootstrapper.ensure(config.stash[RUN_ID_KEY])
    except SessionBootstrapError as e:
        logger.error(f"Session bootstrap failed: {e}")
        pytest.exit(f"Session bootstrap failed: {e}", returncode=pytest.ExitCode.TESTS_FAILED)


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep the report of every phase on the item for artifact policies."""
    outcome = yield
    report = outcome.get_result()

    if report.when == "setup":
        # New attempt (pytest-rerunfailures reruns the same item)
        item.stash[PHASE_REPORT_KEY] = {}
    item.stash.setdefault(PHASE_REPORT_KEY, {})[report.when] = report


def pytest_report_header(config):
    """Add custom header to pytest output."""
    settings = _configured_settings(config)
    return [
        "",
        "=" * 60,
        "E2E Fixture Suite",
        f"Application: {settings.base_url}  API: {settings.api_base_url}",
        f"Projects: {', '.join(p.name for p in _selected_projects(config))}  Headless: {settings.headless}",
        f"Run id: {config.stash.get(RUN_ID_KEY, '-')}",
        "=" * 60,
        "",
    ]


# ================================================================================
# Fixtures
# ================================================================================

registry.export(globals())
