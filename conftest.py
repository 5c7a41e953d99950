"""
Repository-level pytest configuration.

Loads a local `.env` before any configuration is read and registers the
command line options of the suite. Options live here so they are known
whichever directory is collected.

Values in `.env.example` are placeholders; CI injects real credentials
as environment variables.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

from e2e_suite.ui_testing.framework.browser_manager import BROWSER_TYPES


# Already-set variables win over the file
load_dotenv(Path(__file__).parent / ".env", override=False)

pytest_plugins = ("pytester",)


def pytest_addoption(parser):
    group = parser.getgroup("e2e", "End-to-end suite")
    group.addoption(
        "--project",
        action="append",
        default=[],
        help="Configured browser project (ui.projects) to run UI tests in; "
             "repeat for several (default: every configured project)",
    )
    group.addoption(
        "--browser",
        action="append",
        default=[],
        choices=BROWSER_TYPES,
        help="Run UI tests in this browser instead of the configured projects; "
             "repeat for a browser matrix",
    )
    group.addoption(
        "--headed",
        action="store_true",
        default=False,
        help="Run browsers with a visible window",
    )
    group.addoption(
        "--device",
        default=None,
        help="Playwright device descriptor to emulate in every --browser, e.g. 'Pixel 7'",
    )
    group.addoption(
        "--skip-session-bootstrap",
        action="store_true",
        default=False,
        help="Reuse the existing session state file instead of logging in",
    )
