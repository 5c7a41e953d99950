import sys

import pytest

from run_tests import SUITE_PATHS, SuiteRunner


@pytest.fixture
def local_env(clean_env):
    clean_env.delenv("CI", raising=False)
    for name in ("RUNNER_WORKERS", "RUNNER_RETRIES", "RUNNER_TIMEOUT"):
        clean_env.delenv(name, raising=False)
    return clean_env


def test_api_suite_command(local_env):
    runner = SuiteRunner(
        suite="api", tags=["P0", "smoke"], parallel="1", retries=0, timeout=30,
        browsers=["firefox"], headed=True, allure_report=False,
    )

    cmd = runner.build_command()

    assert cmd[:4] == [sys.executable, "-m", "pytest", SUITE_PATHS["api"]]
    assert cmd[cmd.index("-m", 4) + 1] == "P0 or smoke"
    assert "-n" not in cmd
    assert "--reruns" not in cmd
    assert "--timeout=30" in cmd
    assert "--alluredir" not in cmd
    assert not any(arg.startswith("--browser") for arg in cmd)
    assert "--headed" not in cmd
    assert cmd[-1] == "-q"


def test_ui_suite_command(local_env):
    runner = SuiteRunner(
        suite="ui", parallel="auto", retries=2, timeout=60,
        browsers=["chromium", "webkit"], headed=True, device="Pixel 7",
        skip_session_bootstrap=True, verbose=True,
    )

    cmd = runner.build_command()

    assert cmd[cmd.index("-n") + 1] == "auto"
    assert cmd[cmd.index("--reruns") + 1] == "2"
    assert cmd[cmd.index("--alluredir") + 1] == str(runner.allure_results)
    assert any(arg.endswith("junit.xml") for arg in cmd if arg.startswith("--junitxml="))
    assert "--browser=chromium" in cmd and "--browser=webkit" in cmd
    assert "--headed" in cmd
    assert "--device=Pixel 7" in cmd
    assert "--skip-session-bootstrap" in cmd
    assert "-v" in cmd


def test_ci_defaults_from_config(local_env):
    local_env.setenv("CI", "true")
    local_env.setenv("RUNNER_CI_WORKERS", "6")
    local_env.setenv("RUNNER_CI_RETRIES", "3")

    runner = SuiteRunner(suite="unit")

    assert runner.parallel == "6"
    assert runner.retries == 3


def test_projects_passed_through_for_ui_suites(local_env):
    ui = SuiteRunner(
        suite="ui", parallel="1", projects=["mobile-chrome", "mobile-safari"], allure_report=False,
    )
    api = SuiteRunner(suite="api", parallel="1", projects=["mobile-chrome"], allure_report=False)

    assert [arg for arg in ui.build_command() if arg.startswith("--project")] == [
        "--project=mobile-chrome",
        "--project=mobile-safari",
    ]
    assert not any(arg.startswith("--project") for arg in api.build_command())
