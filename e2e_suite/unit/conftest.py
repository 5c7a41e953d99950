import pytest

from e2e_suite.common.config_loader import ConfigLoader


# Variables read by ConfigLoader/SuiteSettings that a local .env may set
CONFIG_ENV_VARS = (
    "ENVIRONMENT",
    "ENV",
    "BASE_URL",
    "UI_BASE_URL",
    "UI_BROWSER",
    "UI_HEADLESS",
    "UI_DEVICE",
    "API_BASE_URL",
    "API_TOKEN",
    "TEST_USER",
    "TEST_PASS",
    "AUTH_USERNAME",
    "AUTH_PASSWORD",
    "AUTH_SESSION_STATE_PATH",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration variables so only the YAML under test applies."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def _reset_config_singleton():
    yield
    ConfigLoader.reset()
