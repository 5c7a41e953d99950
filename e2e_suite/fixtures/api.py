"""
================================================================================
API Fixtures
================================================================================

Per-test HTTP clients for the application API.

    api_client          unauthenticated client
    authed_api_client   client sending the configured bearer token
    api_cleanup         deletes resources registered by the test, newest first

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from e2e_suite.api_testing.framework.http_client import HttpClient
from e2e_suite.api_testing.framework.resource_cleanup import ResourceCleanup

from .registry import FixtureSet


api = FixtureSet("api")


@api.fixture
def api_client(suite_settings):
    with HttpClient.from_settings(suite_settings) as client:
        yield client


@api.fixture
def authed_api_client(suite_settings):
    with HttpClient.from_settings(suite_settings, authenticated=True) as client:
        yield client


@api.fixture
def api_cleanup(suite_settings):
    """
    Register created resources with `api_cleanup.add("/users/<id>")`.

    Deletion uses its own authenticated client, so it still runs after the
    test's clients are closed.
    """
    with HttpClient.from_settings(suite_settings, authenticated=True) as client:
        cleanup = ResourceCleanup(client)
        yield cleanup
        cleanup.run()


__all__ = ["api"]
