"""
================================================================================
Network Fixtures
================================================================================

    network_interceptors   per-test InterceptorPool, routes removed at teardown
    mock_network           await mock_network(page, "/api/x", 200, {...})
    block_analytics        opt-in: aborts analytics/tracking requests of `page`
    network_logs           RequestLog attached to `page`

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any

from playwright.async_api import Page

from e2e_suite.ui_testing.framework.network_interceptor import (
    InterceptorPool,
    NetworkRule,
    RequestLog,
    UrlPattern,
)

from .registry import FixtureSet


network = FixtureSet("network")


@network.fixture
async def network_interceptors():
    pool = InterceptorPool()
    yield pool
    await pool.dispose()


@network.fixture
def mock_network(network_interceptors):
    """Stub JSON responses on any page of the test."""

    async def stub(page: Page, pattern: UrlPattern, status: int = 200, body: Any = None) -> NetworkRule:
        return await network_interceptors.for_page(page).stub(pattern, status, body)

    return stub


@network.fixture
async def block_analytics(page, network_interceptors):
    interceptor = network_interceptors.for_page(page)
    await interceptor.block_analytics()
    return interceptor


@network.fixture
def network_logs(page):
    log = RequestLog().attach(page)
    yield log
    log.detach()


__all__ = ["network"]
