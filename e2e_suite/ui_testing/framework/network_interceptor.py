"""
================================================================================
Network Interceptor
================================================================================

Request stubbing, blocking and recording for a Playwright page.

Each page gets one catch-all route. Requests are dispatched through an
ordered list of rules and the FIRST registered matching rule decides:
    - fulfil with a fabricated JSON response, or
    - abort the request.
Requests no rule matches continue to the network untouched.

URL patterns:
    re.Pattern       searched in the full URL
    "/api/products"  starts with "/": compared with the URL path (glob allowed)
    "**/x.com/**"    anything else: glob against the full URL
Glob syntax: `**` any characters, `*` any characters except "/",
`{a,b}` alternatives.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Pattern, Union
from urllib.parse import urlsplit

from loguru import logger
from playwright.async_api import Page, Request, Route


UrlPattern = Union[str, Pattern[str]]

ROUTE_ALL = "**/*"

ANALYTICS_DOMAINS = (
    "**/*google-analytics.com/**",
    "**/*googletagmanager.com/**",
    "**/*hotjar.com/**",
    "**/*segment.com/**",
    "**/*amplitude.com/**",
    "**/*mixpanel.com/**",
    "**/*fullstory.com/**",
    "**/*intercom.io/**",
)


def glob_to_regex(glob: str) -> Pattern[str]:
    """
    Translate a URL glob into an anchored regular expression.

    Raises:
        ValueError: a `{` group is nested or never closed
    """
    tokens: List[str] = []
    i = 0
    in_group = False
    while i < len(glob):
        char = glob[i]
        if char == "*":
            if glob[i:i + 2] == "**":
                tokens.append(".*")
                i += 2
                continue
            tokens.append("[^/]*")
        elif char == "{":
            if in_group:
                raise ValueError(f"Nested {{ group in URL glob {glob!r}")
            in_group = True
            tokens.append("(?:")
        elif char == "}" and in_group:
            in_group = False
            tokens.append(")")
        elif char == "," and in_group:
            tokens.append("|")
        else:
            tokens.append(re.escape(char))
        i += 1
    if in_group:
        raise ValueError(f"Unclosed {{ group in URL glob {glob!r}")
    return re.compile("^" + "".join(tokens) + "$")


def compile_pattern(pattern: UrlPattern) -> Callable[[str], bool]:
    """
    Build the URL predicate of a literal path, glob or regex pattern.

    Globs are compiled here, once, so a malformed one fails immediately.
    """
    if isinstance(pattern, re.Pattern):
        return lambda url: pattern.search(url) is not None

    on_path = pattern.startswith("/")

    def target(url: str) -> str:
        return urlsplit(url).path if on_path else url

    if not any(char in pattern for char in "*{"):
        return lambda url: target(url) == pattern
    regex = glob_to_regex(pattern)
    return lambda url: regex.match(target(url)) is not None


def url_matches(pattern: UrlPattern, url: str) -> bool:
    """Whether `url` is matched by a literal path, glob or regex pattern."""
    return compile_pattern(pattern)(url)


@dataclass(frozen=True)
class NetworkRule:
    """One interception rule. `action` is 'fulfill' or 'abort'."""
    pattern: UrlPattern
    action: str = "fulfill"
    status: int = 200
    body: Any = None
    _matcher: Callable[[str], bool] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_matcher", compile_pattern(self.pattern))

    def matches(self, url: str) -> bool:
        return self._matcher(url)


@dataclass(frozen=True)
class RequestLogEntry:
    url: str
    method: str
    resource_type: str = ""
    timestamp: datetime = field(default_factory=datetime.now)


class RequestLog:
    """
    Outbound requests of a page, in arrival order.

    No dedup and no filtering on record; callers filter afterwards.
    """

    def __init__(self) -> None:
        self._entries: List[RequestLogEntry] = []
        self._page: Optional[Page] = None

    def record(self, request: Request) -> None:
        self._entries.append(
            RequestLogEntry(
                url=request.url,
                method=request.method,
                resource_type=request.resource_type,
            )
        )

    def attach(self, page: Page) -> "RequestLog":
        page.on("request", self.record)
        self._page = page
        return self

    def detach(self) -> None:
        if self._page is not None:
            self._page.remove_listener("request", self.record)
            self._page = None

    def filter(
        self,
        url_contains: Optional[str] = None,
        method: Optional[str] = None,
    ) -> List[RequestLogEntry]:
        return [
            entry
            for entry in self._entries
            if (url_contains is None or url_contains in entry.url)
            and (method is None or entry.method.upper() == method.upper())
        ]

    def __iter__(self) -> Iterator[RequestLogEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> RequestLogEntry:
        return self._entries[index]


class NetworkInterceptor:
    """
    Ordered stub/abort rules for one page.

    Usage:
        interceptor = NetworkInterceptor(page)
        await interceptor.stub("/api/products", 200, {"items": [], "total": 0})
        await interceptor.block_analytics()
    """

    def __init__(self, page: Page):
        self.page = page
        self._rules: List[NetworkRule] = []
        self._installed = False

    @property
    def rules(self) -> List[NetworkRule]:
        return list(self._rules)

    async def add_rule(self, rule: NetworkRule) -> NetworkRule:
        if rule.action not in ("fulfill", "abort"):
            raise ValueError(f"Unknown rule action: {rule.action!r}")
        if not self._installed:
            await self.page.route(ROUTE_ALL, self._handle)
            self._installed = True
        self._rules.append(rule)
        logger.debug(f"Network rule added: {rule.action} {rule.pattern}")
        return rule

    async def stub(self, pattern: UrlPattern, status: int, body: Any) -> NetworkRule:
        """Fulfil every matching request with `status` and JSON `body`."""
        return await self.add_rule(NetworkRule(pattern, "fulfill", status, body))

    async def abort(self, pattern: UrlPattern) -> NetworkRule:
        return await self.add_rule(NetworkRule(pattern, "abort"))

    async def block_analytics(self) -> List[NetworkRule]:
        return [await self.abort(domain) for domain in ANALYTICS_DOMAINS]

    def match(self, url: str) -> Optional[NetworkRule]:
        """First registered rule matching `url`, if any."""
        for rule in self._rules:
            if rule.matches(url):
                return rule
        return None

    async def _handle(self, route: Route) -> None:
        rule = self.match(route.request.url)
        if rule is None:
            await route.fallback()
        elif rule.action == "abort":
            await route.abort()
        else:
            await route.fulfill(
                status=rule.status,
                content_type="application/json",
                body=json.dumps(rule.body),
            )

    async def detach(self) -> None:
        """Remove the catch-all route unless the page is already gone."""
        if self._installed and not self.page.is_closed():
            await self.page.unroute(ROUTE_ALL, self._handle)
        self._installed = False
        self._rules.clear()


class InterceptorPool:
    """One NetworkInterceptor per page, shared by the network fixtures of a test."""

    def __init__(self) -> None:
        self._interceptors: Dict[int, NetworkInterceptor] = {}

    def for_page(self, page: Page) -> NetworkInterceptor:
        key = id(page)
        if key not in self._interceptors:
            self._interceptors[key] = NetworkInterceptor(page)
        return self._interceptors[key]

    def __len__(self) -> int:
        return len(self._interceptors)

    async def dispose(self) -> None:
        for interceptor in self._interceptors.values():
            await interceptor.detach()
        self._interceptors.clear()


__all__ = [
    "ANALYTICS_DOMAINS",
    "InterceptorPool",
    "NetworkInterceptor",
    "NetworkRule",
    "RequestLog",
    "RequestLogEntry",
    "compile_pattern",
    "glob_to_regex",
    "url_matches",
]
