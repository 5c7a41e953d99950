"""
================================================================================
HTTP Client with Allure Integration
================================================================================

Per-test request context for the application's REST API, used to seed
data before UI steps and to check API contracts directly.

    - JSON headers by default, Bearer token only for authenticated clients
    - Network errors retried with exponential backoff
    - 429 responses honour Retry-After
    - Every exchange attached to Allure with secrets masked and a cURL line

================================================================================
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, List, Optional, Tuple

import allure
import httpx
from allure_commons.types import AttachmentType
from loguru import logger

from e2e_suite.common.config_loader import SuiteSettings


MAX_RESPONSE_LENGTH = 3000
MASK = "***MASKED***"

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_BACKOFF = 0.5
DEFAULT_RETRY_MAX_WAIT = 5.0

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

SENSITIVE_HEADERS = frozenset({"authorization", "x-api-key", "cookie", "set-cookie"})
SENSITIVE_FIELD_TOKENS = ("password", "secret", "token", "api_key", "authorization", "session")

RETRYABLE_ERRORS = (httpx.TimeoutException, httpx.NetworkError)


class HttpClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class RateLimitExceeded(HttpClientError):
    """Every attempt was answered with 429."""
    pass


def is_reachable(url: str, timeout: float = 2.0) -> bool:
    """True when anything answers HTTP at `url`, whatever the status."""
    try:
        httpx.get(url, timeout=timeout, follow_redirects=True)
    except httpx.HTTPError:
        return False
    return True


def redact_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: MASK if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def redact_body(payload: Any) -> Any:
    """Mask values whose key looks like a credential, at any depth."""
    if isinstance(payload, dict):
        return {
            key: MASK
            if any(token in str(key).lower() for token in SENSITIVE_FIELD_TOKENS)
            else redact_body(value)
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [redact_body(item) for item in payload]
    return payload


def build_curl(method: str, url: str, headers: Dict[str, str], body: Any = None) -> str:
    """Copy-paste cURL line; callers pass already-redacted headers and body."""
    parts = [f"curl -X {method}"]
    parts.extend(f"-H '{key}: {value}'" for key, value in headers.items())
    if body:
        parts.append(f"-d '{json.dumps(body, ensure_ascii=False, default=str)}'")
    parts.append(f"'{url}'")
    return " \\\n  ".join(parts)


def _response_text(response: httpx.Response) -> str:
    try:
        content = json.dumps(response.json(), ensure_ascii=False, indent=2)
    except ValueError:
        content = response.text or "<empty>"
    if len(content) > MAX_RESPONSE_LENGTH:
        content = (
            f"{content[:MAX_RESPONSE_LENGTH]}\n\n"
            f"... [Truncated, full length: {len(content)} chars] ..."
        )
    return content


class HttpClient:
    """
    HTTP request context scoped to a single test.

    Usage:
        >>> with HttpClient("http://localhost:3000/api") as client:
        ...     assert client.get("/health").status_code == 200

        >>> with HttpClient(base_url, token="secret") as client:
        ...     client.post("/users", json={"name": "Ada"})
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_count: int = DEFAULT_RETRY_COUNT,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        retry_max_wait: float = DEFAULT_RETRY_MAX_WAIT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Args:
            base_url: API base URL; request paths are resolved relative to it
            token: Bearer token, no Authorization header when empty
            timeout: Per-request timeout in seconds
            retry_count: Attempts for network errors and 429 responses
            retry_backoff: Base wait for exponential backoff
            retry_max_wait: Upper bound for any single wait
            transport: httpx transport override (httpx.MockTransport in unit tests)
        """
        self.base_url = base_url
        self.token = token or None
        self.timeout = timeout
        self.retry_count = max(1, retry_count)
        self.retry_backoff = retry_backoff
        self.retry_max_wait = retry_max_wait
        self.transport = transport
        self.session: Optional[httpx.Client] = None

    @classmethod
    def from_settings(
        cls,
        settings: SuiteSettings,
        authenticated: bool = False,
        **kwargs: Any,
    ) -> "HttpClient":
        token = settings.api_token if authenticated else None
        if authenticated and not token:
            logger.warning("Authenticated API client requested but API_TOKEN is empty")
        return cls(settings.api_base_url, token=token, **kwargs)

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    @property
    def default_headers(self) -> Dict[str, str]:
        headers = dict(JSON_HEADERS)
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def __enter__(self) -> "HttpClient":
        self.session = httpx.Client(
            base_url=self.base_url,
            headers=self.default_headers,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self.session:
            self.session.close()
            self.session = None

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send one request, retrying network errors and rate limiting.

        Raises:
            HttpClientError: When used outside the context manager
            RateLimitExceeded: When every attempt was rate limited
            httpx.HTTPError: When network retries are exhausted
        """
        if self.session is None:
            raise HttpClientError(
                "HttpClient must be used within a context manager. "
                "Use 'with HttpClient(base_url) as client:'"
            )

        last_attempt = self.retry_count - 1
        for attempt in range(self.retry_count):
            try:
                response = self.session.request(method, url, **kwargs)
            except RETRYABLE_ERRORS as e:
                if attempt == last_attempt:
                    logger.error(f"{method} {url} failed after {self.retry_count} attempts: {e}")
                    raise
                wait = self.backoff(attempt)
                logger.warning(f"{method} {url}: {e}; retry {attempt + 1}/{last_attempt} in {wait}s")
                time.sleep(wait)
                continue

            if response.status_code != 429:
                self._attach_exchange(method, url, kwargs, response)
                return response

            wait = self.retry_after(response)
            logger.warning(f"{method} {url} rate limited; waiting {wait}s ({attempt + 1}/{self.retry_count})")
            time.sleep(wait)

        raise RateLimitExceeded(f"{method} {url} still rate limited after {self.retry_count} attempts")

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", url, **kwargs)

    def backoff(self, attempt: int) -> float:
        """base * 2^attempt, capped at retry_max_wait."""
        return min(self.retry_backoff * (2 ** attempt), self.retry_max_wait)

    def retry_after(self, response: httpx.Response) -> float:
        """Seconds from Retry-After, the base backoff when absent or not numeric."""
        try:
            wait = float(response.headers.get("Retry-After", ""))
        except ValueError:
            wait = self.retry_backoff
        return min(wait, self.retry_max_wait)

    def _attach_exchange(
        self,
        method: str,
        url: str,
        kwargs: Dict[str, Any],
        response: httpx.Response,
    ) -> None:
        full_url = str(response.request.url)
        headers = redact_headers({**self.default_headers, **(kwargs.get("headers") or {})})
        body = redact_body(kwargs.get("json"))

        attachments: List[Tuple[str, str, Any]] = [
            ("Request URL", full_url, AttachmentType.TEXT),
            ("Request Headers", json.dumps(headers, ensure_ascii=False, indent=2), AttachmentType.JSON),
        ]
        if body:
            attachments.append(
                ("Request Body", json.dumps(body, ensure_ascii=False, indent=2, default=str), AttachmentType.JSON)
            )
        if kwargs.get("params"):
            attachments.append(
                ("Query Params", json.dumps(kwargs["params"], ensure_ascii=False, indent=2, default=str), AttachmentType.JSON)
            )
        attachments.append(("cURL Command", build_curl(method, full_url, headers, body), AttachmentType.TEXT))
        attachments.append(
            (f"Response Body ({response.status_code})", _response_text(response), AttachmentType.JSON)
        )

        status_mark = "✅" if response.status_code < 400 else "❌"
        with allure.step(f"{status_mark} {method} {url} -> {response.status_code}"):
            for name, content, attachment_type in attachments:
                allure.attach(content, name=name, attachment_type=attachment_type)


__all__ = [
    "HttpClient",
    "HttpClientError",
    "RateLimitExceeded",
    "build_curl",
    "is_reachable",
    "redact_body",
    "redact_headers",
]
