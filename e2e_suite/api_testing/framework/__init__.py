"""
================================================================================
API Testing Framework
================================================================================

Modules:
    - http_client: per-test HTTP client with retry and Allure logging
    - data_factory: unique user/product records, timestamps, random strings
    - resource_cleanup: reverse-order deletion of created resources

Author: Automation Team
License: MIT
================================================================================
"""

from .data_factory import (
    DataFactory,
    ProductRecord,
    UserRecord,
    make_random_string,
    make_timestamp,
)
from .http_client import HttpClient, HttpClientError, RateLimitExceeded, is_reachable
from .resource_cleanup import ResourceCleanup

__all__ = [
    "DataFactory",
    "ProductRecord",
    "UserRecord",
    "make_random_string",
    "make_timestamp",
    "HttpClient",
    "HttpClientError",
    "RateLimitExceeded",
    "is_reachable",
    "ResourceCleanup",
]
