"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based building blocks for the UI suites.

Components:
    - page_base: Base page object for common operations
    - browser_manager: Browser lifecycle management
    - artifacts: Trace/video/screenshot capture per test
    - network_interceptor: Request stubbing, blocking and logging
    - session_bootstrap: One-time login shared by every worker
      (import it from its module; it depends on the page objects)

Author: Automation Team
License: MIT
================================================================================
"""

from .page_base import BasePage
from .browser_manager import BrowserManager
from .artifacts import ArtifactRecorder, recorded_context
from .network_interceptor import (
    InterceptorPool,
    NetworkInterceptor,
    NetworkRule,
    RequestLog,
)

__all__ = [
    "ArtifactRecorder",
    "BasePage",
    "BrowserManager",
    "InterceptorPool",
    "NetworkInterceptor",
    "NetworkRule",
    "RequestLog",
    "recorded_context",
]
