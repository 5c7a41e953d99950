"""
================================================================================
Resource Cleanup
================================================================================

Tracks API resources created by a test and deletes them afterwards.

Usage:
    cleanup = ResourceCleanup(client)
    response = client.post("/users", json=user.to_dict())
    cleanup.add(f"/users/{response.json()['id']}")
    ...
    cleanup.run()      # DELETE /users/<id>, newest resource first

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import List

import httpx
from loguru import logger

from .http_client import HttpClient, HttpClientError


class ResourceCleanup:
    """Deletes registered resource paths in reverse order of creation."""

    def __init__(self, client: HttpClient):
        self.client = client
        self._paths: List[str] = []

    def add(self, path: str) -> str:
        self._paths.append(path)
        return path

    @property
    def pending(self) -> List[str]:
        return list(self._paths)

    def run(self) -> List[str]:
        """
        Delete every tracked resource.

        A failed delete is logged and does not stop the others.

        Returns:
            Paths that could not be deleted
        """
        failed: List[str] = []
        while self._paths:
            path = self._paths.pop()
            try:
                response = self.client.delete(path)
            except (HttpClientError, httpx.HTTPError) as e:
                logger.warning(f"Cleanup of {path} failed: {e}")
                failed.append(path)
                continue
            if response.status_code >= 400 and response.status_code != 404:
                logger.warning(f"Cleanup of {path} returned {response.status_code}")
                failed.append(path)
            else:
                logger.debug(f"Cleaned up {path}")
        return failed


__all__ = ["ResourceCleanup"]
