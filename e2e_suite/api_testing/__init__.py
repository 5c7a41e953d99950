"""API testing: HTTP client, data factory and API-level tests."""
