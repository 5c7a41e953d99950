"""UI testing: Playwright framework, page objects and browser-level tests."""
