"""
End-to-end test suites package.

Kept importable so that:
  - the aggregated fixture registry can be exported from `e2e_suite/conftest.py`
  - `run_tests.py` and CI jobs can import framework modules directly
  - IDEs resolve page objects and fixture sets

All defaults are demo-safe placeholders; real credentials come from the
environment or a `.env` file.
"""
