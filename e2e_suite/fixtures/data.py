"""
Test data fixtures: unique users and products, timestamps, random strings.
"""

from __future__ import annotations

from e2e_suite.api_testing.framework.data_factory import (
    DataFactory,
    make_random_string,
    make_timestamp,
)

from .registry import FixtureSet


data = FixtureSet("data")


@data.fixture
def data_factory() -> DataFactory:
    return DataFactory()


@data.fixture
def test_user(data_factory):
    return data_factory.create_user()


@data.fixture
def test_product(data_factory):
    return data_factory.create_product()


@data.fixture
def timestamp() -> str:
    return make_timestamp()


@data.fixture
def random_string():
    """The generator itself: `random_string(12)` as often as needed."""
    return make_random_string


__all__ = ["data"]
