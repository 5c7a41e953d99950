"""
================================================================================
Fixture Registry
================================================================================

Declares fixtures in named sets, merges the sets into one registry and
publishes it to pytest.

    core = FixtureSet("core")

    @core.fixture(scope="session")
    def suite_settings(config):
        return SuiteSettings.from_config(config)

    registry = merge_fixture_sets(core, auth, api)
    registry.export(globals())          # inside a conftest.py

Dependencies are the fixture function's parameter names. Parameters that
are not registered (`request`, `pytestconfig`, ...) are left to pytest.

Outside pytest the same definitions can be driven by `FixtureScope`, which
keeps pytest's contract: lazy construction, one instance per scope and
teardown in reverse order of construction whatever the outcome.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import inspect
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, MutableMapping, Optional, Set, Tuple

import pytest
import pytest_asyncio
from loguru import logger


SCOPES = ("function", "class", "module", "package", "session")

# Event loop shared by every async fixture and UI test
ASYNC_LOOP_SCOPE = "session"


class FixtureError(Exception):
    """Base class for fixture registry errors."""
    pass


class FixtureCollisionError(FixtureError):
    """Raised when one fixture name is defined twice."""
    pass


class FixtureCycleError(FixtureError):
    """Raised when fixtures depend on each other in a loop."""
    pass


class FixtureLookupError(FixtureError):
    """Raised when a requested fixture is neither registered nor provided."""
    pass


@dataclass(frozen=True)
class FixtureDefinition:
    name: str
    func: Callable[..., Any]
    dependencies: Tuple[str, ...]
    scope: str = "function"
    source: str = ""

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.func) or inspect.isasyncgenfunction(self.func)

    def as_pytest_fixture(self) -> Any:
        if self.is_async:
            return pytest_asyncio.fixture(
                self.func,
                scope=self.scope,
                name=self.name,
                loop_scope=ASYNC_LOOP_SCOPE,
            )
        return pytest.fixture(self.func, scope=self.scope, name=self.name)


class FixtureSet:
    """A named group of fixture definitions, usually one module."""

    def __init__(self, name: str):
        self.name = name
        self._definitions: Dict[str, FixtureDefinition] = {}

    def fixture(
        self,
        func: Optional[Callable[..., Any]] = None,
        *,
        name: Optional[str] = None,
        scope: str = "function",
    ) -> Any:
        """
        Register `func` in this set. Usable bare or with arguments.

        The function is returned unchanged so it stays callable in tests.

        Raises:
            FixtureCollisionError: `name` already defined in this set
            ValueError: unknown scope
        """
        if scope not in SCOPES:
            raise ValueError(f"Unknown fixture scope {scope!r}, expected one of {SCOPES}")

        def register(fn: Callable[..., Any]) -> Callable[..., Any]:
            fixture_name = name or fn.__name__
            if fixture_name in self._definitions:
                raise FixtureCollisionError(
                    f"Fixture {fixture_name!r} defined twice in set {self.name!r}"
                )
            self._definitions[fixture_name] = FixtureDefinition(
                name=fixture_name,
                func=fn,
                dependencies=tuple(inspect.signature(fn).parameters),
                scope=scope,
                source=self.name,
            )
            return fn

        if func is not None:
            return register(func)
        return register

    @property
    def definitions(self) -> Dict[str, FixtureDefinition]:
        return dict(self._definitions)

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


class FixtureRegistry:
    """Merged, validated view over several fixture sets."""

    def __init__(self, definitions: Dict[str, FixtureDefinition]):
        self._definitions = definitions

    @property
    def names(self) -> List[str]:
        return list(self._definitions)

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def get(self, name: str) -> FixtureDefinition:
        try:
            return self._definitions[name]
        except KeyError:
            raise FixtureLookupError(f"Fixture {name!r} is not registered") from None

    def dependency_order(self, names: Iterable[str]) -> List[str]:
        """
        Construction order for `names` and their registered dependencies.

        Every fixture appears after everything it depends on; each name
        appears once.

        Raises:
            FixtureLookupError: a requested name is not registered
            FixtureCycleError: the requested fixtures depend on each other in a loop
        """
        order: List[str] = []
        done: Set[str] = set()
        visiting: List[str] = []

        def visit(fixture_name: str) -> None:
            if fixture_name in done:
                return
            if fixture_name in visiting:
                loop = visiting[visiting.index(fixture_name):] + [fixture_name]
                raise FixtureCycleError("Fixture dependency cycle: " + " -> ".join(loop))
            visiting.append(fixture_name)
            for dependency in self._definitions[fixture_name].dependencies:
                if dependency in self._definitions:
                    visit(dependency)
            visiting.pop()
            done.add(fixture_name)
            order.append(fixture_name)

        for requested in names:
            self.get(requested)
            visit(requested)
        return order

    def validate(self) -> None:
        self.dependency_order(self._definitions)

    def export(self, namespace: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Publish every definition as a pytest fixture into `namespace`."""
        for definition in self._definitions.values():
            namespace[definition.name] = definition.as_pytest_fixture()
        logger.debug(f"Exported {len(self._definitions)} fixtures")
        return namespace


def merge_fixture_sets(*sets: FixtureSet) -> FixtureRegistry:
    """
    Merge fixture sets into one registry.

    Raises:
        FixtureCollisionError: a name is defined by more than one set
        FixtureCycleError: the merged dependency graph is not acyclic
    """
    merged: Dict[str, FixtureDefinition] = {}
    for fixture_set in sets:
        for fixture_name, definition in fixture_set.definitions.items():
            if fixture_name in merged:
                raise FixtureCollisionError(
                    f"Fixture {fixture_name!r} is defined by both "
                    f"{merged[fixture_name].source!r} and {definition.source!r}"
                )
            merged[fixture_name] = definition

    registry = FixtureRegistry(merged)
    registry.validate()
    return registry


class FixtureScope:
    """
    Resolves registry fixtures outside pytest.

    Usage:
        async with FixtureScope(registry, provided={"request": request}) as scope:
            factory = await scope.resolve("data_factory")

    Values in `provided` stand in for fixtures pytest would supply itself.
    Every resolved fixture lives until the scope closes; teardown runs in
    reverse order of construction even when the body or a setup failed.
    """

    def __init__(
        self,
        registry: FixtureRegistry,
        provided: Optional[Dict[str, Any]] = None,
    ):
        self.registry = registry
        self.provided = dict(provided or {})
        self.acquired: List[str] = []
        self._values: Dict[str, Any] = {}
        self._resolving: List[str] = []
        self._stack = AsyncExitStack()

    async def __aenter__(self) -> "FixtureScope":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def resolve(self, name: str) -> Any:
        """Build `name` (and what it depends on) on first use; reuse afterwards."""
        if name in self._values:
            return self._values[name]
        if name in self.provided:
            return self.provided[name]
        if name not in self.registry:
            requester = f" (requested by {self._resolving[-1]!r})" if self._resolving else ""
            raise FixtureLookupError(f"Fixture {name!r} is not available{requester}")
        if name in self._resolving:
            loop = self._resolving[self._resolving.index(name):] + [name]
            raise FixtureCycleError("Fixture dependency cycle: " + " -> ".join(loop))

        definition = self.registry.get(name)
        self._resolving.append(name)
        try:
            kwargs = {
                dependency: await self.resolve(dependency)
                for dependency in definition.dependencies
            }
            value = await self._setup(definition, kwargs)
        finally:
            self._resolving.pop()

        self._values[name] = value
        self.acquired.append(name)
        return value

    async def _setup(self, definition: FixtureDefinition, kwargs: Dict[str, Any]) -> Any:
        func = definition.func
        if inspect.isasyncgenfunction(func):
            agen = func(**kwargs)
            value = await agen.__anext__()
            self._stack.push_async_callback(self._finish_async, definition.name, agen)
            return value
        if inspect.isgeneratorfunction(func):
            gen = func(**kwargs)
            value = next(gen)
            self._stack.callback(self._finish_sync, definition.name, gen)
            return value
        if inspect.iscoroutinefunction(func):
            return await func(**kwargs)
        return func(**kwargs)

    @staticmethod
    async def _finish_async(name: str, agen: Any) -> None:
        logger.debug(f"Tearing down fixture: {name}")
        try:
            await agen.__anext__()
        except StopAsyncIteration:
            return
        raise FixtureError(f"Fixture {name!r} yielded more than once")

    @staticmethod
    def _finish_sync(name: str, gen: Any) -> None:
        logger.debug(f"Tearing down fixture: {name}")
        try:
            next(gen)
        except StopIteration:
            return
        raise FixtureError(f"Fixture {name!r} yielded more than once")

    async def close(self) -> None:
        """Tear down everything resolved so far, newest first."""
        try:
            await self._stack.aclose()
        finally:
            self._values.clear()


__all__ = [
    "FixtureCollisionError",
    "FixtureCycleError",
    "FixtureDefinition",
    "FixtureError",
    "FixtureLookupError",
    "FixtureRegistry",
    "FixtureScope",
    "FixtureSet",
    "merge_fixture_sets",
]
