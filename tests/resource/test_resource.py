from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from bootloader.fetchers import fetch_json, load_script
from bootloader.resource import (
    FunctionProvider,
    InvalidProviderError,
    InvalidRequiresError,
    InvalidResourceError,
    InvalidUrlError,
    JsonProvider,
    Resource,
    ResourceError,
    ResourceKind,
    ScriptProvider,
    UnnamedResourceError,
)


def test_function_resource() -> None:
    def zebra(animal: str, grass: str) -> str:
        return f"{animal} eats {grass}"

    resource = Resource({"name": "zebra", "requires": ["animal", "grass"], "zebra": zebra})

    assert resource.name == "zebra"
    assert resource.requires == ("animal", "grass")
    assert resource.kind is ResourceKind.FUNCTION
    assert resource.provider == FunctionProvider(zebra)
    assert resource.url is None
    assert not resource.is_bound


def test_script_resource_defaults() -> None:
    resource = Resource({"name": "someScript", "script": "/valid/path.py"})

    assert resource.kind is ResourceKind.SCRIPT
    assert resource.url == "/valid/path.py"
    assert resource.provider == ScriptProvider("/valid/path.py", load_script)


def test_json_resource_defaults() -> None:
    resource = Resource({"name": "animals", "json": "https://example.com/animals.json"})

    assert resource.kind is ResourceKind.JSON
    assert resource.url == "https://example.com/animals.json"
    assert resource.provider == JsonProvider(
        "https://example.com/animals.json", fetch_json, "GET"
    )


def test_json_resource_overrides() -> None:
    async def fetcher(url: str, method: str) -> Any:
        return None

    resource = Resource(
        {"name": "animals", "json": "animals.json", "fetcher": fetcher, "method": "POST"},
        method="PUT",
    )

    assert resource.provider == JsonProvider("animals.json", fetcher, "POST")


def test_loader_defaults_are_used() -> None:
    async def fetcher(url: str, method: str) -> Any:
        return None

    resource = Resource(
        {"name": "animals", "json": "animals.json"}, fetcher=fetcher, method="PUT"
    )

    assert resource.provider == JsonProvider("animals.json", fetcher, "PUT")


@pytest.mark.parametrize("name", ["json", "script"])
def test_url_source_names(name: str) -> None:
    resource = Resource({"name": name, name: "some/location"})

    assert resource.kind is ResourceKind(name)
    assert resource.url == "some/location"


@pytest.mark.parametrize(
    "requires, expected",
    [
        (None, ()),
        ("", ()),
        ([], ()),
        ("req", ("req",)),
        (["req1", "req2"], ("req1", "req2")),
        (("req1", "req2"), ("req1", "req2")),
    ],
)
def test_requires_normalized(requires: Any, expected: tuple[str, ...]) -> None:
    resource = Resource({"name": "test", "test": lambda *_: None, "requires": requires})
    assert resource.requires == expected


@pytest.mark.parametrize("requires", [1, {"req": 1}, ["req", 1], ["req", ""], [None]])
def test_requires_invalid(requires: Any) -> None:
    with pytest.raises(InvalidRequiresError):
        Resource({"name": "test", "test": lambda *_: None, "requires": requires})


@pytest.mark.parametrize(
    "definition, error, match",
    [
        (None, InvalidResourceError, "must be mappings"),
        ("test", InvalidResourceError, "must be mappings"),
        ({}, UnnamedResourceError, "must have a 'name'"),
        ({"name": None}, UnnamedResourceError, "must have a 'name'"),
        ({"name": 3, 3: lambda: 1}, InvalidResourceError, "must be strings"),
        ({"name": "test"}, InvalidProviderError, "no provider found"),
        ({"name": "test", "test1": lambda: 1}, InvalidProviderError, "no provider found"),
        ({"name": "test", "test": "nope"}, InvalidProviderError, "not callable"),
        ({"name": "test", "json": 12}, InvalidUrlError, "must be a string"),
        ({"name": "test", "script": None}, InvalidUrlError, "must be a string"),
        (
            {"name": "test", "test": lambda: 1, "json": "a.json"},
            InvalidResourceError,
            "conflicting providers: function, json",
        ),
        (
            {"name": "test", "script": "a.py", "json": "a.json"},
            InvalidResourceError,
            "conflicting providers: script, json",
        ),
        (
            {"name": "test", "json": "a.json", "fetcher": "fetch"},
            InvalidProviderError,
            "fetcher",
        ),
        (
            {"name": "test", "script": "a.py", "script_loader": 1},
            InvalidProviderError,
            "script loader",
        ),
        ({"name": "test", "json": "a.json", "method": 1}, InvalidResourceError, "method"),
    ],
)
def test_invalid_definition(definition: Any, error: type[Exception], match: str) -> None:
    with pytest.raises(error, match=match):
        Resource(definition)


def test_errors_are_resource_errors() -> None:
    for error in [
        InvalidResourceError,
        UnnamedResourceError,
        InvalidRequiresError,
        InvalidProviderError,
        InvalidUrlError,
    ]:
        assert issubclass(error, ResourceError)


def test_settlement_before_bind() -> None:
    resource = Resource({"name": "test", "test": lambda: 1})
    with pytest.raises(ResourceError, match="has not been declared"):
        resource.settlement


def test_bind_once(loop: asyncio.AbstractEventLoop) -> None:
    resource = Resource({"name": "test", "test": lambda: 1})
    settlement = loop.create_future()

    resource.bind(settlement)

    assert resource.is_bound
    assert resource.settlement is settlement
    with pytest.raises(ResourceError, match="already has a settlement"):
        resource.bind(loop.create_future())


def test_resolve_with_passes_dependencies(run: Callable) -> None:
    resource = Resource({"name": "sum", "requires": ["a", "b"], "sum": lambda a, b: a + b})
    assert run(resource.resolve_with([1, 2])) == 3


def test_resolve_with_awaits_coroutines(run: Callable) -> None:
    async def provider(value: str) -> str:
        await asyncio.sleep(0)
        return value.upper()

    resource = Resource({"name": "test", "requires": "a", "test": provider})
    assert run(resource.resolve_with(["value"])) == "VALUE"


def test_resolve_with_calls_script_loader(run: Callable) -> None:
    loaded = []

    async def script_loader(url: str) -> None:
        loaded.append(url)

    resource = Resource({"name": "test", "script": "a.py"}, script_loader=script_loader)

    assert run(resource.resolve_with([])) is None
    assert loaded == ["a.py"]


def test_resolve_with_propagates_provider_errors(run: Callable) -> None:
    def provider() -> None:
        raise ValueError("bad value")

    resource = Resource({"name": "test", "test": provider})
    with pytest.raises(ValueError, match="bad value"):
        run(resource.resolve_with([]))


def test_repr() -> None:
    resource = Resource({"name": "test", "requires": ["a"], "json": "a.json"})
    assert repr(resource) == "Resource('test', kind=json, requires=['a'])"
