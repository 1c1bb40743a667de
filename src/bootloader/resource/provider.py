"""
=========
Providers
=========

A resource's value comes from exactly one of three sources: a function, a
script or a JSON document. Each source is a small frozen record that knows how
to produce the value once the resource's dependencies are available.

"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar


class ResourceKind(Enum):
    FUNCTION = "function"
    SCRIPT = "script"
    JSON = "json"


@dataclass(frozen=True)
class FunctionProvider:
    """Calls ``function`` with the resource's dependency values."""

    function: Callable[..., Any]

    kind: ClassVar[ResourceKind] = ResourceKind.FUNCTION

    @property
    def url(self) -> None:
        return None

    def __call__(self, *dependencies: Any) -> Any:
        return self.function(*dependencies)


@dataclass(frozen=True)
class ScriptProvider:
    """Loads the script at ``url`` once the dependencies are available.

    Dependency values are not passed to the loader.
    """

    url: str
    loader: Callable[[str], Awaitable[Any]]

    kind: ClassVar[ResourceKind] = ResourceKind.SCRIPT

    def __call__(self, *_dependencies: Any) -> Awaitable[Any]:
        return self.loader(self.url)


@dataclass(frozen=True)
class JsonProvider:
    """Fetches the JSON document at ``url`` once the dependencies are available.

    Dependency values are not passed to the fetcher.
    """

    url: str
    fetcher: Callable[[str, str], Awaitable[Any]]
    method: str = "GET"

    kind: ClassVar[ResourceKind] = ResourceKind.JSON

    def __call__(self, *_dependencies: Any) -> Awaitable[Any]:
        return self.fetcher(self.url, self.method)


Provider = FunctionProvider | ScriptProvider | JsonProvider
