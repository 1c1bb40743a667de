from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from bootloader.fetchers import fetch_json, load_script
from bootloader.resource.exceptions import (
    InvalidProviderError,
    InvalidRequiresError,
    InvalidResourceError,
    InvalidUrlError,
    ResourceError,
    UnnamedResourceError,
)
from bootloader.resource.provider import (
    FunctionProvider,
    JsonProvider,
    Provider,
    ResourceKind,
    ScriptProvider,
)

_URL_SOURCES = (ResourceKind.SCRIPT.value, ResourceKind.JSON.value)


class Resource:
    """A named unit of work: its dependencies and the provider of its value.

    Resources are built from plain definition mappings such as::

        {
            "name": "zebra",
            "requires": ["animal", "grass"],
            "zebra": lambda animal, grass: ...,
        }

    where the provider is either the entry named after the resource, a
    ``script`` location or a ``json`` location.
    """

    def __init__(
        self,
        definition: Mapping[str, Any],
        script_loader: Callable[[str], Awaitable[Any]] = load_script,
        fetcher: Callable[..., Awaitable[Any]] = fetch_json,
        method: str = "GET",
    ) -> None:
        """Validate ``definition`` and create a new resource.

        Parameters
        ----------
        definition
            The resource definition.
        script_loader
            The loader used for ``script`` resources that don't provide a
            ``script_loader`` of their own.
        fetcher
            The fetcher used for ``json`` resources that don't provide a
            ``fetcher`` of their own.
        method
            The HTTP method used for ``json`` resources that don't provide a
            ``method`` of their own.

        Raises
        ------
        InvalidResourceError
            If the definition is not a mapping or names conflicting providers.
        UnnamedResourceError
            If the definition has no name.
        InvalidRequiresError
            If ``requires`` is not a string or a list of strings.
        InvalidUrlError
            If a ``script`` or ``json`` location is not a string.
        InvalidProviderError
            If the definition has no provider or the provider is not callable.
        """
        if not isinstance(definition, Mapping):
            raise InvalidResourceError(
                "Resource definitions must be mappings. "
                f"You provided {type(definition).__name__}."
            )
        name = definition.get("name")
        if not name:
            raise UnnamedResourceError("Resource definitions must have a 'name'.")
        if not isinstance(name, str):
            raise InvalidResourceError(
                f"Resource names must be strings. You provided {name!r}."
            )

        self._name = name
        self._requires = _normalize_requires(name, definition.get("requires"))
        self._provider = _build_provider(name, definition, script_loader, fetcher, method)
        self._settlement: asyncio.Future[Any] | None = None

    @property
    def name(self) -> str:
        """The unique name of the resource."""
        return self._name

    @property
    def requires(self) -> tuple[str, ...]:
        """The names of the resources this one depends on, in argument order."""
        return self._requires

    @property
    def provider(self) -> Provider:
        """The source of this resource's value."""
        return self._provider

    @property
    def kind(self) -> ResourceKind:
        return self._provider.kind

    @property
    def url(self) -> str | None:
        """The location of a script or JSON resource."""
        return self._provider.url

    @property
    def settlement(self) -> asyncio.Future[Any]:
        """The eventual value of this resource.

        This is the task that produces the value. Observers that may cancel
        should wait on :meth:`BootLoader.eventual_value_of
        <bootloader.loader.BootLoader.eventual_value_of>` instead.

        Raises
        ------
        ResourceError
            If the resource has not been declared with a loader yet.
        """
        if self._settlement is None:
            raise ResourceError(f"Resource '{self.name}' has not been declared yet.")
        return self._settlement

    @property
    def is_bound(self) -> bool:
        """Whether the resource's settlement has been created."""
        return self._settlement is not None

    def bind(self, settlement: asyncio.Future[Any]) -> None:
        """Attach the future that will hold this resource's value.

        Raises
        ------
        ResourceError
            If the resource already has a settlement.
        """
        if self._settlement is not None:
            raise ResourceError(f"Resource '{self.name}' already has a settlement.")
        self._settlement = settlement

    async def resolve_with(self, dependencies: Sequence[Any]) -> Any:
        """Produce this resource's value from its dependency values.

        Awaitable results from the provider are awaited, so a provider that
        returns a coroutine or future settles with that awaitable's result.
        """
        result = self._provider(*dependencies)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return (
            f"Resource({self.name!r}, kind={self.kind.value}, "
            f"requires={list(self.requires)})"
        )


def _normalize_requires(name: str, requires: Any) -> tuple[str, ...]:
    if not requires:
        return ()
    if isinstance(requires, str):
        return (requires,)
    if isinstance(requires, (list, tuple)) and all(
        isinstance(requirement, str) and requirement for requirement in requires
    ):
        return tuple(requires)
    raise InvalidRequiresError(
        f"The requirements of resource '{name}' must be a string or a list of strings. "
        f"You provided {requires!r}."
    )


def _build_provider(
    name: str,
    definition: Mapping[str, Any],
    script_loader: Callable[[str], Awaitable[Any]],
    fetcher: Callable[..., Awaitable[Any]],
    method: str,
) -> Provider:
    # A resource named "script" or "json" is read as that kind of resource.
    sources = [key for key in _URL_SOURCES if key in definition]
    if name not in _URL_SOURCES and name in definition:
        sources.insert(0, ResourceKind.FUNCTION.value)

    if len(sources) > 1:
        raise InvalidResourceError(
            f"Resource '{name}' has conflicting providers: {', '.join(sources)}."
        )
    if not sources:
        raise InvalidProviderError(name, "no provider found")

    kind = ResourceKind(sources[0])
    if kind is ResourceKind.FUNCTION:
        function = definition[name]
        if not callable(function):
            raise InvalidProviderError(name, f"{function!r} is not callable")
        return FunctionProvider(function)

    url = definition[kind.value]
    if not isinstance(url, str):
        raise InvalidUrlError(
            f"The {kind.value} location of resource '{name}' must be a string. "
            f"You provided {url!r}."
        )

    if kind is ResourceKind.SCRIPT:
        loader = definition.get("script_loader", script_loader)
        if not callable(loader):
            raise InvalidProviderError(name, f"script loader {loader!r} is not callable")
        return ScriptProvider(url, loader)

    json_fetcher = definition.get("fetcher", fetcher)
    if not callable(json_fetcher):
        raise InvalidProviderError(name, f"fetcher {json_fetcher!r} is not callable")
    json_method = definition.get("method", method)
    if not isinstance(json_method, str):
        raise InvalidResourceError(
            f"The method of resource '{name}' must be a string. You provided {json_method!r}."
        )
    return JsonProvider(url, json_fetcher, json_method)
