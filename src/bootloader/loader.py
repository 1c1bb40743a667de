"""
===========
Boot Loader
===========

The :class:`BootLoader` is the registry at the heart of ``bootloader``.
Resources are declared in any order, each naming the resources it requires.
The loader wires every resource to the eventual values of its requirements
and invokes its provider exactly once, as soon as all of them are available.

A requirement may be named before it is declared. The loader hands out a
:class:`PendingSlot <bootloader.resource.PendingSlot>` future for it and
chains that future to the real resource once it arrives. Names that have been
required but never declared are reported by :meth:`BootLoader.outstanding`.

For example::

    async def main():
        loader = BootLoader()
        loader.declare(
            {"name": "zoo", "requires": ["animals"], "zoo": lambda animals: len(animals)}
        ).declare({"name": "animals", "json": "https://example.com/animals.json"})
        return await loader.eventual_value_of("zoo")

"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import networkx as nx
from layered_config_tree import LayeredConfigTree

from bootloader.configuration import build_configuration
from bootloader.fetchers import fetch_json, load_script
from bootloader.logging import (
    configure_logging_to_file,
    configure_logging_to_terminal,
    get_logger,
)
from bootloader.resource import (
    CyclicDependencyError,
    DuplicateResourceNameError,
    PendingSlot,
    Resource,
)
from bootloader.utilities import observe


class BootLoader:
    """Declares resources and activates them as their dependencies settle.

    Each loader owns an independent namespace. All futures it creates belong
    to a single event loop: either the ``loop`` it was given or the loop that
    is running the first time one is needed.
    """

    def __init__(
        self,
        configuration: Mapping[str, Any] | LayeredConfigTree | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        name: str = "bootloader",
    ) -> None:
        self.name = name
        self.configuration = build_configuration(configuration)
        self.logger = get_logger(name)
        self._loop = loop
        self._resources: dict[str, Resource] = {}
        """Declared resources by name."""
        self._slots: dict[str, PendingSlot] = {}
        """Slots for names that have been required but not declared, in the
        order they were first required."""

        fetch_config = self.configuration.fetch
        self._fetcher = functools.partial(
            fetch_json, timeout=fetch_config.timeout, headers=fetch_config.headers.to_dict()
        )
        self._script_loader = functools.partial(
            load_script,
            module_prefix=self.configuration.scripts.module_prefix,
            timeout=fetch_config.timeout,
        )
        self._method = fetch_config.method
        self._detect_cycles = self.configuration.resources.detect_cycles

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """The event loop that owns this loader's futures.

        Raises
        ------
        RuntimeError
            If no loop was given and none is running.
        """
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def graph(self) -> nx.DiGraph:
        """The dependency graph of declared and outstanding resources.

        Edges point from a dependency to the resource that requires it.
        Outstanding names are marked with ``declared=False``.
        """
        graph = nx.DiGraph()
        for name, resource in self._resources.items():
            graph.add_node(name, declared=True, kind=resource.kind.value)
        for name in self._slots:
            graph.add_node(name, declared=False)
        for resource in self._resources.values():
            graph.add_edges_from(
                (dependency, resource.name) for dependency in resource.requires
            )
        return graph

    def configure_logging(self) -> list[int]:
        """Add the log sinks described by the ``logging`` configuration.

        A terminal sink is always added. When ``logging.output_directory`` is
        set, a debug level ``bootloader.log`` is written there as well.

        Returns
        -------
            The loguru handler ids of the new sinks.
        """
        logging_config = self.configuration.logging
        handler_ids = [
            configure_logging_to_terminal(
                verbosity=logging_config.verbosity, long_format=logging_config.long_format
            )
        ]
        if logging_config.output_directory is not None:
            handler_ids.append(configure_logging_to_file(logging_config.output_directory))
        return handler_ids

    def declare(self, definition: Mapping[str, Any]) -> BootLoader:
        """Add a new resource to the pool of resources that will be loaded.

        The definition should include a provider named the same as the
        resource, or a ``script`` or ``json`` location::

            {
                "name": "zebra",
                "requires": ["animal", "grass"],
                "zebra": lambda animal, grass: ...,
            }

        Parameters
        ----------
        definition
            The resource definition.

        Returns
        -------
            This loader, so declarations can be chained.

        Raises
        ------
        ResourceError
            If the definition is invalid, the name is already declared or,
            when cycle detection is enabled, the resource closes a cycle.
        """
        resource = Resource(
            definition,
            script_loader=self._script_loader,
            fetcher=self._fetcher,
            method=self._method,
        )
        if resource.name in self._resources:
            raise DuplicateResourceNameError(resource.name)
        if self._detect_cycles:
            cycle = self._cycle_closed_by(resource)
            if cycle:
                raise CyclicDependencyError(cycle)

        loop = self.loop
        dependencies = [self._future_of(name) for name in resource.requires]
        settlement = loop.create_task(
            self._settle(resource, dependencies), name=f"{self.name}:{resource.name}"
        )
        settlement.add_done_callback(functools.partial(self._on_settled, resource.name))
        resource.bind(settlement)

        slot = self._slots.pop(resource.name, None)
        if slot is not None:
            slot.settle(settlement)
        self._resources[resource.name] = resource

        self.logger.debug(
            f"Declared {resource.kind.value} resource '{resource.name}'"
            f" requiring {list(resource.requires)}."
        )
        return self

    def resource_by_name(self, name: str) -> Resource | None:
        """Returns the declared resource called ``name``, if there is one."""
        return self._resources.get(name)

    def eventual_value_of(self, name: str) -> asyncio.Future[Any]:
        """Get a future for the value of the resource called ``name``.

        If the resource is declared the future follows its settlement.
        Otherwise it follows a pending slot that is settled once the resource
        is declared. Every request for the same undeclared name shares one
        slot.

        Each call returns a new shielded view, so cancelling it, or timing
        out while waiting on it, leaves the settlement itself running for
        every other observer.
        """
        return observe(self._future_of(name))

    def outstanding(self) -> list[str]:
        """Names that have been required but not yet declared."""
        return list(self._slots)

    def find_cycle(self) -> list[str]:
        """Returns the names along one dependency cycle, or an empty list."""
        try:
            edges = nx.find_cycle(self.graph)
        except nx.NetworkXNoCycle:
            return []
        return [dependency for dependency, _ in edges]

    def sorted_names(self) -> list[str]:
        """Returns the declared resource names in dependency order.

        Notes
        -----
        Topological sorts are not stable. Be wary of depending on order
        where you shouldn't.

        Raises
        ------
        CyclicDependencyError
            If the declared resources contain a cycle.
        """
        try:
            order = list(nx.topological_sort(self.graph))
        except nx.NetworkXUnfeasible:
            raise CyclicDependencyError(self.find_cycle())
        return [name for name in order if name in self._resources]

    def _future_of(self, name: str) -> asyncio.Future[Any]:
        resource = self._resources.get(name)
        if resource is not None:
            return resource.settlement
        slot = self._slots.get(name)
        if slot is None:
            slot = PendingSlot(name, self.loop)
            self._slots[name] = slot
            self.logger.debug(f"Resource '{name}' was required before it was declared.")
        return slot.future

    async def _settle(
        self, resource: Resource, dependencies: Sequence[asyncio.Future[Any]]
    ) -> Any:
        logger = get_logger(self.name, resource.name)
        try:
            values = (
                await asyncio.gather(*(asyncio.shield(d) for d in dependencies))
                if dependencies
                else []
            )
        except Exception as e:
            logger.debug(
                f"Not invoking provider of '{resource.name}', a dependency failed: {e!r}"
            )
            raise

        logger.debug(f"Invoking provider of '{resource.name}'.")
        try:
            return await resource.resolve_with(values)
        except Exception as e:
            logger.warning(f"Provider of resource '{resource.name}' failed: {e!r}")
            raise

    def _on_settled(self, name: str, settlement: asyncio.Future[Any]) -> None:
        if settlement.cancelled():
            self.logger.debug(f"Resource '{name}' was cancelled.")
        elif settlement.exception() is None:
            self.logger.debug(f"Resource '{name}' settled.")

    def _cycle_closed_by(self, resource: Resource) -> list[str]:
        graph = self.graph
        graph.add_node(resource.name)
        graph.add_edges_from((dependency, resource.name) for dependency in resource.requires)
        try:
            edges = nx.find_cycle(graph, source=resource.name)
        except nx.NetworkXNoCycle:
            return []
        return [dependency for dependency, _ in edges]

    def __iter__(self) -> Iterator[Resource]:
        resources = [self._resources[name] for name in sorted(self._resources)]
        yield from resources

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, name: object) -> bool:
        return name in self._resources

    def __repr__(self) -> str:
        return "\n".join(
            f"{resource.name} : {', '.join(resource.requires)}" for resource in self
        )
