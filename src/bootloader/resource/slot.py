"""
=============
Pending Slots
=============

A :class:`PendingSlot` stands in for a resource that has been asked for but
not yet declared. Callers receive the slot's future immediately; when the
resource is finally declared the loader settles the slot with the resource's
own settlement and every early caller observes the real outcome.

"""

from __future__ import annotations

import asyncio
from typing import Any

from bootloader.utilities import retrieve_exception


class PendingSlot:
    """A future for an as-yet-undeclared resource and its one-shot completion."""

    def __init__(self, name: str, loop: asyncio.AbstractEventLoop) -> None:
        self.name = name
        """The name of the resource this slot is waiting for."""
        self._future: asyncio.Future[Any] = loop.create_future()
        self._future.add_done_callback(retrieve_exception)
        self._armed = True

    @property
    def future(self) -> asyncio.Future[Any]:
        """The future handed out to everyone who asked for this name."""
        return self._future

    @property
    def armed(self) -> bool:
        """Whether the slot can still be settled or failed."""
        return self._armed

    def settle(self, source: asyncio.Future[Any]) -> None:
        """Chain this slot to ``source``.

        Once ``source`` completes, its result, exception or cancellation is
        mirrored into this slot's future.

        Raises
        ------
        asyncio.InvalidStateError
            If the slot has already been settled or failed.
        """
        self._disarm()
        if source.done():
            self._mirror(source)
        else:
            source.add_done_callback(self._mirror)

    def fail(self, exception: BaseException) -> None:
        """Fail this slot's future with ``exception``.

        Raises
        ------
        asyncio.InvalidStateError
            If the slot has already been settled or failed.
        """
        self._disarm()
        if not self._future.done():
            self._future.set_exception(exception)

    def _disarm(self) -> None:
        if not self._armed:
            raise asyncio.InvalidStateError(
                f"The pending slot for '{self.name}' has already been settled."
            )
        self._armed = False

    def _mirror(self, source: asyncio.Future[Any]) -> None:
        # A requester may have cancelled the slot future; there is nothing to deliver.
        if self._future.done():
            return
        if source.cancelled():
            self._future.cancel()
            return
        exception = source.exception()
        if exception is not None:
            self._future.set_exception(exception)
        else:
            self._future.set_result(source.result())

    def __repr__(self) -> str:
        state = "armed" if self._armed else "settled"
        return f"PendingSlot({self.name!r}, {state})"
