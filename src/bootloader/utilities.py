"""
=================
Utility Functions
=================

Collection of utility functions shared by the ``bootloader`` package.

"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from importlib import import_module
from typing import Any


def import_by_path(path: str) -> Callable[..., Any]:
    """Import a class or function given its absolute path.

    Parameters
    ----------
    path
        Path to object to import

    Returns
    -------
        The imported class or function
    """

    module_path, _, attribute_name = path.rpartition(".")
    callable_attr: Callable[..., Any] = getattr(import_module(module_path), attribute_name)
    return callable_attr


def observe(future: asyncio.Future[Any]) -> asyncio.Future[Any]:
    """Return a view of ``future`` that can be cancelled without cancelling it.

    A view of a future that has already completed is the future itself.
    """
    view = asyncio.shield(future)
    if view is not future:
        view.add_done_callback(retrieve_exception)
    return view


def retrieve_exception(future: asyncio.Future[Any]) -> None:
    """Mark the exception of a completed ``future`` as retrieved."""
    if not future.cancelled():
        future.exception()
