"""
=================
Logging Utilities
=================

``bootloader`` logs through :mod:`loguru` and never adds a sink on its own.
Every record emitted by a :class:`BootLoader <bootloader.loader.BootLoader>`
is bound to the loader's name and, while a resource is being settled, to the
resource's name. The sinks added here render that context as
``loader:resource`` in front of each message.

Applications opt in with :func:`configure_logging_to_terminal` and
:func:`configure_logging_to_file`, or let a loader add the sinks described by
its ``logging`` configuration with
:meth:`BootLoader.configure_logging <bootloader.loader.BootLoader.configure_logging>`.

"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

import loguru
from loguru import logger

if TYPE_CHECKING:
    from loguru import Record

LOG_FILE_NAME = "bootloader.log"
VERBOSITY_LEVELS = ("WARNING", "INFO", "DEBUG")

_TIME = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>"
_LEVEL = "<level>{level: <8}</level>"
_SOURCE = "<cyan>{name}</cyan>:<cyan>{line}</cyan>"
_LOADER = "<cyan>{extra[loader]}</cyan>"
_RESOURCE = "<magenta>{extra[resource]}</magenta>"
_MESSAGE = "<level>{message}</level>\n{exception}"


def get_logger(loader_name: str, resource_name: str | None = None) -> loguru.Logger:
    """Get a logger bound to a loader and, optionally, one of its resources."""
    bind_args = {"loader": loader_name}
    if resource_name:
        bind_args["resource"] = resource_name
    return logger.bind(**bind_args)


def configure_logging_to_terminal(verbosity: int, long_format: bool = True) -> int:
    """Replace loguru's default handler with a ``sys.stdout`` sink.

    Parameters
    ----------
    verbosity
        0 logs warnings and errors, 1 adds info messages and 2 or more adds
        debug messages.
    long_format
        Whether to print the level and the loader and resource context of each
        record. The short format prints the emitting module and line instead.

    Returns
    -------
        The id of the new handler.
    """
    try:
        logger.remove(0)
    except ValueError:
        pass
    return _add_sink(sys.stdout, verbosity, long_format, colorize=True)


def configure_logging_to_file(output_directory: Path | str, verbosity: int = 2) -> int:
    """Log to ``bootloader.log`` in ``output_directory``, creating it if needed.

    Returns
    -------
        The id of the new handler.
    """
    output_directory = Path(output_directory)
    output_directory.mkdir(parents=True, exist_ok=True)
    return _add_sink(
        output_directory / LOG_FILE_NAME, verbosity, long_format=True, colorize=False
    )


def format_record(record: Record, long_format: bool = True) -> str:
    """Build the loguru format string for ``record``."""
    if not long_format:
        return f"{_TIME} | {_SOURCE} - {_MESSAGE}"
    return f"{_TIME} | {_LEVEL} | {_context(record['extra'])} - {_MESSAGE}"


def verbosity_level(verbosity: int) -> str:
    """The loguru level name for a verbosity count."""
    if verbosity < 0:
        raise ValueError(f"Invalid verbosity level: {verbosity}")
    return VERBOSITY_LEVELS[min(verbosity, len(VERBOSITY_LEVELS) - 1)]


def _context(extra: Mapping[str, Any]) -> str:
    if "loader" not in extra:
        return _SOURCE
    if "resource" in extra:
        return f"{_LOADER}:{_RESOURCE}"
    return _LOADER


def _add_sink(sink: Path | TextIO, verbosity: int, long_format: bool, colorize: bool) -> int:
    return logger.add(
        sink,
        level=verbosity_level(verbosity),
        format=lambda record: format_record(record, long_format),
        colorize=colorize,
    )
