from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Generator
from pathlib import Path
from typing import Any, TypeVar

import pytest
from _pytest.logging import LogCaptureFixture
from loguru import logger
from pytest_mock import MockerFixture

from bootloader import BootLoader

T = TypeVar("T")


@pytest.fixture
def caplog(caplog: LogCaptureFixture) -> Generator[LogCaptureFixture, None, None]:
    handler_id = logger.add(caplog.handler, format="{message}")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def user_config_path(mocker: MockerFixture, tmp_path: Path) -> Path:
    """Keeps a real ~/bootloader.yaml out of the tests."""
    path = tmp_path / "user_home" / "bootloader.yaml"
    mocker.patch("bootloader.configuration.USER_CONFIGURATION_PATH", path)
    return path


@pytest.fixture
def loop() -> Generator[asyncio.AbstractEventLoop, None, None]:
    event_loop = asyncio.new_event_loop()
    yield event_loop
    event_loop.close()


@pytest.fixture
def run(loop: asyncio.AbstractEventLoop) -> Callable[[Awaitable[T]], T]:
    """Runs an awaitable to completion on the test loop."""

    def _run(awaitable: Awaitable[Any]) -> Any:
        return loop.run_until_complete(awaitable)

    return _run


@pytest.fixture
def settle(loop: asyncio.AbstractEventLoop) -> Callable[[], None]:
    """Lets every ready callback and task on the test loop run."""

    def _settle() -> None:
        loop.run_until_complete(asyncio.sleep(0.01))

    return _settle


@pytest.fixture
def loader(loop: asyncio.AbstractEventLoop) -> BootLoader:
    return BootLoader(loop=loop)


@pytest.fixture
def simple_resource() -> Callable[..., dict[str, Any]]:
    def _simple_resource(
        name: str, requires: Any = None, value: Any = "simpleResourceResult"
    ) -> dict[str, Any]:
        return {"name": name, name: lambda *_: value, "requires": requires}

    return _simple_resource
