"""
==============
Script Loading
==============

The default collaborator for ``script`` resources. A script is Python source
read from a local path, a ``file:`` URL or an ``http(s):`` URL. Local scripts
are imported with a source file loader; remote scripts are downloaded and
executed from their source. Either way the script becomes a fresh module
registered in :data:`sys.modules` under a common prefix.

"""

from __future__ import annotations

import asyncio
import importlib.machinery
import importlib.util
import re
import sys
from pathlib import Path, PurePosixPath
from types import ModuleType
from urllib.error import HTTPError, URLError
from urllib.parse import urlsplit
from urllib.request import url2pathname, urlopen

from loguru import logger

from bootloader.fetchers.exceptions import FetchError
from bootloader.fetchers.http import DEFAULT_TIMEOUT

DEFAULT_MODULE_PREFIX = "bootloader.scripts"
_REMOTE_SCHEMES = ("http", "https")


async def load_script(
    url: str,
    *,
    module_prefix: str = DEFAULT_MODULE_PREFIX,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> None:
    """Read and execute the script at ``url``.

    Local scripts are imported from their file. Remote scripts are downloaded
    on a worker thread and executed from their source.

    Parameters
    ----------
    url
        A filesystem path, ``file:`` URL or ``http(s):`` URL.
    module_prefix
        The package prefix the script module is registered under.
    timeout
        Socket timeout in seconds for remote scripts.

    Raises
    ------
    FetchError
        If the script cannot be read or does not compile.
    """
    module_name = script_module_name(url, module_prefix)
    path = script_path(url)
    if path is None:
        source = await asyncio.to_thread(download_script, url, timeout)
        execute_script(source, url, module_name)
    else:
        import_script(path, module_name, url=url)


def script_path(url: str) -> Path | None:
    """The local path of the script at ``url``, or ``None`` for a remote script.

    Raises
    ------
    FetchError
        If ``url`` has a scheme other than ``file``, ``http`` or ``https``.
    """
    scheme = urlsplit(url).scheme
    if scheme in _REMOTE_SCHEMES:
        return None
    if scheme == "file":
        return Path(url2pathname(urlsplit(url).path))
    # Single letter schemes are windows drive letters.
    if len(scheme) <= 1:
        return Path(url)
    raise FetchError(f"Unsupported script scheme '{scheme}'", url=url)


def download_script(url: str, timeout: float | None = DEFAULT_TIMEOUT) -> bytes:
    """Return the source of the remote script at ``url``."""
    logger.debug(f"Downloading script {url}")
    try:
        with urlopen(url, timeout=timeout) as response:
            status = getattr(response, "status", None)
            source: bytes = response.read()
    except HTTPError as exc:
        raise FetchError(f"{exc.code} {exc.reason}", url=url, status=exc.code) from exc
    except URLError as exc:
        raise FetchError(str(exc.reason), url=url) from exc
    except OSError as exc:
        raise FetchError(str(exc), url=url) from exc
    if status is not None and not 200 <= status < 300:
        raise FetchError(f"Unsuccessful response status {status}", url=url, status=status)
    return source


def import_script(path: Path, module_name: str, url: str | None = None) -> ModuleType:
    """Import the script file at ``path`` as the module ``module_name``.

    Exceptions raised by the script body propagate unchanged and the
    partially initialized module is discarded.
    """
    url = url or str(path)
    loader = importlib.machinery.SourceFileLoader(module_name, str(path))
    spec = importlib.util.spec_from_file_location(module_name, path, loader=loader)
    if spec is None:  # pragma: no cover - only without a loader
        raise FetchError(f"Cannot create module '{module_name}'", url=url)
    try:
        loader.get_code(module_name)
    except OSError as exc:
        raise FetchError(exc.strerror or str(exc), url=url) from exc
    except (SyntaxError, ValueError) as exc:
        raise FetchError(f"Cannot compile script: {exc}", url=url) from exc

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    logger.debug(f"Loaded script {url} as module '{module_name}'")
    return module


def execute_script(source: bytes | str, url: str, module_name: str) -> ModuleType:
    """Compile the ``source`` of a remote script and execute it as ``module_name``.

    Exceptions raised by the script body propagate unchanged and the
    partially initialized module is discarded.
    """
    try:
        code = compile(source, url, "exec")
    except (SyntaxError, ValueError) as exc:
        raise FetchError(f"Cannot compile script: {exc}", url=url) from exc

    spec = importlib.util.spec_from_loader(module_name, loader=None, origin=url)
    if spec is None:  # pragma: no cover - only possible with a loader
        raise FetchError(f"Cannot create module '{module_name}'", url=url)
    module = importlib.util.module_from_spec(spec)
    module.__file__ = url

    sys.modules[module_name] = module
    try:
        exec(code, module.__dict__)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    logger.debug(f"Loaded script {url} as module '{module_name}'")
    return module


def script_module_name(url: str, module_prefix: str = DEFAULT_MODULE_PREFIX) -> str:
    """The module name a script is registered under, derived from its file name."""
    stem = PurePosixPath(urlsplit(url).path).stem
    stem = re.sub(r"\W", "_", stem) or "script"
    if stem[0].isdigit():
        stem = f"_{stem}"
    return f"{module_prefix}.{stem}"
