"""
=============
JSON Fetching
=============

The default collaborator for ``json`` resources. Requests are made with
:mod:`urllib.request` on a worker thread so the event loop driving the
:class:`BootLoader <bootloader.loader.BootLoader>` is never blocked.

"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from loguru import logger

from bootloader.fetchers.exceptions import FetchError

DEFAULT_TIMEOUT = 10.0
DEFAULT_HEADERS = {"Accept": "application/json"}


async def fetch_json(
    url: str,
    method: str = "GET",
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    headers: Mapping[str, str] | None = None,
) -> Any:
    """Fetch and parse the JSON document at ``url``.

    Parameters
    ----------
    url
        The location of the document. Any scheme :func:`urllib.request.urlopen`
        understands is accepted, including ``file:``.
    method
        The HTTP method to use.
    timeout
        Socket timeout in seconds.
    headers
        Request headers. Defaults to an ``Accept: application/json`` header.

    Returns
    -------
        The parsed document.

    Raises
    ------
    FetchError
        If the request fails, the response status is not a success, the
        response is not JSON-typed or the body cannot be parsed.
    """
    return await asyncio.to_thread(
        request_json, url, method, timeout=timeout, headers=headers
    )


def request_json(
    url: str,
    method: str = "GET",
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    headers: Mapping[str, str] | None = None,
) -> Any:
    """Blocking implementation of :func:`fetch_json`."""
    logger.debug(f"Requesting JSON document {method} {url}")
    try:
        request = Request(url, method=method, headers=dict(headers or DEFAULT_HEADERS))
        with urlopen(request, timeout=timeout) as response:
            # Responses for non-http schemes (e.g. file:) have no status.
            status = getattr(response, "status", None)
            content_type = response.headers.get_content_type()
            body = response.read()
    except HTTPError as exc:
        raise FetchError(f"{exc.code} {exc.reason}", url=url, status=exc.code) from exc
    except URLError as exc:
        raise FetchError(str(exc.reason), url=url) from exc
    except (OSError, ValueError) as exc:
        raise FetchError(str(exc), url=url) from exc

    if status is not None and not 200 <= status < 300:
        raise FetchError(f"Unsuccessful response status {status}", url=url, status=status)
    if not is_json_content_type(content_type):
        raise FetchError(
            f"Expected a JSON response but received '{content_type}'", url=url, status=status
        )
    try:
        return json.loads(body)
    except ValueError as exc:
        raise FetchError(f"Invalid JSON: {exc}", url=url, status=status) from exc


def is_json_content_type(content_type: str) -> bool:
    return content_type == "application/json" or content_type.endswith("+json")
