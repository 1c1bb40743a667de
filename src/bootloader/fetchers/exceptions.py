"""
================
Fetch Exceptions
================

"""

from __future__ import annotations

from bootloader.exceptions import BootLoaderError


class FetchError(BootLoaderError):
    """Error raised when a script or JSON document cannot be fetched.

    Parameters
    ----------
    message
        The underlying error or status text.
    url
        The location that was being fetched.
    status
        The HTTP status code of the response, if there was one.
    """

    def __init__(self, message: str, url: str | None = None, status: int | None = None):
        super().__init__(message if url is None else f"{message} ({url})")
        self.url = url
        self.status = status
