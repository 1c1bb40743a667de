"""
===================
Resource Exceptions
===================

Errors raised synchronously while a resource definition is validated and
registered with a :class:`BootLoader <bootloader.loader.BootLoader>`.

"""

from __future__ import annotations

from bootloader.exceptions import BootLoaderError


class ResourceError(BootLoaderError):
    """Generic error class for the resource management system."""

    pass


class InvalidResourceError(ResourceError):
    """Error raised when a resource definition is malformed."""

    pass


class UnnamedResourceError(ResourceError):
    """Error raised when a resource definition has no name."""

    pass


class DuplicateResourceNameError(ResourceError):
    """Error raised when a resource name is declared more than once."""

    def __init__(self, name: str):
        super().__init__(f"Duplicate resource name: {name}")
        self.name = name


class InvalidRequiresError(ResourceError):
    """Error raised when ``requires`` is not a string or a list of strings."""

    pass


class InvalidProviderError(ResourceError):
    """Error raised when a resource has no usable provider."""

    def __init__(self, name: str, reason: str = ""):
        message = f"Invalid provider: {name}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.name = name


class InvalidUrlError(ResourceError):
    """Error raised when a ``script`` or ``json`` location is not a string."""

    pass


class CyclicDependencyError(ResourceError):
    """Error raised when the declared resources contain a dependency cycle."""

    def __init__(self, cycle: list[str]):
        super().__init__(
            "The resource pool contains at least one cycle: "
            + " -> ".join(cycle + cycle[:1])
        )
        self.cycle = cycle
