"""
===================
Resource Management
===================

This module provides the building blocks of the :class:`BootLoader
<bootloader.loader.BootLoader>`: validated resource definitions, the
providers that produce their values, and the pending slots that stand in for
resources which are needed before they are declared.

"""

from bootloader.resource.exceptions import (
    CyclicDependencyError,
    DuplicateResourceNameError,
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
    ResourceKind,
    ScriptProvider,
)
from bootloader.resource.resource import Resource
from bootloader.resource.slot import PendingSlot
