from bootloader.__about__ import (
    __author__,
    __copyright__,
    __email__,
    __license__,
    __summary__,
    __title__,
    __uri__,
    __version__,
)
from bootloader.exceptions import BootLoaderError
from bootloader.fetchers import FetchError
from bootloader.loader import BootLoader
from bootloader.manifest import ManifestError, build_loader_from_manifest
from bootloader.resource import PendingSlot, Resource, ResourceKind
