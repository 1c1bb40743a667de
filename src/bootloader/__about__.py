__all__ = [
    "__title__",
    "__summary__",
    "__uri__",
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__copyright__",
]

__title__ = "bootloader"
__summary__ = (
    "bootloader is a declarative, dependency-driven resource activator built on asyncio."
)
__uri__ = "https://github.com/bootloader-dev/bootloader"

__version__ = "0.3.0"

__author__ = "The bootloader developers"
__email__ = "bootloader.dev@gmail.com"

__license__ = "BSD-3-Clause"
__copyright__ = f"Copyright 2024 {__author__}"
