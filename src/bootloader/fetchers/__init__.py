"""
=================
Default Fetchers
=================

The collaborators used by ``script`` and ``json`` resources when a resource
definition does not supply its own ``script_loader`` or ``fetcher``.

"""

from bootloader.fetchers.exceptions import FetchError
from bootloader.fetchers.http import fetch_json, request_json
from bootloader.fetchers.script import (
    download_script,
    execute_script,
    import_script,
    load_script,
)
