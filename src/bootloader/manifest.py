"""
=========
Manifests
=========

A manifest is a yaml file that declares a set of resources and, optionally,
the configuration of the loader that activates them::

    configuration:
      fetch:
        timeout: 5.0
    resources:
      - name: animals
        json: https://example.com/animals.json
      - name: zoo
        requires: [animals]
        provider: zoo_keeper.build_zoo

Function providers cannot be written in yaml, so they are given as the full
import path of a callable under the ``provider`` key. The ``fetcher`` and
``script_loader`` overrides are given as import paths as well.

"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from bootloader.exceptions import BootLoaderError
from bootloader.loader import BootLoader
from bootloader.utilities import import_by_path

VALID_KEYS = {"resources", "configuration"}
_IMPORTED_KEYS = ("fetcher", "script_loader")


class ManifestError(BootLoaderError):
    """Error raised when a manifest is not specified correctly."""

    pass


def load_manifest(manifest: str | Path | Mapping[str, Any]) -> dict[str, Any]:
    """Load and validate a manifest.

    Parameters
    ----------
    manifest
        The path to a yaml manifest or an already loaded manifest.

    Returns
    -------
        A dictionary with ``resources`` and ``configuration`` entries.

    Raises
    ------
    ManifestError
        If the manifest file does not exist, is not yaml or is malformed.
    """
    if isinstance(manifest, (str, Path)):
        raw_manifest = _read_manifest_file(Path(manifest))
        source = str(manifest)
    else:
        raw_manifest = dict(manifest)
        source = "user_supplied_args"

    if not isinstance(raw_manifest, Mapping):
        raise ManifestError(f"The manifest {source} must be a mapping.")
    extra_keys = set(raw_manifest) - VALID_KEYS
    if extra_keys:
        raise ManifestError(
            f"The manifest {source} contains additional top level keys {sorted(extra_keys)}."
        )

    resources = raw_manifest.get("resources") or []
    if not isinstance(resources, list) or not all(
        isinstance(entry, Mapping) for entry in resources
    ):
        raise ManifestError(f"The resources in manifest {source} must be a list of mappings.")
    configuration = raw_manifest.get("configuration") or {}
    if not isinstance(configuration, Mapping):
        raise ManifestError(f"The configuration in manifest {source} must be a mapping.")

    return {"resources": resources, "configuration": dict(configuration)}


def parse_resource_definitions(entries: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Turn manifest entries into resource definitions.

    A ``provider`` import path is imported and stored under the resource's
    name. ``fetcher`` and ``script_loader`` import paths are imported in place.
    Everything else is passed through untouched and validated when the
    resource is declared.

    Raises
    ------
    ManifestError
        If an import path cannot be imported.
    """
    definitions = []
    for entry in entries:
        definition = dict(entry)
        if "provider" in definition:
            name = definition.get("name")
            if not name or not isinstance(name, str):
                raise ManifestError(f"Manifest entry {entry!r} has a provider but no name.")
            definition[name] = _import(definition.pop("provider"), name)
        for key in _IMPORTED_KEYS:
            if isinstance(definition.get(key), str):
                definition[key] = _import(definition[key], definition.get("name"))
        definitions.append(definition)
    return definitions


def build_loader_from_manifest(
    manifest: str | Path | Mapping[str, Any],
    loop: asyncio.AbstractEventLoop | None = None,
) -> BootLoader:
    """Build a loader configured by ``manifest`` and declare its resources.

    Resources are declared in the order they appear in the manifest. As with
    any :class:`BootLoader`, ``loop`` may be omitted only when this is called
    while an event loop is running.
    """
    loaded = load_manifest(manifest)
    name = Path(manifest).stem if isinstance(manifest, (str, Path)) else "bootloader"
    loader = BootLoader(configuration=loaded["configuration"], loop=loop, name=name)
    for definition in parse_resource_definitions(loaded["resources"]):
        loader.declare(definition)
    return loader


def _read_manifest_file(path: Path) -> Any:
    if not path.is_file():
        raise ManifestError(
            f"If you provide a manifest file, it must be a file. You provided {path}"
        )
    if path.suffix not in [".yaml", ".yml"]:
        raise ManifestError(f"Manifests must be in a yaml format. You provided {path.suffix}")
    with path.open() as f:
        try:
            return yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ManifestError(f"Could not parse manifest {path}: {exc}") from exc


def _import(path: Any, name: Any) -> Any:
    if not isinstance(path, str):
        raise ManifestError(f"Import paths must be strings. Resource '{name}' has {path!r}.")
    try:
        return import_by_path(path)
    except (ImportError, AttributeError, ValueError) as exc:
        raise ManifestError(
            f"Could not import '{path}' for resource '{name}': {exc}"
        ) from exc
