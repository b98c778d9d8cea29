"""
Configuration Loader (``progress_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into ``progress_config.schema`` dataclasses:
engine settings (database, logging, storage access rules) and milestone
catalog fixtures.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  No dependency on the kernel.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Values of the wrong shape  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from progress_config.schema import AccessRuleDef, CatalogEntryDef, EngineSettings

VALID_OPERATIONS = frozenset({"create", "update", "delete", "write"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def parse_access_rule(data: dict[str, Any]) -> AccessRuleDef:
    """Parse one access rule (``write`` is expanded by the bridge)."""
    operations = data["operations"]
    if isinstance(operations, str):
        operations = [operations]
    unknown = set(operations) - VALID_OPERATIONS
    if unknown:
        raise ValueError(f"Unknown storage operation(s): {sorted(unknown)}")
    return AccessRuleDef(
        path=data["path"],
        operations=tuple(operations),
        allow=bool(data.get("allow", True)),
        actors=tuple(str(a) for a in data.get("actors", ())),
    )


def parse_settings(data: dict[str, Any]) -> EngineSettings:
    """
    Parse EngineSettings from a dict.

    Raises:
        KeyError: if ``database.url`` is missing.
    """
    database = data.get("database", {})
    logging_data = data.get("logging", {})
    access = data.get("access", {})
    return EngineSettings(
        database_url=database["url"],
        echo=bool(database.get("echo", False)),
        log_level=str(logging_data.get("level", "INFO")).upper(),
        default_allow=bool(access.get("default_allow", True)),
        access_rules=tuple(parse_access_rule(r) for r in access.get("rules", ())),
    )


def parse_catalog_entry(data: dict[str, Any]) -> CatalogEntryDef:
    return CatalogEntryDef(
        name=data["name"],
        description=data["description"],
        project_type=data["project_type"],
    )


def load_catalog_file(path: Path) -> tuple[CatalogEntryDef, ...]:
    """
    Load a milestone catalog fixture.

    The file maps project types to lists of milestones::

        catalog:
          Solar Roof:
            - name: Site survey
              description: ...
    """
    data = load_yaml_file(path)
    entries: list[CatalogEntryDef] = []
    for project_type, milestones in data["catalog"].items():
        for item in milestones or ():
            entries.append(parse_catalog_entry({**item, "project_type": project_type}))
    return tuple(entries)


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed YAML document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
