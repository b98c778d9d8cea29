"""
Configuration schema for the progress engine.

Frozen dataclasses parsed from YAML by ``progress_config.loader``.  These are
source artifacts; ``progress_config.bridges`` turns them into kernel inputs.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AccessRuleDef:
    """One storage access rule as written in YAML."""

    path: str
    operations: tuple[str, ...]
    allow: bool = True
    actors: tuple[str, ...] = ()


@dataclass(frozen=True)
class EngineSettings:
    """Runtime settings for an engine instance."""

    database_url: str
    echo: bool = False
    log_level: str = "INFO"
    default_allow: bool = True
    access_rules: tuple[AccessRuleDef, ...] = ()


@dataclass(frozen=True)
class CatalogEntryDef:
    """A milestone template entry in a catalog fixture."""

    name: str
    description: str
    project_type: str
