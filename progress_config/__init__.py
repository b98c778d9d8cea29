"""
progress_config -- single public entrypoint for engine configuration.

Responsibility:
    ``get_settings()`` is the way to obtain runtime settings.  YAML parsing
    lives in ``loader``; ``bridges`` converts settings into kernel inputs.

Architecture position:
    Sits above ``progress_kernel``.  The kernel MUST NEVER import from
    ``progress_config``.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``KeyError`` / ``ValueError`` -- schema violations.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from progress_config.loader import load_yaml_file, parse_settings
from progress_config.schema import AccessRuleDef, CatalogEntryDef, EngineSettings

_logger = logging.getLogger("progress_kernel.config")

DEFAULTS_DIR = Path(__file__).parent / "defaults"
DEFAULT_SETTINGS_PATH = DEFAULTS_DIR / "settings.yaml"
DEFAULT_CATALOG_PATH = DEFAULTS_DIR / "catalog.yaml"

DATABASE_URL_ENV = "PROGRESS_DATABASE_URL"


def get_settings(path: Path | None = None) -> EngineSettings:
    """
    Load engine settings.

    ``PROGRESS_DATABASE_URL``, when set, overrides ``database.url`` from the
    file.
    """
    settings_path = path or DEFAULT_SETTINGS_PATH
    data = load_yaml_file(settings_path)

    override = os.environ.get(DATABASE_URL_ENV)
    if override:
        data = {**data, "database": {**data.get("database", {}), "url": override}}

    settings = parse_settings(data)
    _logger.info(
        "PROGRESS_CONFIG_LOADED",
        extra={
            "settings_path": str(settings_path),
            "database_url_from_env": bool(override),
            "access_rule_count": len(settings.access_rules),
        },
    )
    return settings


__all__ = [
    "AccessRuleDef",
    "CatalogEntryDef",
    "DEFAULT_CATALOG_PATH",
    "DEFAULT_SETTINGS_PATH",
    "EngineSettings",
    "get_settings",
]
