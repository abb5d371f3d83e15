"""Project settings file.

Reads optional defaults from ns-bundle.toml in the project root. Uses
tomlkit so `init` can write a commented file that stays readable.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .errors import ValidationError

SETTINGS_FILE = "ns-bundle.toml"
SETTINGS_TABLE = "ns-bundle"

# TOML key → PipelineOptions field
_KEYS = {
    "app-resources": "app_resources",
    "env-file": "env_path",
    "override": "override",
    "verbose": "verbose",
}


def load_settings(project_root: Path) -> dict[str, Any]:
    """Return PipelineOptions values from the [ns-bundle] table.

    A missing file yields an empty dict.

    Raises:
        ValidationError: If the file is not valid TOML or has unknown keys.
    """
    path = project_root / SETTINGS_FILE
    if not path.exists():
        return {}

    try:
        doc = tomlkit.parse(path.read_text())
    except TOMLKitError as exc:
        raise ValidationError(f"Invalid {SETTINGS_FILE}: {exc}") from exc

    table = doc.unwrap().get(SETTINGS_TABLE, {})
    if not isinstance(table, dict):
        raise ValidationError(f"[{SETTINGS_TABLE}] in {SETTINGS_FILE} must be a table.")
    unknown = sorted(set(table) - set(_KEYS))
    if unknown:
        raise ValidationError(
            f"Unknown keys in [{SETTINGS_TABLE}] of {SETTINGS_FILE}: "
            + ", ".join(unknown)
        )
    return {_KEYS[key]: value for key, value in table.items()}


def default_settings() -> tomlkit.TOMLDocument:
    """Build the document `ns-bundle init` writes."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("nativescript-bundle settings. CLI flags win."))
    table = tomlkit.table()
    table.add("app-resources", "App_Resources")
    table.add("env-file", ".env")
    table["env-file"].comment("holds NATIVESCRIPT_BUNDLE_* variables")
    table.add("override", False)
    table.add("verbose", True)
    doc.add(SETTINGS_TABLE, table)
    return doc


def write_default_settings(project_root: Path) -> Path:
    """Write ns-bundle.toml with default values, replacing any existing file."""
    path = project_root / SETTINGS_FILE
    path.write_text(tomlkit.dumps(default_settings()))
    return path
