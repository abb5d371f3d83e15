"""Environment file loading and required-key validation.

Reads a .env-style file with python-dotenv into an explicit mapping that is
threaded through the pipeline. The process environment is only read (as the
base layer), never written.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path

from dotenv import dotenv_values
from pydantic import ValidationError as PydanticValidationError

from .errors import ResourceError, ValidationError
from .models import IdentityFields, Platform


class EnvVar(str, Enum):
    """Environment variables consumed by the pipeline, in validation order."""

    APPLE_TEAM_ID = "NATIVESCRIPT_APPLE_TEAM_ID"
    BUNDLE_ID = "NATIVESCRIPT_BUNDLE_ID"
    BUNDLE_VERSION = "NATIVESCRIPT_BUNDLE_VERSION"


def read_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file into a dict.

    Keys declared without a value (a bare ``KEY`` line) are dropped.

    Raises:
        ResourceError: If the file does not exist or cannot be read.
    """
    if not path.is_file():
        raise ResourceError(f"Environment file not found: {path}")
    try:
        values = dotenv_values(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ResourceError(f"Could not read environment file {path}: {exc}") from exc
    return {key: value for key, value in values.items() if value is not None}


def load_env(
    path: Path,
    *,
    base: Mapping[str, str] | None = None,
    override: bool = False,
) -> dict[str, str]:
    """Merge the variables from an env file over a base environment.

    Args:
        path: Path to the .env file.
        base: Starting environment. Defaults to a copy of os.environ.
        override: If False (default), keys already present in base keep
                  their value. If True, values from the file win.

    Returns:
        A new dict; neither base nor os.environ is modified.
    """
    env = dict(os.environ if base is None else base)
    for key, value in read_env_file(path).items():
        if override or key not in env:
            env[key] = value
    return env


def required_keys(platform: Platform | None = None) -> list[EnvVar]:
    """Return the keys that must be set for a run, in declaration order.

    With no platform the full list is returned; Android runs skip the
    Apple team ID.
    """
    keys = list(EnvVar)
    if platform is Platform.ANDROID:
        keys.remove(EnvVar.APPLE_TEAM_ID)
    return keys


def validate_required(env: Mapping[str, str], keys: list[EnvVar]) -> None:
    """Ensure every key is present and non-empty.

    Raises:
        ValidationError: Naming the first missing key in list order.
    """
    for key in keys:
        if not env.get(key.value):
            raise ValidationError(f'Missing environment variable "{key.value}"')


def identity_from_env(env: Mapping[str, str]) -> IdentityFields:
    """Build IdentityFields from a validated environment.

    Raises:
        ValidationError: If a value is malformed, e.g. a team ID with spaces.
    """
    try:
        return IdentityFields(
            bundle_id=env[EnvVar.BUNDLE_ID.value],
            apple_team_id=env.get(EnvVar.APPLE_TEAM_ID.value) or None,
        )
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid bundle identity: {exc}") from exc
