"""Version resolution.

Turns the raw NATIVESCRIPT_BUNDLE_VERSION string into a VersionDescriptor,
enforcing semantic-version syntax and the Android version code ceiling.
"""

from __future__ import annotations

import semver

from .errors import ValidationError
from .models import Platform, VersionDescriptor

# Largest versionCode Google Play accepts.
ANDROID_VERSION_CODE_MAX = 2_100_000_000


def parse_build_number(suffix: str | None) -> int:
    """Convert a build or pre-release suffix into a build number.

    Examples:
        None → 1
        "7" → 7
        "0" → 0

    Raises:
        ValidationError: If the suffix is not a non-negative integer.
    """
    if suffix is None:
        return 1
    if not suffix.isdigit():
        raise ValidationError(
            f"Invalid build number {suffix!r}: expected a non-negative integer."
        )
    return int(suffix)


def parse_version(raw: str) -> VersionDescriptor:
    """Parse a semantic version string into a VersionDescriptor.

    Accepts "MAJOR.MINOR.PATCH" with an optional "-N" pre-release or "+N"
    build suffix. The build metadata wins when both are present:
    - "1.4.2" → 1.4.2 build 1
    - "1.4.2+7" → 1.4.2 build 7
    - "1.4.2-3" → 1.4.2 build 3

    Raises:
        ValidationError: If raw is not a valid semantic version.
    """
    try:
        parsed = semver.Version.parse(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid version string {raw!r}.") from exc

    suffix = parsed.build if parsed.build is not None else parsed.prerelease
    return VersionDescriptor(
        major=parsed.major,
        minor=parsed.minor,
        patch=parsed.patch,
        build=parse_build_number(suffix),
    )


def check_android_version_code(version: VersionDescriptor) -> None:
    """Reject versions whose Android versionCode exceeds the store ceiling.

    Raises:
        ValidationError: If the concatenated version code is larger than
            ANDROID_VERSION_CODE_MAX.
    """
    if int(version.android_version_code) > ANDROID_VERSION_CODE_MAX:
        raise ValidationError(
            f"Android versionCode {version.android_version_code} exceeds "
            f"ANDROID_VERSION_CODE_MAX ({ANDROID_VERSION_CODE_MAX})."
        )


def resolve_version(raw: str, platform: Platform | None = None) -> VersionDescriptor:
    """Parse raw and apply the platform's range checks.

    Syntax errors are always reported before range errors.
    """
    version = parse_version(raw)
    if platform is Platform.ANDROID:
        check_android_version_code(version)
    return version
