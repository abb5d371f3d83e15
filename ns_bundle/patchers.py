"""Per-file patch strategies.

Each strategy is a pure function from the current file content to the new
content, touching only the fields it owns. Applying a strategy twice with
the same inputs yields the same output as applying it once.

apply_patch() wraps the strategies with the file I/O the pipeline needs.
"""

from __future__ import annotations

import json
import plistlib
import re
from pathlib import Path
from xml.parsers.expat import ExpatError

from .errors import ResourceError, ValidationError
from .models import ArtifactKind, IdentityFields, VersionDescriptor

_VERSION_CODE_RE = re.compile(r'versionCode="[^"]*"')
_VERSION_NAME_RE = re.compile(r'versionName="[^"]*"')
_DEVELOPMENT_TEAM_RE = re.compile(
    r"^[ \t]*DEVELOPMENT_TEAM[ \t]*=[ \t]*([^;\s]+)", re.MULTILINE
)


def patch_manifest(text: str, version: VersionDescriptor) -> str:
    """Set versionCode and versionName in an AndroidManifest.xml.

    Only the first occurrence of each attribute is rewritten. A missing
    attribute leaves the file unchanged for that field.
    """
    text = _VERSION_CODE_RE.sub(
        lambda _: f'versionCode="{version.android_version_code}"', text, count=1
    )
    return _VERSION_NAME_RE.sub(
        lambda _: f'versionName="{version.display_version}"', text, count=1
    )


def patch_plist(data: bytes, version: VersionDescriptor) -> bytes:
    """Set CFBundleShortVersionString and CFBundleVersion in an Info.plist.

    The whole document is parsed and re-serialized, so every other key is
    kept with its value and position. Binary plists are written back as
    binary, XML plists as XML.

    Raises:
        ValidationError: If the document is not a plist dictionary.
    """
    try:
        doc = plistlib.loads(data)
    except (plistlib.InvalidFileException, ExpatError, ValueError) as exc:
        raise ValidationError(f"Could not parse property list: {exc}") from exc
    if not isinstance(doc, dict):
        raise ValidationError("Property list root must be a dictionary.")

    doc["CFBundleShortVersionString"] = version.display_version
    doc["CFBundleVersion"] = str(version.build)

    fmt = plistlib.FMT_BINARY if data.startswith(b"bplist") else plistlib.FMT_XML
    return plistlib.dumps(doc, fmt=fmt, sort_keys=False)


def patch_xcconfig(text: str, team_id: str) -> str:
    """Point the DEVELOPMENT_TEAM setting of a build.xcconfig at team_id.

    Only the team token is replaced; the rest of the line (spacing, trailing
    semicolon, comments) is kept. Without a DEVELOPMENT_TEAM line the text
    is returned unchanged.
    """
    match = _DEVELOPMENT_TEAM_RE.search(text)
    if not match or match.group(1) == team_id:
        return text
    start, end = match.span(1)
    return text[:start] + team_id + text[end:]


def patch_package_json(
    text: str, identity: IdentityFields, version: VersionDescriptor
) -> str:
    """Set name and version in a package.json.

    Re-serializes with 2-space indentation, keeping key order and non-ASCII
    characters. A trailing newline is kept if the input had one.

    Raises:
        ValidationError: If the document is not a JSON object.
    """
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Could not parse package descriptor: {exc}") from exc
    if not isinstance(doc, dict):
        raise ValidationError("Package descriptor must be a JSON object.")

    doc["name"] = identity.bundle_id
    doc["version"] = version.display_version

    newline = "\n" if text.endswith("\n") else ""
    return json.dumps(doc, indent=2, ensure_ascii=False) + newline


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise ResourceError(f"File not found: {path}") from exc
    except OSError as exc:
        raise ResourceError(f"Could not read {path}: {exc}") from exc


def transform(
    kind: ArtifactKind,
    data: bytes,
    version: VersionDescriptor,
    identity: IdentityFields,
) -> bytes:
    """Run the strategy for kind over raw file content."""
    if kind is ArtifactKind.PLIST:
        return patch_plist(data, version)

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError(f"{kind.value} file is not valid UTF-8: {exc}") from exc

    if kind is ArtifactKind.MANIFEST:
        text = patch_manifest(text, version)
    elif kind is ArtifactKind.XCCONFIG:
        if identity.apple_team_id:
            text = patch_xcconfig(text, identity.apple_team_id)
    elif kind is ArtifactKind.PACKAGE:
        text = patch_package_json(text, identity, version)
    else:
        raise ValueError(f"Unknown artifact kind: {kind}")
    return text.encode("utf-8")


def apply_patch(
    kind: ArtifactKind,
    path: Path,
    version: VersionDescriptor,
    identity: IdentityFields,
    *,
    write: bool = True,
) -> bool:
    """Patch the file at path in place.

    Args:
        kind: Which strategy to run.
        path: File to patch. It must already exist.
        version: Version to write.
        identity: Bundle ID and Apple team ID to write.
        write: If False, compute the result but leave the file untouched.

    Returns:
        True if the content changed (or would change when write is False).

    Raises:
        ResourceError: If the file does not exist or cannot be read.
    """
    original = _read_bytes(path)
    updated = transform(kind, original, version, identity)
    if updated == original:
        return False
    if write:
        path.write_bytes(updated)
    return True
