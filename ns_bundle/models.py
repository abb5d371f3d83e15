"""Data models for nativescript-bundle.

These Pydantic models represent the core data structures passed between
the stages of the bundle pipeline.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    """Build target. Exactly one is selected per run."""

    ANDROID = "android"
    IOS = "ios"


class ArtifactKind(str, Enum):
    """Kinds of files the pipeline knows how to patch."""

    MANIFEST = "manifest"
    PLIST = "plist"
    XCCONFIG = "xcconfig"
    PACKAGE = "package"


class VersionDescriptor(BaseModel):
    """Canonical release version for one pipeline run.

    The display string and Android version code are always derived from
    the numeric components, never stored on their own.

    Attributes:
        major: Major version component.
        minor: Minor version component.
        patch: Patch version component.
        build: Build number; 1 when the source string has no build suffix.
               An explicit 0 is kept as given.
    """

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int = Field(ge=0)
    build: int = Field(default=1, ge=0)

    @property
    def display_version(self) -> str:
        """The "major.minor.patch" string shown to users."""
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def android_version_code(self) -> str:
        """Digits of major, minor, patch and build concatenated as text.

        Examples:
            1.2.3+4 → "1234"
            2.5.10 → "25101"
        """
        return f"{self.major}{self.minor}{self.patch}{self.build}"


class IdentityFields(BaseModel):
    """Application identity read from the environment.

    Attributes:
        bundle_id: Reverse-domain package identifier.
        apple_team_id: Apple development team; only needed for iOS builds.
                       A single token with no whitespace or semicolon.
    """

    model_config = ConfigDict(frozen=True)

    bundle_id: str = Field(min_length=1)
    apple_team_id: str | None = Field(default=None, pattern=r"^[^;\s]+$")


class PipelineOptions(BaseModel):
    """Caller-supplied inputs for a pipeline run.

    Attributes:
        platform: Target platform. None is accepted here so the pipeline can
                  report the missing selection as its first failure.
        env_path: Path to the .env-style file holding the bundle variables,
                  relative to project_root unless absolute.
        project_root: Directory containing package.json.
        app_resources: App resources directory, relative to project_root
                       unless absolute.
        override: If True, values from env_path win over the base environment.
        version: Raw version string that takes precedence over the one in
                 the environment.
        verbose: Print the loaded key/value pairs.
        check: Compute every patch but write nothing.
    """

    platform: Platform | None = None
    env_path: Path = Path(".env")
    project_root: Path = Field(default_factory=Path.cwd)
    app_resources: Path = Path("App_Resources")
    override: bool = False
    version: str | None = None
    verbose: bool = True
    check: bool = False

    @property
    def resources_dir(self) -> Path:
        """App resources directory resolved against the project root."""
        return self.project_root / self.app_resources

    @property
    def resolved_env_path(self) -> Path:
        """Env file path resolved against the project root."""
        return self.project_root / self.env_path


class PatchOutcome(BaseModel):
    """Result of running one patch strategy.

    Attributes:
        kind: Strategy that ran.
        path: File it ran against.
        changed: Whether the content changed (or would change in check mode).
    """

    kind: ArtifactKind
    path: Path
    changed: bool


class BundleResult(BaseModel):
    """Summary of a completed pipeline run."""

    platform: Platform
    version: VersionDescriptor
    identity: IdentityFields
    outcomes: list[PatchOutcome] = Field(default_factory=list)

    @property
    def changed_paths(self) -> list[Path]:
        """Files whose content changed (or would change in check mode)."""
        return [o.path for o in self.outcomes if o.changed]
