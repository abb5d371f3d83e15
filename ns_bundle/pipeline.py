"""Bundle pipeline: platform gate → load env → resolve version → patch files.

This module orchestrates one nativescript-bundle run:
1. Refuse to start without a target platform
2. Load the .env file and check the required variables
3. Resolve the raw version string into a VersionDescriptor
4. Patch the platform's files in a fixed order

Every stage raises on the first problem. There is no rollback: if patching
fails on the Nth file, files 1..N-1 stay patched.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from pathlib import Path

from .console import print_table, step
from .env import (
    EnvVar,
    identity_from_env,
    load_env,
    required_keys,
    validate_required,
)
from .errors import ValidationError
from .models import (
    ArtifactKind,
    BundleResult,
    IdentityFields,
    PatchOutcome,
    PipelineOptions,
    Platform,
    VersionDescriptor,
)
from .patchers import apply_patch
from .versions import resolve_version

PATCH_PLAN: dict[Platform, list[ArtifactKind]] = {
    Platform.ANDROID: [ArtifactKind.PACKAGE, ArtifactKind.MANIFEST],
    Platform.IOS: [ArtifactKind.PACKAGE, ArtifactKind.XCCONFIG, ArtifactKind.PLIST],
}


class PipelineState(str, Enum):
    """Stages of a run; each completed stage moves the pipeline forward."""

    IDLE = "idle"
    CONFIG_LOADED = "config-loaded"
    VERSION_RESOLVED = "version-resolved"
    PATCHED = "patched"


def artifact_path(options: PipelineOptions, kind: ArtifactKind) -> Path:
    """Return where the file for kind lives in the project."""
    if kind is ArtifactKind.PACKAGE:
        return options.project_root / "package.json"
    if kind is ArtifactKind.MANIFEST:
        android = options.resources_dir / "Android"
        return android / "src" / "main" / "AndroidManifest.xml"
    if kind is ArtifactKind.PLIST:
        return options.resources_dir / "iOS" / "Info.plist"
    if kind is ArtifactKind.XCCONFIG:
        return options.resources_dir / "iOS" / "build.xcconfig"
    raise ValueError(f"Unknown artifact kind: {kind}")


def target_files(
    options: PipelineOptions, platform: Platform
) -> dict[ArtifactKind, Path]:
    """Map each artifact the platform patches to its path, in patch order."""
    return {kind: artifact_path(options, kind) for kind in PATCH_PLAN[platform]}


class BundlePipeline:
    """Runs the stages for a single build invocation.

    Stages must run in order; each one moves `state` forward. Calling a
    stage out of order is a programming error and raises RuntimeError.

    Args:
        options: Caller inputs for this run.
        environ: Base environment the .env file is merged over. Defaults
                 to the process environment.
    """

    def __init__(
        self, options: PipelineOptions, environ: Mapping[str, str] | None = None
    ) -> None:
        self.options = options
        self.environ = environ
        self.state = PipelineState.IDLE
        self.env: dict[str, str] = {}
        self.identity: IdentityFields | None = None
        self.version: VersionDescriptor | None = None

    @property
    def platform(self) -> Platform:
        if self.options.platform is None:
            raise ValidationError("No platform specified, expecting android or ios.")
        return self.options.platform

    def _require(self, expected: PipelineState) -> None:
        if self.state is not expected:
            raise RuntimeError(
                f"Pipeline is {self.state.value}, expected {expected.value}"
            )

    def load_config(self) -> dict[str, str]:
        """Load the .env file and validate the required variables."""
        platform = self.platform
        self._require(PipelineState.IDLE)
        step(f"Loading environment from {self.options.env_path}")

        env = load_env(
            self.options.resolved_env_path,
            base=self.environ,
            override=self.options.override,
        )
        if self.options.version:
            env[EnvVar.BUNDLE_VERSION.value] = self.options.version

        if self.options.verbose:
            print_table({k.value: env[k.value] for k in EnvVar if k.value in env})

        validate_required(env, required_keys(platform))
        self.env = env
        self.identity = identity_from_env(env)
        self.state = PipelineState.CONFIG_LOADED
        return env

    def resolve(self) -> VersionDescriptor:
        """Parse the bundle version and apply platform range checks."""
        self._require(PipelineState.CONFIG_LOADED)
        step("Resolving version")

        raw = self.env[EnvVar.BUNDLE_VERSION.value]
        version = resolve_version(raw, self.platform)
        print(f"  version: {version.display_version} (build {version.build})")
        if self.platform is Platform.ANDROID:
            print(f"  versionCode: {version.android_version_code}")

        self.version = version
        self.state = PipelineState.VERSION_RESOLVED
        return version

    def patch(self) -> list[PatchOutcome]:
        """Patch each target file of the platform in order."""
        self._require(PipelineState.VERSION_RESOLVED)
        if self.version is None or self.identity is None:
            raise RuntimeError("Pipeline resolved without a version and identity")

        check = self.options.check
        step(f"{'Checking' if check else 'Patching'} {self.platform.value} files")

        outcomes: list[PatchOutcome] = []
        for kind, path in target_files(self.options, self.platform).items():
            changed = apply_patch(
                kind, path, self.version, self.identity, write=not check
            )
            outcomes.append(PatchOutcome(kind=kind, path=path, changed=changed))
            if not changed:
                status = "up to date"
            else:
                status = "out of date" if check else "updated"
            print(f"  {_display_path(path, self.options.project_root)}: {status}")

        self.state = PipelineState.PATCHED
        return outcomes

    def run(self) -> BundleResult:
        """Execute every stage and summarize the run."""
        platform = self.platform
        self.load_config()
        version = self.resolve()
        outcomes = self.patch()
        return BundleResult(
            platform=platform,
            version=version,
            identity=self.identity,
            outcomes=outcomes,
        )


def _display_path(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def run_bundle(*, environ: Mapping[str, str] | None = None, **options) -> BundleResult:
    """Build PipelineOptions from keyword arguments and run the pipeline.

    Example:
        run_bundle(platform="ios", env_path=".env", project_root=root)
    """
    return BundlePipeline(PipelineOptions(**options), environ=environ).run()
