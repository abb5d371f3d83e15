"""CLI entry point for nativescript-bundle."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError as PydanticValidationError

from ns_bundle.errors import BundleError, ValidationError
from ns_bundle.models import PipelineOptions, Platform
from ns_bundle.pipeline import BundlePipeline
from ns_bundle.settings import SETTINGS_FILE, load_settings, write_default_settings

# CLI parameter name → PipelineOptions field, where they differ
_RENAMED = {"env_file": "env_path", "version_string": "version"}


@contextmanager
def _bundle_errors() -> Iterator[None]:
    """Turn pipeline errors into a clean CLI failure (exit code 1)."""
    try:
        yield
    except BundleError as exc:
        raise click.ClickException(str(exc)) from exc


def pipeline_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every command that runs the pipeline."""
    options = [
        click.option(
            "-p",
            "--platform",
            type=click.Choice([p.value for p in Platform]),
            default=None,
            help="Target platform.",
        ),
        click.option(
            "--env-file",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="Env file holding the NATIVESCRIPT_* variables. [default: .env]",
        ),
        click.option(
            "--project-root",
            type=click.Path(exists=True, file_okay=False, path_type=Path),
            default=None,
            help="Directory containing package.json. [default: current directory]",
        ),
        click.option(
            "--app-resources",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="App resources directory. [default: App_Resources]",
        ),
        click.option(
            "--override/--no-override",
            default=None,
            help="Let env file values win over variables already set.",
        ),
        click.option(
            "--version-string",
            default=None,
            help="Use this version instead of NATIVESCRIPT_BUNDLE_VERSION.",
        ),
        click.option(
            "--verbose/--quiet",
            default=None,
            help="Print the loaded bundle variables.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_options(project_root: Path | None = None, **flags: Any) -> PipelineOptions:
    """Merge ns-bundle.toml with CLI flags; flags given on the command line win.

    An env-file from ns-bundle.toml is relative to the project root, while
    --env-file is relative to the current directory like any other path
    argument.
    """
    root = project_root or Path.cwd()
    values = load_settings(root)
    if flags.get("env_file") is not None:
        flags["env_file"] = Path.cwd() / flags["env_file"]
    for name, value in flags.items():
        if value is not None:
            values[_RENAMED.get(name, name)] = value
    try:
        return PipelineOptions(project_root=root, **values)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid options: {exc}") from exc


@click.group()
@click.version_option(package_name="nativescript-bundle")
def cli() -> None:
    """Stamp one release version into every NativeScript platform file."""


@cli.command()
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="NativeScript project directory. [default: current directory]",
)
@click.option("--force", is_flag=True, help=f"Overwrite an existing {SETTINGS_FILE}.")
def init(project_root: Path | None, force: bool) -> None:
    """Write a default ns-bundle.toml into the project."""
    root = project_root or Path.cwd()

    # Sanity checks
    if not (root / "package.json").exists():
        raise click.ClickException(
            "No package.json found. Run from the NativeScript project root."
        )
    if (root / SETTINGS_FILE).exists() and not force:
        raise click.ClickException(
            f"{SETTINGS_FILE} already exists. Use --force to overwrite it."
        )

    dest = write_default_settings(root)
    click.echo(f"✓ Wrote {dest.name}")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Set the bundle variables in .env:")
    click.echo("       NATIVESCRIPT_BUNDLE_ID, NATIVESCRIPT_BUNDLE_VERSION")
    click.echo("       NATIVESCRIPT_APPLE_TEAM_ID (iOS only)")
    click.echo("  2. Stamp the platform files before building:")
    click.echo("       ns-bundle apply -p android")
    click.echo("       ns-bundle apply -p ios")


@cli.command()
@pipeline_options
@click.option(
    "--check",
    is_flag=True,
    help="Report out-of-date files without writing them; exit 1 if any.",
)
def apply(check: bool, **flags: Any) -> None:
    """Write the bundle version and identity into the platform files."""
    with _bundle_errors():
        result = BundlePipeline(build_options(check=check, **flags)).run()

    if check and result.changed_paths:
        raise click.ClickException(
            f"{len(result.changed_paths)} file(s) out of date. "
            "Run without --check to update them."
        )
    click.echo(
        f"\n✓ {result.platform.value} bundle at "
        f"{result.version.display_version} (build {result.version.build})"
    )


@cli.command()
@pipeline_options
def show(**flags: Any) -> None:
    """Resolve and print the bundle version without touching any file."""
    with _bundle_errors():
        pipeline = BundlePipeline(build_options(**flags))
        pipeline.load_config()
        version = pipeline.resolve()

    click.echo()
    click.echo(f"bundle id:    {pipeline.identity.bundle_id}")
    click.echo(f"version:      {version.display_version}")
    click.echo(f"build:        {version.build}")
    if pipeline.platform is Platform.ANDROID:
        click.echo(f"versionCode:  {version.android_version_code}")
