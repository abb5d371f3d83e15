"""Host build integration.

The host build tool (the NativeScript webpack wrapper or any script that
mimics it) already loads a .env file through its own DotEnv plugin. These
helpers read that plugin's configuration so the bundle pipeline uses the
same file, and hand back a callable to run before compilation.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from .errors import IntegrationError, ValidationError
from .models import BundleResult, PipelineOptions, Platform
from .pipeline import BundlePipeline

DOTENV_PLUGIN = "DotEnvPlugin"


def platform_from_flags(android: bool, ios: bool) -> Platform | None:
    """Collapse the host's two platform flags into a single Platform.

    Returns None when neither flag is set; the pipeline reports that as its
    first failure.

    Raises:
        ValidationError: If both flags are set.
    """
    if android and ios:
        raise ValidationError("Both android and ios selected, expecting exactly one.")
    if android:
        return Platform.ANDROID
    if ios:
        return Platform.IOS
    return None


def dotenv_path_from_plugins(plugins: Mapping[str, Any]) -> Path:
    """Return the env file path configured on the host's DotEnv plugin.

    The plugin entry is expected to look like
    ``{"DotEnvPlugin": {"args": [{"path": ".env"}]}}``.

    Raises:
        IntegrationError: If the plugin or its path is missing.
    """
    entry = plugins.get(DOTENV_PLUGIN)
    if not entry:
        raise IntegrationError(f"{DOTENV_PLUGIN} not found in host build config.")
    args = entry.get("args") or [{}]
    path = args[0].get("path") if isinstance(args[0], Mapping) else None
    if not path:
        raise IntegrationError(f"{DOTENV_PLUGIN} has no env file path configured.")
    return Path(path)


def options_from_host(
    plugins: Mapping[str, Any], env: Mapping[str, Any], **overrides: Any
) -> PipelineOptions:
    """Build PipelineOptions from the host's plugin table and build env.

    Args:
        plugins: Host plugin table keyed by plugin name.
        env: Host build flags; "android" and "ios" select the platform.
        **overrides: Any PipelineOptions field, applied last.
    """
    values: dict[str, Any] = {
        "platform": platform_from_flags(
            bool(env.get("android")), bool(env.get("ios"))
        ),
        "env_path": dotenv_path_from_plugins(plugins),
    }
    values.update(overrides)
    return PipelineOptions(**values)


def before_run_hook(options: PipelineOptions) -> Callable[..., BundleResult]:
    """Return a callable the host invokes before it starts compiling.

    Any arguments the host passes (usually its compiler object) are ignored.
    Errors propagate so the host aborts the build.
    """

    def hook(*_args: Any) -> BundleResult:
        return BundlePipeline(options).run()

    return hook
