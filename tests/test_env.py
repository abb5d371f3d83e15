"""Tests for ns_bundle.env."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from ns_bundle.env import (
    EnvVar,
    identity_from_env,
    load_env,
    read_env_file,
    required_keys,
    validate_required,
)
from ns_bundle.errors import ResourceError, ValidationError
from ns_bundle.models import Platform


class TestReadEnvFile:
    """Tests for read_env_file()."""

    def test_reads_values(self, project: Path) -> None:
        """Key/value lines are returned as a dict."""
        values = read_env_file(project / ".env")
        assert values["NATIVESCRIPT_BUNDLE_ID"] == "com.example.demo"
        assert values["NATIVESCRIPT_BUNDLE_VERSION"] == "1.0.0+3"

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ResourceError."""
        with pytest.raises(ResourceError, match="not found"):
            read_env_file(tmp_path / ".env.missing")

    def test_drops_keys_without_value(self, tmp_path: Path) -> None:
        """Bare keys with no value are left out."""
        env_file = tmp_path / ".env"
        env_file.write_text("BARE\nSET=1\n")
        assert read_env_file(env_file) == {"SET": "1"}


class TestLoadEnv:
    """Tests for load_env()."""

    def test_non_destructive_keeps_base(self, project: Path) -> None:
        """Keys already in the base environment keep their value."""
        base = {"NATIVESCRIPT_BUNDLE_ID": "com.example.base"}
        env = load_env(project / ".env", base=base)
        assert env["NATIVESCRIPT_BUNDLE_ID"] == "com.example.base"
        assert env["NATIVESCRIPT_BUNDLE_VERSION"] == "1.0.0+3"

    def test_override_prefers_file(self, project: Path) -> None:
        """With override, file values replace base values."""
        base = {"NATIVESCRIPT_BUNDLE_ID": "com.example.base"}
        env = load_env(project / ".env", base=base, override=True)
        assert env["NATIVESCRIPT_BUNDLE_ID"] == "com.example.demo"

    def test_does_not_mutate_base(self, project: Path) -> None:
        """The base mapping is copied, not updated."""
        base: dict[str, str] = {}
        load_env(project / ".env", base=base)
        assert base == {}

    def test_does_not_touch_process_environment(
        self, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """File values never leak into os.environ."""
        monkeypatch.delenv("NATIVESCRIPT_BUNDLE_ID", raising=False)
        env = load_env(project / ".env")
        assert env["NATIVESCRIPT_BUNDLE_ID"] == "com.example.demo"
        assert "NATIVESCRIPT_BUNDLE_ID" not in os.environ

    def test_defaults_to_process_environment(
        self, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without a base, os.environ is the starting layer."""
        monkeypatch.setenv("NATIVESCRIPT_BUNDLE_VERSION", "9.9.9")
        env = load_env(project / ".env")
        assert env["NATIVESCRIPT_BUNDLE_VERSION"] == "9.9.9"


class TestRequiredKeys:
    """Tests for required_keys()."""

    def test_declaration_order(self) -> None:
        """Without a platform every key is required, in declaration order."""
        assert required_keys() == [
            EnvVar.APPLE_TEAM_ID,
            EnvVar.BUNDLE_ID,
            EnvVar.BUNDLE_VERSION,
        ]

    def test_ios_requires_team(self) -> None:
        """iOS runs need the Apple team ID."""
        assert EnvVar.APPLE_TEAM_ID in required_keys(Platform.IOS)

    def test_android_skips_team(self) -> None:
        """Android runs do not need the Apple team ID."""
        assert required_keys(Platform.ANDROID) == [
            EnvVar.BUNDLE_ID,
            EnvVar.BUNDLE_VERSION,
        ]


class TestValidateRequired:
    """Tests for validate_required()."""

    def test_all_present(self) -> None:
        """A complete environment passes."""
        env = {key.value: "x" for key in EnvVar}
        validate_required(env, required_keys())

    def test_names_first_missing_key(self) -> None:
        """The error names the first missing key in list order."""
        with pytest.raises(ValidationError, match="NATIVESCRIPT_APPLE_TEAM_ID"):
            validate_required({}, required_keys())

    def test_empty_value_counts_as_missing(self) -> None:
        """An empty string is treated the same as a missing key."""
        env = {"NATIVESCRIPT_BUNDLE_ID": "", "NATIVESCRIPT_BUNDLE_VERSION": "1.0.0"}
        with pytest.raises(ValidationError, match="NATIVESCRIPT_BUNDLE_ID"):
            validate_required(env, required_keys(Platform.ANDROID))


class TestIdentityFromEnv:
    """Tests for identity_from_env()."""

    def test_without_team(self) -> None:
        """A missing team ID becomes None."""
        identity = identity_from_env({"NATIVESCRIPT_BUNDLE_ID": "com.example.demo"})
        assert identity.bundle_id == "com.example.demo"
        assert identity.apple_team_id is None

    def test_with_team(self) -> None:
        """The team ID is read when present."""
        identity = identity_from_env(
            {
                "NATIVESCRIPT_BUNDLE_ID": "com.example.demo",
                "NATIVESCRIPT_APPLE_TEAM_ID": "AB12CD34EF",
            }
        )
        assert identity.apple_team_id == "AB12CD34EF"

    def test_malformed_team(self) -> None:
        """A team ID containing spaces raises ValidationError."""
        with pytest.raises(ValidationError, match="Invalid bundle identity"):
            identity_from_env(
                {
                    "NATIVESCRIPT_BUNDLE_ID": "com.example.demo",
                    "NATIVESCRIPT_APPLE_TEAM_ID": "AB 12",
                }
            )
