"""Shared test fixtures."""

from __future__ import annotations

import plistlib
from pathlib import Path

import pytest

from ns_bundle.models import IdentityFields, VersionDescriptor

MANIFEST = """\
<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android"
    package="__PACKAGE__"
    android:versionCode="1"
    android:versionName="1.0">
    <application android:label="Demo" />
</manifest>
"""

XCCONFIG = """\
// You can add custom settings here
CODE_SIGN_STYLE = Automatic;
DEVELOPMENT_TEAM = OLDTEAM123;
ASSETCATALOG_COMPILER_APPICON_NAME = AppIcon;
"""

PACKAGE_JSON = """\
{
  "name": "demo",
  "version": "0.0.1",
  "main": "app/app.ts",
  "dependencies": {
    "@nativescript/core": "~8.5.0"
  }
}
"""

INFO_PLIST = {
    "CFBundleDevelopmentRegion": "en",
    "CFBundleDisplayName": "Démo",
    "CFBundleShortVersionString": "1.0",
    "CFBundleVersion": "1.0",
    "UIRequiredDeviceCapabilities": ["armv7"],
    "UIStatusBarHidden": True,
}

ENV = """\
NATIVESCRIPT_APPLE_TEAM_ID=AB12CD34EF
NATIVESCRIPT_BUNDLE_ID=com.example.demo
NATIVESCRIPT_BUNDLE_VERSION=1.0.0+3
"""


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a NativeScript project tree with every patchable file."""
    resources = tmp_path / "App_Resources"
    android = resources / "Android" / "src" / "main"
    ios = resources / "iOS"
    android.mkdir(parents=True)
    ios.mkdir(parents=True)

    (android / "AndroidManifest.xml").write_text(MANIFEST)
    (ios / "build.xcconfig").write_text(XCCONFIG)
    (ios / "Info.plist").write_bytes(plistlib.dumps(INFO_PLIST))
    (tmp_path / "package.json").write_text(PACKAGE_JSON)
    (tmp_path / ".env").write_text(ENV)
    return tmp_path


@pytest.fixture
def version() -> VersionDescriptor:
    return VersionDescriptor(major=1, minor=4, patch=2, build=7)


@pytest.fixture
def identity() -> IdentityFields:
    return IdentityFields(bundle_id="com.example.demo", apple_team_id="AB12CD34EF")
