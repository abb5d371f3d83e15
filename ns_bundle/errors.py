"""Error taxonomy for nativescript-bundle.

Every failure raised by the bundle pipeline derives from BundleError so
callers (the CLI, a host build hook) can abort on a single type while
still telling the kinds apart.
"""

from __future__ import annotations


class BundleError(Exception):
    """Base class for all pipeline failures."""


class ValidationError(BundleError):
    """Caller-correctable input problem.

    Raised for a missing platform, a missing required environment key, a
    malformed or out-of-range version string, or a target document that
    cannot be parsed.
    """


class ResourceError(BundleError):
    """An expected file could not be found or read."""


class IntegrationError(BundleError):
    """The host build's env-loading plugin was not there to chain onto."""
