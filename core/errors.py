"""Exception hierarchy for DepBump.

Every failure the core can raise derives from DepBumpError so the CLI and the
web layer can translate them into exit codes and HTTP statuses in one place.
"""

from __future__ import annotations


class DepBumpError(Exception):
    """Base error for DepBump."""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidVersionString(DepBumpError):
    """A declared version string was empty."""

    code = "INVALID_VERSION"


class RegistryError(DepBumpError):
    """A single registry lookup failed."""

    code = "REGISTRY_ERROR"

    def __init__(self, package: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{package}: {message}")
        self.package = package
        self.status_code = status_code


class FetchFailed(DepBumpError):
    """A fetch run was aborted by a registry failure."""

    code = "FETCH_FAILED"

    def __init__(self, section: str, cause: RegistryError) -> None:
        super().__init__(f"Fetching {section} failed: {cause}")
        self.section = section
        self.cause = cause


class MalformedManifest(DepBumpError):
    """The manifest is not valid JSON or a dependency section is not an object."""

    code = "MALFORMED_MANIFEST"


class ConfigError(DepBumpError):
    """Invalid run configuration."""

    code = "CONFIG_ERROR"
