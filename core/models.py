"""Core data models for DepBump."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from packaging.version import InvalidVersion, Version

if TYPE_CHECKING:
    from .errors import FetchFailed


@dataclass(frozen=True)
class VersionSpec:
    """A declared version split into its range prefix and numeric part."""

    numeric_version: str
    range_prefix: str | None = None  # ^, ~, =, ...

    def with_version(self, version: str) -> str:
        """Apply this spec's range prefix to another version."""
        if self.range_prefix is None:
            return version
        return f"{self.range_prefix}{version}"

    def __str__(self) -> str:
        return self.with_version(self.numeric_version)


@dataclass(frozen=True)
class PendingLookup:
    """A dependency waiting to be looked up on the registry."""

    package_name: str
    declared_spec: VersionSpec


@dataclass(frozen=True)
class ChangeRecord:
    """A dependency whose declared version differs from the registry's latest."""

    package_name: str
    declared_spec: VersionSpec
    latest_version: str

    @property
    def declared(self) -> str:
        return str(self.declared_spec)

    @property
    def updated(self) -> str:
        return self.declared_spec.with_version(self.latest_version)

    @property
    def semver_delta(self) -> str:
        """Size of the bump: "major", "minor", "patch" or "unknown"."""
        try:
            old_ver = Version(self.declared_spec.numeric_version)
            new_ver = Version(self.latest_version)
        except InvalidVersion:
            return "unknown"

        if new_ver > old_ver:
            if new_ver.major > old_ver.major:
                return "major"
            elif new_ver.minor > old_ver.minor:
                return "minor"
            elif new_ver.micro > old_ver.micro:
                return "patch"

        return "unknown"


@dataclass
class ChangeSet:
    """Changes found for one dependency section, sorted by package name."""

    section: str
    changes: list[ChangeRecord] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.changes = sorted(self.changes, key=lambda change: change.package_name)

    def __iter__(self):
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def names(self) -> set[str]:
        return {change.package_name for change in self.changes}


@dataclass
class CheckResult:
    """Outcome of checking every dependency section of a manifest."""

    change_sets: dict[str, ChangeSet] = field(default_factory=dict)
    errors: "dict[str, FetchFailed]" = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return any(len(change_set) for change_set in self.change_sets.values())

    @property
    def ok(self) -> bool:
        return not self.errors
