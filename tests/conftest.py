"""Pytest configuration and fixtures."""

import asyncio
import json

import pytest

from core.errors import RegistryError


class StubRegistry:
    """Deterministic in-memory registry.

    ``latest`` maps package names to their latest version. Names listed in
    ``failing`` raise RegistryError as if the registry answered HTTP 500.
    """

    def __init__(self, latest: dict[str, str], failing: tuple[str, ...] = ()):
        self.latest = latest
        self.failing = set(failing)
        self.calls: list[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def fetch_latest(self, package_name: str) -> str:
        self.calls.append(package_name)
        # Give other workers a chance to run
        await asyncio.sleep(0)
        if package_name in self.failing:
            raise RegistryError(package_name, "registry returned HTTP 500", status_code=500)
        if package_name not in self.latest:
            raise RegistryError(package_name, "registry returned HTTP 404", status_code=404)
        return self.latest[package_name]


@pytest.fixture
def stub_registry():
    """Registry with a handful of known packages."""
    return StubRegistry({
        "left-pad": "1.3.0",
        "express": "4.21.2",
        "lodash": "4.17.21",
        "react": "19.0.0",
        "typescript": "5.7.2",
        "jest": "29.7.0",
    })


@pytest.fixture
def sample_package_json():
    """Sample package.json content for testing."""
    return json.dumps({
        "name": "test-project",
        "version": "1.0.0",
        "scripts": {"test": "jest"},
        "dependencies": {
            "express": "^4.18.0",
            "lodash": "~4.17.21",
            "internal-tool": "workspace:*",
        },
        "devDependencies": {
            "jest": "29.0.0",
            "typescript": "^5.7.2",
        },
        "overrides": {
            "lodash": "4.17.0",
        },
    }, indent=2) + "\n"


@pytest.fixture
def temp_manifest_file(tmp_path, sample_package_json):
    """Create a temporary package.json for testing."""
    manifest = tmp_path / "package.json"
    manifest.write_text(sample_package_json)
    return manifest


@pytest.fixture
def make_registry():
    """Factory for registries with custom versions and failures."""
    return StubRegistry
