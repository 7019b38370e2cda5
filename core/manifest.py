"""package.json loading and patching."""

import copy
import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .errors import MalformedManifest
from .models import ChangeSet

logger = logging.getLogger(__name__)

# Sections rewritten by apply_changes
PATCHED_SECTIONS = ("dependencies", "devDependencies", "overrides")

DEFAULT_INDENT = 2


@dataclass
class Manifest:
    """A parsed package.json plus what is needed to write it back unchanged."""

    document: dict
    indent: int | str = DEFAULT_INDENT
    trailing_newline: bool = True

    @property
    def dependencies(self) -> dict[str, str]:
        return _declared_versions(self.document, "dependencies")

    @property
    def dev_dependencies(self) -> dict[str, str]:
        return _declared_versions(self.document, "devDependencies")


def _section(document: dict, key: str) -> dict | None:
    """Return an object-shaped section, None if absent."""
    section = document.get(key)
    if section is None:
        return None
    if not isinstance(section, dict):
        raise MalformedManifest(f'"{key}" must be an object, got {type(section).__name__}')
    return section


def _declared_versions(document: dict, key: str) -> dict[str, str]:
    section = _section(document, key) or {}
    for name, version in section.items():
        if not isinstance(version, str):
            raise MalformedManifest(f'"{key}.{name}" must be a version string')
    return dict(section)


def _detect_indent(text: str) -> int | str:
    match = re.search(r"^[{\[][ \t]*\r?\n([ \t]+)\S", text, re.MULTILINE)
    if not match:
        return DEFAULT_INDENT
    whitespace = match.group(1)
    if "\t" in whitespace:
        return whitespace
    return len(whitespace)


def parse_manifest(content: str) -> Manifest:
    """Parse package.json content into Manifest.

    Args:
        content: The package.json file content

    Returns:
        Parsed Manifest object

    Raises:
        MalformedManifest: If the content is not a JSON object
    """
    try:
        document = json.loads(content)
    except ValueError as e:
        raise MalformedManifest(f"Invalid JSON: {e}") from e

    if not isinstance(document, dict):
        raise MalformedManifest("Manifest root must be a JSON object")

    return Manifest(
        document=document,
        indent=_detect_indent(content),
        trailing_newline=content.endswith("\n"),
    )


def apply_changes(
    document: dict,
    change_sets: ChangeSet | Iterable[ChangeSet],
    skip_sections: Iterable[str] = (),
) -> dict:
    """Write new versions into the dependency sections of a document.

    Every key of ``dependencies``, ``devDependencies`` and ``overrides`` that
    has a matching change gets the change's prefixed latest version. All other
    keys and fields keep their value and position.

    Args:
        document: Parsed package.json
        change_sets: One or more change sets
        skip_sections: Sections to leave untouched, e.g. those whose fetch failed

    Returns:
        Patched copy of the document

    Raises:
        MalformedManifest: If the root or a present section is not an object
    """
    if not isinstance(document, dict):
        raise MalformedManifest("Manifest root must be a JSON object")
    if isinstance(change_sets, ChangeSet):
        change_sets = [change_sets]

    updates = {}
    for change_set in change_sets:
        for change in change_set:
            updates[change.package_name] = change.updated

    patched = copy.deepcopy(document)
    skip_sections = set(skip_sections)
    for key in PATCHED_SECTIONS:
        section = _section(patched, key)
        if section is None or key in skip_sections:
            continue
        for name, version in section.items():
            # nested override objects are left alone
            if name in updates and isinstance(version, str):
                section[name] = updates[name]
                logger.debug("%s.%s: %s -> %s", key, name, version, updates[name])

    return patched


def dump_manifest(manifest: Manifest, document: dict | None = None) -> str:
    """Serialise a document with the manifest's original formatting."""
    if document is None:
        document = manifest.document
    content = json.dumps(document, indent=manifest.indent, ensure_ascii=False)
    if manifest.trailing_newline:
        content += "\n"
    return content


def read_manifest(path: str | Path) -> Manifest:
    return parse_manifest(Path(path).read_text(encoding="utf-8"))


def write_manifest(path: str | Path, manifest: Manifest, document: dict | None = None) -> None:
    Path(path).write_text(dump_manifest(manifest, document), encoding="utf-8")
