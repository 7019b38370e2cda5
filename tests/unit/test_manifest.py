"""Tests for package.json loading and patching."""

import json

import pytest

from core.errors import MalformedManifest
from core.manifest import apply_changes, dump_manifest, parse_manifest, read_manifest, write_manifest
from core.models import ChangeRecord, ChangeSet
from core.version_spec import parse_version_spec


def _change(name: str, declared: str, latest: str) -> ChangeRecord:
    return ChangeRecord(package_name=name, declared_spec=parse_version_spec(declared), latest_version=latest)


class TestParseManifest:
    """Test reading package.json content."""

    def test_dependency_maps(self, sample_package_json):
        """Should expose both dependency sections."""
        manifest = parse_manifest(sample_package_json)

        assert manifest.dependencies == {
            "express": "^4.18.0",
            "lodash": "~4.17.21",
            "internal-tool": "workspace:*",
        }
        assert manifest.dev_dependencies == {"jest": "29.0.0", "typescript": "^5.7.2"}
        assert manifest.indent == 2
        assert manifest.trailing_newline

    def test_missing_sections_are_empty(self):
        """Should return empty maps when sections are absent."""
        manifest = parse_manifest('{"name": "bare"}')

        assert manifest.dependencies == {}
        assert manifest.dev_dependencies == {}

    def test_invalid_json(self):
        """Should reject content that is not JSON."""
        with pytest.raises(MalformedManifest):
            parse_manifest("{not json")

    def test_root_must_be_object(self):
        """Should reject a JSON array root."""
        with pytest.raises(MalformedManifest):
            parse_manifest("[]")

    def test_section_must_be_object(self):
        """Should reject a dependencies section that is not an object."""
        manifest = parse_manifest('{"dependencies": ["left-pad"]}')
        with pytest.raises(MalformedManifest):
            manifest.dependencies

    def test_detects_indentation(self):
        """Should remember four-space and tab indentation."""
        assert parse_manifest('{\n    "name": "x"\n}').indent == 4
        assert parse_manifest('{\n\t"name": "x"\n}').indent == "\t"


class TestApplyChanges:
    """Test rewriting dependency sections."""

    def test_left_pad_example(self):
        """Should write the prefixed latest version."""
        document = {"dependencies": {"left-pad": "^1.0.0"}}

        patched = apply_changes(document, ChangeSet("dependencies", [_change("left-pad", "^1.0.0", "1.3.0")]))

        assert patched == {"dependencies": {"left-pad": "^1.3.0"}}
        assert document == {"dependencies": {"left-pad": "^1.0.0"}}

    def test_patches_all_three_sections(self, sample_package_json):
        """Should update dependencies, devDependencies and overrides."""
        document = parse_manifest(sample_package_json).document
        change_sets = [
            ChangeSet("dependencies", [_change("lodash", "~4.17.0", "4.17.21")]),
            ChangeSet("devDependencies", [_change("jest", "29.0.0", "29.7.0")]),
        ]

        patched = apply_changes(document, change_sets)

        assert patched["dependencies"]["lodash"] == "~4.17.21"
        assert patched["overrides"]["lodash"] == "~4.17.21"
        assert patched["devDependencies"]["jest"] == "29.7.0"

    def test_locality(self, sample_package_json):
        """Should leave unrelated keys, fields and key order untouched."""
        document = parse_manifest(sample_package_json).document

        patched = apply_changes(document, ChangeSet("dependencies", [_change("express", "^4.18.0", "4.21.2")]))

        assert list(patched) == list(document)
        assert list(patched["dependencies"]) == list(document["dependencies"])
        for key in ("name", "version", "scripts", "devDependencies", "overrides"):
            assert patched[key] == document[key]
        assert patched["dependencies"]["internal-tool"] == "workspace:*"
        assert patched["dependencies"]["lodash"] == "~4.17.21"

    def test_idempotent(self, sample_package_json):
        """Should give the same document when applied twice."""
        document = parse_manifest(sample_package_json).document
        change_set = ChangeSet("dependencies", [_change("express", "^4.18.0", "4.21.2")])

        once = apply_changes(document, change_set)
        twice = apply_changes(once, change_set)

        assert once == twice

    def test_empty_change_set_leaves_document(self, sample_package_json):
        """Should not modify anything for an empty change set."""
        manifest = parse_manifest(sample_package_json)

        patched = apply_changes(manifest.document, ChangeSet("dependencies"))

        assert dump_manifest(manifest, patched) == sample_package_json

    def test_document_without_sections(self):
        """Should skip missing sections without error."""
        document = {"name": "bare", "private": True}
        assert apply_changes(document, ChangeSet("dependencies", [_change("a", "1.0.0", "2.0.0")])) == document

    def test_skip_sections(self):
        """Should leave skipped sections untouched even when a change matches."""
        document = {
            "dependencies": {"typescript": "^5.0.0"},
            "devDependencies": {"typescript": "^5.0.0"},
        }
        change_set = ChangeSet("devDependencies", [_change("typescript", "^5.0.0", "5.7.2")])

        patched = apply_changes(document, change_set, skip_sections={"dependencies"})

        assert patched["dependencies"] == {"typescript": "^5.0.0"}
        assert patched["devDependencies"] == {"typescript": "^5.7.2"}

    def test_non_object_section(self):
        """Should raise MalformedManifest for a non-object section."""
        with pytest.raises(MalformedManifest):
            apply_changes({"devDependencies": "jest"}, ChangeSet("devDependencies"))

    def test_nested_overrides_untouched(self):
        """Should leave nested override objects alone."""
        document = {"overrides": {"foo": {"bar": "1.0.0"}}}

        patched = apply_changes(document, ChangeSet("dependencies", [_change("foo", "1.0.0", "2.0.0")]))

        assert patched == document


class TestManifestFiles:
    """Test reading and writing package.json files."""

    def test_round_trip_preserves_formatting(self, temp_manifest_file, sample_package_json):
        """Should write an unchanged document back byte for byte."""
        manifest = read_manifest(temp_manifest_file)
        write_manifest(temp_manifest_file, manifest)

        assert temp_manifest_file.read_text() == sample_package_json

    def test_write_patched_document(self, temp_manifest_file):
        """Should persist the patched versions."""
        manifest = read_manifest(temp_manifest_file)
        patched = apply_changes(manifest.document, ChangeSet("dependencies", [_change("express", "^4.18.0", "4.21.2")]))

        write_manifest(temp_manifest_file, manifest, patched)

        assert json.loads(temp_manifest_file.read_text())["dependencies"]["express"] == "^4.21.2"
