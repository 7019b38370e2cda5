"""Human readable and JSON reports of change sets."""

import json
from collections.abc import Iterable

from .models import ChangeSet


def render(change_set: ChangeSet) -> str:
    """Render a change set as aligned ``name: old => new`` lines.

    Names are padded to the longest name and declared versions to the longest
    declared version, so the arrows line up.

    Args:
        change_set: Changes to render

    Returns:
        One line per change, or an empty string for an empty set
    """
    changes = list(change_set)
    if not changes:
        return ""

    name_width = max(len(change.package_name) for change in changes)
    version_width = max(len(change.declared) for change in changes)

    lines = []
    for change in changes:
        name = f"{change.package_name}:".ljust(name_width + 1)
        lines.append(f"{name} {change.declared.ljust(version_width)} => {change.updated}")
    return "\n".join(lines)


def render_json(change_sets: Iterable[ChangeSet]) -> str:
    """Format change sets as JSON keyed by section."""
    report = {}
    for change_set in change_sets:
        report[change_set.section] = [
            {
                "name": change.package_name,
                "current_version": change.declared,
                "new_version": change.updated,
                "semver_delta": change.semver_delta,
            }
            for change in change_set
        ]
        if change_set.failures:
            report[f"{change_set.section}_failures"] = dict(sorted(change_set.failures.items()))

    return json.dumps(report, indent=2)
