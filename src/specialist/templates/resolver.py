"""Locating templates and their enriched artifacts on disk.

Enriched artifacts live next to the template they derive from::

    {template_dir}/enriched/{version}/{base}.enriched.{seq:03d}.json

``base`` is the template file name without its extension and without a
trailing ``-template``. Files are never rewritten; the latest artifact is
the highest sequence number inside the highest version directory.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import semver

from specialist.errors import TemplateNotFoundError
from specialist.templates.loader import read_template_document

logger = logging.getLogger(__name__)

ARTIFACT_DIRNAME = "enriched"
ARTIFACT_SUFFIX = ".json"
TEMPLATE_SUFFIX = "-template"

_ARTIFACT_RE = re.compile(r"^(?P<base>.+)\.enriched\.(?P<seq>\d+)\.json5?$")
RECENT_BREAKING_CHANGES = 3


def _parse_version(value: str) -> semver.Version | None:
    try:
        return semver.Version.parse(value)
    except (TypeError, ValueError):
        return None


def is_artifact_path(path: Path) -> bool:
    """Check whether a path follows the enriched artifact layout."""
    return (
        _ARTIFACT_RE.match(path.name) is not None
        and path.parent.parent.name == ARTIFACT_DIRNAME
        and _parse_version(path.parent.name) is not None
    )


def artifact_base_name(path: Path) -> str:
    """Return the base name shared by a template and its artifacts."""
    match = _ARTIFACT_RE.match(path.name)
    if match:
        return match.group("base")
    name = path.name
    for ext in (".json5", ".json"):
        if name.endswith(ext):
            name = name[: -len(ext)]
            break
    return name.removesuffix(TEMPLATE_SUFFIX)


def template_dir(path: Path) -> Path:
    """Return the directory holding the base template (and ``enriched/``)."""
    if is_artifact_path(path):
        return path.parent.parent.parent
    return path.parent


def artifact_version(path: Path) -> str | None:
    """Return the version directory name of an artifact path."""
    if is_artifact_path(path):
        return path.parent.name
    return None


def list_artifacts(template_path: Path) -> list[tuple[semver.Version, int, Path]]:
    """List all artifacts of a template as (version, sequence, path), sorted."""
    root = template_dir(template_path) / ARTIFACT_DIRNAME
    base = artifact_base_name(template_path)
    found: list[tuple[semver.Version, int, Path]] = []
    if not root.is_dir():
        return found

    for version_dir in root.iterdir():
        if not version_dir.is_dir():
            continue
        version = _parse_version(version_dir.name)
        if version is None:
            continue
        for candidate in version_dir.iterdir():
            match = _ARTIFACT_RE.match(candidate.name)
            if match and match.group("base") == base and candidate.is_file():
                found.append((version, int(match.group("seq")), candidate))

    found.sort(key=lambda item: (item[0], item[1]))
    return found


def find_latest_artifact(
    template_path: Path, min_version: str | None = None
) -> Path | None:
    """Find the newest artifact at or above ``min_version``.

    Picks the highest version directory that holds at least one matching
    artifact, then the highest sequence number inside it.
    """
    floor = _parse_version(min_version) if min_version else None
    artifacts = [
        item for item in list_artifacts(template_path)
        if floor is None or item[0] >= floor
    ]
    if not artifacts:
        return None
    return artifacts[-1][2]


def next_sequence(version_dir: Path, base: str) -> int:
    """Return the next unused sequence number in a version directory."""
    highest = 0
    if version_dir.is_dir():
        for candidate in version_dir.iterdir():
            match = _ARTIFACT_RE.match(candidate.name)
            if match and match.group("base") == base:
                highest = max(highest, int(match.group("seq")))
    return highest + 1


def artifact_path(template_path: Path, version: str, sequence: int) -> Path:
    """Build the path of an artifact for a given version and sequence."""
    base = artifact_base_name(template_path)
    return (
        template_dir(template_path)
        / ARTIFACT_DIRNAME
        / version
        / f"{base}.enriched.{sequence:03d}{ARTIFACT_SUFFIX}"
    )


def next_artifact_path(template_path: Path, version: str) -> Path:
    """Return the path the next artifact for ``version`` would be written to."""
    version_dir = template_dir(template_path) / ARTIFACT_DIRNAME / version
    sequence = next_sequence(version_dir, artifact_base_name(template_path))
    return artifact_path(template_path, version, sequence)


def write_artifact(template_path: Path, version: str, content: str) -> Path:
    """Write a new artifact without ever replacing an existing file.

    If another writer claims the next sequence number first, the following
    free number is used instead.
    """
    path = next_artifact_path(template_path, version)
    path.parent.mkdir(parents=True, exist_ok=True)
    while True:
        try:
            with path.open("x", encoding="utf-8") as f:
                f.write(content)
            return path
        except FileExistsError:
            logger.debug("Artifact %s already exists, trying next sequence", path)
            path = next_artifact_path(template_path, version)


def version_warnings(document: dict[str, Any]) -> list[str]:
    """Describe deprecation and recent breaking changes of a template document."""
    name = document.get("name", "template")
    version = document.get("version", "?")
    metadata = document.get("version_metadata")
    if not isinstance(metadata, dict):
        return []

    warnings = []
    if metadata.get("deprecated"):
        message = f"Template {name} v{version} is deprecated"
        if metadata.get("deprecated_reason"):
            message += f": {metadata['deprecated_reason']}"
        if metadata.get("replacement"):
            message += f" (use {metadata['replacement']} instead)"
        warnings.append(message)

    breaking = metadata.get("breaking_changes") or []
    if breaking:
        recent = [
            str(change.get("description", "")) if isinstance(change, dict) else str(change)
            for change in breaking[:RECENT_BREAKING_CHANGES]
        ]
        warnings.append(f"Breaking changes in {name} v{version}: " + "; ".join(recent))
    return warnings


def resolve_template_path(path: Path | str, project_root: Path | None = None) -> Path:
    """Resolve which file should be loaded for a template path.

    Relative paths are resolved against ``project_root`` (default: the
    current directory). Artifact paths are used as-is. For a base template
    the newest enriched artifact at or above the template's own version is
    preferred; when none exists the template itself is returned.
    """
    path = Path(path)
    if not path.is_absolute():
        path = (project_root or Path.cwd()) / path

    if not path.is_file():
        raise TemplateNotFoundError(path)

    document = read_template_document(path)
    for warning in version_warnings(document):
        logger.warning("%s", warning)

    if is_artifact_path(path):
        return path

    version = document.get("version")
    latest = find_latest_artifact(path, str(version) if version else None)
    if latest is None:
        logger.warning(
            "No enriched artifact for %s under %s, using base template",
            path.name,
            template_dir(path) / ARTIFACT_DIRNAME,
        )
        return path

    logger.debug("Resolved %s to enriched artifact %s", path, latest)
    return latest
