"""Semantic version bumps and template version history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

import semver

logger = logging.getLogger(__name__)

BumpType = Literal["major", "minor", "patch"]

AUTHOR = "specialist-enrich"


@dataclass(frozen=True)
class ChangeEntry:
    """One line of a changelog entry."""

    category: str
    description: str
    breaking: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "description": self.description,
            "breaking": self.breaking,
        }


def bump_version(version: str, bump: BumpType = "patch") -> str:
    """Return the next version. Raises ValueError for an invalid version."""
    parsed = semver.Version.parse(version)
    match bump:
        case "major":
            bumped = parsed.bump_major()
        case "minor":
            bumped = parsed.bump_minor()
        case _:
            bumped = parsed.bump_patch()
    logger.debug("Bumped version %s -> %s (%s)", version, bumped, bump)
    return str(bumped)


def compare_versions(left: str, right: str) -> int:
    """Compare two versions: negative, zero or positive."""
    return semver.Version.parse(left).compare(right)


def _now() -> str:
    return datetime.now(UTC).isoformat()


def update_version_metadata(
    metadata: dict[str, Any] | None,
    version: str,
    changes: list[ChangeEntry],
    *,
    bump: BumpType = "patch",
    author: str = AUTHOR,
    now: str | None = None,
) -> dict[str, Any]:
    """Return version metadata with a new changelog entry prepended.

    The input mapping is not modified.
    """
    timestamp = now or _now()
    entry = {
        "version": version,
        "date": timestamp,
        "type": bump,
        "changes": [change.to_dict() for change in changes],
        "author": author,
    }

    if not metadata:
        result: dict[str, Any] = {
            "changelog": [entry],
            "breaking_changes": [],
            "deprecated": False,
            "created_at": timestamp,
            "updated_at": timestamp,
        }
    else:
        result = dict(metadata)
        result["changelog"] = [entry, *metadata.get("changelog", [])]
        result["updated_at"] = timestamp
        result.setdefault("breaking_changes", [])
        result.setdefault("deprecated", False)

    if any(change.breaking for change in changes):
        logger.warning("Breaking changes recorded in %s", version)
        result["breaking_changes"] = [
            *result.get("breaking_changes", []),
            *(c.description for c in changes if c.breaking),
        ]
    if any(change.category == "enrichment" for change in changes):
        result["last_enriched_at"] = timestamp
    return result


def changelog_entries(
    metadata: dict[str, Any] | None,
    *,
    limit: int | None = None,
    breaking_only: bool = False,
) -> list[dict[str, Any]]:
    """Return changelog entries, newest first."""
    entries = list((metadata or {}).get("changelog", []))
    if breaking_only:
        entries = [
            entry for entry in entries
            if any(change.get("breaking") for change in entry.get("changes", []))
        ]
    if limit is not None:
        entries = entries[:limit]
    return entries
