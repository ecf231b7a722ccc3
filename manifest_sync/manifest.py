"""Loading, merging and writing the ``latest.json`` update manifest."""

from __future__ import annotations

import datetime
import json
import logging
from collections.abc import Iterable
from pathlib import Path

from packaging import version as pkg_version

from .constants import MANIFEST_FILENAME
from .models import Platform, PlatformWrite, VersionManifest, WritePolicy

logger = logging.getLogger(__name__)


def _now_iso(now: datetime.datetime | None = None) -> str:
    current = now or datetime.datetime.now(datetime.UTC)
    current = current.astimezone(datetime.UTC)
    return current.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_manifest(raw: bytes | str) -> VersionManifest:
    """Parse a published manifest.

    Invalid JSON raises ``json.JSONDecodeError``; there is no fallback to an
    empty manifest.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("Manifest must be a JSON object")
    return VersionManifest.from_dict(payload)


def apply_writes(
    platforms: dict[str, Platform], writes: Iterable[PlatformWrite]
) -> dict[str, Platform]:
    """Return a copy of ``platforms`` with the writes applied in order."""
    merged = dict(platforms)
    for write in writes:
        current = merged.get(write.key)
        if (
            write.policy is WritePolicy.IF_ABSENT
            and current is not None
            and current.is_present()
        ):
            logger.info("[Manifest] Keeping existing entry for %s", write.key)
            continue
        merged[write.key] = write.platform
    return merged


def _warn_on_downgrade(existing: VersionManifest, new_version: str) -> None:
    if not existing.version or not new_version:
        return
    try:
        is_downgrade = pkg_version.parse(existing.version) > pkg_version.parse(
            new_version
        )
    except pkg_version.InvalidVersion as exc:
        logger.debug("[Manifest] Skipping version comparison: %s", exc)
        return
    if is_downgrade:
        logger.warning(
            "[Manifest] Published manifest advertises %s, replacing with older %s",
            existing.version,
            new_version,
        )


def merge_manifest(
    existing: VersionManifest | None,
    version: str,
    notes: str,
    writes: Iterable[PlatformWrite],
    now: datetime.datetime | None = None,
) -> VersionManifest:
    """Build the full manifest to publish.

    Only the platform map of the existing manifest is carried over; version,
    notes and pub_date always come from this run.
    """
    platforms: dict[str, Platform] = {}
    if existing is not None:
        _warn_on_downgrade(existing, version)
        platforms = existing.platforms

    merged = VersionManifest(
        version=version,
        notes=notes,
        pub_date=_now_iso(now),
        platforms=apply_writes(platforms, writes),
    )
    logger.info(
        "[Manifest] version=%s platforms=%s", merged.version, list(merged.platforms)
    )
    return merged


def serialize_manifest(manifest: VersionManifest) -> str:
    return json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False) + "\n"


def write_manifest(manifest: VersionManifest, directory: Path | None = None) -> Path:
    """Write ``latest.json`` into ``directory`` (default: working directory)."""
    target_dir = Path(directory) if directory is not None else Path.cwd()
    manifest_path = target_dir / MANIFEST_FILENAME
    manifest_path.write_text(serialize_manifest(manifest), encoding="utf-8")
    logger.info("[Manifest] Wrote %s", manifest_path)
    return manifest_path
