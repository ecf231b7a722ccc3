"""Data records passed between the reconciliation steps."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Artifact:
    path: str
    arch: str = ""


@dataclass(frozen=True)
class TargetInfo:
    platform: str


@dataclass(frozen=True)
class RemoteAsset:
    name: str
    browser_download_url: str
    id: int

    @classmethod
    def from_api(cls, payload: dict) -> "RemoteAsset":
        return cls(
            name=str(payload.get("name") or ""),
            browser_download_url=str(payload.get("browser_download_url") or ""),
            id=payload.get("id"),
        )


@dataclass(frozen=True)
class MatchedAsset:
    download_url: str
    asset_name: str
    path: str
    arch: str


_NO_PAYLOAD = object()


@dataclass(frozen=True)
class Platform:
    """A manifest platform entry.

    Entries read from a published manifest keep their original JSON value in
    ``payload`` and serialize back to it unchanged.
    """

    signature: str
    url: str
    payload: Any = field(default=_NO_PAYLOAD, compare=False, repr=False)

    def is_present(self) -> bool:
        """False for null-like published entries, which count as absent."""
        if self.payload is _NO_PAYLOAD or isinstance(self.payload, (dict, list)):
            return True
        return bool(self.payload)

    def to_dict(self) -> Any:
        if self.payload is not _NO_PAYLOAD:
            return self.payload
        return {"signature": self.signature, "url": self.url}

    @classmethod
    def from_dict(cls, payload: Any) -> "Platform":
        fields = payload if isinstance(payload, dict) else {}
        return cls(
            signature=str(fields.get("signature") or ""),
            url=str(fields.get("url") or ""),
            payload=payload,
        )


@dataclass
class VersionManifest:
    """In-memory form of ``latest.json``.

    Field order matches the serialized document: version, notes, pub_date,
    platforms.
    """

    version: str
    notes: str
    pub_date: str
    platforms: dict[str, Platform] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "notes": self.notes,
            "pub_date": self.pub_date,
            "platforms": {
                key: platform.to_dict() for key, platform in self.platforms.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "VersionManifest":
        raw_platforms = payload.get("platforms") or {}
        if not isinstance(raw_platforms, dict):
            raise ValueError("Manifest 'platforms' must be an object")
        platforms = {
            key: Platform.from_dict(value) for key, value in raw_platforms.items()
        }
        return cls(
            version=str(payload.get("version") or ""),
            notes=str(payload.get("notes") or ""),
            pub_date=str(payload.get("pub_date") or ""),
            platforms=platforms,
        )


class WritePolicy(enum.Enum):
    IF_ABSENT = "if_absent"
    REPLACE = "replace"


@dataclass(frozen=True)
class PlatformWrite:
    key: str
    platform: Platform
    policy: WritePolicy = WritePolicy.REPLACE


class ReconcileOutcome(enum.Enum):
    PUBLISHED = "published"
    DRY_RUN = "dry_run"
    SKIPPED_NO_SIGNATURE = "skipped_no_signature"
    SKIPPED_NO_ASSET = "skipped_no_asset"


@dataclass(frozen=True)
class ReconcileResult:
    outcome: ReconcileOutcome
    manifest: VersionManifest | None = None
    manifest_path: Path | None = None

    @property
    def published(self) -> bool:
        return self.outcome is ReconcileOutcome.PUBLISHED
