"""Publish an updated ``latest.json`` to a GitHub release."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .config import Settings
from .constants import MANIFEST_FILENAME
from .github_client import GitHubReleaseClient
from .manifest import merge_manifest, parse_manifest, write_manifest
from .matching import download_url_map, match_assets
from .models import (
    Artifact,
    Platform,
    ReconcileOutcome,
    ReconcileResult,
    RemoteAsset,
    TargetInfo,
    VersionManifest,
)
from .platforms import resolve_platform_writes
from .selection import find_companion, select_signature
from .urls import rewrite_untagged_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileRequest:
    owner: str
    repo: str
    release_id: int
    version: str
    target_info: TargetInfo
    artifacts: list[Artifact] = field(default_factory=list)
    notes: str = ""
    tag_name: str = ""
    prefer_nsis: bool = False
    keep_universal: bool = False
    dry_run: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReconcileRequest":
        return cls(
            owner=settings.owner,
            repo=settings.repo,
            release_id=settings.release_id,
            version=settings.version,
            target_info=settings.target,
            artifacts=list(settings.artifacts),
            notes=settings.notes,
            tag_name=settings.tag_name,
            prefer_nsis=settings.prefer_nsis,
            keep_universal=settings.keep_universal,
            dry_run=settings.dry_run,
        )


def read_signature(path: str) -> str:
    """Return signature file contents exactly as written by the signer."""
    return Path(path).read_bytes().decode("utf-8")


def find_manifest_asset(assets: list[RemoteAsset]) -> RemoteAsset | None:
    for asset in assets:
        if asset.name == MANIFEST_FILENAME:
            return asset
    return None


def fetch_existing_manifest(
    client: GitHubReleaseClient, request: ReconcileRequest, asset: RemoteAsset | None
) -> VersionManifest | None:
    if asset is None:
        logger.info("[Sync] No published %s on this release yet", MANIFEST_FILENAME)
        return None
    raw = client.fetch_asset_content(request.owner, request.repo, asset.id)
    existing = parse_manifest(raw)
    logger.info(
        "[Sync] Loaded published manifest version=%s platforms=%s",
        existing.version,
        list(existing.platforms),
    )
    return existing


def upload_version_json(
    client: GitHubReleaseClient,
    request: ReconcileRequest,
    workdir: Path | None = None,
) -> ReconcileResult:
    """Merge this build into the release manifest and publish it.

    Returns a skipped result when no signed updater bundle was uploaded. The
    old manifest is deleted before the new one is uploaded; a failure in
    between leaves the release without a manifest until the next run.
    """
    assets = client.list_release_assets(request.owner, request.repo, request.release_id)
    manifest_asset = find_manifest_asset(assets)
    existing = fetch_existing_manifest(client, request, manifest_asset)

    matched = match_assets(request.artifacts, download_url_map(assets))

    signature = select_signature(matched, request.prefer_nsis)
    if signature is None:
        logger.info("[Sync] Signature not found for the updater JSON. Skipping upload...")
        return ReconcileResult(outcome=ReconcileOutcome.SKIPPED_NO_SIGNATURE)

    companion = find_companion(signature, matched)
    if companion is None:
        logger.info(
            "[Sync] Asset not found for signature %s. Skipping upload...",
            signature.asset_name,
        )
        return ReconcileResult(outcome=ReconcileOutcome.SKIPPED_NO_ASSET)

    download_url = rewrite_untagged_url(companion.download_url, request.tag_name)
    if download_url != companion.download_url:
        logger.info("[Sync] Rewrote untagged URL to %s", download_url)

    platform = Platform(signature=read_signature(signature.path), url=download_url)
    writes = resolve_platform_writes(
        request.target_info.platform,
        signature.arch,
        platform,
        request.keep_universal,
    )
    manifest = merge_manifest(existing, request.version, request.notes, writes)
    manifest_path = write_manifest(manifest, workdir)

    if request.dry_run:
        logger.info("[Sync] Dry run; leaving release assets untouched")
        return ReconcileResult(
            outcome=ReconcileOutcome.DRY_RUN,
            manifest=manifest,
            manifest_path=manifest_path,
        )

    if manifest_asset is not None:
        client.delete_asset(
            request.owner, request.repo, request.release_id, manifest_asset.id
        )

    client.upload_assets(
        request.owner,
        request.repo,
        request.release_id,
        [Artifact(path=str(manifest_path), arch="")],
    )
    logger.info(
        "[Sync] Published %s with %s platform(s)",
        MANIFEST_FILENAME,
        len(manifest.platforms),
    )
    return ReconcileResult(
        outcome=ReconcileOutcome.PUBLISHED,
        manifest=manifest,
        manifest_path=manifest_path,
    )
