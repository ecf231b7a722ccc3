"""Updater manifest reconciliation for GitHub releases."""

from .config import ConfigError, MissingTokenError, Settings, build_settings, require_token
from .constants import MANIFEST_FILENAME
from .github_client import GitHubReleaseClient
from .manifest import (
    apply_writes,
    merge_manifest,
    parse_manifest,
    serialize_manifest,
    write_manifest,
)
from .matching import download_url_map, match_assets
from .models import (
    Artifact,
    MatchedAsset,
    Platform,
    PlatformWrite,
    ReconcileOutcome,
    ReconcileResult,
    RemoteAsset,
    TargetInfo,
    VersionManifest,
    WritePolicy,
)
from .naming import normalize_asset_name
from .platforms import platform_writes, resolve_arch, resolve_os, resolve_platform_writes
from .reconcile import ReconcileRequest, upload_version_json
from .selection import find_companion, select_signature, signature_priority
from .urls import rewrite_untagged_url

__version__ = "0.1.0"

__all__ = [
    # Constants
    "MANIFEST_FILENAME",
    # Config
    "ConfigError",
    "MissingTokenError",
    "Settings",
    "build_settings",
    "require_token",
    # Models
    "Artifact",
    "MatchedAsset",
    "Platform",
    "PlatformWrite",
    "ReconcileOutcome",
    "ReconcileResult",
    "RemoteAsset",
    "TargetInfo",
    "VersionManifest",
    "WritePolicy",
    # Reconciliation steps
    "normalize_asset_name",
    "download_url_map",
    "match_assets",
    "signature_priority",
    "select_signature",
    "find_companion",
    "resolve_os",
    "resolve_arch",
    "platform_writes",
    "resolve_platform_writes",
    "rewrite_untagged_url",
    "apply_writes",
    "merge_manifest",
    "parse_manifest",
    "serialize_manifest",
    "write_manifest",
    # Publishing
    "GitHubReleaseClient",
    "ReconcileRequest",
    "upload_version_json",
]
