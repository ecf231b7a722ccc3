"""Command line entry point for publishing the updater manifest."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

import requests

from .config import ConfigError, MissingTokenError, build_settings, require_token
from .github_client import GitHubReleaseClient
from .models import Artifact
from .reconcile import ReconcileRequest, upload_version_json

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="manifest-sync",
        description="Merge signed updater bundles into a release's latest.json",
    )
    parser.add_argument("--config", type=Path, help="Optional YAML settings file")
    parser.add_argument("--owner", help="Repository owner (default: GITHUB_REPOSITORY)")
    parser.add_argument("--repo", help="Repository name (default: GITHUB_REPOSITORY)")
    parser.add_argument("--release-id", type=int, help="Numeric GitHub release id")
    parser.add_argument("--tag-name", help="Release tag used to fix untagged URLs")
    parser.add_argument("--version", dest="app_version", help="Version to advertise")
    notes = parser.add_mutually_exclusive_group()
    notes.add_argument("--notes", help="Release notes text")
    notes.add_argument("--notes-file", type=Path, help="Read release notes from a file")
    parser.add_argument("--platform", help="Target OS, e.g. macos, windows, linux")
    parser.add_argument(
        "--artifact",
        action="append",
        default=[],
        help="Built artifact or signature path (repeatable)",
    )
    parser.add_argument("--arch", default="", help="Architecture tag of --artifact paths")
    parser.add_argument(
        "--prefer-nsis",
        action="store_true",
        default=None,
        help="Advertise the NSIS installer over the MSI when both are signed",
    )
    parser.add_argument(
        "--keep-universal",
        action="store_true",
        default=None,
        help="Also write darwin-universal for universal macOS builds",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Write latest.json locally without touching release assets",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )


def _overrides(args: argparse.Namespace) -> dict:
    notes = args.notes
    if args.notes_file is not None:
        notes = args.notes_file.read_text(encoding="utf-8")
    return {
        "owner": args.owner,
        "repo": args.repo,
        "release_id": args.release_id,
        "tag_name": args.tag_name,
        "version": args.app_version,
        "notes": notes,
        "platform": args.platform,
        "artifacts": [Artifact(path=path, arch=args.arch) for path in args.artifact],
        "prefer_nsis": args.prefer_nsis,
        "keep_universal": args.keep_universal,
        "dry_run": args.dry_run,
    }


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        token = require_token(os.environ)
        settings = build_settings(_overrides(args), args.config, os.environ)
    except (MissingTokenError, ConfigError, OSError) as exc:
        logger.error("[Config] %s", exc)
        return 1

    request = ReconcileRequest.from_settings(settings)
    try:
        with GitHubReleaseClient(token, api_url=settings.api_url) as client:
            result = upload_version_json(client, request)
    except requests.RequestException as exc:
        logger.error("[GitHub] Request failed: %s", exc)
        return 1
    except OSError as exc:
        logger.error("[Sync] Could not read local file: %s", exc)
        return 1
    except ValueError as exc:
        logger.error("[Manifest] Published manifest is malformed: %s", exc)
        return 1

    logger.info("[Sync] Finished: %s", result.outcome.value)
    return 0
