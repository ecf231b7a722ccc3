"""
Pytest fixtures for manifest sync tests.

Provides a fake release client backed by in-memory assets so the full
reconciliation can run without network access.
"""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from manifest_sync.github_client import GitHubReleaseClient
from manifest_sync.models import Artifact, RemoteAsset

RELEASE_BASE = "https://github.com/acme/app/releases/download/untagged-abc123"


@pytest.fixture
def make_artifact(tmp_path: Path):
    """Create a local artifact file and return it as an Artifact."""

    def _make(name: str, arch: str = "x86_64", content: str = "binary") -> Artifact:
        path = tmp_path / "bundle" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return Artifact(path=str(path), arch=arch)

    return _make


@pytest.fixture
def remote_assets():
    """Build RemoteAsset records for names uploaded to the untagged release."""

    def _build(*names: str) -> list[RemoteAsset]:
        return [
            RemoteAsset(name=name, browser_download_url=f"{RELEASE_BASE}/{name}", id=index)
            for index, name in enumerate(names, start=1)
        ]

    return _build


@pytest.fixture
def fake_client():
    """MagicMock client whose release holds a mutable asset list."""

    def _build(assets: list[RemoteAsset], manifest: dict | None = None) -> MagicMock:
        client = MagicMock(spec=GitHubReleaseClient)
        listed = list(assets)
        if manifest is not None:
            listed.append(
                RemoteAsset(
                    name="latest.json",
                    browser_download_url=f"{RELEASE_BASE}/latest.json",
                    id=999,
                )
            )
            client.fetch_asset_content.return_value = json.dumps(manifest).encode(
                "utf-8"
            )
        client.list_release_assets.return_value = listed
        return client

    return _build
