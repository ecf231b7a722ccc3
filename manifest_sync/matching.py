"""Join locally built artifacts with assets already uploaded to the release."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import Artifact, MatchedAsset, RemoteAsset
from .naming import asset_basename, normalize_asset_name

logger = logging.getLogger(__name__)


def download_url_map(assets: Iterable[RemoteAsset]) -> dict[str, str]:
    """Map remote asset names to their browser download URLs."""
    urls: dict[str, str] = {}
    for asset in assets:
        urls[asset.name] = asset.browser_download_url
    return urls


def match_assets(
    artifacts: Iterable[Artifact], download_urls: dict[str, str]
) -> list[MatchedAsset]:
    """Return the artifacts that were uploaded, in input order.

    Artifacts with no uploaded counterpart are dropped; that happens whenever
    the build skipped an installer type.
    """
    matched: list[MatchedAsset] = []
    for artifact in artifacts:
        asset_name = normalize_asset_name(artifact.path)
        download_url = download_urls.get(asset_name)
        logger.info(
            "[Match] asset=%s asset_name=%s download_url=%s",
            asset_basename(artifact.path),
            asset_name,
            download_url,
        )
        if download_url:
            matched.append(
                MatchedAsset(
                    download_url=download_url,
                    asset_name=asset_name,
                    path=artifact.path,
                    arch=artifact.arch,
                )
            )
    return matched
