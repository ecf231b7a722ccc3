"""Pick the signature that the manifest advertises for this build."""

from __future__ import annotations

import logging
import os

from .constants import (
    MSI_FIRST_PRIORITIES,
    NSIS_FIRST_PRIORITIES,
    PRIORITY_BASE_SCORE,
    SIGNATURE_SUFFIX,
)
from .models import MatchedAsset

logger = logging.getLogger(__name__)


def signature_files(matched: list[MatchedAsset]) -> list[MatchedAsset]:
    """Return matched assets that are detached signatures."""
    return [asset for asset in matched if asset.asset_name.endswith(SIGNATURE_SUFFIX)]


def signature_priority(signature_path: str, prefer_nsis: bool) -> int:
    """Score a signature by installer type.

    The suffix is checked against the local path, which still carries the full
    extension chain.
    """
    priorities = NSIS_FIRST_PRIORITIES if prefer_nsis else MSI_FIRST_PRIORITIES
    for index, extension in enumerate(priorities):
        if signature_path.endswith(extension):
            return PRIORITY_BASE_SCORE - index
    return 0


def select_signature(
    matched: list[MatchedAsset], prefer_nsis: bool
) -> MatchedAsset | None:
    """Return the highest priority signature, or None when there is none.

    Ties keep their input order.
    """
    candidates = signature_files(matched)
    logger.info(
        "[Select] %s signature candidate(s): %s",
        len(candidates),
        [candidate.asset_name for candidate in candidates],
    )
    ranked = sorted(
        candidates,
        key=lambda asset: signature_priority(asset.path, prefer_nsis),
        reverse=True,
    )
    if not ranked:
        return None
    winner = ranked[0]
    logger.info(
        "[Select] Selected %s (priority=%s prefer_nsis=%s)",
        winner.asset_name,
        signature_priority(winner.path, prefer_nsis),
        prefer_nsis,
    )
    return winner


def find_companion(
    signature: MatchedAsset, matched: list[MatchedAsset]
) -> MatchedAsset | None:
    """Return the updater bundle that the signature was made for."""
    updater_name, _ = os.path.splitext(signature.asset_name)
    for asset in matched:
        if asset.asset_name == updater_name:
            return asset
    return None
