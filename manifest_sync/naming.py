"""Canonical release asset names for local artifact paths."""

import re
import unicodedata
from pathlib import Path

from .constants import ASSET_NAME_SEPARATORS

_SEPARATOR_PATTERN = re.compile("[" + re.escape(ASSET_NAME_SEPARATORS) + "]")
_COMBINING_MARKS = re.compile("[\u0300-\u036f]")


def asset_basename(path: str) -> str:
    """Return the file name part of a local artifact path."""
    return Path(path).name


def normalize_asset_name(path: str) -> str:
    """Return the name an artifact ends up with once uploaded to a release.

    GitHub replaces spaces and brackets with dots and drops accents, so
    ``"My App (beta).msi"`` is published as ``"My.App.beta.msi"``.
    """
    text = asset_basename(path).strip()
    text = _SEPARATOR_PATTERN.sub(".", text)
    text = text.replace("..", ".")
    text = unicodedata.normalize("NFD", text)
    return _COMBINING_MARKS.sub("", text)
