"""Run settings from CLI flags, an optional YAML file and the environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import (
    API_URL_ENV_VAR,
    DEFAULT_API_URL,
    REPOSITORY_ENV_VAR,
    TOKEN_ENV_VAR,
)
from .models import Artifact, TargetInfo

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    """Raised when run settings are missing or malformed."""


class MissingTokenError(RuntimeError):
    """Raised when no GitHub token is available."""


@dataclass
class Settings:
    owner: str
    repo: str
    release_id: int
    version: str
    notes: str = ""
    tag_name: str = ""
    target: TargetInfo = field(default_factory=lambda: TargetInfo(platform=""))
    artifacts: list[Artifact] = field(default_factory=list)
    prefer_nsis: bool = False
    keep_universal: bool = False
    dry_run: bool = False
    api_url: str = DEFAULT_API_URL


def require_token(environ: Mapping[str, str] | None = None) -> str:
    """Return the GitHub token or raise before any remote work starts."""
    env = os.environ if environ is None else environ
    token = (env.get(TOKEN_ENV_VAR) or "").strip()
    if not token:
        raise MissingTokenError(f"{TOKEN_ENV_VAR} is required")
    return token


def coerce_bool(value, default: bool = False) -> bool:
    """Interpret YAML/CLI/env style booleans."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if not normalized:
            return default
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    raise ConfigError(f"Cannot interpret {value!r} as boolean")


def _section(cfg: dict, name: str) -> dict:
    value = cfg.get(name, {}) or {}
    if not isinstance(value, dict):
        logger.warning("[Config] %s config was not an object; using defaults", name)
        return {}
    return value


def load_config_file(path: Path) -> dict:
    """Load the YAML config file.

    Expected YAML structure:
        release:
          owner: "tauri-apps"
          repo: "example"
          release_id: 123
          tag_name: "v1.2.3"
          version: "1.2.3"
          notes: "Bug fixes"

        target:
          platform: "macos"

        updater:
          prefer_nsis: false
          keep_universal: false

        artifacts:
          - path: "bundle/macos/App.app.tar.gz"
            arch: "universal"
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config ({path}): {exc}") from exc
    if not isinstance(cfg, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    logger.debug("[Config] Loaded configuration from %s", path)
    return cfg


def _parse_artifacts(raw) -> list[Artifact]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError("artifacts must be a list")
    artifacts: list[Artifact] = []
    for entry in raw:
        if isinstance(entry, str):
            artifacts.append(Artifact(path=entry))
            continue
        if not isinstance(entry, dict) or not entry.get("path"):
            raise ConfigError(f"Invalid artifact entry: {entry!r}")
        artifacts.append(
            Artifact(path=str(entry["path"]), arch=str(entry.get("arch") or ""))
        )
    return artifacts


def _pick(*values):
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def build_settings(
    overrides: Mapping | None = None,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Resolve run settings.

    Precedence is CLI overrides, then the YAML file, then the environment.
    """
    env = os.environ if environ is None else environ
    overrides = dict(overrides or {})
    cfg = load_config_file(config_path) if config_path else {}

    release = _section(cfg, "release")
    target = _section(cfg, "target")
    updater = _section(cfg, "updater")

    owner = _pick(overrides.get("owner"), release.get("owner"))
    repo = _pick(overrides.get("repo"), release.get("repo"))
    repository = (env.get(REPOSITORY_ENV_VAR) or "").strip()
    if (not owner or not repo) and "/" in repository:
        env_owner, env_repo = repository.split("/", 1)
        owner = owner or env_owner
        repo = repo or env_repo
    if not owner or not repo:
        raise ConfigError(
            f"Repository owner and name are required (--owner/--repo or {REPOSITORY_ENV_VAR})"
        )

    release_id = _pick(overrides.get("release_id"), release.get("release_id"))
    try:
        release_id = int(release_id)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"A numeric release id is required, got {release_id!r}") from exc

    version = _pick(overrides.get("version"), release.get("version"))
    if not version:
        raise ConfigError("A version is required")

    platform = _pick(overrides.get("platform"), target.get("platform"))
    if not platform:
        raise ConfigError("A target platform is required")

    artifacts = overrides.get("artifacts")
    if not artifacts:
        artifacts = _parse_artifacts(cfg.get("artifacts"))

    settings = Settings(
        owner=str(owner),
        repo=str(repo),
        release_id=release_id,
        version=str(version),
        notes=str(_pick(overrides.get("notes"), release.get("notes")) or ""),
        tag_name=str(_pick(overrides.get("tag_name"), release.get("tag_name")) or ""),
        target=TargetInfo(platform=str(platform)),
        artifacts=list(artifacts),
        prefer_nsis=coerce_bool(
            _pick(overrides.get("prefer_nsis"), updater.get("prefer_nsis"))
        ),
        keep_universal=coerce_bool(
            _pick(overrides.get("keep_universal"), updater.get("keep_universal"))
        ),
        dry_run=coerce_bool(overrides.get("dry_run")),
        api_url=(env.get(API_URL_ENV_VAR) or "").strip() or DEFAULT_API_URL,
    )
    logger.info(
        "[Config] %s/%s release=%s version=%s platform=%s artifacts=%s",
        settings.owner,
        settings.repo,
        settings.release_id,
        settings.version,
        settings.target.platform,
        len(settings.artifacts),
    )
    return settings
