"""GitHub release asset client used to read and publish the manifest."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path

import requests

from .constants import (
    ASSETS_PER_PAGE,
    BACKOFF_BASE_SECONDS,
    DEFAULT_API_URL,
    GITHUB_API_VERSION,
    NETWORK_RETRIES,
    REQUEST_TIMEOUT_SECONDS,
)
from .models import Artifact, RemoteAsset
from .naming import normalize_asset_name

logger = logging.getLogger(__name__)

_URI_TEMPLATE = re.compile(r"\{[^}]*\}")


class GitHubReleaseClient:
    """Thin wrapper over the GitHub REST release asset endpoints.

    GET requests retry with exponential backoff. Uploads retry only after a
    re-list shows the asset was not created. Deletes are attempted once and
    any HTTP error is raised to the caller.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: int = REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        retries: int = NETWORK_RETRIES,
        backoff_seconds: float = BACKOFF_BASE_SECONDS,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.retries = max(1, retries)
        self.backoff_seconds = backoff_seconds
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            }
        )

    def __enter__(self) -> "GitHubReleaseClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _url(self, path: str) -> str:
        return f"{self.api_url}{path}"

    def _with_retries(self, method: str, url: str, **kwargs) -> requests.Response:
        last_error: requests.RequestException | None = None
        for attempt in range(1, self.retries + 1):
            try:
                response = self.session.request(
                    method, url, timeout=self.timeout, **kwargs
                )
                response.raise_for_status()
                if attempt > 1:
                    logger.info(
                        "[GitHub] %s succeeded after retry attempt %s: %s",
                        method,
                        attempt,
                        url,
                    )
                return response
            except requests.RequestException as exc:
                last_error = exc
                logger.warning(
                    "[GitHub] %s attempt %s/%s failed for %s: %s",
                    method,
                    attempt,
                    self.retries,
                    url,
                    exc,
                )
                if attempt < self.retries:
                    time.sleep(self.backoff_seconds * (2 ** (attempt - 1)))

        raise last_error or requests.RequestException("Unknown network error")

    def list_release_assets(
        self, owner: str, repo: str, release_id: int
    ) -> list[RemoteAsset]:
        """Return every asset attached to the release."""
        url = self._url(f"/repos/{owner}/{repo}/releases/{release_id}/assets")
        assets: list[RemoteAsset] = []
        page = 1
        while True:
            response = self._with_retries(
                "GET", url, params={"per_page": ASSETS_PER_PAGE, "page": page}
            )
            data = response.json()
            if not isinstance(data, list):
                raise requests.RequestException("Unexpected API payload")
            assets.extend(RemoteAsset.from_api(item) for item in data)
            if len(data) < ASSETS_PER_PAGE:
                break
            page += 1
        logger.info(
            "[GitHub] Release %s/%s#%s has %s asset(s)",
            owner,
            repo,
            release_id,
            len(assets),
        )
        return assets

    def fetch_asset_content(self, owner: str, repo: str, asset_id: int) -> bytes:
        """Download the raw bytes of a release asset."""
        response = self._with_retries(
            "GET",
            self._url(f"/repos/{owner}/{repo}/releases/assets/{asset_id}"),
            headers={"Accept": "application/octet-stream"},
        )
        return response.content

    def delete_asset(
        self, owner: str, repo: str, release_id: int, asset_id: int
    ) -> None:
        """Delete a release asset. Not retried."""
        logger.info(
            "[GitHub] Deleting asset %s from release %s/%s#%s",
            asset_id,
            owner,
            repo,
            release_id,
        )
        response = self.session.delete(
            self._url(f"/repos/{owner}/{repo}/releases/assets/{asset_id}"),
            timeout=self.timeout,
        )
        response.raise_for_status()

    def get_upload_url(self, owner: str, repo: str, release_id: int) -> str:
        response = self._with_retries(
            "GET", self._url(f"/repos/{owner}/{repo}/releases/{release_id}")
        )
        upload_url = str(response.json().get("upload_url") or "")
        if not upload_url:
            raise requests.RequestException("Release has no upload URL")
        return _URI_TEMPLATE.sub("", upload_url)

    def upload_assets(
        self, owner: str, repo: str, release_id: int, artifacts: list[Artifact]
    ) -> list[RemoteAsset]:
        """Upload local files as release assets, replacing same-named ones."""
        upload_url = self.get_upload_url(owner, repo, release_id)
        existing = {
            asset.name: asset
            for asset in self.list_release_assets(owner, repo, release_id)
        }

        uploaded: list[RemoteAsset] = []
        for artifact in artifacts:
            path = Path(artifact.path)
            asset_name = normalize_asset_name(artifact.path)
            previous = existing.get(asset_name)
            if previous is not None:
                logger.info("[GitHub] Replacing existing asset %s", asset_name)
                self.delete_asset(owner, repo, release_id, previous.id)

            uploaded.append(
                self._upload_one(
                    owner, repo, release_id, upload_url, asset_name, path.read_bytes()
                )
            )
        return uploaded

    def _upload_one(
        self,
        owner: str,
        repo: str,
        release_id: int,
        upload_url: str,
        asset_name: str,
        data: bytes,
    ) -> RemoteAsset:
        """POST one asset.

        A failed POST may still have created the asset, so the release is
        re-listed before each new attempt.
        """
        last_error: requests.RequestException | None = None
        for attempt in range(1, self.retries + 1):
            logger.info("[GitHub] Uploading %s (%s bytes)", asset_name, len(data))
            try:
                response = self.session.request(
                    "POST",
                    upload_url,
                    timeout=self.timeout,
                    params={"name": asset_name},
                    data=data,
                    headers={
                        "Content-Type": "application/octet-stream",
                        "Content-Length": str(len(data)),
                    },
                )
                response.raise_for_status()
                return RemoteAsset.from_api(response.json())
            except requests.RequestException as exc:
                last_error = exc
                logger.warning(
                    "[GitHub] Upload attempt %s/%s failed for %s: %s",
                    attempt,
                    self.retries,
                    asset_name,
                    exc,
                )

            for asset in self.list_release_assets(owner, repo, release_id):
                if asset.name == asset_name:
                    logger.info("[GitHub] %s is already on the release", asset_name)
                    return asset
            if attempt < self.retries:
                time.sleep(self.backoff_seconds * (2 ** (attempt - 1)))

        raise last_error or requests.RequestException("Unknown upload error")
