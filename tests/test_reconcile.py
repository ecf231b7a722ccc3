"""
End-to-end reconciliation runs against a fake release client.
"""

import json

import pytest

from manifest_sync.models import ReconcileOutcome, TargetInfo
from manifest_sync.reconcile import ReconcileRequest, read_signature, upload_version_json


def _request(artifacts, platform="windows", **kwargs) -> ReconcileRequest:
    values = {
        "owner": "acme",
        "repo": "app",
        "release_id": 42,
        "version": "1.2.3",
        "notes": "Bug fixes",
        "tag_name": "v1.2.3",
        "target_info": TargetInfo(platform=platform),
        "artifacts": artifacts,
    }
    values.update(kwargs)
    return ReconcileRequest(**values)


def _method_names(client) -> list[str]:
    return [call[0] for call in client.method_calls]


class TestWindowsBuild:
    def test_msi_signature_overwrites_existing_windows_entry(
        self, tmp_path, make_artifact, remote_assets, fake_client
    ):
        artifacts = [
            make_artifact("App_1.2.3_x64_en-US.msi", arch="x64"),
            make_artifact("App_1.2.3_x64_en-US.msi.sig", arch="x64", content="msi-signature"),
        ]
        existing = {
            "version": "1.2.2",
            "notes": "old",
            "pub_date": "2024-01-01T00:00:00.000Z",
            "platforms": {"windows-x86_64": {"signature": "old-sig", "url": "https://old"}},
        }
        client = fake_client(
            remote_assets("App_1.2.3_x64_en-US.msi", "App_1.2.3_x64_en-US.msi.sig"),
            manifest=existing,
        )

        result = upload_version_json(client, _request(artifacts), workdir=tmp_path)

        assert result.outcome is ReconcileOutcome.PUBLISHED
        written = json.loads((tmp_path / "latest.json").read_text(encoding="utf-8"))
        assert written["version"] == "1.2.3"
        assert written["notes"] == "Bug fixes"
        assert written["pub_date"] != existing["pub_date"]
        assert written["platforms"] == {
            "windows-x86_64": {
                "signature": "msi-signature",
                "url": "https://github.com/acme/app/releases/download/v1.2.3/App_1.2.3_x64_en-US.msi",
            }
        }

    def test_old_manifest_deleted_before_upload(
        self, tmp_path, make_artifact, remote_assets, fake_client
    ):
        artifacts = [
            make_artifact("App.msi"),
            make_artifact("App.msi.sig"),
        ]
        client = fake_client(remote_assets("App.msi", "App.msi.sig"), manifest={"platforms": {}})

        upload_version_json(client, _request(artifacts), workdir=tmp_path)

        client.delete_asset.assert_called_once_with("acme", "app", 42, 999)
        upload_args = client.upload_assets.call_args.args
        assert upload_args[:3] == ("acme", "app", 42)
        assert upload_args[3][0].path == str(tmp_path / "latest.json")
        names = _method_names(client)
        assert names.index("delete_asset") < names.index("upload_assets")

    def test_no_delete_without_published_manifest(
        self, tmp_path, make_artifact, remote_assets, fake_client
    ):
        artifacts = [make_artifact("App.msi"), make_artifact("App.msi.sig")]
        client = fake_client(remote_assets("App.msi", "App.msi.sig"))

        result = upload_version_json(client, _request(artifacts), workdir=tmp_path)

        assert result.published
        client.fetch_asset_content.assert_not_called()
        client.delete_asset.assert_not_called()
        client.upload_assets.assert_called_once()

    def test_prefer_nsis_advertises_nsis_bundle(
        self, tmp_path, make_artifact, remote_assets, fake_client
    ):
        artifacts = [
            make_artifact("App.msi.zip"),
            make_artifact("App.msi.zip.sig", content="msi"),
            make_artifact("App-setup.nsis.zip"),
            make_artifact("App-setup.nsis.zip.sig", content="nsis"),
        ]
        client = fake_client(
            remote_assets("App.msi.zip", "App.msi.zip.sig", "App-setup.nsis.zip", "App-setup.nsis.zip.sig")
        )

        result = upload_version_json(
            client, _request(artifacts, prefer_nsis=True), workdir=tmp_path
        )

        entry = result.manifest.platforms["windows-x86_64"]
        assert entry.signature == "nsis"
        assert entry.url.endswith("/App-setup.nsis.zip")


class TestUniversalMacosBuild:
    def _artifacts(self, make_artifact):
        return [
            make_artifact("App.app.tar.gz", arch="universal"),
            make_artifact("App.app.tar.gz.sig", arch="universal", content="fat-sig"),
        ]

    def test_universal_build_keeps_native_aarch64(
        self, tmp_path, make_artifact, remote_assets, fake_client
    ):
        existing = {
            "version": "1.2.3",
            "notes": "",
            "pub_date": "",
            "platforms": {"darwin-aarch64": {"signature": "native", "url": "https://native"}},
        }
        client = fake_client(remote_assets("App.app.tar.gz", "App.app.tar.gz.sig"), manifest=existing)

        result = upload_version_json(
            client, _request(self._artifacts(make_artifact), platform="macos"), workdir=tmp_path
        )

        platforms = result.manifest.to_dict()["platforms"]
        assert platforms["darwin-aarch64"] == {"signature": "native", "url": "https://native"}
        assert platforms["darwin-x86_64"]["signature"] == "fat-sig"
        assert "darwin-universal" not in platforms

    def test_keep_universal_writes_universal_key(
        self, tmp_path, make_artifact, remote_assets, fake_client
    ):
        client = fake_client(remote_assets("App.app.tar.gz", "App.app.tar.gz.sig"))

        result = upload_version_json(
            client,
            _request(self._artifacts(make_artifact), platform="macos", keep_universal=True, tag_name=""),
            workdir=tmp_path,
        )

        platforms = result.manifest.platforms
        assert sorted(platforms) == ["darwin-aarch64", "darwin-universal", "darwin-x86_64"]
        assert platforms["darwin-universal"].url == (
            "https://github.com/acme/app/releases/latest/download/App.app.tar.gz"
        )


class TestSkippedRuns:
    def test_no_signature_is_a_successful_no_op(
        self, tmp_path, make_artifact, remote_assets, fake_client
    ):
        client = fake_client(remote_assets("App.msi"))

        result = upload_version_json(client, _request([make_artifact("App.msi")]), workdir=tmp_path)

        assert result.outcome is ReconcileOutcome.SKIPPED_NO_SIGNATURE
        assert result.manifest is None
        assert not (tmp_path / "latest.json").exists()
        client.upload_assets.assert_not_called()

    def test_signature_without_uploaded_bundle_is_skipped(
        self, tmp_path, make_artifact, remote_assets, fake_client
    ):
        artifacts = [make_artifact("App.msi"), make_artifact("App.msi.sig")]
        client = fake_client(remote_assets("App.msi.sig"))

        result = upload_version_json(client, _request(artifacts), workdir=tmp_path)

        assert result.outcome is ReconcileOutcome.SKIPPED_NO_ASSET
        client.delete_asset.assert_not_called()
        client.upload_assets.assert_not_called()

    def test_dry_run_writes_file_only(self, tmp_path, make_artifact, remote_assets, fake_client):
        artifacts = [make_artifact("App.msi"), make_artifact("App.msi.sig")]
        client = fake_client(remote_assets("App.msi", "App.msi.sig"), manifest={"platforms": {}})

        result = upload_version_json(client, _request(artifacts, dry_run=True), workdir=tmp_path)

        assert result.outcome is ReconcileOutcome.DRY_RUN
        assert result.manifest_path.exists()
        client.delete_asset.assert_not_called()
        client.upload_assets.assert_not_called()


def test_malformed_published_manifest_is_fatal(tmp_path, make_artifact, remote_assets, fake_client):
    artifacts = [make_artifact("App.msi"), make_artifact("App.msi.sig")]
    client = fake_client(remote_assets("App.msi", "App.msi.sig"), manifest={})
    client.fetch_asset_content.return_value = b"{broken"

    with pytest.raises(json.JSONDecodeError):
        upload_version_json(client, _request(artifacts), workdir=tmp_path)
    client.upload_assets.assert_not_called()


def test_repeated_runs_produce_identical_platforms(
    tmp_path, make_artifact, remote_assets, fake_client
):
    artifacts = [
        make_artifact("App.app.tar.gz", arch="universal"),
        make_artifact("App.app.tar.gz.sig", arch="universal", content="fat-sig"),
    ]
    names = ("App.app.tar.gz", "App.app.tar.gz.sig")
    request = _request(artifacts, platform="macos", keep_universal=True)

    first = upload_version_json(fake_client(remote_assets(*names)), request, workdir=tmp_path)
    published = json.loads(first.manifest_path.read_text(encoding="utf-8"))

    second = upload_version_json(
        fake_client(remote_assets(*names), manifest=published), request, workdir=tmp_path
    )

    assert json.dumps(second.manifest.to_dict()["platforms"]) == json.dumps(
        published["platforms"]
    )


def test_signature_read_keeps_crlf_line_endings(tmp_path):
    path = tmp_path / "App.msi.sig"
    path.write_bytes(b"line1\r\nline2\r\n")

    assert read_signature(str(path)) == "line1\r\nline2\r\n"
