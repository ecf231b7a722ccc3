from manifest_sync.models import MatchedAsset
from manifest_sync.selection import (
    find_companion,
    select_signature,
    signature_files,
    signature_priority,
)


def _asset(name: str, path: str | None = None, arch: str = "x64") -> MatchedAsset:
    return MatchedAsset(
        download_url=f"https://h/{name}",
        asset_name=name,
        path=path or f"/bundle/{name}",
        arch=arch,
    )


WINDOWS_SIGNATURES = [
    _asset("App_1.0_x64-setup.exe.sig"),
    _asset("App_1.0_x64_en-US.msi.sig"),
    _asset("App_1.0_x64-setup.nsis.zip.sig"),
]


def test_signature_priority_orderings():
    assert signature_priority("a.msi.zip.sig", prefer_nsis=False) == 100
    assert signature_priority("a.msi.sig", prefer_nsis=False) == 99
    assert signature_priority("a.nsis.zip.sig", prefer_nsis=False) == 98
    assert signature_priority("a.exe.sig", prefer_nsis=False) == 97
    assert signature_priority("a.nsis.zip.sig", prefer_nsis=True) == 100
    assert signature_priority("a.exe.sig", prefer_nsis=True) == 99
    assert signature_priority("a.app.tar.gz.sig", prefer_nsis=True) == 0


def test_msi_wins_without_nsis_preference():
    winner = select_signature(WINDOWS_SIGNATURES, prefer_nsis=False)
    assert winner.asset_name == "App_1.0_x64_en-US.msi.sig"


def test_nsis_wins_with_nsis_preference():
    winner = select_signature(WINDOWS_SIGNATURES, prefer_nsis=True)
    assert winner.asset_name == "App_1.0_x64-setup.nsis.zip.sig"


def test_selection_is_stable_for_ties():
    first = _asset("linux-a.AppImage.sig")
    second = _asset("linux-b.AppImage.sig")
    assert select_signature([first, second], prefer_nsis=False) is first
    assert select_signature([second, first], prefer_nsis=False) is second


def test_priority_uses_local_path_not_asset_name():
    # asset name lost the .msi part, the local path still has it
    renamed = _asset("App.sig", path="/bundle/App.msi.sig")
    other = _asset("Other.exe.sig", path="/bundle/Other.exe.sig")
    assert select_signature([other, renamed], prefer_nsis=False) is renamed


def test_no_signatures_selects_nothing():
    assert select_signature([_asset("App.msi")], prefer_nsis=False) is None
    assert select_signature([], prefer_nsis=True) is None


def test_signature_files_filters_by_asset_name():
    matched = [_asset("App.msi"), _asset("App.msi.sig")]
    assert [a.asset_name for a in signature_files(matched)] == ["App.msi.sig"]


def test_find_companion_strips_signature_extension():
    bundle = _asset("App.app.tar.gz")
    signature = _asset("App.app.tar.gz.sig")
    assert find_companion(signature, [signature, bundle]) is bundle
    assert find_companion(signature, [signature]) is None
