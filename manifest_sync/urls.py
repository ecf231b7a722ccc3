"""Download URL fixes for assets uploaded to draft releases."""

import re

_UNTAGGED_SEGMENT = re.compile(r"/download/untagged-[^/]+/")


def rewrite_untagged_url(url: str, tag_name: str | None = None) -> str:
    """Point an ``untagged-*`` download URL at the tag or the latest release.

    Draft release assets get temporary URLs that stop resolving once the
    release is published.
    """
    replacement = f"/download/{tag_name}/" if tag_name else "/latest/download/"
    return _UNTAGGED_SEGMENT.sub(lambda _match: replacement, url, count=1)
