"""Map a build target onto the update client's platform keys."""

from __future__ import annotations

import logging

from .constants import (
    ARCH_ALIASES,
    DARWIN,
    OS_ALIASES,
    UNIVERSAL_ARCH,
    UNIVERSAL_TARGET_ARCHES,
)
from .models import Platform, PlatformWrite, WritePolicy

logger = logging.getLogger(__name__)


def resolve_os(platform: str) -> str:
    return OS_ALIASES.get(platform, platform)


def resolve_arch(arch: str) -> str:
    return ARCH_ALIASES.get(arch, arch)


def platform_key(os_name: str, arch: str) -> str:
    return f"{os_name}-{arch}"


def platform_writes(
    os_name: str, arch: str, platform: Platform, keep_universal: bool = False
) -> list[PlatformWrite]:
    """Return the manifest writes for one resolved OS/arch pair.

    A universal macOS build fills ``darwin-aarch64`` and ``darwin-x86_64`` only
    where no native build was published yet. The ``{os}-{arch}`` key itself is
    always replaced, except for universal macOS builds without keep_universal.
    """
    writes: list[PlatformWrite] = []
    is_universal_darwin = os_name == DARWIN and arch == UNIVERSAL_ARCH

    if is_universal_darwin:
        for target_arch in UNIVERSAL_TARGET_ARCHES:
            writes.append(
                PlatformWrite(
                    key=platform_key(DARWIN, target_arch),
                    platform=platform,
                    policy=WritePolicy.IF_ABSENT,
                )
            )

    if keep_universal or not is_universal_darwin:
        writes.append(
            PlatformWrite(
                key=platform_key(os_name, arch),
                platform=platform,
                policy=WritePolicy.REPLACE,
            )
        )

    logger.info(
        "[Resolve] os=%s arch=%s keys=%s",
        os_name,
        arch,
        [(write.key, write.policy.value) for write in writes],
    )
    return writes


def resolve_platform_writes(
    target_platform: str, arch: str, platform: Platform, keep_universal: bool = False
) -> list[PlatformWrite]:
    """Normalize a raw target platform and arch tag, then build the writes."""
    return platform_writes(
        resolve_os(target_platform), resolve_arch(arch), platform, keep_universal
    )
