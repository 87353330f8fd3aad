"""
Release-asset fetcher interface and WeiDU binary naming.

Retrieving WeiDU release binaries is delegated to an injected collaborator
implementing ``AssetFetcher``. It is responsible for resolving a version tag
(or "latest") and the architecture naming quirks of the individual WeiDU
releases, and returns the unpacked binary together with the resolved tag name
and architecture.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from path_utils import SETUP_PREFIX, tp2_name, tp2_prefix

WEIDU_BINARY = "weidu"

# Platform folder names used by bundled multi-platform WeiDU trees
MULTI_PLATFORM_DIRS = {
    "windows": "win32",
    "linux": "unix",
    "macos": "osx",
}
MULTI_WEIDU_ROOT = "weidu_external/tools/weidu"


@dataclass
class FetchedBinary:
    data: bytes
    tag_name: str
    architecture: str


class AssetFetcher(Protocol):
    def fetch_binary_asset(
        self, platform: str, architecture: str, version: str
    ) -> FetchedBinary:
        """Return the WeiDU binary for ``platform``/``architecture``.

        ``version`` is a WeiDU version number or "latest". Raises
        ``errors.FetchError`` if no matching asset can be retrieved.
        """
        ...


def binary_extension(platform: str) -> str:
    return ".exe" if platform == "windows" else ""


def weidu_binary_name(platform: str) -> str:
    return WEIDU_BINARY + binary_extension(platform)


def setup_binary_name(tp2_path: str, platform: str) -> str:
    """Name of the setup binary for a tp2 file, e.g. ``setup-mymod.exe``.

    WeiDU locates the tp2 through the ``setup-`` prefix, so it is always
    present; its case is kept if the tp2 file name carries it.
    """
    prefix = tp2_prefix(tp2_path) or SETUP_PREFIX
    return prefix + tp2_name(tp2_path) + binary_extension(platform)


def multi_binary_path(platform: str, architecture: str) -> str:
    """Archive-relative location of a bundled WeiDU binary in multi packages."""
    return (
        f"{MULTI_WEIDU_ROOT}/{MULTI_PLATFORM_DIRS[platform]}/"
        f"{architecture}/{weidu_binary_name(platform)}"
    )
