"""
Shared fixtures and helpers for the WeiDU mod packager test suite.
"""

import os
from pathlib import Path

import pytest

from asset_fetcher import FetchedBinary


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create ``{relative_path: content}`` files below root and return root."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def set_mtime(path: Path, seconds: int):
    os.utime(path, (seconds, seconds))


class FakeFetcher:
    """AssetFetcher returning canned binaries and recording the requests."""

    def __init__(self, data: bytes = b"weidu-binary", tag_name: str = "v249.00"):
        self.data = data
        self.tag_name = tag_name
        self.calls: list[tuple[str, str, str]] = []

    def fetch_binary_asset(self, platform, architecture, version):
        self.calls.append((platform, architecture, version))
        arch = architecture if platform == "windows" else "amd64"
        return FetchedBinary(self.data + platform.encode(), self.tag_name, arch)


@pytest.fixture
def modern_mod(tmp_path):
    """Repository root containing mymod/setup-mymod.tp2 (modern layout)."""
    return write_tree(
        tmp_path / "repo",
        {
            "mymod/setup-mymod.tp2": "BACKUP ~mymod/backup~\nVERSION ~1.2 beta~\n",
            "mymod/tra/english/setup.tra": "@1 = ~Hello~\n",
            "mymod/backup/.gitkeep": "",
            "mymod/readme.txt": "readme",
            "README.md": "repo readme",
        },
    )


@pytest.fixture
def legacy_mod(tmp_path):
    """Repository root with setup-oldmod.tp2 next to its oldmod/ data folder."""
    return write_tree(
        tmp_path / "repo",
        {
            "setup-oldmod.tp2": 'BACKUP "oldmod/backup"\nVERSION v3\n',
            "oldmod.ini": "[Metadata]\nName = ~Old Mod: Reloaded~\n",
            "oldmod/data/file.itm": "itm",
            "oldmod/backup/.gitkeep": "",
        },
    )


@pytest.fixture
def fetcher():
    return FakeFetcher()
