import zipfile

import pytest

from archive_writer import EXCLUDE_PATTERNS, ZipArchiveWriter, is_excluded
from errors import ArchiveError
from tests.conftest import write_tree


@pytest.mark.parametrize(
    "path",
    [
        "mymod/.git/config",
        "mymod/.hidden",
        "mymod/tra/old.bak",
        "mymod/old.iemod",
        "mymod/x.TMP",
        "mymod/sub/Thumbs.db",
        "mymod/backup/0/file",
        "mymod/__MACOSX/x",
        "mymod/$RECYCLE.BIN/x",
        ".hidden",
    ],
)
def test_excluded_paths(path):
    assert is_excluded(path, EXCLUDE_PATTERNS)


@pytest.mark.parametrize(
    "path",
    ["mymod/readme.txt", "backup/data.itm", "setup-mymod.tp2", "mymod/backups/x"],
)
def test_included_paths(path):
    assert not is_excluded(path, EXCLUDE_PATTERNS)


def test_create_archive(tmp_path):
    root = write_tree(
        tmp_path / "repo",
        {
            "mymod/mymod.tp2": "",
            "mymod/tra/english.tra": "",
            "mymod/backup/old.itm": "",
            "mymod/.DS_Store": "",
            "setup-mymod": "binary",
            "other/ignored.txt": "",
        },
    )
    dest = tmp_path / "out" / "mymod.iemod"

    ZipArchiveWriter().create_archive(dest, root, ["mymod", "setup-mymod"])

    with zipfile.ZipFile(dest) as zf:
        assert sorted(zf.namelist()) == [
            "mymod/mymod.tp2",
            "mymod/tra/english.tra",
            "setup-mymod",
        ]


def test_missing_include_raises_and_leaves_no_archive(tmp_path):
    dest = tmp_path / "broken.zip"
    with pytest.raises(ArchiveError):
        ZipArchiveWriter().create_archive(dest, tmp_path, ["missing"])
    assert not dest.exists()
