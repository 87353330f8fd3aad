import pytest

from mod_locator import find_mods
from tests.conftest import write_tree


# ── modern layout ────────────────────────────────────────────────────────────

@pytest.mark.parametrize("tp2", ["mymod/mymod.tp2", "mymod/setup-mymod.tp2", "MyMod/Setup-MYMOD.TP2"])
def test_modern_layout(tmp_path, tp2):
    write_tree(tmp_path, {tp2: "VERSION ~1~\n"})
    candidates = list(find_mods(tmp_path))

    assert len(candidates) == 1
    candidate = candidates[0]
    assert candidate.mod_root == tmp_path
    assert candidate.tp2_path == tmp_path / tp2
    assert candidate.tp2_relpath == tp2
    assert candidate.legacy_mod_folder is None
    assert candidate.mod_folder == tmp_path / tp2.split("/")[0]


def test_modern_layout_inside_subfolder_is_too_deep(tmp_path):
    write_tree(tmp_path, {"sub/mymod/mymod.tp2": "BACKUP ~mymod/backup~\n"})
    assert list(find_mods(tmp_path)) == []


def test_deep_files_skipped_regardless_of_content(tmp_path):
    write_tree(
        tmp_path,
        {
            "a/b/setup-deep.tp2": "BACKUP ~deep/backup~\n",
            "a/b/deep/backup/.keep": "",
        },
    )
    assert list(find_mods(tmp_path)) == []


# ── legacy layout ────────────────────────────────────────────────────────────

def test_legacy_layout(tmp_path):
    write_tree(
        tmp_path,
        {
            "setup-mymod.tp2": "BACKUP ~backup/mymod~\n",
            "backup/mymod/.keep": "",
        },
    )
    [candidate] = list(find_mods(tmp_path))

    assert candidate.mod_root == tmp_path
    assert candidate.is_legacy
    assert str(candidate.legacy_mod_folder).endswith("/backup")
    assert candidate.tp2_relpath == "setup-mymod.tp2"


def test_legacy_layout_requires_existing_folder(tmp_path):
    write_tree(tmp_path, {"setup-mymod.tp2": "BACKUP ~backup/mymod~\n"})
    assert list(find_mods(tmp_path)) == []

    # a file of that name is not enough
    write_tree(tmp_path, {"backup": "not a folder"})
    assert list(find_mods(tmp_path)) == []


def test_legacy_layout_in_subfolder(tmp_path):
    write_tree(
        tmp_path,
        {
            "src/oldmod.tp2": "// comment\n  BACKUP \".\\oldmod\\backup\"\n",
            "src/oldmod/data.itm": "",
        },
    )
    [candidate] = list(find_mods(tmp_path))
    assert candidate.mod_root == tmp_path / "src"
    assert candidate.legacy_mod_folder == tmp_path / "src" / "oldmod"
    assert candidate.tp2_relpath == "oldmod.tp2"


def test_missing_or_malformed_backup_skipped(tmp_path):
    write_tree(
        tmp_path,
        {
            "nobackup.tp2": "VERSION ~1~\n",
            "malformed.tp2": "BACKUP BACKUP ~data/backup~\n",
            "data/.keep": "",
        },
    )
    assert list(find_mods(tmp_path)) == []


# ── multiple mods / filter ───────────────────────────────────────────────────

def test_multi_mod_repository(tmp_path):
    write_tree(
        tmp_path,
        {
            "alpha/alpha.tp2": "",
            "beta/setup-beta.tp2": "",
            "setup-gamma.tp2": "BACKUP ~gamma/backup~\n",
            "gamma/backup/.keep": "",
            "notes.tp2": "// not a mod\n",
        },
    )
    names = [c.name for c in find_mods(tmp_path)]
    assert names == ["gamma", "alpha", "beta"]


def test_mod_filter(tmp_path):
    write_tree(tmp_path, {"alpha/alpha.tp2": "", "beta/setup-beta.tp2": ""})
    [candidate] = list(find_mods(tmp_path, mod_filter="BETA"))
    assert candidate.name == "beta"
    assert list(find_mods(tmp_path, mod_filter="beta.tp2")) == []


def test_results_are_deterministic(tmp_path):
    write_tree(
        tmp_path,
        {
            "zeta/zeta.tp2": "",
            "alpha/setup-alpha.tp2": "",
            "setup-old.tp2": "BACKUP ~old/backup~",
            "old/x": "",
        },
    )
    assert list(find_mods(tmp_path)) == list(find_mods(tmp_path))
