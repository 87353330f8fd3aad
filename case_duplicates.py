"""
Removal of files that only differ by letter case.

Mods maintained on case-sensitive filesystems can accumulate files such as
``Data/Item.itm`` and ``Data/item.itm`` side by side. Both would collide when
the package is unpacked on a case-insensitive filesystem, so the older file
of each pair is deleted and the newer one is kept.

Names are compared with simple lowercasing: NTFS, APFS and FAT do not apply
full Unicode case folding, so ``Straße.txt`` and ``STRASSE.txt`` coexist there.
"""

from __future__ import annotations

import logging
from pathlib import Path

_log = logging.getLogger(__name__)


def _mtime(path: Path) -> int:
    return int(path.stat().st_mtime)


def sorted_files(root: Path) -> list[Path]:
    """Return all files under ``root`` sorted by lowercased path."""
    files = [p for p in root.rglob("*") if p.is_file()]
    return sorted(files, key=lambda p: (p.as_posix().lower(), p.as_posix()))


def reconcile_duplicates(mod_root: str | Path) -> list[Path]:
    """Delete the older file of every case-only duplicate under ``mod_root``.

    On equal modification times the file that sorts first is deleted.
    Returns the deleted paths.
    """
    mod_root = Path(mod_root)
    deleted: list[Path] = []
    survivor: Path | None = None

    for current in sorted_files(mod_root):
        if survivor is None or (
            survivor.as_posix().lower() != current.as_posix().lower()
        ):
            survivor = current
            continue

        if _mtime(current) >= _mtime(survivor):
            older, survivor = survivor, current
        else:
            older = current

        _log.info(
            "Removing case-duplicate %s (keeping newer %s)",
            older.relative_to(mod_root).as_posix(),
            survivor.relative_to(mod_root).as_posix(),
        )
        older.unlink()
        deleted.append(older)

    return deleted
