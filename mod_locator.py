"""
Discovery of WeiDU mods inside a directory tree.

Two layout conventions are recognized:

Modern layout (preferred, unambiguous)::

    <root>/
    └── mymod/
        ├── mymod.tp2           (or setup-mymod.tp2)
        └── ...

    The tp2 lives inside a folder that shares its name. The folder's parent
    becomes the archive root.

Legacy layout::

    <root>/
    ├── setup-mymod.tp2         BACKUP ~mymod/backup~
    └── mymod/
        └── ...

    The tp2 sits next to the mod's data folder. The folder is identified by
    the root-most element of the tp2's BACKUP declaration and must exist as a
    real directory beside the tp2.

Only tp2 files at most two levels below the scan root are considered.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from declarations import BACKUP, read_declaration
from path_utils import (
    directory_depth,
    normalize_path,
    parent_name,
    parent_path,
    root_segment,
    tp2_name,
)

_log = logging.getLogger(__name__)

TP2_EXTENSION = ".tp2"
MAX_TP2_DEPTH = 2


@dataclass(frozen=True)
class ModCandidate:
    """A discovered mod: archive root, tp2 file and (legacy only) data folder."""

    mod_root: Path
    tp2_path: Path
    legacy_mod_folder: Path | None = None

    @property
    def is_legacy(self) -> bool:
        return self.legacy_mod_folder is not None

    @property
    def tp2_relpath(self) -> str:
        return self.tp2_path.relative_to(self.mod_root).as_posix()

    @property
    def name(self) -> str:
        return tp2_name(self.tp2_relpath)

    @property
    def mod_folder(self) -> Path:
        """Folder packaged as the mod body."""
        if self.legacy_mod_folder is not None:
            return self.legacy_mod_folder
        return self.tp2_path.parent


def _iter_tp2_files(root: Path) -> Iterator[str]:
    """Yield root-relative posix paths of all .tp2 files, in sorted order."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        for filename in sorted(filenames):
            if not filename.lower().endswith(TP2_EXTENSION):
                continue
            rel = filename if rel_dir == "." else f"{rel_dir}/{filename}"
            yield normalize_path(rel)


def _check_modern(root: Path, rel_path: str) -> ModCandidate | None:
    # Compare against "./"-rooted path so a top-level tp2 has the parent "."
    lowered = ("./" + rel_path).lower()
    if tp2_name(lowered) != parent_name(lowered):
        return None

    mod_root_rel = parent_path(parent_path(rel_path))
    mod_root = root / mod_root_rel if mod_root_rel else root
    return ModCandidate(mod_root=mod_root, tp2_path=root / rel_path)


def _check_legacy(root: Path, rel_path: str) -> ModCandidate | None:
    tp2_file = root / rel_path
    backup_path = read_declaration(tp2_file, BACKUP)
    if not backup_path:
        _log.debug("%s: no usable BACKUP declaration", rel_path)
        return None

    mod_folder = root_segment(backup_path)
    if not mod_folder or mod_folder in (".", ".."):
        return None

    parent = tp2_file.parent
    if not (parent / mod_folder).is_dir():
        _log.debug(
            "%s: BACKUP folder '%s' does not exist beside the tp2", rel_path, mod_folder
        )
        return None

    return ModCandidate(
        mod_root=parent,
        tp2_path=tp2_file,
        legacy_mod_folder=parent / mod_folder,
    )


def find_mods(root: str | Path, mod_filter: str | None = None) -> Iterator[ModCandidate]:
    """Yield every valid mod candidate found under ``root``.

    ``mod_filter`` restricts the result to mods whose tp2 name (without
    ``setup-`` prefix and extension) matches case-insensitively.
    """
    root = Path(root)
    wanted = mod_filter.lower() if mod_filter else None

    for rel_path in _iter_tp2_files(root):
        if directory_depth(rel_path) > MAX_TP2_DEPTH:
            _log.debug("Skipping %s: nested too deeply", rel_path)
            continue

        if wanted is not None and tp2_name(rel_path).lower() != wanted:
            _log.debug("Skipping %s: does not match mod filter", rel_path)
            continue

        candidate = _check_modern(root, rel_path) or _check_legacy(root, rel_path)
        if candidate is None:
            _log.debug("Skipping %s: not a recognized mod layout", rel_path)
            continue

        _log.debug("Found mod: %s", rel_path)
        yield candidate
