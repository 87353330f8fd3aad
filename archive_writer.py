"""
Archive writer used to emit mod packages.

``create_archive`` packs files and folders (given relative to ``base_dir``)
into a zip archive, skipping entries that match any of the exclusion
patterns. Folder patterns (ending with ``/``) exclude a whole subtree when a
folder of that name is nested inside an included folder; other patterns are
matched against file names. Matching is case-insensitive.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, Iterator, Protocol

from errors import ArchiveError

_log = logging.getLogger(__name__)

EXCLUDE_PATTERNS = (
    ".*",
    "*.bak",
    "*.iemod",
    "*.tmp",
    "*.temp",
    "Thumbs.db",
    "ehthumbs.db",
    "backup/",
    "__macosx/",
    "$RECYCLE.BIN/",
)


class ArchiveWriter(Protocol):
    def create_archive(
        self,
        dest_path: Path,
        base_dir: Path,
        include: Iterable[str],
        exclude: Iterable[str] = EXCLUDE_PATTERNS,
    ) -> None: ...


def is_excluded(rel_path: str, exclude: Iterable[str]) -> bool:
    """Check an archive member path (posix, relative to the base dir)."""
    parts = rel_path.lower().split("/")
    for pattern in exclude:
        pattern = pattern.lower()
        if pattern.endswith("/"):
            # "**/backup/*": only folders below the first path element
            folder = pattern.rstrip("/")
            if any(fnmatch.fnmatchcase(p, folder) for p in parts[1:-1]):
                return True
        elif any(fnmatch.fnmatchcase(p, pattern) for p in parts[1:] or parts):
            return True
    return False


def iter_members(base_dir: Path, include: Iterable[str]) -> Iterator[tuple[Path, str]]:
    """Yield ``(file_path, archive_name)`` for all included files, sorted."""
    for entry in include:
        path = base_dir / entry
        if path.is_file():
            yield path, path.relative_to(base_dir).as_posix()
            continue
        if not path.is_dir():
            raise ArchiveError(f"Cannot add missing path to archive: {path}")
        for dirpath, dirnames, filenames in os.walk(path):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                yield file_path, file_path.relative_to(base_dir).as_posix()


class ZipArchiveWriter:
    """``ArchiveWriter`` producing deflate-compressed zip files."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self.compression = compression

    def create_archive(
        self,
        dest_path: Path,
        base_dir: Path,
        include: Iterable[str],
        exclude: Iterable[str] = EXCLUDE_PATTERNS,
    ) -> None:
        exclude = tuple(exclude)
        dest_path = Path(dest_path)
        count = 0
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(dest_path, "w", self.compression) as zf:
                seen: set[str] = set()
                for file_path, arcname in iter_members(Path(base_dir), include):
                    if arcname in seen or is_excluded(arcname, exclude):
                        continue
                    if file_path.resolve() == dest_path.resolve():
                        continue
                    seen.add(arcname)
                    zf.write(file_path, arcname)
                    count += 1
        except (OSError, zipfile.BadZipFile) as exc:
            dest_path.unlink(missing_ok=True)
            raise ArchiveError(f"Could not create zip archive {dest_path.name}: {exc}") from exc
        except ArchiveError:
            dest_path.unlink(missing_ok=True)
            raise

        _log.info("Wrote %s (%d file(s))", dest_path.name, count)
