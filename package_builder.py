"""
WeiDU Mod Packager - Core Logic

Turns discovered mods into distributable archives.

Workflow:
    1. find_candidates() to discover the mods under the scan root
    2. build() (or build_all()) to assemble and write each package
    3. write_package_name() / write_github_output() to publish the results

For every mod the builder removes case-only duplicate files, resolves the
version suffix and the package base name, optionally places a WeiDU setup
binary next to the mod, and writes the archive. Scratch files created along
the way are removed again on success and on failure.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from archive_writer import EXCLUDE_PATTERNS, ArchiveWriter, ZipArchiveWriter
from asset_fetcher import (
    MULTI_PLATFORM_DIRS,
    MULTI_WEIDU_ROOT,
    AssetFetcher,
    multi_binary_path,
    setup_binary_name,
)
from case_duplicates import reconcile_duplicates
from declarations import VERSION, find_ini_file, read_declaration, read_ini_name
from errors import DiscoveryError, FetchError
from mod_locator import ModCandidate, find_mods
from name_template import NameBindings, resolve_template
from package_options import (
    NAMING_INI,
    NAMING_TP2,
    SUFFIX_VERSION,
    PackageOptions,
)
from version_utils import normalize_filename, normalize_version

_log = logging.getLogger(__name__)

PACKAGE_NAME_FILE = "PACKAGE_NAME"
GITHUB_OUTPUT_KEY = "weidu_mod_package"


@dataclass
class PackageResult:
    candidate: ModCandidate
    archive_path: Path
    base_name: str
    version: str

    @property
    def archive_name(self) -> str:
        return self.archive_path.name


class Removables:
    """Scratch files and folders deleted when the scope is left."""

    def __init__(self, log_callback: Callable[[str], None]):
        self._stack = contextlib.ExitStack()
        self._log = log_callback

    def __enter__(self) -> Removables:
        self._stack.__enter__()
        return self

    def __exit__(self, *exc_info) -> bool:
        return self._stack.__exit__(*exc_info)

    def add(self, path: Path) -> Path:
        self._stack.callback(self._remove, path)
        return path

    def _remove(self, path: Path):
        try:
            if path.is_dir():
                shutil.rmtree(path)
            elif path.exists():
                path.unlink()
            else:
                return
            self._log(f"  Removed: {path.name}")
        except OSError as exc:
            _log.warning("Could not remove %s: %s", path, exc)


class PackageBuilder:
    """
    Main packaging controller.

    ``fetcher`` is only needed for platform archive types (windows, linux,
    macos, multi). ``archive_writer`` defaults to a zip writer.
    """

    def __init__(
        self,
        root: str | Path,
        options: PackageOptions | None = None,
        output_dir: str | Path | None = None,
        fetcher: Optional[AssetFetcher] = None,
        archive_writer: Optional[ArchiveWriter] = None,
        log_callback: Optional[Callable[[str], None]] = None,
    ):
        self.root = Path(root)
        self.options = options or PackageOptions()
        self.output_dir = Path(output_dir) if output_dir else self.root
        self.fetcher = fetcher
        self.archive_writer = archive_writer or ZipArchiveWriter()
        self._log_cb = log_callback or _log.info

    # ── Logging ───────────────────────────────────────────────────────

    def log(self, msg: str):
        self._log_cb(msg)

    # ── Discovery ─────────────────────────────────────────────────────

    def find_candidates(self) -> list[ModCandidate]:
        candidates = list(find_mods(self.root, self.options.tp2_name or None))
        if not candidates:
            raise DiscoveryError("No tp2 file found.")
        for candidate in candidates:
            self.log(f"mod root: {candidate.mod_root}")
            self.log(f"  tp2 file: {candidate.tp2_relpath}")
            if candidate.is_legacy:
                self.log(f"  tp2 mod folder: {candidate.legacy_mod_folder.name}")
        return candidates

    # ── Name resolution ───────────────────────────────────────────────

    def resolve_version(self, candidate: ModCandidate) -> str:
        suffix = self.options.suffix
        if not suffix:
            return ""
        if suffix == SUFFIX_VERSION:
            raw = read_declaration(candidate.tp2_path, VERSION)
            if not raw:
                return ""
            return normalize_version(raw, beautify=self.options.beautify)
        return normalize_version(suffix)

    def resolve_base_name(self, candidate: ModCandidate) -> str:
        naming = self.options.naming
        if naming == NAMING_INI:
            name = read_ini_name(candidate.tp2_path.parent, candidate.name)
            if name:
                return normalize_filename(name).strip()
            self.log("  No ini name found, falling back to tp2 name")
            return candidate.name
        if naming == NAMING_TP2:
            return candidate.name
        return naming

    def bindings_for(
        self, candidate: ModCandidate, version: str, arch: str = ""
    ) -> NameBindings:
        return NameBindings(
            type=self.options.type,
            arch=arch if self.options.is_platform_type else "",
            os_prefix=self.options.os_prefix,
            base_name=self.resolve_base_name(candidate),
            extra=self.options.extra,
            version=version,
        )

    def archive_name(self, bindings: NameBindings) -> str:
        name = resolve_template(self.options.name_fmt, bindings)
        if not name:
            name = bindings.base_name or "mod"
        if self.options.lower_case:
            name = name.lower()
        return name + self.options.archive_extension

    # ── Setup binaries ────────────────────────────────────────────────

    def _fetch(self, platform: str, arch: str):
        if self.fetcher is None:
            raise FetchError(
                f"No release-asset fetcher available for archive type '{self.options.type}'"
            )
        self.log(f"  Fetching WeiDU {self.options.weidu} ({platform}, {arch})...")
        binary = self.fetcher.fetch_binary_asset(platform, arch, self.options.weidu)
        self.log(f"  WeiDU release: {binary.tag_name} ({binary.architecture})")
        return binary

    @staticmethod
    def _write_executable(path: Path, data: bytes):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    def _add_setup_binary(
        self, candidate: ModCandidate, removables: Removables
    ) -> tuple[list[str], str]:
        platform = self.options.type
        binary = self._fetch(platform, self.options.arch)
        setup_name = setup_binary_name(candidate.tp2_relpath, platform)
        setup_path = removables.add(candidate.mod_root / setup_name)
        self._write_executable(setup_path, binary.data)
        self.log(f"  Setup name: {setup_name}")
        return [setup_name], binary.architecture

    def _add_multi_binaries(
        self, candidate: ModCandidate, removables: Removables
    ) -> list[str]:
        weidu_root = candidate.mod_root / MULTI_WEIDU_ROOT.split("/")[0]
        if weidu_root.exists():
            # shipped by the mod itself
            self.log(f"  Using existing {weidu_root.name}/ folder")
            return [weidu_root.name]

        removables.add(weidu_root)
        for platform in MULTI_PLATFORM_DIRS:
            arch = self.options.arch if platform == "windows" else "amd64"
            binary = self._fetch(platform, arch)
            rel = multi_binary_path(platform, binary.architecture)
            self._write_executable(candidate.mod_root / rel, binary.data)
            self.log(f"  Bundled: {rel}")
        if not self.options.multi_autoupdate:
            self.log("  Autoupdate disabled for multi-platform package")
        return [weidu_root.name]

    # ── Packaging ─────────────────────────────────────────────────────

    def include_paths(self, candidate: ModCandidate) -> list[str]:
        """Archive entries relative to the mod root, without setup binaries."""
        mod_folder = candidate.mod_folder.relative_to(candidate.mod_root).as_posix()
        paths = [mod_folder]
        if candidate.is_legacy:
            paths.append(candidate.tp2_relpath)
            ini_file = find_ini_file(candidate.tp2_path.parent, candidate.name)
            if ini_file is not None:
                paths.append(ini_file.relative_to(candidate.mod_root).as_posix())
        return paths

    def build(self, candidate: ModCandidate) -> PackageResult:
        self.log(f"Packaging {candidate.tp2_relpath}...")

        if not self.options.case_sensitive:
            removed = reconcile_duplicates(candidate.mod_root)
            if removed:
                self.log(f"  Removed {len(removed)} case-duplicate file(s)")

        version = self.resolve_version(candidate)
        self.log(f"  Version suffix: {version or '<none>'}")

        with Removables(self.log) as removables:
            include = self.include_paths(candidate)
            arch = ""
            if self.options.is_platform_type:
                setup_files, arch = self._add_setup_binary(candidate, removables)
                include.extend(setup_files)
            elif self.options.type == "multi":
                include.extend(self._add_multi_binaries(candidate, removables))

            bindings = self.bindings_for(candidate, version, arch)
            archive_path = self.output_dir / self.archive_name(bindings)
            self.log(f"  Mod archive: {archive_path.name}")
            self.archive_writer.create_archive(
                archive_path, candidate.mod_root, include, EXCLUDE_PATTERNS
            )

        return PackageResult(
            candidate=candidate,
            archive_path=archive_path,
            base_name=bindings.base_name,
            version=version,
        )

    def build_all(self) -> list[PackageResult]:
        results = [self.build(candidate) for candidate in self.find_candidates()]
        self.log(f"Packaging complete: {len(results)} archive(s)")
        return results

    # ── Result publishing ─────────────────────────────────────────────

    def write_package_name(self, results: list[PackageResult], directory: Path | None = None) -> Path:
        path = (directory or self.root) / PACKAGE_NAME_FILE
        path.write_text(
            "".join(f"{r.archive_name}\n" for r in results), encoding="utf-8"
        )
        self.log(f"Storing mod archive name in {path}")
        return path

    def write_github_output(self, results: list[PackageResult]) -> Path | None:
        output = os.environ.get("GITHUB_OUTPUT")
        if not output:
            return None
        names = " ".join(r.archive_name for r in results)
        with open(output, "a", encoding="utf-8") as fh:
            fh.write(f"{GITHUB_OUTPUT_KEY}={names}\n")
        self.log("Passing mod package name to GitHub Action output...")
        return Path(output)
