"""
String helpers for slash-delimited relative paths.

All functions operate on plain strings using ``/`` as separator. Inputs are
expected to be normalized already (see ``normalize_path``): backslashes
converted to slashes and no embedded ``./`` segments.
"""

from __future__ import annotations

import re

SETUP_PREFIX = "setup-"

_LEADING_DOT_RE = re.compile(r"^(?:\./)+")
_EMBEDDED_DOT_RE = re.compile(r"/(?:\./)+")


def normalize_path(path: str) -> str:
    """Convert backslashes to slashes and drop ``./`` path elements."""
    path = path.replace("\\", "/")
    path = _LEADING_DOT_RE.sub("", path)
    return _EMBEDDED_DOT_RE.sub("/", path)


def parent_path(path: str) -> str:
    if "/" not in path:
        return ""
    return path.rsplit("/", 1)[0]


def parent_name(path: str) -> str:
    return file_name(parent_path(path))


def file_name(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def file_base(path: str) -> str:
    return file_name(path).split(".", 1)[0]


def tp2_prefix(path: str) -> str:
    """Return the ``setup-`` prefix of the tp2 file base as found, or ``""``."""
    base = file_base(path)
    if base[: len(SETUP_PREFIX)].lower() == SETUP_PREFIX:
        return base[: len(SETUP_PREFIX)]
    return ""


def tp2_name(path: str) -> str:
    """Return the tp2 file base without a (case-insensitive) ``setup-`` prefix.

    >>> tp2_name("mymod/Setup-MyMod.tp2")
    'MyMod'
    """
    base = file_base(path)
    return base[len(tp2_prefix(path)):]


def root_segment(path: str) -> str:
    return normalize_path(path).split("/", 1)[0]


def directory_depth(path: str) -> int:
    """Number of path elements, counting the file itself.

    ``"mymod.tp2"`` is at depth 1, ``"mymod/mymod.tp2"`` at depth 2.
    """
    parts = [p for p in normalize_path(path).split("/") if p]
    return len(parts)
