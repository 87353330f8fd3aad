"""
Filename and version string normalization.

``normalize_version`` turns the raw text of a tp2 ``VERSION`` declaration into
a single token that can be appended to an archive name, e.g.::

    "  V   12.1 beta"  ->  "v12.1"     (beautify)
    "2.0"              ->  "v2.0"      (beautify)
    "2.0"              ->  "2.0"
"""

from __future__ import annotations

import re

# Characters that are illegal or troublesome in file names
SPECIAL_CHARACTERS_RE = re.compile(r'[<>:|*?$"/\\]')
WHITESPACE_RE = re.compile(r"\s+")

_V_GAP_RE = re.compile(r"^[vV]\s+(?=\d)")
_FIRST_WHITESPACE_RE = re.compile(r"\s.*", re.DOTALL)
_UPPER_V_RE = re.compile(r"^V\d")
_LEADING_DIGIT_RE = re.compile(r"^\d")


def normalize_filename(text: str, replacement: str = "_") -> str:
    """Replace special filename characters and drop non-printable ones."""
    text = SPECIAL_CHARACTERS_RE.sub(replacement, text)
    return "".join(ch for ch in text if ch.isprintable())


def normalize_version(
    raw: str,
    beautify: bool = False,
    space_replacement: str | None = None,
    replacement: str = "_",
) -> str:
    v = raw.strip()

    if beautify:
        v = _V_GAP_RE.sub("v", v)

    if space_replacement:
        v = WHITESPACE_RE.sub(space_replacement, v)

    # version strings are single tokens; anything after whitespace is noise
    v = _FIRST_WHITESPACE_RE.sub("", v)

    v = normalize_filename(v, replacement)

    if beautify:
        if _UPPER_V_RE.match(v):
            v = "v" + v[1:]
        elif _LEADING_DIGIT_RE.match(v):
            v = "v" + v

    return v
