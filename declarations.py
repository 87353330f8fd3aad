"""
Extraction of single values from WeiDU declaration lines.

WeiDU scripts and the PI metadata ini files declare values in a handful of
interchangeable notations::

    VERSION ~1.2.3~
    VERSION "1.2.3"
    VERSION %1.2.3%
    VERSION 1.2.3          (VERSION and BACKUP only)
    BACKUP ~mymod/backup~
    Name = ~My Mod~        (ini sidecar, keyword matched case-insensitively)

Delimiters are tried in the order tilde, double quote, percent sign. A
captured value that starts with the keyword again is a malformed declaration
(e.g. two declarations run together on one line) and is discarded.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

_log = logging.getLogger(__name__)

VERSION = "VERSION"
BACKUP = "BACKUP"
NAME = "Name"

DELIMITERS = ("~", '"', "%")
TOKEN_KEYWORDS = {VERSION, BACKUP}
CASE_INSENSITIVE_KEYWORDS = {NAME.lower()}
# keywords separated from their value by "=" rather than whitespace
ASSIGNMENT_KEYWORDS = {NAME.lower()}

TRA_REFERENCE_PREFIX = "@"


def _flags(keyword: str) -> int:
    return re.IGNORECASE if keyword.lower() in CASE_INSENSITIVE_KEYWORDS else 0


def _separator(keyword: str) -> str:
    if keyword.lower() in ASSIGNMENT_KEYWORDS:
        return r"\s*=\s*"
    return r"\s+"


def starts_with_keyword(line: str, keyword: str) -> bool:
    return re.match(rf"^\s*{re.escape(keyword)}", line, _flags(keyword)) is not None


def _match_delimited(line: str, keyword: str) -> str | None:
    sep = _separator(keyword)
    for delim in DELIMITERS:
        d = re.escape(delim)
        pattern = rf"^\s*{re.escape(keyword)}{sep}{d}([^{d}]*){d}"
        m = re.match(pattern, line, _flags(keyword))
        if m:
            return m.group(1)
    return None


def _match_undelimited(line: str, keyword: str) -> str | None:
    if keyword not in TOKEN_KEYWORDS:
        return None
    m = re.match(rf"^\s*{re.escape(keyword)}\s+(\S+)", line)
    if not m:
        return None
    token = m.group(1)
    if keyword == VERSION and token.startswith(TRA_REFERENCE_PREFIX):
        return None
    return token


def extract_declaration(line: str, keyword: str) -> str | None:
    """Return the value declared by ``keyword`` on ``line``, or ``None``."""
    if not starts_with_keyword(line, keyword):
        return None

    value = _match_delimited(line, keyword)
    if value is None:
        value = _match_undelimited(line, keyword)
    if value is None:
        return None

    if starts_with_keyword(value, keyword):
        _log.debug("Malformed %s declaration ignored: %r", keyword, line.strip())
        return None

    if keyword.lower() == NAME.lower():
        value = value.replace('"', "")

    return value or None


def read_declaration(path: Path, keyword: str) -> str | None:
    """Extract ``keyword`` from the first line of ``path`` that declares it."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        _log.warning("Could not read %s: %s", path, exc)
        return None

    for line in text.splitlines():
        if starts_with_keyword(line, keyword):
            return extract_declaration(line, keyword)
    return None


# ── PI metadata ini sidecar ──────────────────────────────────────────


def find_ini_file(directory: Path, base_name: str) -> Path | None:
    """Locate ``<base_name>.ini`` or ``setup-<base_name>.ini`` in ``directory``."""
    if not directory.is_dir():
        return None
    wanted = (f"{base_name}.ini".lower(), f"setup-{base_name}.ini".lower())
    for name in wanted:
        for entry in sorted(directory.iterdir()):
            if entry.is_file() and entry.name.lower() == name:
                return entry
    return None


def read_ini_name(directory: Path, base_name: str) -> str | None:
    ini_file = find_ini_file(directory, base_name)
    if ini_file is None:
        return None
    name = read_declaration(ini_file, NAME)
    if name:
        name = name.strip()
    return name or None
