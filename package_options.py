"""
Command line parameters for the WeiDU mod packager.

Parameters are passed as ``key=value`` tokens, e.g.::

    weidu-mod-packager type=windows arch=x86-legacy suffix=version naming=ini

Supported keys
--------------
type              iemod (default), windows, linux, macos, multi
arch              amd64 (default), x86, x86-legacy (x86_legacy accepted)
suffix            version (default), none, or a literal string
extra             extra string added to the package name
naming            tp2 (default), ini, or a literal package base name
weidu             latest (default) or a WeiDU version number (>= 246)
prefix_win        package name prefix for Windows archives (default: win)
prefix_lin        package name prefix for Linux archives (default: lin)
prefix_mac        package name prefix for macOS archives (default: mac)
tp2_name          only package the mod with this tp2 name
name_fmt          package name template (see name_template.py)
multi_autoupdate  true (default) / false
case_sensitive    false (default) / true: keep files that only differ by case
beautify          true (default) / false: "v"-prefixed version suffixes
lower_case        false (default) / true: lower-cased package names

An empty value selects the default. Unknown keys are rejected.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from errors import InputError
from name_template import DEFAULT_TEMPLATE
from path_utils import SETUP_PREFIX, file_name
from version_utils import normalize_filename

_log = logging.getLogger(__name__)

WEIDU_MIN_VERSION = 246
WEIDU_LATEST = "latest"

SUFFIX_VERSION = "version"
SUFFIX_NONE = "none"
NAMING_TP2 = "tp2"
NAMING_INI = "ini"

ArchiveType = Literal["iemod", "windows", "linux", "macos", "multi"]
Architecture = Literal["amd64", "x86", "x86-legacy"]

PLATFORM_TYPES = ("windows", "linux", "macos")

_BOOL_VALUES = {"true": True, "1": True, "false": False, "0": False}
_QUOTED_RE = re.compile(r"""^(["'])(.*?)\1""")


def _normalize_text(value: str) -> str:
    return normalize_filename(value).strip()


def _normalize_prefix(value: str) -> str:
    return _normalize_text(value).rstrip("-")


class PackageOptions(BaseModel):
    """Validated packaging parameters."""

    model_config = ConfigDict(extra="forbid")

    type: ArchiveType = "iemod"
    arch: Architecture = "amd64"
    suffix: str = SUFFIX_VERSION
    extra: str = ""
    naming: str = NAMING_TP2
    weidu: str = WEIDU_LATEST
    prefix_win: str = "win"
    prefix_lin: str = "lin"
    prefix_mac: str = "mac"
    tp2_name: str = ""
    name_fmt: str = DEFAULT_TEMPLATE
    multi_autoupdate: bool = True
    case_sensitive: bool = False
    beautify: bool = True
    lower_case: bool = False

    @field_validator("arch", mode="before")
    @classmethod
    def _normalize_arch(cls, v: str) -> str:
        return v.replace("_", "-") if isinstance(v, str) else v

    @field_validator("suffix")
    @classmethod
    def _unwrap_suffix(cls, v: str) -> str:
        if v == SUFFIX_NONE:
            return ""
        m = _QUOTED_RE.match(v)
        if m:
            return m.group(2)
        return v

    @field_validator("extra")
    @classmethod
    def _normalize_extra(cls, v: str) -> str:
        return _normalize_text(v)

    @field_validator("naming")
    @classmethod
    def _normalize_naming(cls, v: str) -> str:
        if v in (NAMING_TP2, NAMING_INI):
            return v
        return _normalize_text(v) or NAMING_TP2

    @field_validator("weidu")
    @classmethod
    def _check_weidu(cls, v: str) -> str:
        if v == WEIDU_LATEST:
            return v
        if not v.isdigit():
            raise ValueError(f"Invalid WeiDU version: {v}")
        if int(v) < WEIDU_MIN_VERSION:
            raise ValueError(f"Unsupported WeiDU version: {v}")
        return v

    @field_validator("prefix_win", "prefix_lin", "prefix_mac")
    @classmethod
    def _normalize_prefixes(cls, v: str) -> str:
        return _normalize_prefix(v)

    @field_validator("tp2_name")
    @classmethod
    def _normalize_tp2_name(cls, v: str) -> str:
        v = file_name(v.replace("\\", "/"))
        if v.lower().endswith(".tp2"):
            v = v[:-4]
        if v[: len(SETUP_PREFIX)].lower() == SETUP_PREFIX:
            v = v[len(SETUP_PREFIX):]
        return v

    @field_validator(
        "multi_autoupdate", "case_sensitive", "beautify", "lower_case", mode="before"
    )
    @classmethod
    def _parse_bool(cls, v):
        if isinstance(v, bool):
            return v
        key = str(v).strip().lower()
        if key not in _BOOL_VALUES:
            raise ValueError(f"expected true, false, 0 or 1, got {v!r}")
        return _BOOL_VALUES[key]

    # ── Derived values ────────────────────────────────────────────────

    @property
    def is_platform_type(self) -> bool:
        return self.type in PLATFORM_TYPES

    @property
    def os_prefix(self) -> str:
        return {
            "windows": self.prefix_win,
            "linux": self.prefix_lin,
            "macos": self.prefix_mac,
        }.get(self.type, "")

    @property
    def archive_extension(self) -> str:
        return ".iemod" if self.type == "iemod" else ".zip"

    def describe(self) -> list[str]:
        """Summary lines of the effective parameters."""
        lines = [f"Archive type: {self.type}"]
        if self.type == "iemod":
            lines.append("Architecture: <platform-neutral>")
        else:
            lines.append(f"Architecture: {self.arch}")

        if self.suffix == SUFFIX_VERSION:
            lines.append("Suffix: <tp2 VERSION string>")
        elif not self.suffix:
            lines.append("Suffix: <none>")
        else:
            lines.append(f"Suffix: {self.suffix}")

        lines.append(f"WeiDU version: {self.weidu}")
        lines.append(f"Extra suffix: '{self.extra}'" if self.extra else "Extra suffix: <none>")
        if self.naming in (NAMING_TP2, NAMING_INI):
            lines.append(f"Naming scheme: {self.naming}")
        else:
            lines.append(f"Package base name: '{self.naming}'")
        lines.append(
            f"OS-specific prefixes: '{self.prefix_win}', '{self.prefix_lin}', '{self.prefix_mac}'"
        )
        lines.append(f"Mod filter: {self.tp2_name or '<none>'}")
        lines.append(f"Package name format: {self.name_fmt}")
        return lines


def split_tokens(tokens: Iterable[str]) -> dict[str, str]:
    """Split ``key=value`` tokens; later tokens override earlier ones.

    Empty values are dropped so that the model default applies.
    """
    params: dict[str, str] = {}
    for token in tokens:
        if "=" not in token:
            raise InputError(f"Invalid argument: {token}")
        key, value = token.split("=", 1)
        if key not in PackageOptions.model_fields:
            raise InputError(f"Invalid argument: {token}")
        if value:
            params[key] = value
        else:
            params.pop(key, None)
    return params


def parse_tokens(tokens: Iterable[str]) -> PackageOptions:
    params = split_tokens(tokens)
    try:
        options = PackageOptions.model_validate(params)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise InputError(f"Invalid argument: {details}") from exc
    _log.debug("Parsed options: %s", options.model_dump())
    return options
