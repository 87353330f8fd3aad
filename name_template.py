"""
Package name templates.

A template is literal text with ``%name%`` placeholders. Parts of the template
can be wrapped in ``<...>`` groups: a group is only kept if at least one
placeholder inside it resolves to a non-empty value, otherwise the whole group
including its literal text disappears. This keeps separators tidy::

    <%os_prefix%-><%base_name%><-%extra%><-%version%>

    base_name="Foo"                                -> "Foo"
    os_prefix="win", base_name="Foo", version="v1" -> "win-Foo-v1"

Placeholder vocabulary: type, arch, os_prefix, base_name, extra, version.
Unknown placeholders resolve to an empty string. ``\\<``, ``\\>`` and ``\\%``
insert the characters as plain text (they end up replaced by a filler
character), spaces become underscores.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Mapping, Union

from version_utils import normalize_filename

DEFAULT_TEMPLATE = "<%os_prefix%-><%base_name%><-%extra%><-%version%>"
PLACEHOLDERS = ("type", "arch", "os_prefix", "base_name", "extra", "version")

FILLER = "_"
NAME_REPLACEMENT = "-"

_ESCAPED_RE = re.compile(r"\\([<>%])")
_PLACEHOLDER_RE = re.compile(r"%([A-Za-z_][A-Za-z0-9_]*)%")


@dataclass
class NameBindings:
    type: str = ""
    arch: str = ""
    os_prefix: str = ""
    base_name: str = ""
    extra: str = ""
    version: str = ""


# ── Parsing ──────────────────────────────────────────────────────────


@dataclass
class _Literal:
    text: str


@dataclass
class _Placeholder:
    name: str


@dataclass
class _Group:
    children: list


_Node = Union[_Literal, _Placeholder, _Group]


def _parse(text: str, pos: int, nested: bool) -> tuple[list[_Node], int, bool]:
    """Parse ``text`` from ``pos``.

    Returns the nodes, the position after the parsed span and whether a
    closing ``>`` terminated it (only possible when ``nested``).
    """
    nodes: list[_Node] = []
    buf: list[str] = []

    def flush():
        if buf:
            nodes.append(_Literal("".join(buf)))
            buf.clear()

    while pos < len(text):
        ch = text[pos]
        if ch == "<":
            flush()
            children, end, closed = _parse(text, pos + 1, nested=True)
            if closed:
                nodes.append(_Group(children))
            else:
                # unbalanced: keep "<" as text, contents belong to this level
                nodes.append(_Literal("<"))
                nodes.extend(children)
            pos = end
            continue
        if ch == ">" and nested:
            flush()
            return nodes, pos + 1, True
        if ch == "%":
            m = _PLACEHOLDER_RE.match(text, pos)
            if m:
                flush()
                nodes.append(_Placeholder(m.group(1)))
                pos = m.end()
                continue
        buf.append(ch)
        pos += 1

    flush()
    return nodes, pos, False


def parse_template(template: str) -> list[_Node]:
    text = _ESCAPED_RE.sub(FILLER, template)
    text = text.replace(" ", "_")
    nodes, _, _ = _parse(text, 0, nested=False)
    return nodes


# ── Resolution ───────────────────────────────────────────────────────


def _render(nodes: list[_Node], values: Mapping[str, str]) -> tuple[str, bool]:
    parts: list[str] = []
    produced = False
    for node in nodes:
        if isinstance(node, _Literal):
            parts.append(node.text)
        elif isinstance(node, _Placeholder):
            value = values.get(node.name, "") if node.name in PLACEHOLDERS else ""
            value = (value or "").replace(" ", "_")
            produced = produced or bool(value)
            parts.append(value)
        else:
            text, group_produced = _render(node.children, values)
            # all-or-nothing: a group without any resolved content is dropped
            if group_produced:
                parts.append(text)
                produced = True
    return "".join(parts), produced


def resolve_template(
    template: str | None,
    bindings: Mapping[str, str] | NameBindings,
) -> str:
    if not template:
        template = DEFAULT_TEMPLATE
    if isinstance(bindings, NameBindings):
        bindings = asdict(bindings)
    text, _ = _render(parse_template(template), bindings)
    return normalize_filename(text, NAME_REPLACEMENT)
