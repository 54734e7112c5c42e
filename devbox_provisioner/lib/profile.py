"""Structured edits of shell startup files.

A managed block looks like::

    # >>> devbox-provisioner: profile.d >>>
    ...body...
    # <<< devbox-provisioner: profile.d <<<

Blocks are located by their markers and replaced wholesale, so changing the
body between releases never leaves two copies behind.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

MARKER_PREFIX = "devbox-provisioner"

_THEME_RE = re.compile(r"^ZSH_THEME=(.*)$", re.MULTILINE)


def begin_marker(name: str) -> str:
    return f"# >>> {MARKER_PREFIX}: {name} >>>"


def end_marker(name: str) -> str:
    return f"# <<< {MARKER_PREFIX}: {name} <<<"


@dataclass(frozen=True)
class BlockSpan:
    start: int
    end: int
    body: str


def find_blocks(text: str, name: str) -> List[BlockSpan]:
    """Return every span (line indexes, end inclusive) of the named block."""

    lines = text.splitlines()
    begin = begin_marker(name)
    end = end_marker(name)
    spans: List[BlockSpan] = []
    i = 0
    while i < len(lines):
        if lines[i].strip() == begin:
            for j in range(i + 1, len(lines)):
                if lines[j].strip() == end:
                    spans.append(BlockSpan(start=i, end=j, body="\n".join(lines[i + 1 : j])))
                    i = j
                    break
            else:
                raise ValueError(f"Unterminated managed block {name!r} at line {i + 1}")
        i += 1
    return spans


def render_block(name: str, body: str) -> str:
    return "\n".join([begin_marker(name), body.rstrip("\n"), end_marker(name)])


def upsert_block(
    text: str,
    name: str,
    body: str,
    *,
    comment: Optional[str] = None,
    legacy_lines: tuple[str, ...] = (),
) -> str:
    """Ensure exactly one copy of the named block carrying body.

    An existing block is replaced in place; extra copies are dropped.
    Bare lines equal to one of legacy_lines outside any block are removed.
    A missing block is appended as blank line + comment + block.
    """

    spans = find_blocks(text, name)
    lines = text.splitlines()
    block_lines = render_block(name, body).splitlines()

    inside = set()
    for s in spans:
        inside.update(range(s.start, s.end + 1))

    out: List[str] = []
    placed = False
    for idx, line in enumerate(lines):
        if idx in inside:
            if spans and idx == spans[0].start:
                out.extend(block_lines)
                placed = True
            continue
        if line.strip() in legacy_lines:
            # The legacy line was preceded by its own comment.
            if comment and out and out[-1].strip() == comment:
                out.pop()
                if out and not out[-1].strip():
                    out.pop()
            continue
        out.append(line)

    if not placed:
        while out and not out[-1].strip():
            out.pop()
        if out:
            out.append("")
        if comment:
            out.append(comment)
        out.extend(block_lines)

    return "\n".join(out) + "\n"


def has_block(text: str, name: str, body: str) -> bool:
    spans = find_blocks(text, name)
    return len(spans) == 1 and spans[0].body == body.rstrip("\n")


def read_zsh_theme(text: str) -> Optional[str]:
    """Return the value of the last ZSH_THEME assignment, unquoted."""

    matches = _THEME_RE.findall(text)
    if not matches:
        return None
    value = matches[-1].strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return value


def set_zsh_theme(text: str, theme: str) -> str:
    """Rewrite every ZSH_THEME assignment in place, or prepend one."""

    line = f'ZSH_THEME="{theme}"'
    if _THEME_RE.search(text):
        return _THEME_RE.sub(lambda _m: line, text)
    return line + "\n" + text


def include_directive(profile_dir: Path) -> str:
    return f'for f in {profile_dir}/*; do source "$f"; done'


def legacy_include_directive(profile_dir: Path) -> str:
    return f"for f in {profile_dir}/*; do source $f; done"
