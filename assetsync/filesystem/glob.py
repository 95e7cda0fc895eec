"""Glob patterns for input declarations.

Matching uses ``fnmatch`` with the conventional separator-agnostic semantics:
``*`` and ``?`` may cross ``/``. On top of that, ``{a,b}`` alternation is
expanded and a ``**/`` component may also match zero directories, so
``assets/**/*.png`` matches ``assets/hero.png``.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from pathlib import PurePath, PurePosixPath

_META_CHARS = frozenset("*?[{")


def _split_alternatives(body: str) -> list[str]:
    """Split the inside of a brace group on top-level commas."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in body:
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        current.append(ch)
    parts.append("".join(current))
    return parts


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternation into plain patterns.

    Raises ValueError on an unbalanced brace.
    """
    start = pattern.find("{")
    if start == -1:
        if "}" in pattern:
            msg = f"Unmatched '}}' in glob {pattern!r}"
            raise ValueError(msg)
        return [pattern]

    depth = 0
    end = -1
    for i in range(start, len(pattern)):
        if pattern[i] == "{":
            depth += 1
        elif pattern[i] == "}":
            depth -= 1
            if depth == 0:
                end = i
                break
    if end == -1:
        msg = f"Unclosed '{{' in glob {pattern!r}"
        raise ValueError(msg)

    head, body, tail = pattern[:start], pattern[start + 1 : end], pattern[end + 1 :]
    if "}" in head:
        msg = f"Unmatched '}}' in glob {pattern!r}"
        raise ValueError(msg)

    expanded: list[str] = []
    for alternative in _split_alternatives(body):
        expanded.extend(expand_braces(head + alternative + tail))
    return expanded


def _globstar_variants(pattern: str) -> list[str]:
    """Return the pattern plus every variant with ``**/`` components dropped."""
    idx = 0
    while True:
        idx = pattern.find("**/", idx)
        if idx == -1:
            return [pattern]
        if idx == 0 or pattern[idx - 1] == "/":
            break
        idx += 1

    head = pattern[:idx]
    rest = _globstar_variants(pattern[idx + 3 :])
    return [head + "**/" + r for r in rest] + [head + r for r in rest]


@dataclass(frozen=True)
class Glob:
    """A compiled glob pattern, compared by its source text."""

    pattern: str
    _variants: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.pattern:
            msg = "Glob pattern must not be empty"
            raise ValueError(msg)
        variants: list[str] = []
        for expanded in expand_braces(self.pattern):
            for variant in _globstar_variants(expanded):
                if variant not in variants:
                    variants.append(variant)
        object.__setattr__(self, "_variants", tuple(variants))

    def __str__(self) -> str:
        return self.pattern

    @property
    def prefix(self) -> PurePosixPath:
        """Leading path components that contain no glob metacharacters."""
        literal: list[str] = []
        for component in self.pattern.split("/"):
            if any(ch in _META_CHARS for ch in component):
                break
            if component:
                literal.append(component)
        return PurePosixPath(*literal)

    def is_match(self, path: str | PurePath) -> bool:
        """Check a path (relative to the owning config's folder) against the pattern."""
        if isinstance(path, PurePath):
            path = path.as_posix()
        return any(fnmatch.fnmatchcase(path, variant) for variant in self._variants)
