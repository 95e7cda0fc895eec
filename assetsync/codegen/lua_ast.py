"""A tiny Lua expression model and pretty-printer for generated files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

LUA_KEYWORDS = frozenset(
    {
        "and", "break", "do", "else", "elseif", "end", "false", "for", "function",
        "goto", "if", "in", "local", "nil", "not", "or", "repeat", "return",
        "then", "true", "until", "while",
    }
)

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


@dataclass(frozen=True)
class LuaString:
    value: str


@dataclass(frozen=True)
class LuaRaw:
    """Source text emitted verbatim, e.g. a constructor call."""

    source: str


@dataclass
class LuaTable:
    """A table constructor; entries keep insertion order."""

    entries: list[tuple[str, Expression]] = field(default_factory=list)

    def add_entry(self, key: str, value: Expression | str) -> None:
        if isinstance(value, str):
            value = LuaString(value)
        self.entries.append((key, value))


Expression = LuaString | LuaRaw | LuaTable


def quote_string(value: str) -> str:
    """Quote ``value`` as a Lua string literal."""
    out: list[str] = ['"']
    for ch in value:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 32 or ord(ch) == 127:
            out.append(f"\\{ord(ch):03d}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def render_key(key: str) -> str:
    if _IDENTIFIER_RE.match(key) and key not in LUA_KEYWORDS:
        return key
    return f"[{quote_string(key)}]"


def render_expression(expr: Expression, depth: int = 0) -> str:
    """Render an expression; nested tables are indented with tabs."""
    if isinstance(expr, LuaString):
        return quote_string(expr.value)
    if isinstance(expr, LuaRaw):
        return expr.source
    if not expr.entries:
        return "{}"

    inner = "\t" * (depth + 1)
    lines = ["{"]
    for key, value in expr.entries:
        lines.append(f"{inner}{render_key(key)} = {render_expression(value, depth + 1)},")
    lines.append("\t" * depth + "}")
    return "\n".join(lines)


def render_return(expr: Expression) -> str:
    """Render a ``return <expr>`` statement followed by a newline."""
    return f"return {render_expression(expr)}\n"
