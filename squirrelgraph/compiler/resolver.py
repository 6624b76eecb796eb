"""
squirrelgraph Compiler: Expression Resolver
============================================
Answers "what expression feeds this input port?" for node templates.

Resolution order for ``value_of(ctx, node, port_id)``:
  1. Wired port, producer already bound   → the bound expression.
  2. Wired port, producer not yet emitted → generate the producer now (pull
     model), splice any lines it emits in front of the consuming statement,
     then return its bound expression, or ``null`` if it bound nothing.
  3. Unwired port → the node's own ``data`` entry whose key matches the port
     label, formatted as a literal; ``null`` when nothing matches.

A producer that is asked for its own value while it is still being generated
raises CyclicDependency instead of recursing forever.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .errors import CyclicDependency
from .ir import IRNode
from . import walker

if TYPE_CHECKING:
    from .context import CompileContext

logger = logging.getLogger(__name__)

NULL = "null"

# Port data types whose defaults are emitted as bare identifiers / asset paths.
_BARE_TYPES = frozenset({"asset", "function"})


# ── Literal formatting ────────────────────────────────────────────────────────

def _quote(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
    )
    return f'"{escaped}"'


def format_literal(value: Any) -> str:
    """Render a JSON-ish value as a Squirrel literal."""
    if value is None:
        return NULL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_literal(v) for v in value) + "]"
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        items = ", ".join(f"{k} = {format_literal(v)}" for k, v in value.items())
        return "{ " + items + " }"
    return str(value)


# ── Default lookup ────────────────────────────────────────────────────────────

def _normalise(text: str) -> str:
    return re.sub(r"\s+", "", text).lower()


def default_value(node: IRNode, port_id: str) -> Optional[str]:
    """Literal for an unwired input, taken from the node's data map."""
    port = node.input_port(port_id)
    if port is None or not port.label:
        return None

    label = _normalise(port.label)
    keys = [k for k in node.data if k]
    match = next((k for k in keys if k.lower() == label), None)
    if match is None:
        match = next((k for k in keys if k.lower() in label), None)
    if match is None:
        return None

    val = node.data[match]
    if port.data_type in _BARE_TYPES and isinstance(val, str):
        return val
    return format_literal(val)


# ── Public entry point ────────────────────────────────────────────────────────

def value_of(ctx: "CompileContext", node: IRNode, port_id: str) -> str:
    incoming = ctx.graph.get_incoming(node.id, port_id)

    if not incoming:
        literal = default_value(node, port_id)
        return literal if literal is not None else NULL

    conn = incoming[0]
    bound = ctx.lookup(conn.from_id, conn.from_port)
    if bound is not None:
        return bound

    if conn.from_id in ctx.resolving:
        raise CyclicDependency(conn.from_id)

    source = ctx.graph.get_node(conn.from_id)
    if source is not None and source.id not in ctx.visited:
        logger.debug("Generating '%s' on demand for %s.%s", source.id, node.id, port_id)
        ctx.visited.add(source.id)
        ctx.resolving.add(source.id)
        try:
            lines = walker.emit_node(ctx, source)
        finally:
            ctx.resolving.discard(source.id)
        if lines:
            ctx.writer.raw(lines)
        bound = ctx.lookup(conn.from_id, conn.from_port)
        if bound is not None:
            return bound

    return NULL
