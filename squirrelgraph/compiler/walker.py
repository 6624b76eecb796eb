"""
squirrelgraph Compiler: Control-Flow Walker
============================================
Depth-first descent over exec connections.

Templates never walk their successors themselves: ``ctx.follow`` leaves a
Continuation in the writer for every connection on an exec output, and
``expand`` replaces those markers, in text order, with the code of the node
each one points at.  The pending markers live on an explicit stack, so a
chain of any length is lowered without nesting Python calls.

A node's statement form is emitted the first time it is reached in a pass
and nothing is emitted on every later arrival.  That single check gives
fan-in without duplication and stops exec cycles from looping forever.
Fan-out keeps connection-array order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List

from .ir import IRNode
from .templates import Continuation, Line, get_template

if TYPE_CHECKING:
    from .context import CompileContext

logger = logging.getLogger(__name__)

_END = object()


def emit_node(ctx: "CompileContext", node: IRNode) -> List[Line]:
    """Run the node's template and return the lines it produced, indented."""
    with ctx.emitting() as writer:
        get_template(node.type_name).emit(ctx, node, writer)
    return [line for line in writer.lines() if not isinstance(line, str) or line.strip()]


def _enter(ctx: "CompileContext", node_id: str) -> List[Line]:
    if node_id in ctx.visited:
        return []

    node = ctx.graph.get_node(node_id)
    if node is None:
        return []

    ctx.visited.add(node_id)
    ctx.walked.add(node_id)
    logger.debug("Walking %s (%s) at depth %d", node.id, node.type_name, ctx.indent)
    return emit_node(ctx, node)


def expand(ctx: "CompileContext", lines: Iterable[Line]) -> List[str]:
    """Return ``lines`` with every Continuation replaced by the code it leads to."""
    out: List[str] = []
    pending = [iter(lines)]
    saved_indent = ctx.indent
    try:
        while pending:
            line = next(pending[-1], _END)
            if line is _END:
                pending.pop()
            elif isinstance(line, Continuation):
                ctx.indent = line.indent
                pending.append(iter(_enter(ctx, line.node_id)))
            else:
                out.append(line)
    finally:
        ctx.indent = saved_indent
    return out
