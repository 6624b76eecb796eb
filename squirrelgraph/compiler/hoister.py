"""
squirrelgraph Compiler: Thread Hoister
=======================================
Turns every thread body registered during a pass into its own top-level
callable::

    void function __Thread_<id>()
    {
        <body statements>
    }

Bodies are walked with the pass's own context, so nodes already emitted in
the enclosing root are not emitted a second time, and bindings made there
stay visible.  A thread node reached while a body is being hoisted registers
another callable; it is emitted after the current one.
"""

from __future__ import annotations

import logging
from typing import List

from .context import CompileContext, HoistedThread
from .templates import CodeWriter

logger = logging.getLogger(__name__)


def _hoist_one(ctx: CompileContext, thread: HoistedThread) -> List[str]:
    writer = CodeWriter(indent=0)
    writer.writeln(f"void function {thread.name}()")

    saved_indent, ctx.indent = ctx.indent, 0
    try:
        with ctx.block(writer):
            node = ctx.graph.get_node(thread.node_id)
            if node is not None:
                ctx.follow(node, thread.body_port, writer)
    finally:
        ctx.indent = saved_indent

    return ctx.expand(writer)


def hoist_threads(ctx: CompileContext) -> List[List[str]]:
    """Emit all pending thread bodies, including ones discovered along the way."""
    hoisted: List[List[str]] = []
    i = 0
    while i < len(ctx.threads):
        thread = ctx.threads[i]
        logger.debug("Hoisting thread body of %s as %s", thread.node_id, thread.name)
        hoisted.append(_hoist_one(ctx, thread))
        i += 1
    return hoisted
