"""
squirrelgraph Compiler: Compilation Context
============================================
All state of a single compilation pass.  A fresh CompileContext is created for
every root (server init, client init, UI init, each standalone event) and is
discarded when that root's block has been emitted, so nothing leaks from one
root into another.

Pass state
----------
    visited      node ids whose statement form has been emitted
    walked       the subset of visited reached through exec connections
    variables    "nodeId:portId" → source expression already available
    var_counter  suffix for generated temporaries (i0, origin1, vec2 ...)
    indent       current block depth (4 spaces per level)
    threads      thread bodies waiting to be hoisted into their own callables
    resolving    data nodes currently being generated on demand (cycle guard)

The context is also the handle node templates use to talk to the rest of the
compiler: ``value_of`` (Expression Resolver), ``follow`` and ``expand`` (Control-Flow
Walker), ``new_var`` / ``bind`` (variable table) and ``register_thread``
(Thread Hoister).
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set

from .ir import IRGraph, IRNode
from .templates import CodeWriter
from . import resolver, walker

logger = logging.getLogger(__name__)


@dataclass
class HoistedThread:
    name: str
    node_id: str
    body_port: str


def var_key(node_id: str, port_id: str) -> str:
    return f"{node_id}:{port_id}"


class CompileContext:

    def __init__(self, graph: IRGraph, indent: int = 0):
        self.graph = graph
        self.visited: Set[str] = set()
        self.walked: Set[str] = set()
        self.variables: Dict[str, str] = {}
        self.var_counter = 0
        self.indent = indent
        self.threads: List[HoistedThread] = []
        self.resolving: Set[str] = set()

        self._writers: List[CodeWriter] = []
        self._callable_names: Set[str] = set()

    # ── Variable table ────────────────────────────────────────────────────

    def new_var(self, prefix: str = "v") -> str:
        name = f"{prefix}{self.var_counter}"
        self.var_counter += 1
        return name

    def bind(self, node: IRNode, port_id: str, expr: str) -> None:
        key = var_key(node.id, port_id)
        if key in self.variables:
            logger.debug("Variable %s already bound to %s; keeping it", key, self.variables[key])
            return
        self.variables[key] = expr

    def lookup(self, node_id: str, port_id: str) -> Optional[str]:
        return self.variables.get(var_key(node_id, port_id))

    # ── Writers ───────────────────────────────────────────────────────────

    @property
    def writer(self) -> CodeWriter:
        """The writer of the statement currently being emitted."""
        return self._writers[-1]

    @contextmanager
    def emitting(self) -> Iterator[CodeWriter]:
        writer = CodeWriter(indent=self.indent)
        self._writers.append(writer)
        try:
            yield writer
        finally:
            self._writers.pop()

    @contextmanager
    def block(self, writer: CodeWriter) -> Iterator[None]:
        """Open a ``{ ... }`` block; statements walked inside land one level deeper."""
        writer.writeln("{")
        self.indent += 1
        try:
            yield
        finally:
            self.indent -= 1
        writer.writeln("}")

    # ── Resolver / walker entry points for templates ──────────────────────

    def value_of(self, node: IRNode, port_id: str) -> str:
        return resolver.value_of(self, node, port_id)

    def follow(self, node: IRNode, port_id: str, writer: CodeWriter) -> None:
        """Queue every connection leaving an exec output, in connection order."""
        for conn in self.graph.get_outgoing(node.id, port_id):
            writer.defer(conn.to_id, self.indent)

    def expand(self, writer: CodeWriter) -> List[str]:
        """The writer's text with every queued connection walked in place."""
        return walker.expand(self, writer.lines())

    # ── Thread hoisting ───────────────────────────────────────────────────

    def register_thread(self, node: IRNode, body_port: str) -> str:
        base = "__Thread_" + re.sub(r"[^a-zA-Z0-9]", "_", node.id)
        name, n = base, 1
        while name in self._callable_names:
            name = f"{base}_{n}"
            n += 1
        self._callable_names.add(name)
        self.threads.append(HoistedThread(name=name, node_id=node.id, body_port=body_port))
        return name
