"""
squirrelgraph Compiler: Errors
===============================
Only conditions that abort a compilation pass live here.  Everything else the
compiler meets (unknown node types, dangling connections, missing defaults)
degrades to a comment or a ``null`` literal instead of raising.
"""

from __future__ import annotations


class CompilerError(Exception):
    """Base class for compiler failures."""


class CyclicDependency(CompilerError):
    """A data node was asked for its own value while it was still being resolved."""

    def __init__(self, node_id: str):
        super().__init__(f"cyclic data dependency involving node '{node_id}'")
        self.node_id = node_id


class GraphTooDeep(CompilerError):
    """Data dependencies below a root are chained deeper than the interpreter can follow."""

    def __init__(self, node_id: str):
        super().__init__(f"data dependencies below node '{node_id}' are nested too deeply")
        self.node_id = node_id
