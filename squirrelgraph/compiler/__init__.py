"""
squirrelgraph Compiler: Graph → Squirrel
=========================================
Compiles the editor's node and connection arrays into Squirrel source.

Pipeline:
    nodes, connections  →  [deserialiser.to_ir]     →  IRGraph
    IRGraph             →  [driver.compile_roots]   →  List[RootResult]
    List[RootResult]    →  [emitter.emit]           →  Squirrel source str

Public API
----------
    from squirrelgraph.compiler import compile_graph

    source = compile_graph(nodes, connections)

    report = compile_graph_report(nodes, connections)
    report.source, report.errors

    report = compile_ir_report(json_to_ir("graphs/my_mod.json"))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List

from .deserialiser import to_ir
from .driver import compile_roots
from .emitter import PLACEHOLDER, emit
from .errors import CompilerError, CyclicDependency, GraphTooDeep
from .ir import IRGraph


@dataclass
class RootError:
    function_name: str
    node_id: str
    message: str


@dataclass
class CompileReport:
    source: str
    errors: List[RootError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def compile_graph_report(nodes: Iterable[Any], connections: Iterable[Any]) -> CompileReport:
    """
    Compile and also report which root passes were aborted.

    A pass that hits a cyclic data dependency, or data chained too deeply to
    resolve, is abandoned on its own; the other roots still compile.
    """
    return compile_ir_report(to_ir(nodes, connections))


def compile_ir_report(graph: IRGraph) -> CompileReport:
    """Same as compile_graph_report, for a graph that is already deserialised."""
    if not graph.nodes:
        return CompileReport(source=PLACEHOLDER)

    results = compile_roots(graph)
    errors = [
        RootError(r.spec.function_name, r.spec.node.id, str(r.error))
        for r in results if r.error is not None
    ]
    return CompileReport(source=emit(results), errors=errors)


def compile_graph(nodes: Iterable[Any], connections: Iterable[Any]) -> str:
    """
    Compile a graph into Squirrel source.

    Args:
        nodes:        Editor node dicts or IRNode objects.
        connections:  Editor connection dicts or IRConnection objects.

    Returns:
        The complete .nut source, or a fixed placeholder for an empty graph.
    """
    return compile_graph_report(nodes, connections).source


__all__ = [
    "compile_graph", "compile_graph_report", "compile_ir_report", "CompileReport", "RootError",
    "CompilerError", "CyclicDependency", "GraphTooDeep", "PLACEHOLDER",
]
