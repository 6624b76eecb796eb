"""
squirrelgraph Compiler: Entry-Point Driver
===========================================
One isolated compilation pass per root:

    server init → client init → UI init → each standalone event

Every pass gets a fresh CompileContext (empty visited set, empty variable
table, counter at zero, no pending threads), marks the root visited, walks
the connections on the root's primary exec output and then hoists the thread
bodies registered along the way.  A node reachable from two roots is
therefore generated independently in each root's block.

Only the first node of each init type counts as a root.  Event nodes become
roots in array order unless the exec walk of an earlier pass already reached
them.  A node that was only generated on demand for its data does not count.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .context import CompileContext
from .definitions import (
    CLIENT_INIT, EVENT_CATEGORY, EVENT_TYPES, SERVER_INIT, UI_INIT,
)
from .errors import CompilerError, GraphTooDeep
from .hoister import hoist_threads
from .ir import IRGraph, IRNode
from .templates import CodeWriter

logger = logging.getLogger(__name__)

PRIMARY_EXEC = "output_0"

# init type → (platform guard, default callable name)
_INIT_ROOTS = (
    (SERVER_INIT, "SERVER", "CodeCallback_ModInit"),
    (CLIENT_INIT, "CLIENT", "ClientCodeCallback_ModInit"),
    (UI_INIT,     "UI",     "UICodeCallback_ModInit"),
)

_PARAM_TYPES = {
    "entity":  "entity",
    "float":   "float",
    "number":  "float",
    "int":     "int",
    "string":  "string",
    "bool":    "bool",
    "boolean": "bool",
    "vector":  "vector",
}


@dataclass
class RootSpec:
    node: IRNode
    function_name: str
    guard: Optional[str] = None     # SERVER / CLIENT / UI, None for events

    @property
    def is_event(self) -> bool:
        return self.guard is None


@dataclass
class RootResult:
    spec: RootSpec
    params: List[str] = field(default_factory=list)
    body: List[str] = field(default_factory=list)
    threads: List[List[str]] = field(default_factory=list)
    walked: Set[str] = field(default_factory=set)
    error: Optional[CompilerError] = None


# ── Root discovery ────────────────────────────────────────────────────────────

def is_event_node(node: IRNode) -> bool:
    return node.category == EVENT_CATEGORY or node.type_name in EVENT_TYPES


def _function_name(node: IRNode, fallback: str) -> str:
    return node.data.get("functionName") or fallback


def init_roots(graph: IRGraph) -> List[RootSpec]:
    roots = []
    for type_name, guard, default_name in _INIT_ROOTS:
        node = graph.first_of_type(type_name)
        if node is not None:
            roots.append(RootSpec(node, _function_name(node, default_name), guard))
    return roots


def event_root(node: IRNode) -> RootSpec:
    fallback = node.type_name.replace("-", "_") + "_handler"
    return RootSpec(node, _function_name(node, fallback))


# ── Event parameters ──────────────────────────────────────────────────────────

def _param_name(label: str, index: int) -> str:
    words = re.findall(r"[A-Za-z0-9]+", label)
    if not words:
        return f"param{index}"
    name = words[0][0].lower() + words[0][1:] + "".join(w[0].upper() + w[1:] for w in words[1:])
    if name[0].isdigit():
        name = "p" + name
    return name


def bind_event_params(ctx: CompileContext, node: IRNode) -> List[str]:
    """Turn the event's data outputs into callable parameters, bound for the body."""
    params = []
    for i, port in enumerate(node.data_outputs()):
        name = _param_name(port.label, i)
        squirrel_type = _PARAM_TYPES.get((port.data_type or "").lower(), "var")
        ctx.bind(node, port.id, name)
        params.append(f"{squirrel_type} {name}")
    return params


# ── Passes ────────────────────────────────────────────────────────────────────

def _abort(result: RootResult, exc: CompilerError) -> None:
    logger.error("Aborted pass for %s: %s", result.spec.function_name, exc)
    result.body = []
    result.threads = []
    result.error = exc


def compile_root(graph: IRGraph, spec: RootSpec) -> RootResult:
    """Run one isolated pass for ``spec`` and return its lowered lines."""
    ctx = CompileContext(graph, indent=1)
    result = RootResult(spec=spec, walked=ctx.walked)
    ctx.visited.add(spec.node.id)
    ctx.walked.add(spec.node.id)

    if spec.is_event:
        result.params = bind_event_params(ctx, spec.node)

    logger.debug("Compiling root %s (%s) as %s", spec.node.id, spec.node.type_name, spec.function_name)
    body = CodeWriter(indent=1)
    try:
        ctx.follow(spec.node, PRIMARY_EXEC, body)
        result.body = ctx.expand(body)
        result.threads = hoist_threads(ctx)
    except RecursionError:
        _abort(result, GraphTooDeep(spec.node.id))
    except CompilerError as exc:
        _abort(result, exc)

    return result


def compile_roots(graph: IRGraph) -> List[RootResult]:
    """All passes of one compile, in root order."""
    results: List[RootResult] = []
    reached: Set[str] = set()

    for spec in init_roots(graph):
        result = compile_root(graph, spec)
        reached |= result.walked
        results.append(result)

    for node in graph.nodes:
        if not is_event_node(node) or node.id in reached:
            continue
        result = compile_root(graph, event_root(node))
        reached |= result.walked
        results.append(result)

    return results
