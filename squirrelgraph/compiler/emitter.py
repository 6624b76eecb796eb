"""
squirrelgraph Compiler: Emitter
================================
Assembles the final .nut source from the driver's per-root results:

    // Generated by squirrelgraph
    // Do not edit by hand: regenerate from the visual script
    <blank>
    global function <root name>       (one per distinct root, in root order)
    <blank>
    #if SERVER                        (init roots only)
    void function <name>(<params>)
    {
        <body>
    }
    <blank>
    void function __Thread_...()      (hoisted callables of this root)
    { ... }
    #endif
    <blank>

Event roots carry a ``// Event: <label>`` comment instead of a guard.  An
aborted pass keeps its function but the body is a single ``// ERROR:``
comment.
"""

from __future__ import annotations

from typing import List

from .driver import RootResult

HEADER = (
    "// Generated by squirrelgraph",
    "// Do not edit by hand: regenerate from the visual script",
)

PLACEHOLDER = (
    "// No nodes in the visual script\n"
    "// Add nodes from the palette to get started"
)


def preamble(results: List[RootResult]) -> List[str]:
    lines = list(HEADER)
    lines.append("")
    seen = set()
    for result in results:
        name = result.spec.function_name
        if name not in seen:
            seen.add(name)
            lines.append(f"global function {name}")
    lines.append("")
    return lines


def root_block(result: RootResult) -> List[str]:
    spec = result.spec
    lines: List[str] = []

    if spec.guard:
        lines.append(f"#if {spec.guard}")
    else:
        lines.append(f"// Event: {spec.node.label}")

    lines.append(f"void function {spec.function_name}({', '.join(result.params)})")
    lines.append("{")
    if result.error is not None:
        lines.append(f"    // ERROR: {result.error}")
    else:
        lines.extend(result.body)
    lines.append("}")

    for thread in result.threads:
        lines.append("")
        lines.extend(thread)

    if spec.guard:
        lines.append("#endif")
    lines.append("")
    return lines


def emit(results: List[RootResult]) -> str:
    out = preamble(results)
    for result in results:
        out.extend(root_block(result))
    return "\n".join(out)
