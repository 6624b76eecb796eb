"""
squirrelgraph Compiler: JSON Deserialiser
==========================================
Converts the editor's node and connection arrays (or a whole saved graph
document) into an IRGraph.

Pipeline
--------
    graph.json / editor arrays  →  [deserialiser.to_ir]  →  IRGraph
    IRGraph                     →  [driver]              →  List[RootResult]
    List[RootResult]            →  [emitter]             →  Squirrel source str

Editor format
-------------
Quick reference (see schema.py for the validated subset):

    {
      "nodes": [
        {
          "id":       "node_1",
          "type":     "get-origin",
          "category": "game",
          "label":    "GetOrigin",
          "data":     {},
          "inputs":   [{"id": "input_0", "label": "Entity", "type": "data",
                        "dataType": "entity"}],
          "outputs":  [{"id": "output_0", "label": "Origin", "type": "data",
                        "dataType": "vector"}],
          "position": {"x": 0, "y": 0}
        }
      ],
      "connections": [
        {"id": "c1", "from": {"nodeId": "node_1", "portId": "output_0"},
                     "to":   {"nodeId": "node_2", "portId": "input_1"}}
      ]
    }

Catalogue fill-in
-----------------
Hand-written graphs may omit ports, category, label or data.  Missing pieces
come from definitions.NODE_DEFINITIONS; the node's own ``data`` is merged on
top of the catalogue defaults.  Types the catalogue does not know keep exactly
what the dict provides.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

from .definitions import NODE_DEFINITIONS, default_data, default_ports
from .ir import DATA, EXEC, IRConnection, IRGraph, IRNode, IRPort

logger = logging.getLogger(__name__)


# ── Ports ─────────────────────────────────────────────────────────────────────

def _parse_port(spec: Mapping[str, Any]) -> IRPort:
    kind = spec.get("type") or spec.get("kind") or DATA
    return IRPort(
        id=str(spec["id"]),
        label=spec.get("label", ""),
        kind=EXEC if kind == EXEC else DATA,
        data_type=spec.get("dataType"),
    )


def _parse_ports(specs: Iterable[Mapping[str, Any]]) -> List[IRPort]:
    return [_parse_port(s) for s in specs]


# ── Nodes / connections ───────────────────────────────────────────────────────

def _parse_node(spec: Mapping[str, Any]) -> IRNode:
    type_name = spec["type"]
    catalogue = NODE_DEFINITIONS.get(type_name, {})
    default_inputs, default_outputs = default_ports(type_name)

    inputs = _parse_ports(spec["inputs"]) if "inputs" in spec else default_inputs
    outputs = _parse_ports(spec["outputs"]) if "outputs" in spec else default_outputs

    data = default_data(type_name)
    data.update(spec.get("data") or {})

    return IRNode(
        id=str(spec["id"]),
        type_name=type_name,
        category=spec.get("category") or catalogue.get("category", ""),
        label=spec.get("label") or catalogue.get("label", type_name),
        data=data,
        inputs=inputs,
        outputs=outputs,
    )


def _parse_connection(spec: Mapping[str, Any]) -> IRConnection:
    src, dst = spec["from"], spec["to"]
    return IRConnection(
        from_id=str(src["nodeId"]),
        from_port=str(src["portId"]),
        to_id=str(dst["nodeId"]),
        to_port=str(dst["portId"]),
        id=str(spec.get("id", "")),
    )


def _as_node(item: Union[IRNode, Mapping[str, Any]]) -> IRNode:
    return item if isinstance(item, IRNode) else _parse_node(item)


def _as_connection(item: Union[IRConnection, Mapping[str, Any]]) -> IRConnection:
    return item if isinstance(item, IRConnection) else _parse_connection(item)


# ── Public entry points ───────────────────────────────────────────────────────

def to_ir(nodes: Iterable[Any], connections: Iterable[Any], name: str = "graph") -> IRGraph:
    """
    Build an IRGraph from editor arrays.

    Items may be editor dicts or already-built IRNode / IRConnection objects;
    the two can be mixed.
    """
    ir_nodes = [_as_node(n) for n in nodes]
    ir_conns = [_as_connection(c) for c in connections]
    logger.debug("Deserialised %d nodes, %d connections", len(ir_nodes), len(ir_conns))
    return IRGraph(nodes=ir_nodes, connections=ir_conns, name=name)


def json_to_ir(source: Union[str, Path, Dict[str, Any]]) -> IRGraph:
    """
    Parse a saved graph document and return an IRGraph.

    Args:
        source: A path to a JSON file, or an already-parsed document with
            ``nodes`` and ``connections`` lists.

    Raises:
        FileNotFoundError: If a path is given and the file does not exist.
        KeyError: If a node or connection misses a required field.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        default_name = path.stem
    else:
        data = source
        default_name = "graph"

    return to_ir(
        data.get("nodes", []),
        data.get("connections", []),
        name=data.get("name") or default_name,
    )


__all__ = ["to_ir", "json_to_ir"]
