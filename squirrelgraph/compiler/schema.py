"""
squirrelgraph Compiler: Graph JSON Schema + Validator
======================================================
Structural validation of a saved graph document, run before
deserialisation.  No third-party JSON Schema library is needed.

Document format
---------------

    {
      "name": "my-mod",                       // optional
      "nodes": [
        {
          "id":     "node_1",                 // unique within this graph (str, required)
          "type":   "init-server",            // node type (str, required)
          "data":   {...},                    // optional object
          "inputs": [...], "outputs": [...]   // optional port lists
        }
      ],
      "connections": [
        {
          "id":   "c1",                                   // optional
          "from": {"nodeId": "node_1", "portId": "output_0"},
          "to":   {"nodeId": "node_2", "portId": "input_0"}
        }
      ]
    }

Connections whose endpoints name missing nodes are not rejected here: the
compiler ignores them, as the editor can leave them behind.
"""

from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any, Dict, List, Union

from .definitions import KNOWN_NODE_TYPES


# ── Validation helpers ────────────────────────────────────────────────────────

class SchemaError(ValueError):
    """Raised when graph JSON fails structural validation."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise SchemaError(message)


def _require_keys(obj: Dict, keys: List[str], context: str) -> None:
    for key in keys:
        _require(key in obj, f"{context}: missing required field '{key}'")


def _validate_ports(ports: Any, context: str) -> None:
    _require(isinstance(ports, list), f"{context} must be a list")
    for i, port in enumerate(ports):
        _require(isinstance(port, dict), f"{context}[{i}] must be an object")
        _require_keys(port, ["id"], f"{context}[{i}]")


def _validate_endpoint(endpoint: Any, context: str) -> None:
    _require(isinstance(endpoint, dict), f"{context} must be an object")
    _require_keys(endpoint, ["nodeId", "portId"], context)
    for key in ("nodeId", "portId"):
        _require(isinstance(endpoint[key], str), f"{context}.{key} must be a string")


# ── Public validator ─────────────────────────────────────────────────────────

def validate(data: Dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a parsed graph document.

    Args:
        data:   A pre-parsed dict (result of json.load / json.loads).
        strict: When True, raise SchemaError for unknown node types.
                When False (default), unknown types produce a warning.

    Raises:
        SchemaError: On any structural violation.
    """
    _require(isinstance(data, dict), "graph JSON must be a JSON object at the top level")
    _require_keys(data, ["nodes", "connections"], "graph root")
    _require(isinstance(data["nodes"], list), "nodes must be a list")
    _require(isinstance(data["connections"], list), "connections must be a list")

    # ── Validate nodes ──────────────────────────────────────────────────────

    node_ids: set = set()

    for i, node in enumerate(data["nodes"]):
        ctx = f"nodes[{i}]"
        _require(isinstance(node, dict), f"{ctx}: each node must be a JSON object")
        _require_keys(node, ["id", "type"], ctx)
        _require(isinstance(node["id"], str), f"{ctx}.id must be a string")
        _require(isinstance(node["type"], str), f"{ctx}.type must be a string")
        _require(node["id"] not in node_ids, f"{ctx}: duplicate node id '{node['id']}'")
        node_ids.add(node["id"])

        if "data" in node:
            _require(isinstance(node["data"], dict), f"{ctx}.data must be an object")
        for key in ("inputs", "outputs"):
            if key in node:
                _validate_ports(node[key], f"{ctx}.{key}")

        type_name = node["type"]
        if type_name not in KNOWN_NODE_TYPES:
            msg = f"{ctx}: unknown node type '{type_name}'"
            if strict:
                raise SchemaError(msg)
            warnings.warn(msg + " (compilation will emit a TODO comment)", stacklevel=2)

    # ── Validate connections ────────────────────────────────────────────────

    for i, conn in enumerate(data["connections"]):
        ctx = f"connections[{i}]"
        _require(isinstance(conn, dict), f"{ctx}: each connection must be a JSON object")
        _require_keys(conn, ["from", "to"], ctx)
        _validate_endpoint(conn["from"], f"{ctx}.from")
        _validate_endpoint(conn["to"], f"{ctx}.to")


def validate_file(path: Union[str, Path], *, strict: bool = False) -> Dict[str, Any]:
    """
    Load and validate a graph JSON file.

    Returns:
        The parsed dict on success.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        SchemaError: If the graph structure is invalid.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    validate(data, strict=strict)
    return data


__all__ = ["KNOWN_NODE_TYPES", "SchemaError", "validate", "validate_file"]
