import itertools
from typing import Any, Dict, List, Optional

import pytest

from squirrelgraph.compiler import compile_graph, compile_graph_report
from squirrelgraph.compiler.deserialiser import to_ir


class GraphBuilder:
    """
    Builds editor-shaped node / connection dicts.  Ports are left out unless
    given, so the deserialiser fills them from the node catalogue.
    """

    def __init__(self):
        self.nodes: List[Dict[str, Any]] = []
        self.connections: List[Dict[str, Any]] = []
        self._ids = itertools.count(1)

    def node(
        self,
        type_name: str,
        node_id: Optional[str] = None,
        *,
        label: Optional[str] = None,
        category: Optional[str] = None,
        inputs: Optional[List[Dict[str, Any]]] = None,
        outputs: Optional[List[Dict[str, Any]]] = None,
        **data: Any,
    ) -> str:
        node_id = node_id or f"n{next(self._ids)}"
        spec: Dict[str, Any] = {"id": node_id, "type": type_name, "data": data}
        if label is not None:
            spec["label"] = label
        if category is not None:
            spec["category"] = category
        if inputs is not None:
            spec["inputs"] = inputs
        if outputs is not None:
            spec["outputs"] = outputs
        self.nodes.append(spec)
        return node_id

    def wire(self, src: str, src_port: str, dst: str, dst_port: str) -> None:
        self.connections.append({
            "id": f"c{len(self.connections) + 1}",
            "from": {"nodeId": src, "portId": src_port},
            "to": {"nodeId": dst, "portId": dst_port},
        })

    def then(self, src: str, dst: str, src_port: str = "output_0") -> None:
        """Exec wire into the node's ``In`` port."""
        self.wire(src, src_port, dst, "input_0")

    def document(self) -> Dict[str, Any]:
        return {"nodes": self.nodes, "connections": self.connections}

    def ir(self):
        return to_ir(self.nodes, self.connections)

    def compile(self) -> str:
        return compile_graph(self.nodes, self.connections)

    def report(self):
        return compile_graph_report(self.nodes, self.connections)


def exec_port(port_id: str, label: str = "") -> Dict[str, Any]:
    return {"id": port_id, "label": label, "type": "exec"}


def data_port(port_id: str, label: str = "", data_type: str = "any") -> Dict[str, Any]:
    return {"id": port_id, "label": label, "type": "data", "dataType": data_type}


def block_of(source: str, header: str) -> List[str]:
    """Lines of the ``{ ... }`` block that follows ``header``, braces excluded."""
    lines = source.split("\n")
    start = lines.index(header)
    assert lines[start + 1] == "{"
    end = lines.index("}", start + 1)
    return lines[start + 2:end]


@pytest.fixture
def graph():
    return GraphBuilder()
