"""
squirrelgraph Compiler: Intermediate Representation
====================================================
IRGraph is a decoupled structural snapshot of the editor's node and
connection arrays, plus the lookup tables every compilation pass reads:

    nodes / connections  →  [deserialiser]  →  IRGraph
                                                  ↓
                                       [driver]  one pass per root
                                                  ↓
                                       [emitter]  →  Squirrel source str

Design goals:
  - No references back into the editor; dataclasses only.
  - Built once per top-level compile call.  Every lookup the passes make
    (node by id, connections by endpoint) is a dict hit, never a scan.
  - Connections whose endpoints do not exist are dropped here, so the rest
    of the compiler can treat them as absent.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


EXEC = "exec"
DATA = "data"


# ── Port ─────────────────────────────────────────────────────────────────────

@dataclass
class IRPort:
    id: str
    label: str = ""
    kind: str = DATA                 # "exec" | "data"
    data_type: Optional[str] = None  # informational only: int, entity, asset ...

    @property
    def is_exec(self) -> bool:
        return self.kind == EXEC


# ── Node ─────────────────────────────────────────────────────────────────────

@dataclass
class IRNode:
    id: str
    type_name: str
    category: str = ""
    label: str = ""

    # Per-type configuration; also the fallback source for unwired inputs.
    data: Dict[str, Any] = field(default_factory=dict)

    inputs: List[IRPort]  = field(default_factory=list)
    outputs: List[IRPort] = field(default_factory=list)

    def input_port(self, port_id: str) -> Optional[IRPort]:
        return next((p for p in self.inputs if p.id == port_id), None)

    def output_port(self, port_id: str) -> Optional[IRPort]:
        return next((p for p in self.outputs if p.id == port_id), None)

    def exec_outputs(self) -> List[IRPort]:
        return [p for p in self.outputs if p.is_exec]

    def data_outputs(self) -> List[IRPort]:
        return [p for p in self.outputs if not p.is_exec]


# ── Connection ───────────────────────────────────────────────────────────────

@dataclass
class IRConnection:
    from_id: str
    from_port: str
    to_id: str
    to_port: str
    id: str = ""

    @property
    def source(self) -> Tuple[str, str]:
        return (self.from_id, self.from_port)

    @property
    def target(self) -> Tuple[str, str]:
        return (self.to_id, self.to_port)


# ── Graph ─────────────────────────────────────────────────────────────────────

@dataclass
class IRGraph:
    nodes: List[IRNode]             = field(default_factory=list)
    connections: List[IRConnection] = field(default_factory=list)
    name: str = "graph"

    def __post_init__(self) -> None:
        self._by_id: Dict[str, IRNode] = {}
        for node in self.nodes:
            if node.id in self._by_id:
                logger.warning("Duplicate node id '%s'; the later node wins", node.id)
            self._by_id[node.id] = node

        self._outgoing: Dict[Tuple[str, str], List[IRConnection]] = defaultdict(list)
        self._incoming: Dict[Tuple[str, str], List[IRConnection]] = defaultdict(list)
        self.dangling: List[IRConnection] = []

        for conn in self.connections:
            if not self._resolves(conn):
                logger.warning(
                    "Ignoring dangling connection %s (%s.%s -> %s.%s)",
                    conn.id or "<unnamed>", conn.from_id, conn.from_port,
                    conn.to_id, conn.to_port,
                )
                self.dangling.append(conn)
                continue
            self._outgoing[conn.source].append(conn)
            self._incoming[conn.target].append(conn)

    def _resolves(self, conn: IRConnection) -> bool:
        src = self._by_id.get(conn.from_id)
        dst = self._by_id.get(conn.to_id)
        if src is None or dst is None:
            return False
        return src.output_port(conn.from_port) is not None \
            and dst.input_port(conn.to_port) is not None

    # ── Convenience queries ────────────────────────────────────────────────

    def get_node(self, node_id: str) -> Optional[IRNode]:
        return self._by_id.get(node_id)

    def get_outgoing(self, node_id: str, port_id: str) -> List[IRConnection]:
        """Connections leaving ``node_id.port_id``, in connection-array order."""
        return self._outgoing.get((node_id, port_id), [])

    def get_incoming(self, node_id: str, port_id: str) -> List[IRConnection]:
        """Connections arriving at ``node_id.port_id``, in connection-array order."""
        return self._incoming.get((node_id, port_id), [])

    def first_of_type(self, type_name: str) -> Optional[IRNode]:
        return next((n for n in self.nodes if n.type_name == type_name), None)
