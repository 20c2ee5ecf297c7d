"""User-arranged project graph layout (``project-graph.json`` in a repository).

The file is a cache of where the user dragged each project node; losing it is
harmless, so unreadable files load as an empty graph.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from diffcommit.errors import CorruptDataError
from diffcommit.hierarchy.types import PROJECT_GRAPH_FILE
from diffcommit.store.fileio import read_json, write_json

logger = logging.getLogger(__name__)


@dataclass
class GraphNode:
    id: str
    x: float
    y: float


@dataclass
class GraphEdge:
    source: str
    target: str


@dataclass
class ProjectGraph:
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [{"id": n.id, "x": n.x, "y": n.y} for n in self.nodes],
            "edges": [{"from": e.source, "to": e.target} for e in self.edges],
        }


def _finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def sanitize_graph(data: Any) -> ProjectGraph:
    """Keep only nodes with a string id and finite x/y, and edges between string ids."""
    graph = ProjectGraph()
    if not isinstance(data, dict):
        return graph
    for raw in data.get("nodes") or []:
        if not isinstance(raw, dict):
            continue
        node_id, x, y = raw.get("id"), raw.get("x"), raw.get("y")
        if isinstance(node_id, str) and _finite_number(x) and _finite_number(y):
            graph.nodes.append(GraphNode(id=node_id, x=float(x), y=float(y)))
    for raw in data.get("edges") or []:
        if not isinstance(raw, dict):
            continue
        source, target = raw.get("from"), raw.get("to")
        if isinstance(source, str) and isinstance(target, str):
            graph.edges.append(GraphEdge(source=source, target=target))
    return graph


def load_project_graph(repository: Path) -> ProjectGraph:
    path = repository / PROJECT_GRAPH_FILE
    if not path.is_file():
        return ProjectGraph()
    try:
        return sanitize_graph(read_json(path))
    except CorruptDataError as exc:
        logger.warning("Ignoring project graph: %s", exc)
        return ProjectGraph()


def save_project_graph(repository: Path, data: Any) -> ProjectGraph:
    """Sanitise *data* (a dict or ProjectGraph) and write it; returns what was written."""
    graph = sanitize_graph(data.to_dict() if isinstance(data, ProjectGraph) else data)
    write_json(repository / PROJECT_GRAPH_FILE, graph.to_dict())
    return graph
