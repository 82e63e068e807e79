"""
Graph view payload for the frontend: nodes and edges flagged with the critical path.
No geometry; the client lays the graph out.
"""

from typing import Any, Dict, List, Optional

from .engine import compute_schedule, critical_path_ids
from .errors import GraphInvalidError
from .model import TaskIndex, as_index, build_graph


def edge_id(prerequisite: int, dependent: int) -> str:
    """'e1-2' for 'task 2 depends on task 1'."""
    return f"e{prerequisite}-{dependent}"


def _edges(tasks: TaskIndex) -> List[Dict[str, Any]]:
    graph = build_graph(as_index(tasks).values())
    return [
        {"id": edge_id(u, v), "source": u, "target": v, "critical": False}
        for u, v in graph.edges()
    ]


def build_graph_view(tasks: TaskIndex, target_id: Optional[int] = None) -> Dict[str, Any]:
    """
    Returns {valid, message, nodes, edges, order, criticalPath, targetId, schedule}.
    A snapshot that is not acyclic degrades to valid=False with plain nodes/edges.
    """
    by_id = as_index(tasks)
    ordered = sorted(by_id.values(), key=lambda t: t.id)
    try:
        schedule = compute_schedule(by_id, target_id)
    except GraphInvalidError as e:
        return {
            "valid": False,
            "message": e.message,
            "targetId": target_id,
            "nodes": [
                {"id": t.id, "label": t.title, "due": t.due.isoformat(), "earliestStart": None, "critical": False}
                for t in ordered
            ],
            "edges": _edges(by_id),
            "order": [],
            "criticalPath": [],
            "schedule": None,
        }

    nodes = [
        {
            "id": t.id,
            "label": t.title,
            "due": t.due.isoformat(),
            "earliestStart": schedule.earliest_start.get(t.id),
            "critical": t.id in schedule.critical_nodes,
        }
        for t in ordered
    ]
    critical_ids = {edge_id(u, v) for u, v in schedule.critical_edges}
    edges = [{**e, "critical": e["id"] in critical_ids} for e in _edges(by_id)]
    return {
        "valid": True,
        "message": None,
        "targetId": target_id,
        "nodes": nodes,
        "edges": edges,
        "order": list(schedule.order),
        "criticalPath": critical_path_ids(schedule),
        "schedule": schedule.to_dict(),
    }
