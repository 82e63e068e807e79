"""
Engine operations exposed to request handlers.
Every call works on the snapshot it is given and keeps nothing between calls.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from loguru import logger

from .chain import DependencyChain
from .chain import extract_chain as _extract_chain
from .critical_path import Edge, analyze
from .errors import CycleDetectedError, GraphInvalidError, InvalidReferenceError
from .model import TaskIndex, as_index, build_graph
from .topo import topological_order
from .validator import validate_dependency


@dataclass(frozen=True)
class Schedule:
    order: Tuple[int, ...]
    earliest_start: Dict[int, Optional[int]]
    predecessor: Dict[int, Optional[int]]
    critical_nodes: FrozenSet[int] = field(default_factory=frozenset)
    critical_edges: FrozenSet[Edge] = field(default_factory=frozenset)

    def to_dict(self) -> Dict:
        return {
            "order": list(self.order),
            "earliestStart": {str(k): v for k, v in self.earliest_start.items()},
            "predecessor": {str(k): v for k, v in self.predecessor.items()},
            "criticalNodes": sorted(self.critical_nodes),
            "criticalEdges": [list(e) for e in sorted(self.critical_edges)],
        }


def toggle_dependency(tasks: TaskIndex, task_id: int, candidate_id: int) -> FrozenSet[int]:
    """
    Remove candidate_id from task_id's dependencies if present, otherwise validate and add it.
    Returns the new dependency set; the caller persists it.
    """
    by_id = as_index(tasks)
    task = by_id.get(task_id)
    if task is None:
        raise InvalidReferenceError("Todo to add dependency to not found", task_id=task_id)

    current = task.dependencies
    if candidate_id in current:
        return current - {candidate_id}

    if candidate_id not in by_id and candidate_id != task_id:
        raise InvalidReferenceError("Invalid dependency ID", task_id=task_id)
    validate_dependency(by_id, task_id, candidate_id)
    return current | {candidate_id}


def compute_schedule(tasks: TaskIndex, target_id: Optional[int] = None) -> Schedule:
    """Topological order plus critical path toward target_id. Raises GraphInvalidError on a cycle."""
    graph = build_graph(as_index(tasks).values())
    try:
        order = topological_order(graph)
    except CycleDetectedError:
        logger.warning("Snapshot of {} tasks is not acyclic; schedule unavailable", len(graph))
        raise GraphInvalidError() from None
    result = analyze(graph, order, target_id)
    return Schedule(
        order=tuple(order),
        earliest_start=result.earliest_start,
        predecessor=result.predecessor,
        critical_nodes=result.critical_nodes,
        critical_edges=result.critical_edges,
    )


def extract_chain(tasks: TaskIndex, root_id: int) -> DependencyChain:
    return _extract_chain(tasks, root_id)


def critical_path_ids(schedule: Schedule) -> List[int]:
    return sorted(schedule.critical_nodes, key=lambda tid: schedule.earliest_start[tid] or 0)
