"""
Critical path (longest chain of prerequisite hops) under unit task duration.

1. Earliest start: 0 for tasks without prerequisites, unreachable (None) otherwise
2. One forward relaxation pass in topological order, recording predecessors
3. Backtrack predecessors from the target to collect critical nodes and edges
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Sequence, Set, Tuple

from loguru import logger

from .errors import GraphInvalidError
from .model import TaskGraph

TASK_DURATION = 1

Edge = Tuple[int, int]


@dataclass(frozen=True)
class CriticalPath:
    earliest_start: Dict[int, Optional[int]]
    predecessor: Dict[int, Optional[int]]
    critical_nodes: FrozenSet[int] = field(default_factory=frozenset)
    critical_edges: FrozenSet[Edge] = field(default_factory=frozenset)

    @property
    def length(self) -> int:
        """Longest chain length in tasks (max earliest start + 1), 0 for an empty graph."""
        starts = [es for es in self.earliest_start.values() if es is not None]
        return max(starts) + 1 if starts else 0


def _check_order(graph: TaskGraph, order: Sequence[int]) -> None:
    if len(order) != len(graph) or set(order) != set(graph.tasks):
        logger.warning(
            "Topological order covers {} of {} tasks; refusing to compute critical path",
            len(set(order) & set(graph.tasks)),
            len(graph),
        )
        raise GraphInvalidError()


def earliest_starts(graph: TaskGraph, order: Sequence[int]) -> Tuple[Dict[int, Optional[int]], Dict[int, Optional[int]]]:
    """Forward DP pass. Returns (earliest_start, predecessor)."""
    _check_order(graph, order)

    es: Dict[int, Optional[int]] = {tid: None for tid in graph.tasks}
    pred: Dict[int, Optional[int]] = {tid: None for tid in graph.tasks}
    for tid, deg in graph.in_degrees().items():
        if deg == 0:
            es[tid] = 0

    for u in order:
        start_u = es[u]
        if start_u is None:
            continue
        candidate = start_u + TASK_DURATION
        for v in graph.dependents(u):
            current = es[v]
            if current is None or candidate > current:
                es[v] = candidate
                pred[v] = u

    return es, pred


def backtrack(
    predecessor: Dict[int, Optional[int]],
    earliest_start: Dict[int, Optional[int]],
    target_id: Optional[int],
) -> Tuple[FrozenSet[int], FrozenSet[Edge]]:
    """Follow predecessors from target_id. Unknown or unreachable targets give empty sets."""
    if target_id is None or earliest_start.get(target_id) is None:
        return frozenset(), frozenset()

    nodes: Set[int] = set()
    edges: Set[Edge] = set()
    cur: Optional[int] = target_id
    while cur is not None and cur not in nodes:
        nodes.add(cur)
        prev = predecessor.get(cur)
        if prev is not None:
            edges.add((prev, cur))
        cur = prev
    return frozenset(nodes), frozenset(edges)


def analyze(graph: TaskGraph, order: Sequence[int], target_id: Optional[int] = None) -> CriticalPath:
    """Earliest starts, predecessors and the critical path ending at target_id."""
    es, pred = earliest_starts(graph, order)
    nodes, edges = backtrack(pred, es, target_id)
    return CriticalPath(earliest_start=es, predecessor=pred, critical_nodes=nodes, critical_edges=edges)
