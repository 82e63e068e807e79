"""
Topological sort of a TaskGraph.
Kahn's algorithm via networkx with a min-heap ready queue: ties break on ascending task id.
"""

from typing import List

import networkx as nx

from .errors import CycleDetectedError
from .model import TaskGraph


def topological_order(graph: TaskGraph) -> List[int]:
    """
    Return every task id, prerequisites first. Raises CycleDetectedError instead of
    returning a partial order when the graph is not acyclic.
    """
    try:
        order = list(nx.lexicographical_topological_sort(graph.digraph))
    except nx.NetworkXUnfeasible:
        raise CycleDetectedError("Cycle detected in task dependency graph") from None
    if len(order) != len(graph):
        raise CycleDetectedError("Cycle detected in task dependency graph")
    return order


def is_acyclic(graph: TaskGraph) -> bool:
    return nx.is_directed_acyclic_graph(graph.digraph)
