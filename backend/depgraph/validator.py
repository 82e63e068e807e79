"""
Pre-commit validation of a single candidate edge (task_id depends on candidate_id).
Advisory only: nothing is mutated here, the caller commits the edge set.
"""

from typing import List, Set

from loguru import logger

from .errors import CycleDetectedError, SelfDependencyError
from .model import TaskIndex, as_index


def can_reach(tasks: TaskIndex, start_id: int, goal_id: int) -> bool:
    """
    True if goal_id is reachable from start_id by following dependencies
    (task -> its prerequisites). Explicit stack; ids missing from the snapshot are dead ends.
    """
    by_id = as_index(tasks)
    visited: Set[int] = set()
    stack: List[int] = [start_id]
    while stack:
        tid = stack.pop()
        if tid == goal_id:
            return True
        if tid in visited:
            continue
        visited.add(tid)
        task = by_id.get(tid)
        if task is None:
            logger.debug("Dangling dependency reference {} treated as dead end", tid)
            continue
        stack.extend(d for d in task.dependencies if d not in visited)
    return False


def would_create_cycle(tasks: TaskIndex, task_id: int, candidate_id: int) -> bool:
    if candidate_id == task_id:
        return True
    return can_reach(tasks, candidate_id, task_id)


def validate_dependency(tasks: TaskIndex, task_id: int, candidate_id: int) -> None:
    """Raise SelfDependencyError / CycleDetectedError if the edge would break acyclicity."""
    if candidate_id == task_id:
        logger.debug("Rejected self dependency on task {}", task_id)
        raise SelfDependencyError(task_id=task_id)
    if can_reach(tasks, candidate_id, task_id):
        logger.debug("Rejected {} -> {}: candidate already reaches task", task_id, candidate_id)
        raise CycleDetectedError(task_id=task_id)
