"""
Dependency chain of a root task: every task reachable through dependencies,
prerequisites before dependents, root last.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterator, List, Set, Tuple

from loguru import logger

from .errors import InvalidReferenceError
from .model import Task, TaskIndex, as_index


@dataclass(frozen=True)
class DependencyChain:
    chain: Tuple[Task, ...]
    scheduling_bound: date

    @property
    def root(self) -> Task:
        return self.chain[-1]

    @property
    def ids(self) -> List[int]:
        return [t.id for t in self.chain]


def _post_order(by_id: Dict[int, Task], root: Task) -> List[Task]:
    """Iterative post-order DFS. Prerequisites are visited in ascending id order."""
    visited: Set[int] = {root.id}
    out: List[Task] = []
    stack: List[Tuple[Task, Iterator[int]]] = [(root, iter(sorted(root.dependencies)))]

    while stack:
        task, pending = stack[-1]
        for dep_id in pending:
            if dep_id in visited:
                continue
            visited.add(dep_id)
            dep = by_id.get(dep_id)
            if dep is None:
                logger.debug("Task {} references missing task {}, skipped", task.id, dep_id)
                continue
            stack.append((dep, iter(sorted(dep.dependencies))))
            break
        else:
            stack.pop()
            out.append(task)

    return out


def extract_chain(tasks: TaskIndex, root_id: int) -> DependencyChain:
    """
    Chain ending at root_id plus its scheduling bound: the latest due date among the
    root's (transitive) prerequisites, or the root's own due date when it has none.
    """
    by_id = as_index(tasks)
    root = by_id.get(root_id)
    if root is None:
        raise InvalidReferenceError(f"Invalid: Task {root_id} not found", task_id=root_id)

    chain = _post_order(by_id, root)
    prereq_dues = [t.due for t in chain if t.id != root.id]
    bound = max(prereq_dues) if prereq_dues else root.due
    return DependencyChain(chain=tuple(chain), scheduling_bound=bound)
