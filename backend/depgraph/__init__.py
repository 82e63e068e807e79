"""
Task dependency graph engine.
Pure functions over a task snapshot: cycle validation, topological order,
critical path / earliest start, dependency chain extraction.
"""

from .chain import DependencyChain
from .critical_path import CriticalPath, analyze
from .engine import Schedule, compute_schedule, extract_chain, toggle_dependency
from .errors import (
    CycleDetectedError,
    DependencyError,
    GraphInvalidError,
    InvalidReferenceError,
    Reason,
    SelfDependencyError,
)
from .model import Task, TaskGraph, build_graph
from .topo import topological_order
from .validator import validate_dependency, would_create_cycle
from .view import build_graph_view

__all__ = [
    "CriticalPath",
    "CycleDetectedError",
    "DependencyChain",
    "DependencyError",
    "GraphInvalidError",
    "InvalidReferenceError",
    "Reason",
    "Schedule",
    "SelfDependencyError",
    "Task",
    "TaskGraph",
    "analyze",
    "build_graph",
    "build_graph_view",
    "compute_schedule",
    "extract_chain",
    "toggle_dependency",
    "topological_order",
    "validate_dependency",
    "would_create_cycle",
]
