"""
Typed rejections raised by the dependency graph engine.
Routes turn these into {"error": message, "reason": code} responses.
"""

from enum import Enum
from typing import Optional


class Reason(str, Enum):
    INVALID_REFERENCE = "InvalidReference"
    SELF_DEPENDENCY = "SelfDependency"
    CYCLE_DETECTED = "CycleDetected"
    GRAPH_INVALID = "GraphInvalid"


class DependencyError(ValueError):
    """Base class for engine rejections. `reason` is the machine-readable code."""

    reason: Reason = Reason.GRAPH_INVALID
    default_message = "Invalid dependency graph"

    def __init__(self, message: Optional[str] = None, task_id: Optional[int] = None):
        self.message = message or self.default_message
        self.task_id = task_id
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "reason": self.reason.value}


class InvalidReferenceError(DependencyError):
    reason = Reason.INVALID_REFERENCE
    default_message = "Invalid: Task not found"


class SelfDependencyError(DependencyError):
    reason = Reason.SELF_DEPENDENCY
    default_message = "Invalid: A task can't be dependent on itself"


class CycleDetectedError(DependencyError):
    reason = Reason.CYCLE_DETECTED
    default_message = "Invalid: Adding this task would create a circular dependency."


class GraphInvalidError(DependencyError):
    reason = Reason.GRAPH_INVALID
    default_message = "Cycle detected or graph invalid — cannot compute critical path."
