"""
Shared API state - Socket.IO server for change notifications.
Initialized by main.py after creating app and services.
"""

from typing import Any, List, Dict

from loguru import logger

# Set by main.py
sio: Any = None


def init_api_state(sio_instance) -> None:
    global sio
    sio = sio_instance


async def broadcast_tasks(tasks: List[Dict]) -> None:
    """Push the current task list to connected clients after a mutation."""
    if sio is None:
        return
    logger.debug("Broadcasting tasks-update ({} tasks)", len(tasks))
    await sio.emit("tasks-update", {"tasks": tasks})
