"""API route modules."""

from fastapi import FastAPI

from . import db, graph, settings, tasks
from ..state import init_api_state


def register_routes(app: FastAPI, sio) -> None:
    """Register all API routers. Call after app and sio are created."""
    init_api_state(sio)

    app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
    app.include_router(graph.router, prefix="/api/graph", tags=["graph"])
    app.include_router(db.router, prefix="/api/db", tags=["db"])
    app.include_router(settings.router, prefix="/api/settings", tags=["settings"])
