"""Graph API - topological order and critical path over the whole task store."""

from typing import Optional

from fastapi import APIRouter, Query

from db import get_snapshot
from depgraph import build_graph_view

router = APIRouter()


@router.get("/schedule")
async def get_schedule(target_id: Optional[int] = Query(None, alias="targetId")):
    """
    Schedule (order, earliest starts, predecessors, critical path toward targetId) and graph view.
    A store that is not acyclic yields 200 with valid=false and schedule=null rather than an error.
    """
    _, snapshot = await get_snapshot()
    return build_graph_view(snapshot, target_id=target_id)
