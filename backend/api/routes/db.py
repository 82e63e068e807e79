"""DB API routes."""

from fastapi import APIRouter

from db import clear_db, get_tasks

from .. import state as api_state

router = APIRouter()


@router.post("/clear")
async def clear():
    """Clear DB: remove all tasks."""
    result = await clear_db()
    await api_state.broadcast_tasks(await get_tasks())
    return result
