"""Tasks API - list, create, delete, dependency toggle, chain, images."""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger

from db import (
    StaleSnapshotError,
    TaskNotFoundError,
    create_task,
    delete_task,
    dependency_lock,
    get_effective_config,
    get_snapshot,
    get_task,
    get_tasks,
    save_dependencies,
)
from depgraph import DependencyError, InvalidReferenceError, build_graph_view, extract_chain, toggle_dependency
from depgraph.model import parse_due
from enrichment import fetch_image_url, fetch_image_urls, titles_by_id

from .. import state as api_state
from ..schemas import DependencyToggleRequest, TaskCreateRequest

router = APIRouter()


def _parse_id(raw: str) -> Optional[int]:
    raw = (raw or "").strip()
    if not raw.isdigit():
        return None
    return int(raw)


def _invalid_id():
    return JSONResponse(status_code=400, content={"error": "Invalid ID"})


def _not_found(task_id: int):
    return JSONResponse(status_code=404, content={"error": f"Todo {task_id} not found"})


@router.get("")
async def list_tasks():
    try:
        return await get_tasks()
    except Exception:
        logger.exception("Error fetching todos")
        return JSONResponse(status_code=500, content={"error": "Error fetching todos"})


@router.post("")
async def create_task_route(body: TaskCreateRequest):
    title = body.title
    if not title or not title.strip():
        return JSONResponse(status_code=400, content={"error": "Title is required"})
    if not body.due or not body.due.strip():
        return JSONResponse(status_code=400, content={"error": "Due date is required"})
    try:
        due = parse_due(body.due)
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Due date must be an ISO date (YYYY-MM-DD)"})

    try:
        task = await create_task(title.strip(), due)
    except Exception:
        logger.exception("Error creating todo")
        return JSONResponse(status_code=500, content={"error": "Error creating todo"})
    await api_state.broadcast_tasks(await get_tasks())
    return JSONResponse(status_code=201, content=task)


# Must come before /{task_id}
@router.get("/images")
async def get_task_images():
    """Image URL per task, looked up with bounded concurrency."""
    cfg = await get_effective_config()
    if not cfg.get("imagesEnabled", True):
        return {"images": {}}
    tasks = await get_tasks()
    images = await fetch_image_urls(
        titles_by_id(tasks), concurrency=cfg["imageConcurrency"], enabled=cfg["imagesEnabled"]
    )
    return {"images": {str(k): v for k, v in images.items()}}


@router.get("/{task_id}")
async def get_task_route(task_id: str):
    tid = _parse_id(task_id)
    if tid is None:
        return _invalid_id()
    task = await get_task(tid)
    if task is None:
        return _not_found(tid)
    return task


@router.delete("/{task_id}")
async def delete_task_route(task_id: str):
    tid = _parse_id(task_id)
    if tid is None:
        return _invalid_id()
    try:
        await delete_task(tid)
    except TaskNotFoundError:
        return _not_found(tid)
    except Exception:
        logger.exception("Error deleting todo {}", tid)
        return JSONResponse(status_code=500, content={"error": "Error deleting todo"})
    await api_state.broadcast_tasks(await get_tasks())
    return {"message": "Todo deleted"}


@router.patch("/{task_id}/dependencies")
async def toggle_dependency_route(task_id: str, body: DependencyToggleRequest):
    """Toggle a dependency on or off. Turning one on is validated against cycles first."""
    tid = _parse_id(task_id)
    if tid is None:
        return _invalid_id()
    dep = body.dependency
    if isinstance(dep, bool) or not isinstance(dep, int):
        return JSONResponse(status_code=400, content={"error": "Invalid dependency ID", "reason": "InvalidReference"})

    try:
        async with dependency_lock():
            version, snapshot = await get_snapshot()
            if tid not in {t.id for t in snapshot}:
                return _not_found(tid)
            updated = toggle_dependency(snapshot, tid, dep)
            task = await save_dependencies(tid, updated, expected_version=version)
    except DependencyError as e:
        return JSONResponse(status_code=400, content=e.to_dict())
    except StaleSnapshotError as e:
        logger.warning("Dependency toggle on {} rejected: {}", tid, e)
        return JSONResponse(status_code=409, content={"error": str(e)})
    except TaskNotFoundError:
        return _not_found(tid)
    except Exception:
        logger.exception("Error updating todo {}", tid)
        return JSONResponse(status_code=500, content={"error": "Error updating todo"})

    await api_state.broadcast_tasks(await get_tasks())
    return task


@router.get("/{task_id}/chain")
async def get_dependency_chain(task_id: str):
    """Dependency chain of a task, its scheduling bound and the chain's graph view (task as target)."""
    tid = _parse_id(task_id)
    if tid is None:
        return _invalid_id()
    _, snapshot = await get_snapshot()
    try:
        result = extract_chain(snapshot, tid)
    except InvalidReferenceError:
        return _not_found(tid)
    return {
        "chain": [t.to_dict() for t in result.chain],
        "schedulingBound": result.scheduling_bound.isoformat(),
        "graph": build_graph_view(result.chain, target_id=tid),
    }


@router.get("/{task_id}/image")
async def get_task_image(task_id: str):
    tid = _parse_id(task_id)
    if tid is None:
        return _invalid_id()
    task = await get_task(tid)
    if task is None:
        return _not_found(tid)
    cfg = await get_effective_config()
    if not cfg.get("imagesEnabled", True):
        return {"url": None}
    return {"url": await fetch_image_url(task.get("title") or "", enabled=cfg["imagesEnabled"])}
