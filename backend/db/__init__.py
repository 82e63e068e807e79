"""
Database Module
File-based task store: {DB_DIR}/tasks.json holds {version, nextId, tasks}; settings.json holds UI settings.
Every write bumps version; dependency writes carry the version they were derived from and are
rejected when the store moved on. Uses orjson for faster JSON parsing.
"""

import asyncio
import weakref
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

import aiofiles
import json_repair
import orjson
from loguru import logger

from depgraph import Task
from shared import config

DB_DIR = config.DB_DIR
TASKS_FILE = "tasks.json"
SETTINGS_FILE = "settings.json"
DEFAULT_IMAGE_CONCURRENCY = config.IMAGE_CONCURRENCY


class StaleSnapshotError(RuntimeError):
    """Raised when a write was computed from an older store version."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Task graph changed concurrently (version {expected} -> {actual}); retry")


class TaskNotFoundError(KeyError):
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Todo {task_id} not found")


# Locks are per event loop: (1) store lock guards read-modify-write of tasks.json,
# (2) dependency lock serializes validate-then-commit of edge toggles.
_store_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()
_dependency_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()


def _loop_lock(registry) -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    lock = registry.get(loop)
    if lock is None:
        lock = asyncio.Lock()
        registry[loop] = lock
    return lock


def dependency_lock() -> asyncio.Lock:
    """Hold across snapshot read -> validation -> save_dependencies."""
    return _loop_lock(_dependency_locks)


def _empty_store() -> Dict[str, Any]:
    return {"version": 0, "nextId": 1, "tasks": []}


async def _read_json(filename: str) -> Optional[Any]:
    """Read a JSON file with json_repair fallback for corrupted files. None when missing."""
    file_path = DB_DIR / filename
    try:
        async with aiofiles.open(file_path, "rb") as f:
            raw = await f.read()
    except FileNotFoundError:
        return None
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        logger.warning("Invalid JSON in {}: {}; attempting repair", file_path, e)
        return json_repair.loads(raw.decode("utf-8"))


async def _write_json(filename: str, data: Any) -> None:
    """Atomic write: write to .tmp then rename to avoid partial/corrupt files on concurrent access."""
    DB_DIR.mkdir(parents=True, exist_ok=True)
    file_path = DB_DIR / filename
    tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    content = orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8")
    async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
        await f.write(content)
    tmp_path.replace(file_path)


async def _read_store() -> Dict[str, Any]:
    data = await _read_json(TASKS_FILE)
    if not isinstance(data, dict):
        return _empty_store()
    tasks = data.get("tasks") if isinstance(data.get("tasks"), list) else []
    return {
        "version": int(data.get("version") or 0),
        "nextId": int(data.get("nextId") or (max((t.get("id", 0) for t in tasks), default=0) + 1)),
        "tasks": tasks,
    }


async def _commit(store: Dict[str, Any]) -> int:
    store["version"] = int(store.get("version") or 0) + 1
    await _write_json(TASKS_FILE, store)
    return store["version"]


def _sort_newest_first(tasks: Iterable[Dict]) -> List[Dict]:
    return sorted(tasks, key=lambda t: (t.get("createdAt") or "", t.get("id", 0)), reverse=True)


def _find(tasks: List[Dict], task_id: int) -> Optional[Dict]:
    return next((t for t in tasks if t.get("id") == task_id), None)


async def get_tasks() -> List[Dict]:
    """All tasks (read model, dependency ids included), newest first."""
    store = await _read_store()
    return _sort_newest_first(store["tasks"])


async def get_task(task_id: int) -> Optional[Dict]:
    store = await _read_store()
    return _find(store["tasks"], task_id)


async def get_snapshot() -> Tuple[int, List[Task]]:
    """(version, tasks) for the graph engine. Rows that fail to parse are skipped with a warning."""
    store = await _read_store()
    snapshot: List[Task] = []
    for row in store["tasks"]:
        try:
            snapshot.append(Task.from_dict(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed task row {}: {}", row.get("id"), e)
    return store["version"], snapshot


async def create_task(title: str, due: date) -> Dict:
    async with _loop_lock(_store_locks):
        store = await _read_store()
        task = {
            "id": store["nextId"],
            "title": title,
            "due": due.isoformat(),
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "dependencies": [],
        }
        store["tasks"].append(task)
        store["nextId"] += 1
        await _commit(store)
    logger.info("Created task {} ({})", task["id"], title)
    return task


async def delete_task(task_id: int) -> Dict:
    """Delete task_id and remove it from every other task's dependencies in the same write."""
    async with _loop_lock(_store_locks):
        store = await _read_store()
        task = _find(store["tasks"], task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        remaining = []
        detached = []
        for t in store["tasks"]:
            if t.get("id") == task_id:
                continue
            deps = list(t.get("dependencies") or [])
            if task_id in deps:
                t = {**t, "dependencies": [d for d in deps if d != task_id]}
                detached.append(t["id"])
            remaining.append(t)
        store["tasks"] = remaining
        await _commit(store)
    logger.info("Deleted task {}; detached from {}", task_id, detached)
    return task


async def save_dependencies(task_id: int, dependencies: Iterable[int], expected_version: int) -> Dict:
    """Replace task_id's dependency set. Raises StaleSnapshotError if the store changed since expected_version."""
    async with _loop_lock(_store_locks):
        store = await _read_store()
        if store["version"] != expected_version:
            raise StaleSnapshotError(expected_version, store["version"])
        task = _find(store["tasks"], task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        task["dependencies"] = sorted(set(dependencies))
        await _commit(store)
    return task


async def clear_db() -> Dict:
    """Clear DB: remove all tasks. Version and nextId keep counting so older snapshots stay stale."""
    async with _loop_lock(_store_locks):
        store = await _read_store()
        removed = len(store["tasks"])
        await _commit({"version": store["version"], "nextId": store["nextId"], "tasks": []})
    logger.info("Cleared {} tasks", removed)
    return {"success": True, "removed": removed}


async def get_settings() -> Dict:
    """Get full settings from settings.json."""
    data = await _read_json(SETTINGS_FILE)
    return data if isinstance(data, dict) else {}


async def save_settings(settings: Dict) -> Dict:
    """Save settings to settings.json. Atomic write to avoid corruption."""
    await _write_json(SETTINGS_FILE, settings or {})
    return {"success": True}


def _resolve_config(raw: Dict) -> Dict:
    """Settings on top of environment defaults."""
    cfg = {"imageConcurrency": DEFAULT_IMAGE_CONCURRENCY, "imagesEnabled": config.IMAGES_ENABLED}
    v = (raw or {}).get("imageConcurrency")
    if v is not None:
        try:
            cfg["imageConcurrency"] = max(1, int(v))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid imageConcurrency setting: {!r}", v)
    if (raw or {}).get("imagesEnabled") is not None:
        cfg["imagesEnabled"] = bool(raw["imagesEnabled"])
    return cfg


async def get_effective_config() -> Dict:
    """Effective runtime config (settings.json merged over env)."""
    return _resolve_config(await get_settings())
