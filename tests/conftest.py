from datetime import date
from typing import Iterable, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import db
from depgraph import Task
from shared import config


def make_task(task_id: int, deps: Iterable[int] = (), due: Optional[date] = None, title: Optional[str] = None) -> Task:
    return Task(
        id=task_id,
        title=title or f"Task {task_id}",
        due=due or date(2025, 1, task_id if task_id <= 28 else 28),
        dependencies=frozenset(deps),
    )


@pytest.fixture
def design_build_test():
    """1:Design, 2:Build (depends on 1), 3:Test (depends on 2)."""
    return [
        make_task(1, title="Design", due=date(2025, 3, 1)),
        make_task(2, [1], title="Build", due=date(2025, 3, 10)),
        make_task(3, [2], title="Test", due=date(2025, 3, 20)),
    ]


@pytest.fixture(autouse=True)
def store_dir(tmp_path, monkeypatch):
    """Every test gets an empty data directory; image lookups are off unless a test enables them."""
    monkeypatch.setattr(db, "DB_DIR", tmp_path)
    monkeypatch.setattr(config, "IMAGES_ENABLED", False)
    return tmp_path


@pytest_asyncio.fixture
async def client():
    from main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
