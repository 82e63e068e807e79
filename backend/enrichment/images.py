"""
Illustrative image lookup per task title (Pexels search API).
One URL or None per title; fan-out bounded by a semaphore, transient errors retried with tenacity.
Set TASKGRAPH_IMAGES_ENABLED=0 (or imagesEnabled=false in settings) to disable; no lookups without PEXELS_API_KEY.
"""

import asyncio
from typing import Dict, Iterable, Optional

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shared import config

_USER_AGENT = "TaskGraph/1.0"


def create_client() -> httpx.AsyncClient:
    headers = {"User-Agent": _USER_AGENT}
    if config.PEXELS_API_KEY:
        headers["Authorization"] = config.PEXELS_API_KEY
    return httpx.AsyncClient(timeout=config.IMAGE_TIMEOUT, headers=headers, follow_redirects=True)


def _first_medium_url(data: object) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    photos = data.get("photos") or []
    if not photos or not isinstance(photos[0], dict):
        return None
    src = photos[0].get("src") or {}
    url = src.get("medium") if isinstance(src, dict) else None
    return url if isinstance(url, str) and url else None


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
async def _search(client: httpx.AsyncClient, query: str) -> Optional[str]:
    resp = await client.get(config.PEXELS_SEARCH_URL, params={"query": query, "per_page": 1})
    resp.raise_for_status()
    return _first_medium_url(resp.json())


def _lookups_allowed(enabled: Optional[bool]) -> bool:
    if not (config.IMAGES_ENABLED if enabled is None else enabled):
        return False
    if not config.PEXELS_API_KEY:
        logger.warning("Image lookup skipped: PEXELS_API_KEY is not set")
        return False
    return True


async def fetch_image_url(
    title: str,
    client: Optional[httpx.AsyncClient] = None,
    enabled: Optional[bool] = None,
) -> Optional[str]:
    """
    Return the first matching image URL for title, or None (disabled, no API key, no match, or lookup failed).
    enabled overrides TASKGRAPH_IMAGES_ENABLED (callers pass the effective settings value).
    """
    if not _lookups_allowed(enabled):
        return None
    if not title or not isinstance(title, str) or not title.strip():
        return None
    query = title.strip()[:200]

    if client is None:
        async with create_client() as own_client:
            return await fetch_image_url(query, own_client, enabled=True)

    try:
        return await _search(client, query)
    except httpx.HTTPStatusError as e:
        logger.warning("Image lookup for {!r} failed: HTTP {}", query, e.response.status_code)
    except (httpx.RequestError, ValueError) as e:
        logger.warning("Image lookup for {!r} failed: {}", query, e)
    return None


async def fetch_image_urls(
    titles: Dict[int, str],
    concurrency: int = config.IMAGE_CONCURRENCY,
    client: Optional[httpx.AsyncClient] = None,
    enabled: Optional[bool] = None,
) -> Dict[int, Optional[str]]:
    """Look up images for {task_id: title} with at most `concurrency` requests in flight."""
    if not titles:
        return {}
    if not _lookups_allowed(enabled):
        return {task_id: None for task_id in titles}
    if client is None:
        async with create_client() as own_client:
            return await fetch_image_urls(titles, concurrency, own_client, enabled=True)

    sem = asyncio.Semaphore(max(1, int(concurrency)))

    async def one(task_id: int, title: str):
        async with sem:
            return task_id, await fetch_image_url(title, client, enabled=True)

    results = await asyncio.gather(*(one(tid, title) for tid, title in titles.items()))
    return dict(results)


def titles_by_id(tasks: Iterable[Dict]) -> Dict[int, str]:
    return {t["id"]: t.get("title") or "" for t in tasks if t.get("id") is not None}
