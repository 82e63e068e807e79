"""
Environment configuration. Read once at import; tests monkeypatch module attributes.
"""

import os
from pathlib import Path
from typing import Optional


def _str_env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.environ.get(name)
    return v if v not in (None, "") else default


def _int_env(name: str, default: int) -> int:
    v = os.environ.get(name)
    return int(v) if v is not None else default


def _float_env(name: str, default: float) -> float:
    v = os.environ.get(name)
    return float(v) if v is not None else default


def _bool_env(name: str, default: bool) -> bool:
    v = os.environ.get(name)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "on")


DB_DIR = Path(_str_env("TASKGRAPH_DB_DIR") or Path(__file__).parent.parent / "db")
LOG_LEVEL = _str_env("TASKGRAPH_LOG_LEVEL", "INFO")

IMAGES_ENABLED = _bool_env("TASKGRAPH_IMAGES_ENABLED", True)
PEXELS_API_KEY = _str_env("PEXELS_API_KEY")
PEXELS_SEARCH_URL = _str_env("TASKGRAPH_PEXELS_URL", "https://api.pexels.com/v1/search")
IMAGE_CONCURRENCY = max(1, _int_env("TASKGRAPH_IMAGE_CONCURRENCY", 4))
IMAGE_TIMEOUT = _float_env("TASKGRAPH_IMAGE_TIMEOUT", 10.0)
