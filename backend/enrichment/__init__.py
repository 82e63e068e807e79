"""Per-task enrichment from external services."""

from .images import fetch_image_url, fetch_image_urls, titles_by_id

__all__ = ["fetch_image_url", "fetch_image_urls", "titles_by_id"]
