"""Shared configuration for api, db and enrichment."""

from . import config

__all__ = ["config"]
