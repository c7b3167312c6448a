"""Utils module -- config, logging, URL canonicalization, concurrency."""

from scout.utils.config import Settings, settings
from scout.utils.logger import get_logger
from scout.utils.urls import normalize_url

__all__ = ["Settings", "settings", "get_logger", "normalize_url"]
