"""In-memory caches shared across the process."""

from .guide_cache import GuideCache, guide_cache

__all__ = ["GuideCache", "guide_cache"]
