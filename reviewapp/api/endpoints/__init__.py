"""Expose API endpoint routers."""

from reviewapp.api.endpoints import reviews, statistics

__all__ = ["reviews", "statistics"]
