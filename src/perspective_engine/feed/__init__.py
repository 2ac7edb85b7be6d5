"""Balanced feed assembly."""

from perspective_engine.feed.balanced import BalancedFeedBuilder

__all__ = ["BalancedFeedBuilder"]
