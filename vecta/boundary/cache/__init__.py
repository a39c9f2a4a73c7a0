"""
Redis-backed counters.

Exports:
  - UsageCounter: Daily per-session conversion counter
  - build_usage_counter: Factory from settings
"""

from vecta.boundary.cache.usage_counter import UsageCounter, build_usage_counter

__all__ = ["UsageCounter", "build_usage_counter"]
