"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, object storage,
Redis, task broker). Provides adapters and clients for infrastructure
dependencies.
"""
