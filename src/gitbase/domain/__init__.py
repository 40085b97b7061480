"""Domain layer for GitBase.

Entities and services here have no dependency on the remote backend.
"""
