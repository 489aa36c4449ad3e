"""Persistence adapters for travel sessions."""

from trailwarden.repository.json_store import JsonSnapshotStore

__all__ = ["JsonSnapshotStore"]
