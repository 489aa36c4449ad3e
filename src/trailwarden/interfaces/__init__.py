"""Protocol-based interfaces for Trailwarden collaborators.

Rules functions depend on these protocols rather than concrete classes, so
deterministic fakes can be injected in tests.
"""

from trailwarden.interfaces.random_source import RandomSource
from trailwarden.interfaces.snapshot_store import SnapshotStore

__all__ = [
    "RandomSource",
    "SnapshotStore",
]
