"""Snapshot Store Protocol Interface.

Persistence of the four session snapshots (settings, matrix, creatures,
storages) is injected through this protocol.
"""

from typing import Protocol

from trailwarden.domain.models import Session


class SnapshotStore(Protocol):
    """Protocol for loading and saving a travel session."""

    def load_session(self, *, log_limit: int = 200) -> Session:
        """Build a session from the stored snapshots.

        Missing or unreadable snapshots fall back to defaults; loading never
        fails because of stored data.
        """
        ...

    def save_session(self, session: Session) -> None:
        """Write the settings, matrix, creature and storage snapshots."""
        ...
