"""Session bookkeeping: the single active interaction and the event log."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TypeVar

from .errors import InteractionConflict
from .models import ActiveInteraction, FlowState, ForageState, RationingState, Session

logger = logging.getLogger(__name__)

_INTERACTION_NAMES: dict[type, str] = {
    FlowState: "encounter resolution",
    ForageState: "foraging",
    RationingState: "daily rationing",
}

T = TypeVar("T", FlowState, ForageState, RationingState)


def record(session: Session, message: str) -> None:
    """Prepend a timestamped line to the session log."""

    logger.info(message)
    stamp = datetime.now().strftime("%H:%M:%S")
    session.log.insert(0, f"{stamp} - {message}")
    del session.log[session.log_limit :]


def clear_log(session: Session) -> None:
    session.log.clear()
    session.result = "Log cleared."


def interaction_name(interaction: ActiveInteraction | None) -> str | None:
    if interaction is None:
        return None
    return _INTERACTION_NAMES[type(interaction)]


def ensure_idle(session: Session) -> None:
    """Raise :class:`InteractionConflict` while any interaction is open."""

    if session.active is not None:
        raise InteractionConflict(
            f"Finish or cancel the open {interaction_name(session.active)} first."
        )


def begin(session: Session, interaction: T) -> T:
    """Make ``interaction`` the active one, refusing if another is open."""

    ensure_idle(session)
    session.active = interaction
    session.notice = None
    return interaction


def require(session: Session, kind: type[T]) -> T:
    """Return the active interaction if it has the expected kind."""

    if not isinstance(session.active, kind):
        raise InteractionConflict(f"No {_INTERACTION_NAMES[kind]} is open.")
    return session.active


def end(session: Session) -> None:
    session.active = None
