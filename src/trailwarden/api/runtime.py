"""Runtime primitives backing the Trailwarden HTTP API."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict

from trailwarden.config import Settings, get_settings
from trailwarden.domain import models as dm
from trailwarden.domain import protocol, rationing
from trailwarden.domain.consumption import requirement, total_needs, total_stored
from trailwarden.domain.enums import FlowStep
from trailwarden.domain.rules_config import DEFAULT_RULES, RulesConfig
from trailwarden.domain.session import interaction_name, require
from trailwarden.interfaces import RandomSource, SnapshotStore
from trailwarden.repository import JsonSnapshotStore
from trailwarden.utils.rng import SeededRng

logger = logging.getLogger(__name__)


class SessionService:
    """Owns the live session and writes it back after every mutation."""

    def __init__(
        self,
        store: SnapshotStore,
        *,
        log_limit: int = 200,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> None:
        self._store = store
        self.rules = rules
        self.session = store.load_session(log_limit=log_limit)
        logger.info(
            "Loaded session with %d creatures and %d storages",
            len(self.session.creatures),
            len(self.session.storages),
        )

    @contextmanager
    def mutation(self) -> Iterator[dm.Session]:
        """Yield the session and persist it if the block completes."""

        yield self.session
        self.persist()

    def persist(self) -> None:
        self._store.save_session(self.session)

    # -- views ------------------------------------------------------------------

    def overview(self) -> dict[str, object]:
        session = self.session
        return {
            "settings": asdict(session.settings),
            "hot_weather": session.hot_weather,
            "result": session.result,
            "notice": session.notice,
            "undo_available": session.undo is not None,
            "active": self.interaction_dict(),
            "supplies": self.supplies_dict(),
        }

    def interaction_dict(self) -> dict[str, object] | None:
        active = self.session.active
        if active is None:
            return None
        payload: dict[str, object] = {"kind": interaction_name(active), **asdict(active)}
        if isinstance(active, dm.FlowState) and active.step == FlowStep.DETECTION:
            payload["default_detection_pp"] = protocol.default_detection_pp(active, self.rules)
            payload["detection_threshold"] = protocol.detection_threshold(active)
        return payload

    def supplies_dict(self) -> dict[str, object]:
        session = self.session
        return {
            "needs": asdict(total_needs(session.creatures, session.hot_weather, self.rules)),
            "stored": asdict(total_stored(session.storages)),
        }

    def creatures_list(self) -> list[dict[str, object]]:
        session = self.session
        return [
            {
                **asdict(creature),
                "requirement": asdict(requirement(creature, session.hot_weather, self.rules)),
            }
            for creature in session.creatures
        ]

    def storages_list(self) -> list[dict[str, object]]:
        return [
            {
                **asdict(storage),
                "load": storage.load,
                "remaining_capacity": storage.remaining_capacity,
            }
            for storage in self.session.storages
        ]

    def rationing_dict(self) -> dict[str, object]:
        session = self.session
        state = require(session, dm.RationingState)
        totals = rationing.selection_totals(
            state, session.creatures, session.hot_weather, self.rules
        )
        return {
            "selections": {key: asdict(value) for key, value in state.selections.items()},
            "totals": asdict(totals),
            "stored": asdict(total_stored(session.storages)),
            "can_commit": rationing.can_commit(session, self.rules),
            "warnings": [asdict(warning) for warning in rationing.preview(session, self.rules)],
        }


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        rules: RulesConfig = DEFAULT_RULES,
        rng: RandomSource | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = JsonSnapshotStore(self.settings.data_dir)
        self.rules = rules
        self.rng: RandomSource = rng or SeededRng(self.settings.rng_seed)
        self.sessions = SessionService(
            self.store, log_limit=self.settings.log_limit, rules=rules
        )

    async def shutdown(self) -> None:
        self.sessions.persist()


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
