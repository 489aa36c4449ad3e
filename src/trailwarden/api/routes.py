"""HTTP routes for the Trailwarden API."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from trailwarden.api.runtime import ApiState
from trailwarden.domain import encounters, foraging, matrix, party, protocol, rationing
from trailwarden.domain import session as sessions
from trailwarden.domain.enums import (
    CreatureSize,
    ForageShortcut,
    Need,
    Pace,
    RangeKind,
    StorageType,
    Terrain,
    Vision,
)
from trailwarden.domain.errors import (
    CapacityFailure,
    ConfigurationFailure,
    InteractionConflict,
    UnknownRecord,
    ValidationFailure,
)

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


@contextmanager
def translate_errors() -> Iterator[None]:
    """Turn rules-layer exceptions into HTTP errors."""

    try:
        yield
    except ValidationFailure as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except (CapacityFailure, ConfigurationFailure, InteractionConflict) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except UnknownRecord as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# Request bodies


class SettingsUpdateRequest(BaseModel):
    terrain: Terrain | None = None
    pace: Pace | None = None
    vehicle: bool | None = None
    watch_count: int | None = None
    light_hours: int | None = None


class WatchUpdateRequest(BaseModel):
    name: str | None = None
    vision: Vision | None = None
    pp: int | None = None


class CellValueRequest(BaseModel):
    value: int = Field(ge=0)


class ChooseRequest(BaseModel):
    attempt: bool


class RollsRequest(BaseModel):
    text: str


class ContestRequest(BaseModel):
    player_pp: int | None = None
    enemy_pp: int | None = None


class DetectionRequest(BaseModel):
    detection_pp: int | None = None


class CreatureRequest(BaseModel):
    name: str | None = None
    size: CreatureSize | None = None
    uses_feed: bool | None = None
    con_mod: int | None = None
    days_without_food: int | None = None
    exhaustion: int | None = None


class StorageRequest(BaseModel):
    name: str | None = None
    active: bool | None = None
    storage_type: StorageType | None = None
    max_capacity: float | None = None
    food: float | None = None
    feed: float | None = None
    water: float | None = None


class WeatherRequest(BaseModel):
    hot: bool


class ToggleNeedRequest(BaseModel):
    creature_id: str
    need: Need


class ForageConfigRequest(BaseModel):
    dc: int
    modifier: int = 0
    is_ranger: bool = False


class ShortcutRequest(BaseModel):
    shortcut: ForageShortcut


class CheckRequest(BaseModel):
    check: int


class DestinationRequest(BaseModel):
    resource: StorageType
    storage_id: str


class DepositRequest(BaseModel):
    resource: StorageType
    storage_id: str | None = None


# ---------------------------------------------------------------------------
# Session


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    return {"status": "ok", "data_dir": str(state.settings.data_dir)}


@router.get("/session")
async def session_overview(state: ApiStateDep) -> dict[str, object]:
    return state.sessions.overview()


@router.get("/session/log")
async def session_log(state: ApiStateDep) -> dict[str, object]:
    session = state.sessions.session
    return {"log": list(session.log), "result": session.result}


@router.delete("/session/log")
async def clear_session_log(state: ApiStateDep) -> dict[str, object]:
    with state.sessions.mutation() as session:
        sessions.clear_log(session)
    return state.sessions.overview()


@router.patch("/settings")
async def update_settings(
    request: SettingsUpdateRequest, state: ApiStateDep
) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        settings = party.update_settings(
            session,
            terrain=request.terrain,
            pace=request.pace,
            vehicle=request.vehicle,
            watch_count=request.watch_count,
            light_hours=request.light_hours,
            rules=state.rules,
        )
    return asdict(settings)


@router.patch("/settings/watches/{index}")
async def update_watch(
    index: int, request: WatchUpdateRequest, state: ApiStateDep
) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        watch = party.update_watch(
            session, index, name=request.name, vision=request.vision, pp=request.pp
        )
    return asdict(watch)


@router.post("/settings/reset")
async def reset_settings(state: ApiStateDep) -> dict[str, object]:
    with state.sessions.mutation() as session:
        party.reset_all_settings(session)
    return state.sessions.overview()


# ---------------------------------------------------------------------------
# Matrix


@router.get("/matrix")
async def get_matrix(state: ApiStateDep) -> dict[str, object]:
    return asdict(state.sessions.session.matrix)


@router.put("/matrix/day/{terrain}/{kind}/{index}")
async def set_day_bound(
    terrain: Terrain,
    kind: RangeKind,
    index: int,
    request: CellValueRequest,
    state: ApiStateDep,
) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        adjusted = matrix.edit_day_bound(session, terrain, kind, index, request.value)
    return {"ranges": asdict(matrix.get_range(session.matrix, terrain)), "adjusted": adjusted}


@router.delete("/matrix/day/{terrain}/{kind}/{index}")
async def reset_day_bound(
    terrain: Terrain, kind: RangeKind, index: int, state: ApiStateDep
) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        adjusted = matrix.restore_day_bound(session, terrain, kind, index)
    return {"ranges": asdict(matrix.get_range(session.matrix, terrain)), "adjusted": adjusted}


@router.put("/matrix/night/{terrain}/basis/{index}")
async def set_night_bound(
    terrain: Terrain, index: int, request: CellValueRequest, state: ApiStateDep
) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        matrix.edit_night_cell(session, terrain, index=index, value=request.value)
    return asdict(matrix.get_night_params(session.matrix, terrain))


@router.put("/matrix/night/{terrain}/light")
async def set_night_light(
    terrain: Terrain, request: CellValueRequest, state: ApiStateDep
) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        matrix.edit_night_cell(session, terrain, value=request.value)
    return asdict(matrix.get_night_params(session.matrix, terrain))


@router.delete("/matrix/night/{terrain}/basis/{index}")
async def reset_night_bound(terrain: Terrain, index: int, state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        matrix.reset_night_cell(session.matrix, terrain, index)
    return asdict(matrix.get_night_params(session.matrix, terrain))


@router.delete("/matrix/night/{terrain}/light")
async def reset_night_light(terrain: Terrain, state: ApiStateDep) -> dict[str, object]:
    with state.sessions.mutation() as session:
        matrix.reset_night_cell(session.matrix, terrain)
    return asdict(matrix.get_night_params(session.matrix, terrain))


@router.post("/matrix/reset")
async def reset_matrix(state: ApiStateDep) -> dict[str, object]:
    with state.sessions.mutation() as session:
        matrix.reset_matrix(session)
    return asdict(session.matrix)


# ---------------------------------------------------------------------------
# Encounter rolls and stealth protocol


@router.post("/rolls/travel")
async def roll_travel(state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        outcome = encounters.roll_travel(session, state.rng, state.rules)
    return {
        "kind": outcome.kind,
        "roll": outcome.roll,
        "result": session.result,
        "active": state.sessions.interaction_dict(),
    }


@router.post("/rolls/rest")
async def roll_rest(state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        outcome = encounters.roll_rest(session, state.rng, state.rules)
    return {
        "kind": outcome.kind,
        "roll": outcome.roll,
        "threshold": outcome.threshold,
        "result": session.result,
        "active": state.sessions.interaction_dict(),
    }


def _advance_flow(state: ApiState, event: protocol.FlowEvent) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        transition = protocol.apply(session, event, state.rules)
    return {
        "outcome": transition.outcome,
        "terminal": transition.terminal,
        "result": session.result,
        "active": state.sessions.interaction_dict(),
    }


@router.post("/flow/confirm")
async def flow_confirm(state: ApiStateDep) -> dict[str, object]:
    return _advance_flow(state, protocol.Confirm())


@router.post("/flow/choose")
async def flow_choose(request: ChooseRequest, state: ApiStateDep) -> dict[str, object]:
    return _advance_flow(state, protocol.Choose(attempt=request.attempt))


@router.post("/flow/rolls")
async def flow_rolls(request: RollsRequest, state: ApiStateDep) -> dict[str, object]:
    return _advance_flow(state, protocol.SubmitRolls(text=request.text))


@router.post("/flow/contest")
async def flow_contest(request: ContestRequest, state: ApiStateDep) -> dict[str, object]:
    return _advance_flow(
        state, protocol.SubmitContest(player_pp=request.player_pp, enemy_pp=request.enemy_pp)
    )


@router.post("/flow/detection")
async def flow_detection(request: DetectionRequest, state: ApiStateDep) -> dict[str, object]:
    return _advance_flow(state, protocol.SubmitDetection(detection_pp=request.detection_pp))


@router.post("/flow/cancel")
async def flow_cancel(state: ApiStateDep) -> dict[str, object]:
    return _advance_flow(state, protocol.Cancel())


# ---------------------------------------------------------------------------
# Creatures, storages and supplies


@router.get("/creatures")
async def list_creatures(state: ApiStateDep) -> list[dict[str, object]]:
    return state.sessions.creatures_list()


@router.post("/creatures", status_code=status.HTTP_201_CREATED)
async def add_creature(request: CreatureRequest, state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        creature = party.add_creature(
            session, state.rules, **request.model_dump(exclude_none=True)
        )
    return asdict(creature)


@router.patch("/creatures/{creature_id}")
async def update_creature(
    creature_id: str, request: CreatureRequest, state: ApiStateDep
) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        creature = party.update_creature(
            session, creature_id, state.rules, **request.model_dump(exclude_none=True)
        )
    return asdict(creature)


@router.delete("/creatures/{creature_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_creature(creature_id: str, state: ApiStateDep) -> None:
    with translate_errors(), state.sessions.mutation() as session:
        party.remove_creature(session, creature_id)


@router.get("/storages")
async def list_storages(state: ApiStateDep) -> list[dict[str, object]]:
    return state.sessions.storages_list()


@router.post("/storages", status_code=status.HTTP_201_CREATED)
async def add_storage(request: StorageRequest, state: ApiStateDep) -> dict[str, object]:
    fields = request.model_dump(exclude_none=True)
    storage_type = fields.pop("storage_type", StorageType.FOOD_FEED)
    with translate_errors(), state.sessions.mutation() as session:
        storage = party.add_storage(session, storage_type, **fields)
    return asdict(storage)


@router.patch("/storages/{storage_id}")
async def update_storage(
    storage_id: str, request: StorageRequest, state: ApiStateDep
) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        storage = party.update_storage(
            session, storage_id, **request.model_dump(exclude_none=True)
        )
    return asdict(storage)


@router.delete("/storages/{storage_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_storage(storage_id: str, state: ApiStateDep) -> None:
    with translate_errors(), state.sessions.mutation() as session:
        party.remove_storage(session, storage_id)


@router.put("/weather")
async def set_weather(request: WeatherRequest, state: ApiStateDep) -> dict[str, object]:
    with state.sessions.mutation() as session:
        party.set_hot_weather(session, request.hot)
    return {"hot_weather": session.hot_weather, **state.sessions.supplies_dict()}


@router.get("/supplies")
async def supplies(state: ApiStateDep) -> dict[str, object]:
    return state.sessions.supplies_dict()


# ---------------------------------------------------------------------------
# Daily rationing


@router.post("/rationing")
async def open_rationing(state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        rationing.open_rationing(session)
    return state.sessions.rationing_dict()


@router.get("/rationing")
async def get_rationing(state: ApiStateDep) -> dict[str, object]:
    with translate_errors():
        return state.sessions.rationing_dict()


@router.post("/rationing/toggle")
async def toggle_need(request: ToggleNeedRequest, state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        rationing.toggle_need(session, request.creature_id, request.need)
    return state.sessions.rationing_dict()


@router.post("/rationing/commit")
async def commit_rationing(state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        notice = rationing.commit(session, state.rules)
    return {
        "notice": notice,
        "creatures": state.sessions.creatures_list(),
        "storages": state.sessions.storages_list(),
    }


@router.post("/rationing/cancel")
async def cancel_rationing(state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        rationing.cancel(session)
    return state.sessions.overview()


@router.post("/rationing/undo")
async def undo_rationing(state: ApiStateDep) -> dict[str, object]:
    with state.sessions.mutation() as session:
        undone = rationing.undo(session)
    return {
        "undone": undone,
        "creatures": state.sessions.creatures_list(),
        "storages": state.sessions.storages_list(),
    }


# ---------------------------------------------------------------------------
# Foraging


@router.post("/foraging")
async def start_foraging(state: ApiStateDep) -> dict[str, object] | None:
    with translate_errors(), state.sessions.mutation() as session:
        foraging.start_foraging(session, state.rules)
    return state.sessions.interaction_dict()


@router.post("/foraging/config")
async def configure_foraging(
    request: ForageConfigRequest, state: ApiStateDep
) -> dict[str, object] | None:
    with translate_errors(), state.sessions.mutation() as session:
        foraging.configure(session, request.dc, request.modifier, request.is_ranger, state.rules)
    return state.sessions.interaction_dict()


@router.post("/foraging/back")
async def foraging_back(state: ApiStateDep) -> dict[str, object] | None:
    with translate_errors(), state.sessions.mutation() as session:
        foraging.back_to_config(session)
    return state.sessions.interaction_dict()


@router.post("/foraging/shortcut")
async def foraging_shortcut(
    request: ShortcutRequest, state: ApiStateDep
) -> dict[str, object] | None:
    with translate_errors(), state.sessions.mutation() as session:
        foraging.use_shortcut(session, request.shortcut, state.rules)
    return state.sessions.interaction_dict()


@router.post("/foraging/check")
async def foraging_check(request: CheckRequest, state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        outcome = foraging.submit_check(session, request.check, state.rng, state.rules)
    return {**asdict(outcome), "active": state.sessions.interaction_dict()}


@router.post("/foraging/destination")
async def foraging_destination(
    request: DestinationRequest, state: ApiStateDep
) -> dict[str, object] | None:
    with translate_errors(), state.sessions.mutation() as session:
        foraging.select_destination(session, request.resource, request.storage_id)
    return state.sessions.interaction_dict()


@router.post("/foraging/deposit")
async def foraging_deposit(request: DepositRequest, state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        deposited = foraging.deposit(session, request.resource, request.storage_id)
    return {**asdict(deposited), "active": state.sessions.interaction_dict()}


@router.post("/foraging/discard")
async def foraging_discard(state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        foraging.discard_remaining(session)
    return state.sessions.overview()


@router.post("/foraging/close")
async def foraging_close(state: ApiStateDep) -> dict[str, object]:
    with translate_errors(), state.sessions.mutation() as session:
        foraging.close(session)
    return state.sessions.overview()
