"""Foraging mini-game: skill check, yields and deposits into storages."""

from __future__ import annotations

from dataclasses import dataclass

from trailwarden.interfaces.random_source import RandomSource

from . import session as sessions
from .enums import ForageShortcut, ForageStep, Pace, StorageType
from .errors import CapacityFailure, ConfigurationFailure, InteractionConflict, UnknownRecord
from .errors import ValidationFailure
from .models import ForageState, Session, Storage
from .rules_config import DEFAULT_RULES, RulesConfig

_SHORTCUT_LOGS: dict[ForageShortcut, str] = {
    ForageShortcut.WANDERER: (
        'Foraging: "Wanderer" feature used. '
        "Found {food} lb food, {water} gal water automatically."
    ),
    ForageShortcut.CREATE_FOOD_AND_WATER: (
        'Spell "Create Food and Water" cast. Created {food} lb food, {water} gal water.'
    ),
}


@dataclass(slots=True)
class ForageYield:
    """Outcome of a foraging check."""

    food: float
    water: float
    mishap: bool

    @property
    def found_anything(self) -> bool:
        return self.food > 0 or self.water > 0


@dataclass(slots=True)
class DepositResult:
    storage_id: str
    deposited: float
    remaining: float


# ---------------------------------------------------------------------------
# Pure rules


def evaluate(
    check: int,
    dc: int,
    modifier: int,
    is_ranger: bool,
    rng: RandomSource,
    rules: RulesConfig = DEFAULT_RULES,
) -> ForageYield:
    """Resolve a survival check against ``dc``.

    Success rolls food and water independently; a check at least
    ``mishap_margin`` below the DC is a mishap.
    """

    foraging = rules.foraging
    if check >= dc:
        multiplier = foraging.ranger_multiplier if is_ranger else 1
        food = max(0, rng.roll(foraging.yield_die) + modifier) * multiplier
        water = max(0, rng.roll(foraging.yield_die) + modifier) * multiplier
        return ForageYield(food=food, water=water, mishap=False)
    if check <= dc - foraging.mishap_margin:
        return ForageYield(food=0, water=0, mishap=True)
    return ForageYield(food=0, water=0, mishap=False)


def eligible_storages(storages: list[Storage], storage_type: StorageType) -> list[Storage]:
    """Active storages of ``storage_type`` that still have room."""

    return [
        storage
        for storage in storages
        if storage.active
        and storage.storage_type == storage_type
        and storage.load < storage.max_capacity
    ]


# ---------------------------------------------------------------------------
# Step operations


def _require_step(session: Session, step: ForageStep) -> ForageState:
    state = sessions.require(session, ForageState)
    if state.step != step:
        raise InteractionConflict(
            f"Foraging is at step '{state.step.value}', expected '{step.value}'."
        )
    return state


def start_foraging(session: Session, rules: RulesConfig = DEFAULT_RULES) -> ForageState:
    if session.settings.pace == Pace.FAST:
        raise ConfigurationFailure("Foraging is not possible at a fast travel pace.")
    state = ForageState(step=ForageStep.CONFIG, dc=rules.foraging.default_dc)
    return sessions.begin(session, state)


def configure(
    session: Session,
    dc: int,
    modifier: int = 0,
    is_ranger: bool = False,
    rules: RulesConfig = DEFAULT_RULES,
) -> ForageState:
    """Fix DC, modifier and ranger flag and move on to the check input."""

    state = _require_step(session, ForageStep.CONFIG)
    if dc not in rules.foraging.dc_options:
        options = ", ".join(str(option) for option in rules.foraging.dc_options)
        raise ValidationFailure(f"DC must be one of {options}, got {dc}.")
    state.dc = dc
    state.modifier = modifier
    state.is_ranger = is_ranger
    state.step = ForageStep.INPUT
    return state


def back_to_config(session: Session) -> ForageState:
    state = _require_step(session, ForageStep.INPUT)
    state.step = ForageStep.CONFIG
    return state


def use_shortcut(
    session: Session, shortcut: ForageShortcut, rules: RulesConfig = DEFAULT_RULES
) -> ForageState:
    """Skip the check with a fixed automatic yield."""

    state = _require_step(session, ForageStep.CONFIG)
    food, water = rules.foraging.shortcut_yields[shortcut]
    _enter_result(
        session,
        state,
        ForageYield(food=food, water=water, mishap=False),
        check=rules.foraging.automatic_check,
    )
    sessions.record(session, _SHORTCUT_LOGS[shortcut].format(food=_fmt(food), water=_fmt(water)))
    return state


def submit_check(
    session: Session, check: int, rng: RandomSource, rules: RulesConfig = DEFAULT_RULES
) -> ForageYield:
    state = _require_step(session, ForageStep.INPUT)
    outcome = evaluate(check, state.dc, state.modifier, state.is_ranger, rng, rules)
    _enter_result(session, state, outcome, check=check)

    message = f"Foraging: DC {state.dc}, check {check}."
    if outcome.mishap:
        message += " MISHAP!"
    elif check >= state.dc:
        message += f" Success: {_fmt(outcome.food)} lb food, {_fmt(outcome.water)} gal water"
        if state.is_ranger:
            message += " (x2 ranger)"
    else:
        message += " Nothing found."
    sessions.record(session, message)
    return outcome


def is_automatic(state: ForageState, rules: RulesConfig = DEFAULT_RULES) -> bool:
    return state.check_result == rules.foraging.automatic_check


def select_destination(session: Session, resource: StorageType, storage_id: str) -> ForageState:
    """Choose where ``resource`` will be deposited."""

    state = _require_step(session, ForageStep.RESULT)
    storage = _find_storage(session, storage_id)
    eligible = eligible_storages(session.storages, resource)
    if all(candidate.id != storage.id for candidate in eligible):
        raise CapacityFailure(f"Storage '{storage.name}' cannot take more {_NOUNS[resource]}.")
    setattr(state, _DESTINATION_FIELDS[resource], storage.id)
    return state


def deposit(
    session: Session, resource: StorageType, storage_id: str | None = None
) -> DepositResult:
    """Move found ``resource`` into a storage, capped at its free space.

    Without ``storage_id`` the selected destination is used.
    """

    state = _require_step(session, ForageStep.RESULT)
    _auto_select(session, state)
    if storage_id is None:
        storage_id = getattr(state, _DESTINATION_FIELDS[resource])
    if storage_id is None:
        raise CapacityFailure(f"No storage available for {_NOUNS[resource]}.")
    storage = _find_storage(session, storage_id)
    if not storage.active or storage.storage_type != resource:
        raise CapacityFailure(f"Storage '{storage.name}' cannot hold {_NOUNS[resource]}.")

    found = state.water_found if resource == StorageType.WATER else state.food_found
    if found <= 0:
        raise ValidationFailure(f"No {_NOUNS[resource]} left to deposit.")
    space = storage.max_capacity - storage.load
    amount = min(space, found)
    if amount <= 0:
        raise CapacityFailure(f"Storage '{storage.name}' is full.")

    if resource == StorageType.WATER:
        storage.water += amount
        state.water_found -= amount
        remaining = state.water_found
        unit = "gal water"
    else:
        storage.food += amount
        state.food_found -= amount
        remaining = state.food_found
        unit = "lb food"
    sessions.record(session, f"Stored in {storage.name}: {_fmt(amount)} {unit}.")
    _auto_select(session, state)
    return DepositResult(storage_id=storage.id, deposited=amount, remaining=remaining)


def discard_remaining(session: Session) -> None:
    """Leave whatever was not deposited behind and end foraging."""

    state = _require_step(session, ForageStep.RESULT)
    sessions.record(
        session,
        f"Remaining resources discarded: {_fmt(state.food_found)} lb food, "
        f"{_fmt(state.water_found)} gal water.",
    )
    sessions.end(session)


def close(session: Session) -> None:
    """End foraging from any step; pending finds must be discarded explicitly."""

    state = sessions.require(session, ForageState)
    pending = ForageYield(food=state.food_found, water=state.water_found, mishap=state.mishap)
    if state.step == ForageStep.RESULT and pending.found_anything:
        raise InteractionConflict("Deposit or discard the remaining finds first.")
    sessions.end(session)


# ---------------------------------------------------------------------------
# Helpers

_NOUNS: dict[StorageType, str] = {
    StorageType.FOOD_FEED: "food",
    StorageType.WATER: "water",
}

_DESTINATION_FIELDS: dict[StorageType, str] = {
    StorageType.FOOD_FEED: "food_storage_id",
    StorageType.WATER: "water_storage_id",
}


def _enter_result(
    session: Session, state: ForageState, outcome: ForageYield, *, check: int
) -> None:
    state.step = ForageStep.RESULT
    state.check_result = check
    state.food_found = outcome.food
    state.water_found = outcome.water
    state.mishap = outcome.mishap
    _auto_select(session, state)


def _auto_select(session: Session, state: ForageState) -> None:
    """Point each destination at the first eligible storage, keeping a valid choice."""

    for resource, field_name in _DESTINATION_FIELDS.items():
        eligible = eligible_storages(session.storages, resource)
        current = getattr(state, field_name)
        if current is not None and any(storage.id == current for storage in eligible):
            continue
        setattr(state, field_name, eligible[0].id if eligible else None)


def _find_storage(session: Session, storage_id: str) -> Storage:
    for storage in session.storages:
        if storage.id == storage_id:
            return storage
    raise UnknownRecord(f"Storage '{storage_id}' does not exist.")


def _fmt(value: float) -> str:
    return f"{value:g}"
