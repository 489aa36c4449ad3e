"""Travel settings, party members and storages."""

from __future__ import annotations

from typing import Any

from . import matrix as matrix_rules
from . import session as sessions
from .enums import Pace, StorageType, Terrain, Vision
from .errors import UnknownRecord, ValidationFailure
from .models import Creature, Session, Storage, TravelSettings, Watch
from .rules_config import DEFAULT_RULES, RulesConfig

# ---------------------------------------------------------------------------
# Travel settings


def normalise_watches(settings: TravelSettings, rules: RulesConfig = DEFAULT_RULES) -> None:
    """Clamp the watch count and pad or truncate the watch list to match it."""

    encounters = rules.encounters
    count = min(encounters.max_watches, max(encounters.min_watches, settings.watch_count))
    settings.watch_count = count
    del settings.watches[count:]
    for index in range(len(settings.watches) + 1, count + 1):
        settings.watches.append(
            Watch(name=f"Watch {index}", vision=Vision.NONE, pp=encounters.default_watch_pp)
        )


def set_watch_count(session: Session, count: int, rules: RulesConfig = DEFAULT_RULES) -> int:
    session.settings.watch_count = count
    normalise_watches(session.settings, rules)
    return session.settings.watch_count


def set_light_hours(session: Session, hours: int, rules: RulesConfig = DEFAULT_RULES) -> int:
    session.settings.light_hours = min(rules.encounters.max_light_hours, max(0, hours))
    return session.settings.light_hours


def update_settings(
    session: Session,
    *,
    terrain: Terrain | None = None,
    pace: Pace | None = None,
    vehicle: bool | None = None,
    watch_count: int | None = None,
    light_hours: int | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> TravelSettings:
    """Apply the given setting changes; omitted ones stay as they are."""

    settings = session.settings
    if terrain is not None:
        settings.terrain = terrain
    if pace is not None:
        settings.pace = pace
    if vehicle is not None:
        settings.vehicle = vehicle
    if watch_count is not None:
        set_watch_count(session, watch_count, rules)
    if light_hours is not None:
        set_light_hours(session, light_hours, rules)
    return settings


def update_watch(
    session: Session,
    index: int,
    *,
    name: str | None = None,
    vision: Vision | None = None,
    pp: int | None = None,
) -> Watch:
    watches = session.settings.watches
    if not 0 <= index < len(watches):
        raise UnknownRecord(f"Watch {index + 1} does not exist.")
    if pp is not None and pp <= 0:
        raise ValidationFailure(f"Passive perception must be positive, got {pp}.")
    watch = watches[index]
    if name is not None:
        watch.name = name
    if vision is not None:
        watch.vision = vision
    if pp is not None:
        watch.pp = pp
    return watch


def reset_all_settings(session: Session) -> None:
    """Restore travel settings and the matrix; creatures and storages stay."""

    session.settings = TravelSettings()
    matrix_rules.reset_all(session.matrix)
    sessions.record(session, "All settings reset.")


def set_hot_weather(session: Session, hot: bool) -> None:
    session.hot_weather = hot


# ---------------------------------------------------------------------------
# Creatures

_CREATURE_FIELDS = frozenset(
    {"name", "size", "uses_feed", "con_mod", "days_without_food", "exhaustion"}
)


def find_creature(session: Session, creature_id: str) -> Creature:
    for creature in session.creatures:
        if creature.id == creature_id:
            return creature
    raise UnknownRecord(f"Creature '{creature_id}' does not exist.")


def add_creature(session: Session, rules: RulesConfig = DEFAULT_RULES, **fields: Any) -> Creature:
    creature = Creature()
    _apply_creature_changes(creature, fields, rules)
    session.creatures.append(creature)
    return creature


def update_creature(
    session: Session, creature_id: str, rules: RulesConfig = DEFAULT_RULES, **changes: Any
) -> Creature:
    creature = find_creature(session, creature_id)
    _apply_creature_changes(creature, changes, rules)
    return creature


def remove_creature(session: Session, creature_id: str) -> None:
    find_creature(session, creature_id)
    session.creatures = [c for c in session.creatures if c.id != creature_id]


def _apply_creature_changes(
    creature: Creature, changes: dict[str, Any], rules: RulesConfig
) -> None:
    unknown = set(changes) - _CREATURE_FIELDS
    if unknown:
        raise ValidationFailure(f"Unknown creature fields: {', '.join(sorted(unknown))}.")
    exhaustion = changes.get("exhaustion")
    if exhaustion is not None and not 0 <= exhaustion <= rules.survival.max_exhaustion:
        raise ValidationFailure(
            f"Exhaustion must be between 0 and {rules.survival.max_exhaustion}, got {exhaustion}."
        )
    days = changes.get("days_without_food")
    if days is not None and days < 0:
        raise ValidationFailure(f"Days without food cannot be negative, got {days}.")
    _assign(creature, changes)


# ---------------------------------------------------------------------------
# Storages

_STORAGE_FIELDS = frozenset({"name", "active", "max_capacity", "food", "feed", "water"})
_QUANTITY_FIELDS = ("max_capacity", "food", "feed", "water")
_INCOMPATIBLE_STOCK: dict[StorageType, frozenset[str]] = {
    StorageType.FOOD_FEED: frozenset({"water"}),
    StorageType.WATER: frozenset({"food", "feed"}),
}


def find_storage(session: Session, storage_id: str) -> Storage:
    for storage in session.storages:
        if storage.id == storage_id:
            return storage
    raise UnknownRecord(f"Storage '{storage_id}' does not exist.")


def add_storage(
    session: Session, storage_type: StorageType = StorageType.FOOD_FEED, **fields: Any
) -> Storage:
    _check_storage_changes(storage_type, fields)
    storage = Storage()
    set_storage_type(storage, storage_type)
    _assign(storage, fields)
    session.storages.append(storage)
    return storage


def update_storage(session: Session, storage_id: str, **changes: Any) -> Storage:
    """Edit storage fields; a ``storage_type`` change clears incompatible stock."""

    storage = find_storage(session, storage_id)
    storage_type = changes.pop("storage_type", None) or storage.storage_type
    _check_storage_changes(storage_type, changes)
    if storage_type != storage.storage_type:
        set_storage_type(storage, storage_type)
    _assign(storage, changes)
    return storage


def set_storage_type(storage: Storage, storage_type: StorageType) -> None:
    storage.storage_type = storage_type
    if storage_type == StorageType.WATER:
        storage.food = 0.0
        storage.feed = 0.0
    else:
        storage.water = 0.0


def remove_storage(session: Session, storage_id: str) -> None:
    find_storage(session, storage_id)
    session.storages = [s for s in session.storages if s.id != storage_id]


def _check_storage_changes(storage_type: StorageType, changes: dict[str, Any]) -> None:
    unknown = set(changes) - _STORAGE_FIELDS
    if unknown:
        raise ValidationFailure(f"Unknown storage fields: {', '.join(sorted(unknown))}.")
    for name in _QUANTITY_FIELDS:
        value = changes.get(name)
        if value is not None and value < 0:
            raise ValidationFailure(f"{name} cannot be negative, got {value}.")
    for name in _INCOMPATIBLE_STOCK[storage_type]:
        if changes.get(name):
            raise ValidationFailure(f"A {storage_type.value} storage cannot hold {name}.")


def _assign(record: Creature | Storage, changes: dict[str, Any]) -> None:
    for name, value in changes.items():
        if value is not None:
            setattr(record, name, value)
