"""Dataclasses describing every entity a travel session works with.

The rules layer only interacts with these types.  The JSON snapshot store
validates them through pydantic, so every field carries a default that lets
older or partial snapshots load without failing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4

from .enums import (
    CreatureSize,
    FlowContext,
    FlowStep,
    ForageStep,
    Need,
    Pace,
    RangeKind,
    Side,
    StorageType,
    Terrain,
    Vision,
)
from .rules_config import DEFAULT_DAY_RANGES, DEFAULT_NIGHT_PARAMS, Interval


def new_record_id() -> str:
    """Short random identifier for creatures and storages."""

    return uuid4().hex[:9]


# --- Encounter matrix -----------------------------------------------------------


@dataclass(slots=True)
class EncounterRange:
    """Day encounter intervals of one terrain; a lower bound of 0 disables one."""

    hostile: Interval = (0, 0)
    neutral: Interval = (0, 0)
    poi: Interval = (0, 0)

    def bounds(self, kind: RangeKind) -> Interval:
        return getattr(self, kind.value)

    def set_bounds(self, kind: RangeKind, bounds: Interval) -> None:
        setattr(self, kind.value, bounds)


@dataclass(slots=True)
class NightEncounterParams:
    """Night threshold basis and per-light-hour multiplier of one terrain."""

    basis: Interval = (0, 0)
    light: int = 0


def default_day_ranges() -> dict[Terrain, EncounterRange]:
    return {
        terrain: EncounterRange(hostile=hostile, neutral=neutral, poi=poi)
        for terrain, (hostile, neutral, poi) in DEFAULT_DAY_RANGES.items()
    }


def default_night_params() -> dict[Terrain, NightEncounterParams]:
    return {
        terrain: NightEncounterParams(basis=basis, light=light)
        for terrain, (basis, light) in DEFAULT_NIGHT_PARAMS.items()
    }


@dataclass(slots=True)
class Matrix:
    """Day and night encounter tables keyed by terrain."""

    day: dict[Terrain, EncounterRange] = field(default_factory=default_day_ranges)
    night: dict[Terrain, NightEncounterParams] = field(default_factory=default_night_params)


# --- Travel settings ------------------------------------------------------------


@dataclass(slots=True)
class Watch:
    """One shift of the night watch."""

    name: str = ""
    vision: Vision = Vision.NONE
    pp: int = 12


def default_watches() -> list[Watch]:
    return [Watch(name=f"Watch {index}") for index in range(1, 4)]


@dataclass(slots=True)
class TravelSettings:
    """Situation of the party used by travel and rest rolls."""

    terrain: Terrain = Terrain.ROAD
    pace: Pace = Pace.NORMAL
    vehicle: bool = False
    watch_count: int = 3
    light_hours: int = 0
    watches: list[Watch] = field(default_factory=default_watches)


# --- Stealth and detection protocol ---------------------------------------------


@dataclass(slots=True)
class WatchPerception:
    effective_pp: int
    modifier: str


@dataclass(slots=True)
class FlowState:
    """Live instance of the stealth and detection protocol."""

    step: FlowStep
    context: FlowContext
    encounter_type: RangeKind
    roll: int
    terrain: Terrain
    vehicle: bool = False
    enemy_stealth_avg: int | None = None
    player_pp: int | None = None
    enemy_pp: int | None = None
    winner: Side | None = None
    stealth_avg: int | None = None
    affected_watch: Watch | None = None
    watch_perception: WatchPerception | None = None


# --- Provisioning ---------------------------------------------------------------


@dataclass(slots=True)
class Creature:
    """Party member or animal that eats and drinks every day."""

    id: str = field(default_factory=new_record_id)
    name: str = "New character"
    size: CreatureSize = CreatureSize.MEDIUM
    uses_feed: bool = False
    con_mod: int = 0
    days_without_food: int = 0
    exhaustion: int = 0


@dataclass(slots=True)
class Storage:
    """Container of provisions; water storages only ever hold water."""

    id: str = field(default_factory=new_record_id)
    name: str = "New storage"
    active: bool = True
    storage_type: StorageType = StorageType.FOOD_FEED
    max_capacity: float = 100.0
    food: float = 0.0
    feed: float = 0.0
    water: float = 0.0

    @property
    def load(self) -> float:
        """Quantity counted against ``max_capacity``."""

        if self.storage_type == StorageType.WATER:
            return self.water
        return self.food + self.feed

    @property
    def remaining_capacity(self) -> float:
        return max(0.0, self.max_capacity - self.load)


@dataclass(slots=True)
class ResourceTotals:
    food: float = 0.0
    feed: float = 0.0
    water: float = 0.0

    def __add__(self, other: ResourceTotals) -> ResourceTotals:
        return ResourceTotals(
            food=self.food + other.food,
            feed=self.feed + other.feed,
            water=self.water + other.water,
        )


@dataclass(slots=True)
class NeedSelection:
    """Which needs of one creature are met this cycle."""

    food: bool = True
    water: bool = True

    def is_met(self, need: Need) -> bool:
        return getattr(self, need.value)


@dataclass(slots=True)
class RationingState:
    """Open daily-consumption dialog: one selection per creature id."""

    selections: dict[str, NeedSelection] = field(default_factory=dict)


@dataclass(slots=True)
class ForageState:
    """Foraging mini-game state."""

    step: ForageStep = ForageStep.IDLE
    dc: int = 15
    modifier: int = 0
    check_result: int = 0
    food_found: float = 0
    water_found: float = 0
    mishap: bool = False
    is_ranger: bool = False
    food_storage_id: str | None = None
    water_storage_id: str | None = None


ActiveInteraction = FlowState | ForageState | RationingState


@dataclass(slots=True)
class UndoSnapshot:
    """Creatures and storages as they were before the last daily commit."""

    creatures: list[Creature]
    storages: list[Storage]


@dataclass(slots=True)
class Session:
    """Root aggregate owned by one gamemaster at a time."""

    settings: TravelSettings = field(default_factory=TravelSettings)
    matrix: Matrix = field(default_factory=Matrix)
    creatures: list[Creature] = field(default_factory=list)
    storages: list[Storage] = field(default_factory=list)
    hot_weather: bool = False
    active: ActiveInteraction | None = None
    undo: UndoSnapshot | None = None
    log: list[str] = field(default_factory=list)
    result: str = "No rolls yet."
    notice: str | None = None
    log_limit: int = 200


def default_party() -> list[Creature]:
    """Starter party of a fresh session."""

    return [
        Creature(
            id="1",
            name="Horse",
            size=CreatureSize.LARGE,
            uses_feed=True,
            con_mod=2,
        ),
        Creature(
            id="2",
            name="Adventurer",
            size=CreatureSize.MEDIUM,
            con_mod=1,
        ),
    ]


def default_storages() -> list[Storage]:
    """Starter storages of a fresh session."""

    return [
        Storage(
            id="1",
            name="Wagon (food)",
            storage_type=StorageType.FOOD_FEED,
            max_capacity=200,
            food=50,
            feed=7,
        ),
        Storage(
            id="2",
            name="Water barrel",
            storage_type=StorageType.WATER,
            max_capacity=50,
            water=20,
        ),
    ]
