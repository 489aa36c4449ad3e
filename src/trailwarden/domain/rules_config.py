"""Declarative rule configuration for the encounter and provisioning rules."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import CreatureSize, ForageShortcut, Terrain

Interval = tuple[int, int]


@dataclass(frozen=True, slots=True)
class ConsumptionRate:
    """Daily intake of one creature: food in lb, water in gal, feed in units."""

    food: float
    water: float
    feed: float


# Large creatures anchor the table at one feed unit per day; each size step
# scales by four, except Tiny which sits at 1/16 of Large.
CONSUMPTION_RATES: dict[CreatureSize, ConsumptionRate] = {
    CreatureSize.TINY: ConsumptionRate(food=0.25, water=0.25, feed=0.06),
    CreatureSize.SMALL: ConsumptionRate(food=1, water=1, feed=0.25),
    CreatureSize.MEDIUM: ConsumptionRate(food=1, water=1, feed=0.25),
    CreatureSize.LARGE: ConsumptionRate(food=4, water=4, feed=1.0),
    CreatureSize.HUGE: ConsumptionRate(food=16, water=16, feed=4.0),
    CreatureSize.GARGANTUAN: ConsumptionRate(food=64, water=64, feed=16.0),
}

# hostile, neutral, poi
DEFAULT_DAY_RANGES: dict[Terrain, tuple[Interval, Interval, Interval]] = {
    Terrain.ROAD: ((1, 3), (4, 6), (7, 8)),
    Terrain.WILDERNESS: ((1, 5), (6, 8), (9, 10)),
    Terrain.UNKNOWN: ((1, 5), (6, 8), (9, 22)),
    Terrain.ENEMY: ((1, 10), (11, 12), (13, 15)),
    Terrain.WANTED: ((1, 12), (13, 14), (15, 17)),
    Terrain.CUSTOM: ((0, 0), (0, 0), (0, 0)),
}

# basis interval, light multiplier
DEFAULT_NIGHT_PARAMS: dict[Terrain, tuple[Interval, int]] = {
    Terrain.ROAD: ((1, 1), 1),
    Terrain.WILDERNESS: ((1, 3), 1),
    Terrain.UNKNOWN: ((1, 3), 1),
    Terrain.ENEMY: ((1, 6), 1),
    Terrain.WANTED: ((1, 10), 2),
    Terrain.CUSTOM: ((0, 0), 0),
}


@dataclass(frozen=True, slots=True)
class EncounterRules:
    """Dice and watch constants for travel and rest rolls."""

    encounter_die: int = 100
    min_watches: int = 1
    max_watches: int = 8
    max_light_hours: int = 8
    default_watch_pp: int = 12
    default_detection_pp: int = 10


@dataclass(frozen=True, slots=True)
class SurvivalRules:
    """Hunger, thirst and exhaustion constants."""

    base_days_without_food: int = 3
    min_days_without_food: int = 1
    max_exhaustion: int = 6
    hot_weather_water_multiplier: int = 2
    thirst_gain: int = 1
    thirst_gain_when_exhausted: int = 2
    supply_tolerance: float = 0.001
    quantity_decimals: int = 2


@dataclass(frozen=True, slots=True)
class ForagingRules:
    """Foraging check constants."""

    dc_options: tuple[int, ...] = (10, 15, 20)
    default_dc: int = 15
    yield_die: int = 6
    mishap_margin: int = 5
    ranger_multiplier: int = 2
    automatic_check: int = 999
    shortcut_yields: dict[ForageShortcut, tuple[float, float]] = field(
        default_factory=lambda: {
            ForageShortcut.WANDERER: (6, 6),
            ForageShortcut.CREATE_FOOD_AND_WATER: (45, 30),
        }
    )


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    encounters: EncounterRules = EncounterRules()
    survival: SurvivalRules = SurvivalRules()
    foraging: ForagingRules = ForagingRules()


DEFAULT_RULES = RulesConfig()
