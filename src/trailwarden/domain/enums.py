"""Enumerations shared by the encounter and provisioning rules."""

from __future__ import annotations

from enum import StrEnum


class Terrain(StrEnum):
    """Travel situation selecting a row of the encounter matrix."""

    ROAD = "road"
    WILDERNESS = "wilderness"
    UNKNOWN = "unknown"
    ENEMY = "enemy"
    WANTED = "wanted"
    CUSTOM = "custom"

    @property
    def area(self) -> str:
        """Matrix area label shown to the gamemaster."""

        return TERRAIN_AREAS[self]


TERRAIN_AREAS: dict[Terrain, str] = {
    Terrain.ROAD: "Road",
    Terrain.WILDERNESS: "Wilderness",
    Terrain.UNKNOWN: "Unknown territory",
    Terrain.ENEMY: "Enemy territory",
    Terrain.WANTED: "Wanted",
    Terrain.CUSTOM: "Custom",
}


class Pace(StrEnum):
    """Travel pace of the party."""

    NORMAL = "normal"
    FAST = "fast"
    SLOW = "slow"


class Vision(StrEnum):
    """Sight available to a watch in the dark."""

    NONE = "none"
    DARKVISION = "darkvision"
    MAGIC = "magic"


class RangeKind(StrEnum):
    """Day encounter categories, in classification order."""

    HOSTILE = "hostile"
    NEUTRAL = "neutral"
    POI = "poi"


class EncounterKind(StrEnum):
    """Outcome categories of a single travel or rest roll."""

    NONE = "none"
    HOSTILE = "hostile"
    NEUTRAL = "neutral"
    POI = "poi"
    NIGHT = "night"


class FlowContext(StrEnum):
    DAY = "day"
    NIGHT = "night"


class FlowStep(StrEnum):
    """Non-terminal steps of the stealth and detection protocol."""

    NIGHT_ENCOUNTER_INFO = "night_encounter_info"
    ENEMY_STEALTH_CHOICE = "enemy_stealth_choice"
    ENEMY_STEALTH_INPUT = "enemy_stealth_input"
    PP_CONTEST = "pp_contest"
    STEALTH_CHOICE = "stealth_choice"
    STEALTH_INPUT = "stealth_input"
    DETECTION = "detection"


class Side(StrEnum):
    """Winner of the passive perception contest."""

    PLAYERS = "players"
    ENEMIES = "enemies"


class FlowOutcome(StrEnum):
    """Terminal narrative results of the protocol."""

    ALL_AWAKE_NO_STEALTH = "all_awake_no_stealth"
    TIE_NORMAL_ENCOUNTER = "tie_normal_encounter"
    NORMAL_ENCOUNTER_NO_STEALTH = "normal_encounter_no_stealth"
    ENEMIES_SPOTTED_ALL_AWAKE = "enemies_spotted_all_awake"
    PARTY_SURPRISED_WATCH_AWAKE = "party_surprised_watch_awake"
    STEALTH_SPOTTED = "stealth_spotted"
    ENCOUNTER_AVOIDED = "encounter_avoided"
    PARTY_SURPRISED_ENEMIES_SNUCK = "party_surprised_enemies_snuck"
    ABORTED = "aborted"


class CreatureSize(StrEnum):
    """Size categories driving the consumption rate lookup."""

    TINY = "Tiny"
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"
    HUGE = "Huge"
    GARGANTUAN = "Gargantuan"


class StorageType(StrEnum):
    """What a storage container is allowed to hold."""

    FOOD_FEED = "food_feed"
    WATER = "water"


class Resource(StrEnum):
    FOOD = "food"
    FEED = "feed"
    WATER = "water"


class Need(StrEnum):
    """Rationing checkboxes; ``food`` also covers feed for animals."""

    FOOD = "food"
    WATER = "water"


class ForageStep(StrEnum):
    """Steps of the foraging mini-game."""

    IDLE = "idle"
    CONFIG = "config"
    INPUT = "input"
    RESULT = "result"


class ForageShortcut(StrEnum):
    """Instant foraging successes that skip the skill check."""

    WANDERER = "wanderer"
    CREATE_FOOD_AND_WATER = "create_food_and_water"
