"""Travel and long-rest encounter rolls."""

from __future__ import annotations

from dataclasses import dataclass

from trailwarden.interfaces.random_source import RandomSource

from . import session as sessions
from .enums import EncounterKind, FlowContext, FlowStep, RangeKind, Vision
from .errors import ValidationFailure
from .matrix import RANGE_ORDER
from .models import (
    EncounterRange,
    FlowState,
    NightEncounterParams,
    Session,
    Watch,
    WatchPerception,
)
from .rules_config import DEFAULT_RULES, RulesConfig

# ---------------------------------------------------------------------------
# Results


@dataclass(slots=True)
class RollOutcome:
    """Result of one travel or rest roll."""

    kind: EncounterKind
    roll: int
    threshold: int | None = None
    flow: FlowState | None = None


# ---------------------------------------------------------------------------
# Pure calculations


def classify_day_roll(ranges: EncounterRange, roll: int) -> RangeKind | None:
    """Return the first enabled interval containing ``roll``."""

    for kind in RANGE_ORDER:
        low, high = ranges.bounds(kind)
        if low > 0 and low <= roll <= high:
            return kind
    return None


def night_threshold(params: NightEncounterParams, light_hours: int) -> int:
    """Highest d100 value that still produces a night encounter."""

    return max(params.basis) + light_hours * params.light


_RANGE_LABELS: dict[RangeKind, str] = {
    RangeKind.HOSTILE: "Hostile",
    RangeKind.NEUTRAL: "Neutral",
    RangeKind.POI: "POI",
}

_VISION_MODIFIERS: dict[Vision, str] = {
    Vision.NONE: "PP halved (no darkvision)",
    Vision.DARKVISION: "disadvantage on active checks",
    Vision.MAGIC: "normal",
}


def watch_perception(watch: Watch) -> WatchPerception:
    """Effective passive perception of a watch in the dark."""

    effective = watch.pp // 2 if watch.vision == Vision.NONE else watch.pp
    return WatchPerception(effective_pp=effective, modifier=_VISION_MODIFIERS[watch.vision])


# ---------------------------------------------------------------------------
# Session operations


def roll_travel(
    session: Session, rng: RandomSource, rules: RulesConfig = DEFAULT_RULES
) -> RollOutcome:
    """Roll a day encounter for the current terrain.

    Hostile and neutral results open the stealth protocol on the session.
    """

    sessions.ensure_idle(session)
    settings = session.settings
    area = settings.terrain.area
    ranges = session.matrix.day[settings.terrain]

    roll = rng.roll(rules.encounters.encounter_die)
    sessions.record(session, "--- TRAVEL ROLL START ---")
    sessions.record(session, f"Travel d100 -> {roll} ({area})")
    sessions.record(
        session,
        "Ranges: " + ", ".join(
            f"{_RANGE_LABELS[kind]} {ranges.bounds(kind)[0]}-{ranges.bounds(kind)[1]}"
            for kind in RANGE_ORDER
        ),
    )

    kind = classify_day_roll(ranges, roll)
    if kind is None:
        session.result = "No encounter."
        return RollOutcome(kind=EncounterKind.NONE, roll=roll)
    if kind == RangeKind.POI:
        session.result = f"Point of interest discovered! (d100 {roll})"
        sessions.record(session, "POI - immediately visible.")
        return RollOutcome(kind=EncounterKind.POI, roll=roll)

    flow = FlowState(
        step=FlowStep.ENEMY_STEALTH_CHOICE,
        context=FlowContext.DAY,
        encounter_type=kind,
        roll=roll,
        terrain=settings.terrain,
        vehicle=settings.vehicle,
    )
    sessions.begin(session, flow)
    session.result = f"Encounter: {kind.value.upper()} (d100 {roll}) -> stealth resolution starts."
    return RollOutcome(kind=EncounterKind(kind.value), roll=roll, flow=flow)


def roll_rest(
    session: Session, rng: RandomSource, rules: RulesConfig = DEFAULT_RULES
) -> RollOutcome:
    """Roll a long-rest encounter; a hit picks the watch on duty at random."""

    sessions.ensure_idle(session)
    settings = session.settings
    if not settings.watches:
        raise ValidationFailure("At least one watch is required for a long rest.")
    params = session.matrix.night[settings.terrain]
    base = max(params.basis)
    threshold = night_threshold(params, settings.light_hours)

    roll = rng.roll(rules.encounters.encounter_die)
    sessions.record(session, "--- LONG REST ROLL START ---")
    sessions.record(
        session,
        f"Long rest d100 -> {roll} (threshold {threshold} | base {base}, "
        f"light {settings.light_hours}h * {params.light})",
    )
    if roll > threshold:
        session.result = "No encounter during the long rest."
        return RollOutcome(kind=EncounterKind.NONE, roll=roll, threshold=threshold)

    watch_roll = rng.roll(len(settings.watches))
    watch = settings.watches[watch_roll - 1]
    perception = watch_perception(watch)
    sessions.record(
        session,
        f"Encounter! Affected watch: {watch.name} (roll {watch_roll}/{len(settings.watches)})",
    )

    flow = FlowState(
        step=FlowStep.NIGHT_ENCOUNTER_INFO,
        context=FlowContext.NIGHT,
        encounter_type=RangeKind.HOSTILE,
        roll=roll,
        terrain=settings.terrain,
        affected_watch=Watch(name=watch.name, vision=watch.vision, pp=watch.pp),
        watch_perception=perception,
    )
    sessions.begin(session, flow)
    session.result = f"Night encounter: {watch.name}!"
    return RollOutcome(kind=EncounterKind.NIGHT, roll=roll, threshold=threshold, flow=flow)

