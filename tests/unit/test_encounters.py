"""Tests for travel and long-rest encounter rolls."""

from __future__ import annotations

import pytest

from trailwarden.domain import encounters
from trailwarden.domain.enums import (
    EncounterKind,
    FlowContext,
    FlowStep,
    RangeKind,
    Terrain,
    Vision,
)
from trailwarden.domain.errors import InteractionConflict, ValidationFailure
from trailwarden.domain.models import (
    FlowState,
    ForageState,
    NightEncounterParams,
    Session,
    Watch,
)


def _session(terrain: Terrain = Terrain.ROAD) -> Session:
    session = Session()
    session.settings.terrain = terrain
    return session


def test_watch_perception_halves_pp_without_darkvision():
    assert encounters.watch_perception(Watch(pp=13)).effective_pp == 6
    darkvision = encounters.watch_perception(Watch(vision=Vision.DARKVISION, pp=13))
    assert darkvision.effective_pp == 13
    assert darkvision.modifier == "disadvantage on active checks"
    assert encounters.watch_perception(Watch(vision=Vision.MAGIC, pp=15)).effective_pp == 15


def test_night_threshold_uses_highest_basis_bound_and_light():
    params = NightEncounterParams(basis=(1, 10), light=2)
    assert encounters.night_threshold(params, 0) == 10
    assert encounters.night_threshold(params, 3) == 16


def test_travel_miss_sets_result(scripted_rng):
    session = _session()
    scripted_rng.queue(50)

    outcome = encounters.roll_travel(session, scripted_rng)

    assert outcome.kind == EncounterKind.NONE
    assert outcome.roll == 50
    assert scripted_rng.requested == [100]
    assert session.result == "No encounter."
    assert session.active is None
    assert session.log[-1].endswith("--- TRAVEL ROLL START ---")
    assert session.log[1].endswith("Travel d100 -> 50 (Road)")
    assert session.log[0].endswith("Ranges: Hostile 1-3, Neutral 4-6, POI 7-8")


def test_travel_poi_is_immediately_visible(scripted_rng):
    session = _session()
    scripted_rng.queue(8)

    outcome = encounters.roll_travel(session, scripted_rng)

    assert outcome.kind == EncounterKind.POI
    assert session.result == "Point of interest discovered! (d100 8)"
    assert session.active is None


def test_travel_hostile_opens_stealth_protocol(scripted_rng):
    session = _session()
    session.settings.vehicle = True
    scripted_rng.queue(2)

    outcome = encounters.roll_travel(session, scripted_rng)

    assert outcome.kind == EncounterKind.HOSTILE
    flow = session.active
    assert isinstance(flow, FlowState)
    assert flow is outcome.flow
    assert flow.step == FlowStep.ENEMY_STEALTH_CHOICE
    assert flow.context == FlowContext.DAY
    assert flow.encounter_type == RangeKind.HOSTILE
    assert flow.vehicle is True
    assert flow.roll == 2


def test_travel_neutral_opens_stealth_protocol(scripted_rng):
    session = _session(Terrain.ENEMY)
    scripted_rng.queue(11)

    outcome = encounters.roll_travel(session, scripted_rng)

    assert outcome.kind == EncounterKind.NEUTRAL
    assert session.active.encounter_type == RangeKind.NEUTRAL


def test_roll_refused_while_interaction_open(scripted_rng):
    session = _session()
    session.active = ForageState()
    scripted_rng.queue(1)

    with pytest.raises(InteractionConflict, match="foraging"):
        encounters.roll_travel(session, scripted_rng)
    with pytest.raises(InteractionConflict):
        encounters.roll_rest(session, scripted_rng)
    assert scripted_rng.requested == []
    assert session.log == []


def test_rest_above_threshold_is_quiet(scripted_rng):
    session = _session(Terrain.WILDERNESS)
    session.settings.light_hours = 2
    scripted_rng.queue(6)

    outcome = encounters.roll_rest(session, scripted_rng)

    assert outcome.kind == EncounterKind.NONE
    assert outcome.threshold == 5
    assert session.result == "No encounter during the long rest."
    assert session.log[0].endswith("Long rest d100 -> 6 (threshold 5 | base 3, light 2h * 1)")


def test_rest_hit_picks_watch_and_opens_night_flow(scripted_rng):
    session = _session(Terrain.WANTED)
    session.settings.watches[1] = Watch(name="Mira", vision=Vision.DARKVISION, pp=14)
    scripted_rng.queue(10, 2)

    outcome = encounters.roll_rest(session, scripted_rng)

    assert outcome.kind == EncounterKind.NIGHT
    assert scripted_rng.requested == [100, 3]
    flow = session.active
    assert flow.step == FlowStep.NIGHT_ENCOUNTER_INFO
    assert flow.context == FlowContext.NIGHT
    assert flow.affected_watch == Watch(name="Mira", vision=Vision.DARKVISION, pp=14)
    assert flow.affected_watch is not session.settings.watches[1]
    assert flow.watch_perception.effective_pp == 14
    assert session.result == "Night encounter: Mira!"
    assert session.log[0].endswith("Encounter! Affected watch: Mira (roll 2/3)")


def test_rest_requires_a_watch(scripted_rng):
    session = _session()
    session.settings.watches = []

    with pytest.raises(ValidationFailure):
        encounters.roll_rest(session, scripted_rng)
