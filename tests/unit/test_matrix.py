"""Tests for encounter matrix editing and overlap repair."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from trailwarden.domain import matrix
from trailwarden.domain.encounters import classify_day_roll
from trailwarden.domain.enums import RangeKind, Terrain
from trailwarden.domain.errors import ValidationFailure
from trailwarden.domain.models import EncounterRange, Matrix, Session


def _overlaps(ranges: EncounterRange) -> bool:
    enabled = [
        ranges.bounds(kind) for kind in matrix.RANGE_ORDER if ranges.bounds(kind)[0] > 0
    ]
    for index, (low, high) in enumerate(enabled):
        for other_low, other_high in enabled[index + 1 :]:
            if low <= other_high and other_low <= high:
                return True
    return False


interval = st.tuples(st.integers(1, 60), st.integers(0, 20)).map(
    lambda pair: (pair[0], pair[0] + pair[1])
)


def test_default_matrix_matches_table():
    table = Matrix()
    assert table.day[Terrain.ROAD] == EncounterRange(hostile=(1, 3), neutral=(4, 6), poi=(7, 8))
    assert table.day[Terrain.UNKNOWN].poi == (9, 22)
    assert table.night[Terrain.WANTED].basis == (1, 10)
    assert table.night[Terrain.WANTED].light == 2
    assert table.night[Terrain.CUSTOM].light == 0
    for terrain in Terrain:
        assert not _overlaps(table.day[terrain])


def test_widening_hostile_pushes_following_ranges():
    table = Matrix()
    changed = matrix.set_range_bound(table, Terrain.ROAD, RangeKind.HOSTILE, 1, 5)

    ranges = table.day[Terrain.ROAD]
    assert changed is True
    assert ranges.hostile == (1, 5)
    assert ranges.neutral == (6, 8)
    assert ranges.poi == (9, 10)


def test_edit_without_overlap_reports_no_change():
    table = Matrix()
    changed = matrix.set_range_bound(table, Terrain.ENEMY, RangeKind.POI, 1, 30)

    assert changed is False
    assert table.day[Terrain.ENEMY].poi == (13, 30)
    assert table.day[Terrain.ENEMY].neutral == (11, 12)


def test_disabled_interval_is_ignored_by_repair():
    table = Matrix()
    assert matrix.set_range_bound(table, Terrain.ROAD, RangeKind.NEUTRAL, 1, 0) is False
    assert matrix.set_range_bound(table, Terrain.ROAD, RangeKind.NEUTRAL, 0, 0) is False

    changed = matrix.set_range_bound(table, Terrain.ROAD, RangeKind.HOSTILE, 1, 7)

    ranges = table.day[Terrain.ROAD]
    assert changed is True
    assert ranges.neutral == (0, 0)
    assert ranges.hostile == (1, 7)
    assert ranges.poi == (8, 9)


@given(hostile=interval, neutral=interval, poi=interval, data=st.data())
def test_repair_leaves_well_formed_ranges_disjoint(hostile, neutral, poi, data):
    table = Matrix()
    table.day[Terrain.CUSTOM] = EncounterRange(hostile=hostile, neutral=neutral, poi=poi)
    kind = data.draw(st.sampled_from(list(RangeKind)))
    index = data.draw(st.sampled_from([0, 1]))
    low, high = table.day[Terrain.CUSTOM].bounds(kind)
    if index == 0:
        value = data.draw(st.integers(1, high))
    else:
        value = data.draw(st.integers(low, low + 40))

    matrix.set_range_bound(table, Terrain.CUSTOM, kind, index, value)

    ranges = table.day[Terrain.CUSTOM]
    assert not _overlaps(ranges)
    for each in matrix.RANGE_ORDER:
        low, high = ranges.bounds(each)
        assert low <= high


@st.composite
def disjoint_ranges(draw) -> EncounterRange:
    """Enabled intervals laid out in a random order with gaps; some disabled."""

    order = draw(st.permutations(list(RangeKind)))
    bounds: dict[RangeKind, tuple[int, int]] = {}
    cursor = 0
    for kind in order:
        if draw(st.booleans()) and draw(st.booleans()):
            bounds[kind] = (0, 0)
            continue
        low = cursor + 1 + draw(st.integers(0, 10))
        high = low + draw(st.integers(0, 30))
        bounds[kind] = (low, high)
        cursor = high
    return EncounterRange(
        hostile=bounds[RangeKind.HOSTILE],
        neutral=bounds[RangeKind.NEUTRAL],
        poi=bounds[RangeKind.POI],
    )


@given(ranges=disjoint_ranges(), roll=st.integers(0, 101))
def test_classification_finds_the_interval_containing_the_roll(ranges, roll):
    containing = [
        kind
        for kind in matrix.RANGE_ORDER
        if ranges.bounds(kind)[0] > 0
        and ranges.bounds(kind)[0] <= roll <= ranges.bounds(kind)[1]
    ]
    assert len(containing) <= 1

    kind = classify_day_roll(ranges, roll)

    if containing:
        assert kind == containing[0]
    else:
        assert kind is None


def test_unknown_terrain_classification():
    ranges = Matrix().day[Terrain.UNKNOWN]
    assert classify_day_roll(ranges, 5) == RangeKind.HOSTILE
    assert classify_day_roll(ranges, 6) == RangeKind.NEUTRAL
    assert classify_day_roll(ranges, 22) == RangeKind.POI
    assert classify_day_roll(ranges, 23) is None


def test_custom_terrain_never_classifies():
    ranges = Matrix().day[Terrain.CUSTOM]
    assert all(classify_day_roll(ranges, roll) is None for roll in range(0, 101))


def test_reset_range_bound_restores_default():
    table = Matrix()
    matrix.set_range_bound(table, Terrain.WILDERNESS, RangeKind.POI, 1, 40)
    matrix.reset_range_bound(table, Terrain.WILDERNESS, RangeKind.POI, 1)
    assert table.day[Terrain.WILDERNESS].poi == (9, 10)


def test_night_cells_edit_and_reset():
    table = Matrix()
    matrix.set_night_bound(table, Terrain.ROAD, 1, 4)
    matrix.set_night_light(table, Terrain.ROAD, 3)
    assert table.night[Terrain.ROAD].basis == (1, 4)
    assert table.night[Terrain.ROAD].light == 3

    matrix.reset_night_cell(table, Terrain.ROAD, 1)
    matrix.reset_night_cell(table, Terrain.ROAD)
    assert table.night[Terrain.ROAD].basis == (1, 1)
    assert table.night[Terrain.ROAD].light == 1


def test_bound_index_must_be_zero_or_one():
    with pytest.raises(ValidationFailure):
        matrix.set_range_bound(Matrix(), Terrain.ROAD, RangeKind.HOSTILE, 2, 4)
    with pytest.raises(ValidationFailure):
        matrix.set_night_bound(Matrix(), Terrain.ROAD, -1, 4)


def test_session_edit_logs_automatic_adjustment():
    session = Session()
    matrix.edit_day_bound(session, Terrain.ROAD, RangeKind.HOSTILE, 1, 5)

    assert session.log[0].endswith("Matrix: ranges for 'Road' adjusted automatically.")


def test_session_edit_rejects_negative_values():
    session = Session()
    with pytest.raises(ValidationFailure):
        matrix.edit_day_bound(session, Terrain.ROAD, RangeKind.HOSTILE, 1, -1)
    with pytest.raises(ValidationFailure):
        matrix.edit_night_cell(session, Terrain.ROAD, value=-3)
    assert session.matrix == Matrix()
    assert session.log == []


def test_reset_matrix_restores_everything():
    session = Session()
    matrix.edit_day_bound(session, Terrain.WANTED, RangeKind.HOSTILE, 1, 50)
    matrix.edit_night_cell(session, Terrain.WANTED, value=9)

    matrix.reset_matrix(session)

    assert session.matrix == Matrix()
    assert session.log[0].endswith("Entire matrix reset to defaults.")


def test_ensure_complete_fills_missing_terrains():
    table = Matrix(day={}, night={})
    matrix.ensure_complete(table)
    assert set(table.day) == set(Terrain)
    assert set(table.night) == set(Terrain)
