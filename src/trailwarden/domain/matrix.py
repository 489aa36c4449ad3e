"""Encounter matrix editing rules.

Day intervals of a terrain are kept apart by nudging later intervals forward
after every edit.  The repair is a single ascending pass without re-sorting,
so an edit that moves one interval past another is not always fully
resolved; a well-formed table (every enabled interval with ``from <= to``)
always ends up non-overlapping.
"""

from __future__ import annotations

from . import session as sessions
from .enums import RangeKind, Terrain
from .errors import ValidationFailure
from .models import EncounterRange, Matrix, NightEncounterParams, Session, default_day_ranges
from .models import default_night_params
from .rules_config import DEFAULT_DAY_RANGES, DEFAULT_NIGHT_PARAMS

RANGE_ORDER: tuple[RangeKind, ...] = (RangeKind.HOSTILE, RangeKind.NEUTRAL, RangeKind.POI)


def get_range(matrix: Matrix, terrain: Terrain) -> EncounterRange:
    return matrix.day[terrain]


def get_night_params(matrix: Matrix, terrain: Terrain) -> NightEncounterParams:
    return matrix.night[terrain]


def set_range_bound(
    matrix: Matrix,
    terrain: Terrain,
    kind: RangeKind,
    index: int,
    value: int,
) -> bool:
    """Write one bound of a day interval and repair overlaps.

    Returns ``True`` when another interval had to be shifted.
    """

    _check_index(index)
    ranges = matrix.day[terrain]
    bounds = list(ranges.bounds(kind))
    bounds[index] = value
    ranges.set_bounds(kind, (bounds[0], bounds[1]))
    return _repair_overlaps(ranges)


def reset_range_bound(matrix: Matrix, terrain: Terrain, kind: RangeKind, index: int) -> bool:
    """Restore one day bound to its default, repairing overlaps as an edit would."""

    _check_index(index)
    defaults = dict(zip(RANGE_ORDER, DEFAULT_DAY_RANGES[terrain], strict=True))
    return set_range_bound(matrix, terrain, kind, index, defaults[kind][index])


def set_night_bound(matrix: Matrix, terrain: Terrain, index: int, value: int) -> None:
    _check_index(index)
    params = matrix.night[terrain]
    basis = list(params.basis)
    basis[index] = value
    params.basis = (basis[0], basis[1])


def set_night_light(matrix: Matrix, terrain: Terrain, value: int) -> None:
    matrix.night[terrain].light = value


def reset_night_cell(matrix: Matrix, terrain: Terrain, index: int | None = None) -> None:
    """Restore one basis bound, or the light multiplier when ``index`` is None."""

    basis, light = DEFAULT_NIGHT_PARAMS[terrain]
    if index is None:
        set_night_light(matrix, terrain, light)
    else:
        set_night_bound(matrix, terrain, index, basis[index])


def reset_all(matrix: Matrix) -> None:
    """Restore every cell of the matrix to the default table."""

    matrix.day = default_day_ranges()
    matrix.night = default_night_params()


def ensure_complete(matrix: Matrix) -> None:
    """Fill terrains missing from a loaded matrix with their defaults."""

    day_defaults = default_day_ranges()
    night_defaults = default_night_params()
    for terrain in Terrain:
        matrix.day.setdefault(terrain, day_defaults[terrain])
        matrix.night.setdefault(terrain, night_defaults[terrain])


def _repair_overlaps(ranges: EncounterRange) -> bool:
    ordered = sorted(RANGE_ORDER, key=lambda kind: ranges.bounds(kind)[0])
    changed = False
    for current_kind, next_kind in zip(ordered, ordered[1:]):
        current_to = ranges.bounds(current_kind)[1]
        next_from, next_to = ranges.bounds(next_kind)
        if current_to >= next_from and current_to > 0 and next_from > 0:
            gap = current_to - next_from + 1
            ranges.set_bounds(next_kind, (next_from + gap, next_to + gap))
            changed = True
    return changed


def _check_index(index: int) -> None:
    if index not in (0, 1):
        raise ValidationFailure(f"Bound index must be 0 or 1, got {index}.")


# ---------------------------------------------------------------------------
# Session operations


def edit_day_bound(
    session: Session, terrain: Terrain, kind: RangeKind, index: int, value: int
) -> bool:
    """Edit one day bound of the session matrix, logging any automatic repair."""

    _check_value(value)
    changed = set_range_bound(session.matrix, terrain, kind, index, value)
    if changed:
        sessions.record(session, f"Matrix: ranges for '{terrain.area}' adjusted automatically.")
    return changed


def restore_day_bound(session: Session, terrain: Terrain, kind: RangeKind, index: int) -> bool:
    changed = reset_range_bound(session.matrix, terrain, kind, index)
    if changed:
        sessions.record(session, f"Matrix: ranges for '{terrain.area}' adjusted automatically.")
    return changed


def edit_night_cell(
    session: Session, terrain: Terrain, *, index: int | None = None, value: int
) -> None:
    """Edit a night basis bound, or the light multiplier when ``index`` is None."""

    _check_value(value)
    if index is None:
        set_night_light(session.matrix, terrain, value)
    else:
        set_night_bound(session.matrix, terrain, index, value)


def reset_matrix(session: Session) -> None:
    reset_all(session.matrix)
    sessions.record(session, "Entire matrix reset to defaults.")


def _check_value(value: int) -> None:
    if value < 0:
        raise ValidationFailure(f"Matrix values cannot be negative, got {value}.")
