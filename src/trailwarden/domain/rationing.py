"""Daily rationing: consume provisions and apply hunger and thirst.

Commit is the only operation that changes creature survival stats.  It keeps a
deep copy of creatures and storages so the most recent commit can be undone
once.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass

from . import session as sessions
from .consumption import requirement, round_quantity, total_stored
from .enums import Need, Resource
from .errors import CapacityFailure, UnknownRecord
from .models import (
    Creature,
    NeedSelection,
    RationingState,
    ResourceTotals,
    Session,
    Storage,
    UndoSnapshot,
)
from .rules_config import DEFAULT_RULES, RulesConfig

# ---------------------------------------------------------------------------
# Data structures


@dataclass(slots=True)
class RationingWarning:
    """Exhaustion a creature is about to gain if the selection is committed."""

    creature_id: str
    name: str
    will_starve: bool
    will_dehydrate: bool


# ---------------------------------------------------------------------------
# Selection


def open_rationing(session: Session) -> RationingState:
    """Open the dialog with every creature fed and watered."""

    state = RationingState(
        selections={creature.id: NeedSelection() for creature in session.creatures}
    )
    return sessions.begin(session, state)


def toggle_need(session: Session, creature_id: str, need: Need) -> NeedSelection:
    state = sessions.require(session, RationingState)
    selection = state.selections.get(creature_id)
    if selection is None:
        raise UnknownRecord(f"Creature '{creature_id}' is not part of this rationing.")
    setattr(selection, need.value, not selection.is_met(need))
    return selection


def selection_totals(
    state: RationingState,
    creatures: list[Creature],
    hot_weather: bool = False,
    rules: RulesConfig = DEFAULT_RULES,
) -> ResourceTotals:
    """Demand of the selected needs; the food flag also gates feed."""

    totals = ResourceTotals()
    for creature in creatures:
        selection = state.selections.get(creature.id)
        if selection is None:
            continue
        needs = requirement(creature, hot_weather, rules)
        totals = totals + ResourceTotals(
            food=needs.food if selection.food else 0.0,
            feed=needs.feed if selection.food else 0.0,
            water=needs.water if selection.water else 0.0,
        )
    return totals


def shortfall(
    needs: ResourceTotals, stored: ResourceTotals, rules: RulesConfig = DEFAULT_RULES
) -> list[Resource]:
    """Resources whose demand exceeds supply by more than the tolerance."""

    tolerance = rules.survival.supply_tolerance
    return [
        resource
        for resource in Resource
        if getattr(needs, resource.value) > getattr(stored, resource.value) + tolerance
    ]


def can_commit(session: Session, rules: RulesConfig = DEFAULT_RULES) -> bool:
    state = sessions.require(session, RationingState)
    needs = selection_totals(state, session.creatures, session.hot_weather, rules)
    return not shortfall(needs, total_stored(session.storages), rules)


def hunger_limit(creature: Creature, rules: RulesConfig = DEFAULT_RULES) -> int:
    survival = rules.survival
    return max(survival.min_days_without_food, survival.base_days_without_food + creature.con_mod)


def preview(session: Session, rules: RulesConfig = DEFAULT_RULES) -> list[RationingWarning]:
    """Warnings for creatures whose unmet needs will cost exhaustion."""

    state = sessions.require(session, RationingState)
    warnings: list[RationingWarning] = []
    for creature in session.creatures:
        selection = state.selections.get(creature.id)
        if selection is None:
            continue
        will_starve = not selection.food and (
            creature.days_without_food + 1 > hunger_limit(creature, rules)
        )
        will_dehydrate = not selection.water
        if will_starve or will_dehydrate:
            warnings.append(
                RationingWarning(
                    creature_id=creature.id,
                    name=creature.name,
                    will_starve=will_starve,
                    will_dehydrate=will_dehydrate,
                )
            )
    return warnings


def cancel(session: Session) -> None:
    sessions.require(session, RationingState)
    sessions.end(session)


# ---------------------------------------------------------------------------
# Commit


def allocate(
    storages: list[Storage], needs: ResourceTotals, rules: RulesConfig = DEFAULT_RULES
) -> None:
    """Draw ``needs`` from active storages in list order.

    Every active storage is rounded to the configured decimals afterwards.
    """

    tolerance = rules.survival.supply_tolerance
    outstanding = {resource: getattr(needs, resource.value) for resource in Resource}
    for storage in storages:
        if not storage.active:
            continue
        for resource in Resource:
            available = getattr(storage, resource.value)
            if outstanding[resource] > tolerance and available > tolerance:
                taken = min(available, outstanding[resource])
                setattr(storage, resource.value, available - taken)
                outstanding[resource] -= taken
        for resource in Resource:
            quantity = getattr(storage, resource.value)
            setattr(storage, resource.value, round_quantity(quantity, rules))


def consequences(
    creature: Creature, selection: NeedSelection, rules: RulesConfig = DEFAULT_RULES
) -> tuple[int, int]:
    """Return ``(days_without_food, exhaustion)`` after one day.

    Hunger is evaluated before thirst, so a hunger gain on the same day makes
    thirst cost two levels.
    """

    survival = rules.survival
    previous = creature.exhaustion
    gains = 0

    if selection.food:
        days_without_food = 0
    else:
        days_without_food = creature.days_without_food + 1
        if days_without_food > hunger_limit(creature, rules):
            gains += 1

    if not selection.water:
        if previous + gains > 0:
            gains += survival.thirst_gain_when_exhausted
        else:
            gains += survival.thirst_gain

    exhaustion = previous + gains
    if gains == 0 and selection.food and selection.water and previous > 0:
        exhaustion -= 1
    return days_without_food, min(survival.max_exhaustion, max(0, exhaustion))


def commit(session: Session, rules: RulesConfig = DEFAULT_RULES) -> str:
    """Close the day with the current selection and return the notice."""

    state = sessions.require(session, RationingState)
    needs = selection_totals(state, session.creatures, session.hot_weather, rules)
    missing = shortfall(needs, total_stored(session.storages), rules)
    if missing:
        names = ", ".join(resource.value for resource in missing)
        raise CapacityFailure(f"Not enough supplies in active storages: {names}.")

    session.undo = UndoSnapshot(
        creatures=copy.deepcopy(session.creatures),
        storages=copy.deepcopy(session.storages),
    )
    allocate(session.storages, needs, rules)
    for creature in session.creatures:
        selection = state.selections.get(creature.id)
        if selection is None:
            continue
        creature.days_without_food, creature.exhaustion = consequences(creature, selection, rules)

    present = {creature.id for creature in session.creatures}
    fed = sum(
        1
        for creature_id, selection in state.selections.items()
        if creature_id in present and selection.food
    )
    sessions.end(session)
    sessions.record(
        session, "Day closed. Supplies consumed, hunger and thirst consequences applied."
    )
    session.notice = f"Day closed: {fed}/{len(session.creatures)} supplied."
    return session.notice


def undo(session: Session) -> bool:
    """Restore the state before the last commit; ``False`` when nothing to undo."""

    snapshot = session.undo
    if snapshot is None:
        return False
    session.creatures = snapshot.creatures
    session.storages = snapshot.storages
    session.undo = None
    session.notice = "Undone."
    sessions.record(session, "Daily consumption undone.")
    return True
