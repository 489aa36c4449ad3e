"""Daily food, feed and water requirements of the party."""

from __future__ import annotations

import math
from collections.abc import Iterable

from .models import Creature, ResourceTotals, Storage
from .rules_config import CONSUMPTION_RATES, DEFAULT_RULES, RulesConfig


def requirement(
    creature: Creature, hot_weather: bool = False, rules: RulesConfig = DEFAULT_RULES
) -> ResourceTotals:
    """Daily intake of one creature.

    Feed users eat feed instead of food; water doubles in hot weather.
    """

    rate = CONSUMPTION_RATES[creature.size]
    multiplier = rules.survival.hot_weather_water_multiplier if hot_weather else 1
    return ResourceTotals(
        food=0.0 if creature.uses_feed else rate.food,
        feed=rate.feed if creature.uses_feed else 0.0,
        water=rate.water * multiplier,
    )


def total_needs(
    creatures: Iterable[Creature], hot_weather: bool = False, rules: RulesConfig = DEFAULT_RULES
) -> ResourceTotals:
    totals = ResourceTotals()
    for creature in creatures:
        totals = totals + requirement(creature, hot_weather, rules)
    return totals


def total_stored(storages: Iterable[Storage]) -> ResourceTotals:
    """Sum the provisions of active storages; inactive ones are ignored."""

    totals = ResourceTotals()
    for storage in storages:
        if storage.active:
            totals = totals + ResourceTotals(
                food=storage.food, feed=storage.feed, water=storage.water
            )
    return totals


def round_quantity(value: float, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Round a stored quantity half up to the configured number of decimals."""

    scale = 10**rules.survival.quantity_decimals
    return math.floor(value * scale + 0.5) / scale
