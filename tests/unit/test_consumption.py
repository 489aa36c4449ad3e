"""Unit tests for daily requirements and supply totals."""

from __future__ import annotations

import pytest

from trailwarden.domain.consumption import (
    requirement,
    round_quantity,
    total_needs,
    total_stored,
)
from trailwarden.domain.enums import CreatureSize, StorageType
from trailwarden.domain.models import Creature, ResourceTotals, Storage, default_party


def test_food_eaters_need_food_and_water():
    needs = requirement(Creature(size=CreatureSize.MEDIUM))
    assert needs == ResourceTotals(food=1, feed=0, water=1)


def test_feed_users_eat_feed_instead_of_food():
    needs = requirement(Creature(size=CreatureSize.LARGE, uses_feed=True))
    assert needs == ResourceTotals(food=0, feed=1.0, water=4)


def test_hot_weather_doubles_water_only():
    needs = requirement(Creature(size=CreatureSize.HUGE), hot_weather=True)
    assert needs.food == 16
    assert needs.water == 32


@pytest.mark.parametrize(
    "size, food, water",
    [
        (CreatureSize.TINY, 0.25, 0.25),
        (CreatureSize.SMALL, 1, 1),
        (CreatureSize.GARGANTUAN, 64, 64),
    ],
)
def test_rates_by_size(size, food, water):
    needs = requirement(Creature(size=size))
    assert needs.food == food
    assert needs.water == water


def test_default_party_totals():
    needs = total_needs(default_party())
    assert needs == ResourceTotals(food=1, feed=1.0, water=5)

    hot = total_needs(default_party(), hot_weather=True)
    assert hot.water == 10


def test_total_stored_ignores_inactive_storages():
    storages = [
        Storage(food=10, feed=2),
        Storage(storage_type=StorageType.WATER, water=7),
        Storage(active=False, food=100),
    ]
    assert total_stored(storages) == ResourceTotals(food=10, feed=2, water=7)


def test_round_quantity_half_up_to_two_decimals():
    assert round_quantity(2.345678) == 2.35
    assert round_quantity(49.994) == 49.99
    assert round_quantity(0.125) == 0.13
