"""Pytest configuration to ensure the `src` package layout is importable.

This adds the `src/` directory to `sys.path` so tests can import the
`trailwarden` package without requiring an editable install in CI.
"""

import sys
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


class ScriptedRng:
    """Random source that replays queued rolls and records requested die sizes."""

    def __init__(self, *rolls: int) -> None:
        self.rolls = list(rolls)
        self.requested: list[int] = []

    def queue(self, *rolls: int) -> None:
        self.rolls.extend(rolls)

    def roll(self, sides: int) -> int:
        self.requested.append(sides)
        if not self.rolls:
            raise AssertionError(f"no scripted roll left for d{sides}")
        return self.rolls.pop(0)


@pytest.fixture
def scripted_rng() -> ScriptedRng:
    return ScriptedRng()
