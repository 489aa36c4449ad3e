"""Random Source Protocol Interface.

Every roll in the rules layer goes through this protocol so tests can script
the dice.
"""

from typing import Protocol


class RandomSource(Protocol):
    """Protocol for a uniform integer generator."""

    def roll(self, sides: int) -> int:
        """Return a uniform integer in ``[1, sides]``.

        Args:
            sides: Number of faces of the die (100 for encounter rolls,
                6 for foraging yields, the watch count for watch selection)
        """
        ...
