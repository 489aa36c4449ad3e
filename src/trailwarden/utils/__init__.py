"""Utility functions for the Trailwarden rules engine."""

from trailwarden.utils.rng import SeededRng

__all__ = [
    "SeededRng",
]
