"""Trailwarden: travel, rest, rationing and foraging for a tabletop party."""

__version__ = "0.1.0"
