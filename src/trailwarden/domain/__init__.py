"""Rules layer for Trailwarden.

This package holds everything a travel session needs in memory:

* Dataclasses describing the session and its records (see :mod:`models`).
* Enumerations used across the rules layer.
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions for the encounter side (matrix, rolls, stealth
  protocol) and the provisioning side (consumption, rationing, foraging).

Persistence and the HTTP surface live outside this package and only pass a
:class:`models.Session` in and out.
"""

from . import (
    consumption,
    encounters,
    enums,
    errors,
    foraging,
    matrix,
    models,
    party,
    protocol,
    rationing,
    rules_config,
    session,
)

__all__ = [
    "consumption",
    "encounters",
    "enums",
    "errors",
    "foraging",
    "matrix",
    "models",
    "party",
    "protocol",
    "rationing",
    "rules_config",
    "session",
]
