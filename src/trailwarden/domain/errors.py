"""Exceptions raised by the rules layer.

All of them are recoverable: the session is left untouched and the caller
reports the message to the gamemaster.
"""

from __future__ import annotations


class RulesError(ValueError):
    """Base class for rejected actions."""


class ValidationFailure(RulesError):
    """Input could not be used, e.g. an empty roll list or a zero PP value."""


class CapacityFailure(RulesError):
    """Supplies or storage space are insufficient for the requested action."""


class ConfigurationFailure(RulesError):
    """The travel settings forbid the requested action."""


class InteractionConflict(RulesError):
    """Another interaction is open, or the addressed one is not."""


class UnknownRecord(LookupError):
    """A creature or storage id does not exist in the session."""
