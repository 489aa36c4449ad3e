"""Stealth and detection protocol.

The protocol is a finite state machine over :class:`FlowStep`.  ``advance``
is pure: it never mutates the incoming state and returns a
:class:`FlowTransition` describing the next state (``None`` once a terminal
outcome is reached), the narrative result and the log lines to record.
``apply`` binds a transition to the session.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from . import session as sessions
from .enums import FlowContext, FlowOutcome, FlowStep, Side
from .errors import InteractionConflict, ValidationFailure
from .models import FlowState, Session
from .rules_config import DEFAULT_RULES, RulesConfig

# ---------------------------------------------------------------------------
# Events


@dataclass(frozen=True, slots=True)
class Confirm:
    """Acknowledge the night encounter briefing."""


@dataclass(frozen=True, slots=True)
class Choose:
    """Answer a yes/no stealth question."""

    attempt: bool


@dataclass(frozen=True, slots=True)
class SubmitRolls:
    """Free-text list of stealth check results."""

    text: str


@dataclass(frozen=True, slots=True)
class SubmitContest:
    player_pp: int | None
    enemy_pp: int | None


@dataclass(frozen=True, slots=True)
class SubmitDetection:
    """Detection score; ``None`` accepts the suggested default."""

    detection_pp: int | None = None


@dataclass(frozen=True, slots=True)
class Cancel:
    """Abandon the protocol from any step."""


FlowEvent = Confirm | Choose | SubmitRolls | SubmitContest | SubmitDetection | Cancel


@dataclass(slots=True)
class FlowTransition:
    state: FlowState | None
    outcome: FlowOutcome | None = None
    result: str | None = None
    log: list[str] = field(default_factory=list)

    @property
    def terminal(self) -> bool:
        return self.state is None


# ---------------------------------------------------------------------------
# Input helpers

_SEPARATORS = re.compile(r"[,;\s]+")
_LEADING_INT = re.compile(r"^[+-]?\d+")


def parse_rolls(text: str) -> list[int]:
    """Parse a permissive list of integers.

    Tokens are separated by commas, semicolons or whitespace.  Each token
    contributes its leading integer (``"14a"`` gives 14); tokens without one
    are dropped.
    """

    values: list[int] = []
    for token in _SEPARATORS.split(text):
        match = _LEADING_INT.match(token)
        if match:
            values.append(int(match.group(0)))
    return values


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""

    return math.floor(value + 0.5)


def average_rolls(text: str) -> tuple[list[int], int]:
    rolls = parse_rolls(text)
    if not rolls:
        raise ValidationFailure("Please enter at least one roll.")
    return rolls, round_half_up(sum(rolls) / len(rolls))


def detection_threshold(state: FlowState) -> int:
    if state.enemy_stealth_avg is not None:
        return state.enemy_stealth_avg
    if state.stealth_avg is not None:
        return state.stealth_avg
    return 0


def default_detection_pp(state: FlowState, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Suggested detection score for the detection step."""

    fallback = rules.encounters.default_detection_pp
    if state.context == FlowContext.NIGHT and state.watch_perception is not None:
        return state.watch_perception.effective_pp
    if state.winner == Side.PLAYERS:
        return state.enemy_pp if state.enemy_pp is not None else fallback
    if state.winner == Side.ENEMIES:
        return state.player_pp if state.player_pp is not None else fallback
    return fallback


_SIDE_LABELS: dict[Side | None, str] = {
    Side.PLAYERS: "Party",
    Side.ENEMIES: "Enemies",
    None: "Party",
}


def _watch_name(state: FlowState) -> str:
    return state.affected_watch.name if state.affected_watch else "the watch"


def _unexpected(state: FlowState, event: FlowEvent) -> InteractionConflict:
    return InteractionConflict(
        f"{type(event).__name__} is not accepted at step '{state.step.value}'."
    )


# ---------------------------------------------------------------------------
# Step handlers


def _night_encounter_info(state: FlowState, event: FlowEvent, rules: RulesConfig) -> FlowTransition:
    if not isinstance(event, Confirm):
        raise _unexpected(state, event)
    return FlowTransition(
        state=replace(state, step=FlowStep.ENEMY_STEALTH_CHOICE),
        log=[f"Night encounter at {_watch_name(state)} acknowledged"],
    )


def _enemy_stealth_choice(state: FlowState, event: FlowEvent, rules: RulesConfig) -> FlowTransition:
    if not isinstance(event, Choose):
        raise _unexpected(state, event)
    if event.attempt:
        return FlowTransition(
            state=replace(state, step=FlowStep.ENEMY_STEALTH_INPUT),
            log=["Enemies attempt stealth"],
        )
    if state.context == FlowContext.NIGHT:
        return FlowTransition(
            state=None,
            outcome=FlowOutcome.ALL_AWAKE_NO_STEALTH,
            result="Normal encounter. The watch notices the enemies automatically.",
            log=["Night encounter without enemy stealth -> all awake"],
        )
    return FlowTransition(
        state=replace(state, step=FlowStep.PP_CONTEST, enemy_stealth_avg=None),
        log=["No enemy stealth -> PP contest"],
    )


def _enemy_stealth_input(state: FlowState, event: FlowEvent, rules: RulesConfig) -> FlowTransition:
    if not isinstance(event, SubmitRolls):
        raise _unexpected(state, event)
    rolls, average = average_rolls(event.text)
    return FlowTransition(
        state=replace(state, step=FlowStep.DETECTION, enemy_stealth_avg=average),
        log=[f"Enemy stealth: [{', '.join(map(str, rolls))}] -> avg {average}"],
    )


def _pp_contest(state: FlowState, event: FlowEvent, rules: RulesConfig) -> FlowTransition:
    if not isinstance(event, SubmitContest):
        raise _unexpected(state, event)
    player_pp, enemy_pp = event.player_pp, event.enemy_pp
    if player_pp is None or enemy_pp is None or player_pp <= 0 or enemy_pp <= 0:
        raise ValidationFailure("Please enter valid PP values for both sides.")

    log = [f"PP contest: players {player_pp} vs enemies {enemy_pp}"]
    if player_pp == enemy_pp:
        log.append("PP contest tied -> normal encounter")
        return FlowTransition(
            state=None,
            outcome=FlowOutcome.TIE_NORMAL_ENCOUNTER,
            result=f"Tie ({player_pp} = {enemy_pp}) -> normal encounter",
            log=log,
        )

    winner = Side.PLAYERS if player_pp > enemy_pp else Side.ENEMIES
    if winner == Side.PLAYERS:
        result = f"Players win ({player_pp} > {enemy_pp}) -> the party may sneak"
        if state.vehicle:
            log.append("Vehicle in use: all party stealth checks at disadvantage")
    else:
        result = f"Enemies win ({enemy_pp} > {player_pp}) -> the enemies may sneak"
    return FlowTransition(
        state=replace(
            state,
            step=FlowStep.STEALTH_CHOICE,
            winner=winner,
            player_pp=player_pp,
            enemy_pp=enemy_pp,
        ),
        result=result,
        log=log,
    )


def _stealth_choice(state: FlowState, event: FlowEvent, rules: RulesConfig) -> FlowTransition:
    if not isinstance(event, Choose):
        raise _unexpected(state, event)
    if event.attempt:
        return FlowTransition(
            state=replace(state, step=FlowStep.STEALTH_INPUT),
            log=[f"{_SIDE_LABELS[state.winner]} attempt stealth"],
        )
    return FlowTransition(
        state=None,
        outcome=FlowOutcome.NORMAL_ENCOUNTER_NO_STEALTH,
        result="Normal encounter (no stealth).",
        log=["No stealth -> normal encounter"],
    )


def _stealth_input(state: FlowState, event: FlowEvent, rules: RulesConfig) -> FlowTransition:
    if not isinstance(event, SubmitRolls):
        raise _unexpected(state, event)
    rolls, average = average_rolls(event.text)
    return FlowTransition(
        state=replace(state, step=FlowStep.DETECTION, stealth_avg=average),
        log=[f"Stealth: [{', '.join(map(str, rolls))}] -> avg {average}"],
    )


def _detection(state: FlowState, event: FlowEvent, rules: RulesConfig) -> FlowTransition:
    if not isinstance(event, SubmitDetection):
        raise _unexpected(state, event)
    detection_pp = event.detection_pp
    if detection_pp is None:
        detection_pp = default_detection_pp(state, rules)
    if detection_pp < 0:
        raise ValidationFailure("Detection PP cannot be negative.")

    threshold = detection_threshold(state)
    log = [f"Detection: PP {detection_pp} vs stealth {threshold}"]
    night = state.context == FlowContext.NIGHT
    watch = _watch_name(state)

    if detection_pp >= threshold:
        if night:
            outcome = FlowOutcome.ENEMIES_SPOTTED_ALL_AWAKE
            result = "Enemies spotted! The watch wakes everyone."
            log.append(f"Enemies spotted by {watch} -> all awake")
        else:
            outcome = FlowOutcome.STEALTH_SPOTTED
            result = "Stealth spotted! Normal encounter."
            log.append("Stealth spotted -> normal encounter")
    elif night:
        outcome = FlowOutcome.PARTY_SURPRISED_WATCH_AWAKE
        result = f"Party surprised! Only {watch} is awake."
        log.append(f"Party surprised -> only {watch} awake")
    elif state.winner == Side.PLAYERS:
        outcome = FlowOutcome.ENCOUNTER_AVOIDED
        result = "Encounter avoided! The party sneaked past."
        log.append("Encounter avoided -> party sneaked successfully")
    else:
        outcome = FlowOutcome.PARTY_SURPRISED_ENEMIES_SNUCK
        result = "Party surprised! The enemies sneaked up successfully."
        log.append("Party surprised -> enemies sneaked successfully")
    return FlowTransition(state=None, outcome=outcome, result=result, log=log)


StepHandler = Callable[[FlowState, FlowEvent, RulesConfig], FlowTransition]

_STEP_HANDLERS: dict[FlowStep, StepHandler] = {
    FlowStep.NIGHT_ENCOUNTER_INFO: _night_encounter_info,
    FlowStep.ENEMY_STEALTH_CHOICE: _enemy_stealth_choice,
    FlowStep.ENEMY_STEALTH_INPUT: _enemy_stealth_input,
    FlowStep.PP_CONTEST: _pp_contest,
    FlowStep.STEALTH_CHOICE: _stealth_choice,
    FlowStep.STEALTH_INPUT: _stealth_input,
    FlowStep.DETECTION: _detection,
}


# ---------------------------------------------------------------------------
# Public API


def advance(
    state: FlowState, event: FlowEvent, rules: RulesConfig = DEFAULT_RULES
) -> FlowTransition:
    """Compute the transition caused by ``event`` without touching ``state``.

    Raises:
        ValidationFailure: Input of the event is unusable.
        InteractionConflict: The event does not belong to the current step.
    """

    if isinstance(event, Cancel):
        return FlowTransition(
            state=None,
            outcome=FlowOutcome.ABORTED,
            result="Resolution aborted.",
            log=["Resolution aborted."],
        )
    return _STEP_HANDLERS[state.step](state, event, rules)


def apply(session: Session, event: FlowEvent, rules: RulesConfig = DEFAULT_RULES) -> FlowTransition:
    """Advance the session's open protocol and record the transition."""

    state = sessions.require(session, FlowState)
    transition = advance(state, event, rules)
    for line in transition.log:
        sessions.record(session, line)
    if transition.result is not None:
        session.result = transition.result
    if transition.terminal:
        sessions.end(session)
    else:
        session.active = transition.state
    return transition
