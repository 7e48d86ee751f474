"""Mission status values and the allowed transitions between them."""
from enum import Enum
from typing import Dict, FrozenSet

from survey_fleet.errors import InvalidTransitionError


class MissionStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    ABORTED = "aborted"


TERMINAL_STATUSES: FrozenSet[MissionStatus] = frozenset({
    MissionStatus.COMPLETED,
    MissionStatus.ABORTED,
})

ACTIVE_STATUSES: FrozenSet[MissionStatus] = frozenset({
    MissionStatus.PLANNED,
    MissionStatus.IN_PROGRESS,
    MissionStatus.PAUSED,
})

ALLOWED_TRANSITIONS: Dict[MissionStatus, FrozenSet[MissionStatus]] = {
    MissionStatus.PLANNED: frozenset({MissionStatus.IN_PROGRESS, MissionStatus.ABORTED}),
    MissionStatus.IN_PROGRESS: frozenset({
        MissionStatus.PAUSED, MissionStatus.COMPLETED, MissionStatus.ABORTED,
    }),
    MissionStatus.PAUSED: frozenset({MissionStatus.IN_PROGRESS, MissionStatus.ABORTED}),
    MissionStatus.COMPLETED: frozenset(),
    MissionStatus.ABORTED: frozenset(),
}


def is_terminal(status: MissionStatus) -> bool:
    return MissionStatus(status) in TERMINAL_STATUSES


def can_transition(current: MissionStatus, target: MissionStatus) -> bool:
    """Check whether the edge current -> target is in the transition table."""
    return MissionStatus(target) in ALLOWED_TRANSITIONS[MissionStatus(current)]


def validate_transition(current: MissionStatus, target: MissionStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is allowed."""
    if not can_transition(current, target):
        raise InvalidTransitionError(MissionStatus(current).value, MissionStatus(target).value)
