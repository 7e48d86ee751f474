"""Tests for the mission status transition table."""
import unittest

from survey_fleet.domain.mission_status import (
    ACTIVE_STATUSES, ALLOWED_TRANSITIONS, MissionStatus, can_transition, is_terminal,
    validate_transition,
)
from survey_fleet.errors import InvalidTransitionError, PreconditionError


class TestMissionStatus(unittest.TestCase):
    """Test the allowed status edges."""

    def test_allowed_edges(self):
        allowed = {
            ("planned", "in_progress"), ("planned", "aborted"),
            ("in_progress", "paused"), ("in_progress", "completed"), ("in_progress", "aborted"),
            ("paused", "in_progress"), ("paused", "aborted"),
        }
        for current in MissionStatus:
            for target in MissionStatus:
                expected = (current.value, target.value) in allowed
                self.assertEqual(can_transition(current, target), expected, f"{current} -> {target}")

    def test_terminal_states_have_no_exits(self):
        for status in (MissionStatus.COMPLETED, MissionStatus.ABORTED):
            self.assertTrue(is_terminal(status))
            self.assertEqual(ALLOWED_TRANSITIONS[status], frozenset())

    def test_self_transition_rejected(self):
        for status in MissionStatus:
            self.assertFalse(can_transition(status, status))

    def test_validate_raises_with_both_states(self):
        with self.assertRaises(InvalidTransitionError) as ctx:
            validate_transition(MissionStatus.COMPLETED, MissionStatus.IN_PROGRESS)
        self.assertEqual(ctx.exception.current, "completed")
        self.assertEqual(ctx.exception.target, "in_progress")
        self.assertIsInstance(ctx.exception, PreconditionError)

    def test_accepts_string_values(self):
        self.assertTrue(can_transition("paused", "in_progress"))
        validate_transition("planned", "aborted")

    def test_active_statuses(self):
        self.assertEqual(
            ACTIVE_STATUSES,
            {MissionStatus.PLANNED, MissionStatus.IN_PROGRESS, MissionStatus.PAUSED},
        )
        self.assertFalse(is_terminal(MissionStatus.PAUSED))


if __name__ == '__main__':
    unittest.main()
