"""
Tests for action decoding and intent selection.
"""

import numpy as np
import pytest

from cogs_arena.arena_core.actions import ActionRequest, MoveAxis, RotateAxis
from cogs_arena.arena_core.config_loader import load_config
from cogs_arena.arena_core.counters import BallState
from cogs_arena.arena_core.intent import (
    UP,
    AgentPose,
    Intent,
    IntentSelector,
    find_nearest_target,
    signed_heading_deg,
)

TEAM = 1

FORWARD_Z = np.array([0.0, 0.0, 1.0])


def at(x, z):
    return np.array([x, 0.0, z])


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def selector(config):
    return IntentSelector(TEAM, config)


@pytest.fixture
def pose():
    return AgentPose(position=at(0, 0), forward=FORWARD_Z.copy())


class TestActionRequest:

    def test_decodes_all_branches(self):
        request = ActionRequest.from_array(np.array([2, 1, 1, 0, 1]))

        assert request.forward == MoveAxis.BACKWARD
        assert request.rotate == RotateAxis.CLOCKWISE
        assert request.shoot
        assert not request.seek_target
        assert request.seek_base

    def test_unknown_values_fall_back_to_none(self):
        request = ActionRequest.from_array([7, -1, 3, 0, 0])

        assert request.forward == MoveAxis.NONE
        assert request.rotate == RotateAxis.NONE
        assert not request.shoot

    def test_short_vector_is_padded(self):
        request = ActionRequest.from_array([1])

        assert request.forward == MoveAxis.FORWARD
        assert not request.seek_base

    def test_to_array(self):
        request = ActionRequest(forward=MoveAxis.FORWARD, seek_target=True)

        assert request.to_array().tolist() == [1, 0, 0, 1, 0]


class TestHeading:

    def test_straight_ahead_is_zero(self):
        assert signed_heading_deg(FORWARD_Z, at(0, 10)) == pytest.approx(0.0)

    def test_target_on_the_right_is_negative(self):
        assert signed_heading_deg(FORWARD_Z, at(10, 0)) == pytest.approx(-90.0)

    def test_target_on_the_left_is_positive(self):
        assert signed_heading_deg(FORWARD_Z, at(-10, 0)) == pytest.approx(90.0)

    def test_target_behind_reads_positive(self):
        assert signed_heading_deg(FORWARD_Z, at(0, -10)) == pytest.approx(180.0)

    def test_vertical_offset_is_ignored(self):
        above = np.array([10.0, 50.0, 0.0])

        assert signed_heading_deg(FORWARD_Z, above) == pytest.approx(-90.0)

    def test_degenerate_direction(self):
        assert signed_heading_deg(FORWARD_Z, np.zeros(3)) == 0.0


class TestDeadBand:
    """Boundary of the drive-straight band is exclusive on both sides."""

    @pytest.mark.parametrize("angle", [5.0, -5.0, 0.0, 4.99, -4.99])
    def test_inside_band_drives(self, selector, pose, angle):
        intent = Intent()
        selector.steer(intent, pose, angle)

        assert intent.drives
        assert not intent.rotates
        np.testing.assert_allclose(intent.direction, FORWARD_Z)

    def test_above_band_rotates_counter_clockwise(self, selector, pose):
        intent = Intent()
        selector.steer(intent, pose, 5.01)

        assert intent.turn_sign == -1
        assert not intent.drives

    def test_below_band_rotates_clockwise(self, selector, pose):
        intent = Intent()
        selector.steer(intent, pose, -5.01)

        assert intent.turn_sign == 1
        assert not intent.drives


class TestNearestTarget:

    def test_picks_closest_claimable(self):
        balls = [
            BallState(0, at(0, 10)),
            BallState(1, at(0, 3), carried_by_agent=True),
            BallState(2, at(0, 2), bank_owner=TEAM),
            BallState(3, at(0, 5)),
        ]

        assert find_nearest_target(balls, at(0, 0), TEAM, 200.0).uid == 3

    def test_tie_keeps_first_in_scan_order(self):
        balls = [BallState(0, at(4, 0)), BallState(1, at(-4, 0)), BallState(2, at(0, 4))]

        assert find_nearest_target(balls, at(0, 0), TEAM, 200.0).uid == 0

    def test_opponent_base_balls_are_targets(self):
        balls = [BallState(0, at(0, 3), bank_owner=2)]

        assert find_nearest_target(balls, at(0, 0), TEAM, 200.0).uid == 0

    def test_none_when_nothing_eligible(self):
        balls = [BallState(0, at(0, 3), carried_by_agent=True)]

        assert find_nearest_target(balls, at(0, 0), TEAM, 200.0) is None
        assert find_nearest_target([], at(0, 0), TEAM, 200.0) is None

    def test_search_radius(self):
        balls = [BallState(0, at(0, 250))]

        assert find_nearest_target(balls, at(0, 0), TEAM, 200.0) is None


class TestIntentSelector:

    def test_manual_axes_map_to_vectors(self, selector, pose):
        intent = selector.select(ActionRequest.from_array([1, 2, 0, 0, 0]), pose, [], at(0, 0))

        np.testing.assert_allclose(intent.direction, FORWARD_Z)
        np.testing.assert_allclose(intent.rotation, -UP)
        assert not intent.laser

    def test_backward(self, selector, pose):
        intent = selector.select(ActionRequest(forward=MoveAxis.BACKWARD), pose, [], at(0, 0))

        np.testing.assert_allclose(intent.direction, -FORWARD_Z)

    def test_shoot_is_always_honoured(self, selector, pose):
        intent = selector.select(ActionRequest(shoot=True), pose, [], at(0, 0))

        assert intent.laser

    def test_seek_target_turns_toward_ball(self, selector, pose):
        balls = [BallState(0, at(10, 0))]
        intent = selector.select(ActionRequest(seek_target=True), pose, balls, at(-30, 0))

        assert intent.turn_sign == 1
        assert not intent.drives

    def test_seek_target_drives_when_aligned(self, selector, pose):
        balls = [BallState(0, at(0.5, 10))]
        intent = selector.select(ActionRequest(seek_target=True), pose, balls, at(-30, 0))

        assert intent.drives
        assert not intent.rotates

    def test_seek_target_without_targets_does_nothing(self, selector, pose):
        balls = [BallState(0, at(10, 0), bank_owner=TEAM)]
        intent = selector.select(ActionRequest(seek_target=True), pose, balls, at(-30, 0))

        assert not intent.drives
        assert not intent.rotates

    def test_seek_base_turns_toward_base(self, selector, pose):
        intent = selector.select(ActionRequest(seek_base=True), pose, [], at(-30, 0))

        assert intent.turn_sign == -1

    def test_helper_keeps_manual_drive_when_rotating(self, selector, pose):
        request = ActionRequest(forward=MoveAxis.FORWARD, seek_base=True)
        intent = selector.select(request, pose, [], at(-30, 0))

        assert intent.drives
        assert intent.turn_sign == -1
