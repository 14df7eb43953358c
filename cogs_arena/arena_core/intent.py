"""
Intent Selector
===============

Turns a requested high-level action into a movement/shoot intent for the
host movement engine. Never grants reward and never ends the episode.

Axis conventions (y is up, ground plane is x/z):
- Rotation about +up turns the agent clockwise seen from above.
- Heading angles are signed angles from the target direction to the agent's
  forward vector about +up, so a target on the agent's right is negative.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from cogs_arena.arena_core.actions import ActionRequest, MoveAxis, RotateAxis
from cogs_arena.arena_core.config_loader import GameConfig, StrategyConfig, get_config
from cogs_arena.arena_core.counters import BallState

UP = np.array([0.0, 1.0, 0.0], dtype=np.float64)


@dataclass
class AgentPose:
    """Agent position and facing in world space."""
    position: np.ndarray
    forward: np.ndarray

    @property
    def up(self) -> np.ndarray:
        return UP


@dataclass
class Intent:
    """Per-tick output handed to the movement engine and laser."""
    direction: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    laser: bool = False

    @property
    def drives(self) -> bool:
        return bool(np.any(self.direction))

    @property
    def rotates(self) -> bool:
        return bool(np.any(self.rotation))

    @property
    def turn_sign(self) -> int:
        """+1 clockwise, -1 counter-clockwise, 0 no rotation."""
        return int(np.sign(np.dot(self.rotation, UP)))


def _project_on_ground(vector: np.ndarray) -> np.ndarray:
    vector = np.asarray(vector, dtype=np.float64)
    return vector - np.dot(vector, UP) * UP


def signed_heading_deg(forward: np.ndarray, target_dir: np.ndarray) -> float:
    """
    Signed angle in degrees from ``target_dir`` to ``forward`` about +up.

    Both vectors are projected onto the ground plane first. A degenerate
    (zero-length) direction yields 0.0. A zero cross product counts as
    positive, so a target straight behind reads +180.
    """
    a = _project_on_ground(target_dir)
    b = _project_on_ground(forward)
    norms = np.linalg.norm(a) * np.linalg.norm(b)
    if norms < 1e-12:
        return 0.0

    cos_angle = np.clip(np.dot(a, b) / norms, -1.0, 1.0)
    angle = float(np.degrees(np.arccos(cos_angle)))
    sign = 1.0 if np.dot(np.cross(a, b), UP) >= 0 else -1.0
    return sign * angle


def find_nearest_target(
    balls: Sequence[BallState],
    position: np.ndarray,
    team: int,
    search_radius: float
) -> Optional[BallState]:
    """
    Nearest claimable ball within ``search_radius``.

    Ties keep the first ball met in scan order. Returns None when nothing
    is eligible.
    """
    position = np.asarray(position, dtype=np.float64)
    best_distance = search_radius
    nearest: Optional[BallState] = None
    for ball in balls:
        distance = float(np.linalg.norm(np.asarray(ball.position) - position))
        if distance < best_distance and ball.is_claimable_by(team):
            best_distance = distance
            nearest = ball
    return nearest


class IntentSelector:
    """
    Maps an ActionRequest onto an Intent.

    Manual axes map straight to direction/rotation vectors; seek requests
    steer with a turn-or-drive helper that uses a symmetric dead-band.
    """

    def __init__(self, team: int, config: Optional[GameConfig] = None):
        """
        Initialize selector.

        Args:
            team: Team id of the agent.
            config: Arena configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._team = team
        self._strategy: StrategyConfig = config.strategy
        self._dead_band = config.strategy.heading_dead_band_deg

    @property
    def dead_band(self) -> float:
        """Half-width of the drive-straight band in degrees."""
        return self._dead_band

    def select(
        self,
        request: ActionRequest,
        pose: AgentPose,
        balls: Sequence[BallState],
        base_position: np.ndarray
    ) -> Intent:
        """
        Build this tick's intent.

        Args:
            request: Decoded action.
            pose: Current agent pose.
            balls: Every ball in the arena.
            base_position: World position of the agent's own base.

        Returns:
            Intent for the movement engine.
        """
        forward = np.asarray(pose.forward, dtype=np.float64)
        intent = Intent()

        if request.forward == MoveAxis.FORWARD:
            intent.direction = forward.copy()
        elif request.forward == MoveAxis.BACKWARD:
            intent.direction = -forward

        if request.rotate == RotateAxis.CLOCKWISE:
            intent.rotation = UP.copy()
        elif request.rotate == RotateAxis.COUNTER_CLOCKWISE:
            intent.rotation = -UP

        # Shooting is always honoured mechanically; the reward policy scores it
        intent.laser = request.shoot

        if request.seek_target:
            target = find_nearest_target(
                balls, pose.position, self._team, self._strategy.target_search_radius
            )
            if target is not None:
                self.turn_and_go(intent, pose, target.position)

        if request.seek_base:
            self.turn_and_go(intent, pose, base_position)

        return intent

    def turn_and_go(
        self,
        intent: Intent,
        pose: AgentPose,
        target_position: np.ndarray
    ) -> float:
        """
        Rotate toward ``target_position`` or drive straight at it.

        Sets exactly one of rotation/direction on ``intent`` and leaves the
        other untouched.

        Returns:
            The signed heading angle used for the decision.
        """
        target_dir = np.asarray(target_position, dtype=np.float64) - np.asarray(pose.position)
        angle = signed_heading_deg(pose.forward, target_dir)
        self.steer(intent, pose, angle)
        return angle

    def steer(self, intent: Intent, pose: AgentPose, angle: float) -> None:
        """Apply the dead-band rule for an already computed heading angle."""
        if angle < -self._dead_band:
            intent.rotation = UP.copy()
        elif angle > self._dead_band:
            intent.rotation = -UP
        else:
            intent.direction = np.asarray(pose.forward, dtype=np.float64).copy()
