"""
Host Arena
==========

Minimal stand-in for the host engine the policy runs inside.

This is not a physics simulation: the agent moves on the x/z ground plane
by a fixed step per tick, balls are points, and contacts are plain distance
checks. It exists so that the policy can be driven end to end in-process.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

import numpy as np

from cogs_arena.arena_core.config_loader import GameConfig, get_config
from cogs_arena.arena_core.counters import BallState
from cogs_arena.arena_core.intent import AgentPose, Intent


@dataclass
class HostEvents:
    """Contacts that started during one tick."""
    wall_hit: bool = False
    touched_balls: List[BallState] = field(default_factory=list)
    entered_bases: List[int] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.wall_hit or self.touched_balls or self.entered_bases)


def _xz_to_world(x: float, z: float) -> np.ndarray:
    return np.array([x, 0.0, z], dtype=np.float64)


class ArenaWorld:
    """
    Square two-team arena with one controllable agent.

    Owns the ball registry, the agent pose, the stun timer and the tick
    clock. Contacts are edge triggered: a wall, ball or base reports once
    when contact starts and again only after contact was broken.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize arena.

        Args:
            config: Arena configuration. Uses default if None.
            seed: Random seed for ball placement.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._arena = config.arena
        self._seed = seed
        self._rng = np.random.default_rng(seed)

        self._team = self._arena.self_team
        self._bases: Dict[int, np.ndarray] = {
            team: _xz_to_world(*self._arena.base_xz(team)) for team in (1, 2)
        }

        self._balls: List[BallState] = []
        self._held: List[BallState] = []
        self._position = np.zeros(3)
        self._yaw_deg: float = 0.0
        self._tick: int = 0
        self._freeze_remaining: int = 0

        # Edge-trigger state
        self._touching: Set[int] = set()
        self._inside_bases: Set[int] = set()
        self._against_wall: bool = False

        self.reset(seed)

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def team(self) -> int:
        return self._team

    @property
    def balls(self) -> List[BallState]:
        """Every ball in the arena, in stable scan order."""
        return self._balls

    @property
    def held_balls(self) -> List[BallState]:
        return list(self._held)

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def time_remaining(self) -> int:
        """Ticks left before the episode is truncated."""
        return max(0, self._config.episode.max_ticks - self._tick)

    @property
    def is_frozen(self) -> bool:
        return self._freeze_remaining > 0

    @property
    def yaw_deg(self) -> float:
        return self._yaw_deg

    @property
    def forward(self) -> np.ndarray:
        """Unit facing vector; yaw 0 faces +z, positive yaw turns clockwise."""
        yaw = math.radians(self._yaw_deg)
        return np.array([math.sin(yaw), 0.0, math.cos(yaw)], dtype=np.float64)

    @property
    def pose(self) -> AgentPose:
        return AgentPose(position=self._position.copy(), forward=self.forward)

    def base_position(self, team: Optional[int] = None) -> np.ndarray:
        """World position of a team's base (own team by default)."""
        if team is None:
            team = self._team
        return self._bases[team].copy()

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Scatter balls and put the agent back in its base.

        Args:
            seed: New random seed. Uses previous if None.
        """
        if seed is not None:
            self._seed = seed
        self._rng = np.random.default_rng(self._seed)

        self._balls = [
            BallState(uid=i, position=self._sample_ball_position())
            for i in range(self._arena.num_balls)
        ]
        self._held = []
        self._tick = 0
        self._freeze_remaining = 0

        home = self._bases[self._team]
        self._position = home.copy()
        # Face the arena centre
        self._yaw_deg = math.degrees(math.atan2(-home[0], -home[2])) if np.any(home) else 0.0

        self._touching = set()
        self._inside_bases = {self._team}
        self._against_wall = False

    def _sample_ball_position(self) -> np.ndarray:
        """Uniform position away from the walls and outside both bases."""
        limit = self._arena.half_size - self._arena.spawn_margin
        while True:
            x, z = self._rng.uniform(-limit, limit, size=2)
            point = _xz_to_world(x, z)
            if all(
                np.linalg.norm(point - base) > self._arena.base_radius
                for base in self._bases.values()
            ):
                return point

    def place_ball(
        self,
        uid: int,
        position: np.ndarray,
        bank_owner: Optional[int] = None
    ) -> BallState:
        """Move a ball directly (scripted scenarios, tests)."""
        ball = self._balls[uid]
        ball.position = np.asarray(position, dtype=np.float64)
        ball.bank_owner = bank_owner
        return ball

    def place_agent(self, position: np.ndarray, yaw_deg: float = 0.0) -> None:
        """Teleport the agent without raising contact events."""
        self._position = np.asarray(position, dtype=np.float64)
        self._yaw_deg = yaw_deg
        self._inside_bases = self._bases_containing(self._position)

    def freeze(self, ticks: Optional[int] = None) -> None:
        """Stun the agent; it drops whatever it is holding."""
        if ticks is None:
            ticks = self._config.episode.freeze_ticks
        self._freeze_remaining = max(self._freeze_remaining, int(ticks))
        self.drop_held()

    def attach(self, ball: BallState) -> None:
        """Hand a ball to the agent after the policy accepted the pickup."""
        ball.carried_by_agent = True
        ball.bank_owner = None
        ball.position = self._position.copy()
        self._held.append(ball)

    def drop_held(self) -> None:
        for ball in self._held:
            ball.carried_by_agent = False
            ball.position = self._position.copy()
        self._held = []

    def deposit(self, team: int) -> int:
        """
        Put every held ball into ``team``'s base.

        Returns:
            Number of balls deposited.
        """
        count = len(self._held)
        for ball in self._held:
            ball.carried_by_agent = False
            ball.bank_owner = team
            ball.position = self._bases[team].copy()
        self._held = []
        return count

    def _bases_containing(self, position: np.ndarray) -> Set[int]:
        return {
            team for team, base in self._bases.items()
            if np.linalg.norm(position - base) <= self._arena.base_radius
        }

    def apply_intent(self, intent: Intent) -> HostEvents:
        """
        Integrate one tick of the movement engine.

        Args:
            intent: Direction/rotation/laser for this tick.

        Returns:
            HostEvents for contacts that started this tick.
        """
        events = HostEvents()
        self._tick += 1

        if self._freeze_remaining > 0:
            self._freeze_remaining -= 1
        else:
            self._yaw_deg = (
                self._yaw_deg + intent.turn_sign * self._arena.turn_speed_deg
            ) % 360.0

            direction = np.asarray(intent.direction, dtype=np.float64).copy()
            direction[1] = 0.0
            norm = np.linalg.norm(direction)
            if norm > 0:
                self._position = self._position + direction / norm * self._arena.move_speed

        # Walls
        limit = self._arena.half_size
        clamped = np.clip(self._position, -limit, limit)
        at_wall = bool(np.any(clamped != self._position)) or bool(
            np.any(np.abs(clamped[[0, 2]]) >= limit)
        )
        self._position = clamped
        events.wall_hit = at_wall and not self._against_wall
        self._against_wall = at_wall

        for ball in self._held:
            ball.position = self._position.copy()

        # Balls
        touching: Set[int] = set()
        for ball in self._balls:
            if ball.carried_by_agent:
                continue
            if np.linalg.norm(ball.position - self._position) <= self._arena.pickup_radius:
                touching.add(ball.uid)
                if ball.uid not in self._touching:
                    events.touched_balls.append(ball)
        self._touching = touching

        # Bases
        inside = self._bases_containing(self._position)
        events.entered_bases = sorted(inside - self._inside_bases)
        self._inside_bases = inside

        return events
