"""
Carry/Bank Counter
==================

Tracks how many balls the agent is holding and how many sit in its home base.

The banked count is never tracked incrementally: it is re-derived every tick
from the ball registry so that balls taken out of the base by other agents
are picked up without any cross-agent bookkeeping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np


@dataclass
class BallState:
    """Host-owned view of a single ball (read-only to the policy)."""
    uid: int
    position: np.ndarray                  # (3,) world position, y is up
    carried_by_agent: bool = False
    bank_owner: Optional[int] = None      # Team id of the base holding it

    def is_claimable_by(self, team: int) -> bool:
        """Free to take: nobody holds it and it is not in ``team``'s base."""
        return not self.carried_by_agent and self.bank_owner != team


@dataclass
class AgentState:
    """Per-episode counts owned by a single agent."""
    carried: int = 0
    banked: int = 0
    is_frozen: bool = False


@dataclass
class CarryBankCounter:
    """
    Maintains carried/banked counts for one agent.

    Counts are plain integers; the counter never clamps ``carried`` so that
    the reward policy can still penalise over-capacity pickups.
    """
    team: int
    state: AgentState = field(default_factory=AgentState)

    @property
    def carried(self) -> int:
        return self.state.carried

    @property
    def banked(self) -> int:
        return self.state.banked

    def reset(self) -> None:
        """Start a fresh episode."""
        self.state = AgentState()

    def can_pick_up(self, ball: BallState) -> bool:
        """Pickup preconditions: ball free, not in our base, agent not frozen."""
        return ball.is_claimable_by(self.team) and not self.state.is_frozen

    def on_pickup(self, ball: BallState) -> bool:
        """
        Register a pickup collision.

        Args:
            ball: The ball the agent touched.

        Returns:
            True if the ball was taken (``carried`` incremented), False otherwise.
        """
        if not self.can_pick_up(ball):
            return False
        self.state.carried += 1
        return True

    def on_freeze(self) -> None:
        """Drop everything. Safe to call on every frozen tick."""
        self.state.carried = 0

    def set_frozen(self, is_frozen: bool) -> None:
        self.state.is_frozen = bool(is_frozen)

    def recompute_banked(self, balls: Iterable[BallState]) -> int:
        """
        Re-count balls sitting in this agent's base.

        Args:
            balls: Every ball in the arena.

        Returns:
            The new banked count.
        """
        self.state.banked = sum(1 for ball in balls if ball.bank_owner == self.team)
        return self.state.banked

    def settle(self, carried: int, banked: int) -> None:
        """Apply post-event counts computed by the reward policy."""
        self.state.carried = carried
        self.state.banked = banked
