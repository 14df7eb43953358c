"""
Reward Policy
=============

Pure reward shaping for the collector strategy:

- Forage while the home base holds no majority, two balls at a time.
- Head home when full, or with the single ball that tips the majority.
- Once the majority is banked, stop collecting and guard (shoot).

Every rule reads the same majority threshold with a strict ``>``. Base
arrival is the only terminal event.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from cogs_arena.arena_core.actions import ActionRequest
from cogs_arena.arena_core.config_loader import GameConfig, get_config
from cogs_arena.arena_core.counters import AgentState


class EventKind(str, Enum):
    FREEZE = "freeze"
    PICKUP = "pickup"
    WALL = "wall"
    BASE_ARRIVAL = "base_arrival"
    SHOOT = "shoot"
    SEEK_TARGET = "seek_target"
    SEEK_BASE = "seek_base"


@dataclass
class RewardOutcome:
    """Reward for one event plus the counts the agent should hold afterwards."""
    event: EventKind
    reward: float
    terminal: bool
    carried: int
    banked: int

    def __repr__(self) -> str:
        tag = ", terminal" if self.terminal else ""
        return f"RewardOutcome({self.event.value}={self.reward:+.2f}{tag})"


class RewardPolicy:
    """
    Stateless reward table.

    Each method takes an AgentState snapshot and returns a RewardOutcome;
    nothing here mutates the state passed in. Out-of-range counts simply fall
    into the penalty branches.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize reward policy.

        Args:
            config: Arena configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._rewards = config.rewards
        self._strategy = config.strategy
        self._majority = config.strategy.majority_threshold
        self._capacity = config.strategy.carry_capacity

    @property
    def majority_threshold(self) -> int:
        return self._majority

    @property
    def carry_capacity(self) -> int:
        return self._capacity

    def has_majority(self, banked: int) -> bool:
        return self._strategy.has_majority(banked)

    def _outcome(
        self,
        event: EventKind,
        reward: float,
        state: AgentState,
        terminal: bool = False
    ) -> RewardOutcome:
        return RewardOutcome(event, reward, terminal, state.carried, state.banked)

    def on_freeze(self, state: AgentState) -> RewardOutcome:
        """Stun penalty; the agent drops everything it carried."""
        return RewardOutcome(
            EventKind.FREEZE, self._rewards.freeze, False, 0, state.banked
        )

    def on_pickup(self, state: AgentState, accepted: bool = True) -> RewardOutcome:
        """
        Score a pickup collision.

        Args:
            state: Counts after the counter registered the pickup.
            accepted: False when the pickup preconditions failed.

        Returns:
            Zero reward for refused pickups, otherwise the capacity-aware reward.
        """
        if not accepted:
            return self._outcome(EventKind.PICKUP, 0.0, state)

        if state.carried <= self._capacity and not self.has_majority(state.banked):
            reward = self._rewards.pickup_good
        else:
            reward = self._rewards.pickup_bad
        return self._outcome(EventKind.PICKUP, reward, state)

    def on_wall(self, state: AgentState) -> RewardOutcome:
        return self._outcome(EventKind.WALL, self._rewards.wall, state)

    def on_base_arrival(self, state: AgentState) -> RewardOutcome:
        """
        Terminal reward for reaching the agent's own base.

        With a majority banked the agent should come home empty; any balls
        it still carries are banked but penalised. Without a majority it
        should come home full, or with the one ball that completes the
        majority; other trips are penalised and the carried balls are not
        counted as banked.
        """
        carried, banked = state.carried, state.banked

        if self.has_majority(banked):
            if carried == 0:
                return RewardOutcome(
                    EventKind.BASE_ARRIVAL, self._rewards.base_good, True, 0, banked
                )
            return RewardOutcome(
                EventKind.BASE_ARRIVAL, self._rewards.base_bad, True, 0, banked + carried
            )

        if carried == self._capacity or (carried == 1 and banked == self._majority):
            return RewardOutcome(
                EventKind.BASE_ARRIVAL, self._rewards.base_good, True, 0, banked + carried
            )

        # Wasted trip: counts reset without banking
        return RewardOutcome(
            EventKind.BASE_ARRIVAL, self._rewards.base_bad, True, 0, banked
        )

    def on_shoot(self, state: AgentState) -> RewardOutcome:
        """Guarding pays only once the majority is banked; carried is ignored."""
        if self.has_majority(state.banked):
            reward = self._rewards.shoot_good
        else:
            reward = self._rewards.shoot_bad
        return self._outcome(EventKind.SHOOT, reward, state)

    def on_seek_target(self, state: AgentState) -> RewardOutcome:
        carried, banked = state.carried, state.banked
        foraging = carried < self._capacity and banked < self._majority
        last_ball = carried == 0 and banked == self._majority
        if foraging or last_ball:
            reward = self._rewards.seek_target_good
        else:
            reward = self._rewards.seek_target_bad
        return self._outcome(EventKind.SEEK_TARGET, reward, state)

    def on_seek_base(self, state: AgentState) -> RewardOutcome:
        carried, banked = state.carried, state.banked
        full = carried == self._capacity and not self.has_majority(banked)
        last_ball = carried == 1 and banked == self._majority
        if full or last_ball:
            reward = self._rewards.seek_base_good
        else:
            reward = self._rewards.seek_base_bad
        return self._outcome(EventKind.SEEK_BASE, reward, state)

    def score_request(self, state: AgentState, request: ActionRequest) -> List[RewardOutcome]:
        """
        Shaping rewards for one action request, in shoot/seek-target/seek-base order.

        Manual movement and rotation axes are never scored.
        """
        outcomes: List[RewardOutcome] = []
        if request.shoot:
            outcomes.append(self.on_shoot(state))
        if request.seek_target:
            outcomes.append(self.on_seek_target(state))
        if request.seek_base:
            outcomes.append(self.on_seek_base(state))
        return outcomes

    def evaluate(
        self,
        state: AgentState,
        event: EventKind,
        accepted: bool = True
    ) -> RewardOutcome:
        """
        Dispatch a single event to its rule.

        Args:
            state: Current counts.
            event: Event being scored.
            accepted: Only used for PICKUP events.

        Returns:
            RewardOutcome for the event.
        """
        if event == EventKind.PICKUP:
            return self.on_pickup(state, accepted)

        handlers = {
            EventKind.FREEZE: self.on_freeze,
            EventKind.WALL: self.on_wall,
            EventKind.BASE_ARRIVAL: self.on_base_arrival,
            EventKind.SHOOT: self.on_shoot,
            EventKind.SEEK_TARGET: self.on_seek_target,
            EventKind.SEEK_BASE: self.on_seek_base,
        }
        return handlers[event](state)
