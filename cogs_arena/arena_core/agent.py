"""
Collector Agent
===============

Per-tick orchestration of the carry/bank counter, intent selector and
reward policy against the host collaborators:

- Episode controller: add_reward / set_reward / end_episode
- Movement engine: callable taking (direction, rotation)
- Laser: callable taking the laser-active flag
"""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol, Sequence, Union

import numpy as np

from cogs_arena.arena_core.actions import ActionRequest
from cogs_arena.arena_core.config_loader import GameConfig, get_config
from cogs_arena.arena_core.counters import AgentState, BallState, CarryBankCounter
from cogs_arena.arena_core.intent import AgentPose, Intent, IntentSelector
from cogs_arena.arena_core.rewards import RewardOutcome, RewardPolicy


class EpisodeController(Protocol):
    """What the agent needs from the host's episode bookkeeping."""

    def add_reward(self, reward: float) -> None: ...

    def set_reward(self, reward: float) -> None: ...

    def end_episode(self) -> None: ...


class EpisodeLedger:
    """
    In-process episode controller.

    ``add_reward`` accumulates into the current step, ``set_reward`` replaces
    the current step's reward. The cumulative return follows both.
    """

    def __init__(self):
        self._step_reward: float = 0.0
        self._cumulative: float = 0.0
        self._ended: bool = False
        self._steps: int = 0

    @property
    def step_reward(self) -> float:
        """Reward accumulated since the last begin_step()."""
        return self._step_reward

    @property
    def cumulative_reward(self) -> float:
        """Episode return so far."""
        return self._cumulative

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def steps(self) -> int:
        return self._steps

    def begin_step(self) -> None:
        """Open a new step."""
        self._step_reward = 0.0
        self._steps += 1

    def add_reward(self, reward: float) -> None:
        self._step_reward += reward
        self._cumulative += reward

    def set_reward(self, reward: float) -> None:
        self._cumulative += reward - self._step_reward
        self._step_reward = reward

    def end_episode(self) -> None:
        self._ended = True

    def reset(self) -> None:
        """Reset for a new episode."""
        self._step_reward = 0.0
        self._cumulative = 0.0
        self._ended = False
        self._steps = 0


class CollectorAgent:
    """
    Ball-collecting agent policy.

    Call order per tick:
    1. fixed_update() with the full ball list and the frozen flag
    2. on_action_received() with the requested action
    3. collision/trigger callbacks reported by the host

    After a terminal outcome further events are ignored until reset().
    """

    def __init__(
        self,
        team: int,
        controller: Optional[EpisodeController] = None,
        config: Optional[GameConfig] = None,
        movement: Optional[Callable[[np.ndarray, np.ndarray], None]] = None,
        laser: Optional[Callable[[bool], None]] = None,
        debug: bool = False
    ):
        """
        Initialize agent.

        Args:
            team: Team id of the agent (its home base shares it).
            controller: Episode controller. A fresh EpisodeLedger if None.
            config: Arena configuration. Uses default if None.
            movement: Optional movement engine callback.
            laser: Optional laser callback.
            debug: If True, print every reward outcome.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._team = team
        self._controller = controller if controller is not None else EpisodeLedger()
        self._movement = movement
        self._laser = laser
        self._debug = debug

        self._counter = CarryBankCounter(team)
        self._selector = IntentSelector(team, config)
        self._policy = RewardPolicy(config)

        self._outcomes: List[RewardOutcome] = []
        self._episode_over: bool = False
        self._last_intent: Intent = Intent()

    @property
    def team(self) -> int:
        return self._team

    @property
    def state(self) -> AgentState:
        """Live counts (do not mutate)."""
        return self._counter.state

    @property
    def carried(self) -> int:
        return self._counter.carried

    @property
    def banked(self) -> int:
        return self._counter.banked

    @property
    def controller(self) -> EpisodeController:
        return self._controller

    @property
    def policy(self) -> RewardPolicy:
        return self._policy

    @property
    def episode_over(self) -> bool:
        """True once a terminal reward has been assigned this episode."""
        return self._episode_over

    @property
    def last_intent(self) -> Intent:
        return self._last_intent

    def reset(self) -> None:
        """Start a new episode."""
        self._counter.reset()
        self._outcomes = []
        self._episode_over = False
        self._last_intent = Intent()

    def drain_outcomes(self) -> List[RewardOutcome]:
        """Return and clear outcomes recorded since the last drain."""
        outcomes, self._outcomes = self._outcomes, []
        return outcomes

    def _apply(self, outcome: RewardOutcome) -> RewardOutcome:
        """Push an outcome to the controller and settle the counts."""
        self._counter.settle(outcome.carried, outcome.banked)
        self._outcomes.append(outcome)

        if outcome.terminal:
            self._controller.set_reward(outcome.reward)
            self._controller.end_episode()
            self._episode_over = True
        elif outcome.reward != 0.0:
            self._controller.add_reward(outcome.reward)

        if self._debug:
            print(f"[DEBUG] team={self._team} {outcome!r} "
                  f"carried={outcome.carried} banked={outcome.banked}")
        return outcome

    def fixed_update(self, balls: Sequence[BallState], is_frozen: bool) -> Optional[RewardOutcome]:
        """
        Per-tick bookkeeping, run before any decision.

        Re-counts banked balls and handles the freeze state: the freeze
        penalty is charged once on the tick the agent becomes frozen, and
        the carried count stays at zero while frozen.

        Args:
            balls: Every ball in the arena.
            is_frozen: Host-reported stun flag.

        Returns:
            The freeze outcome on a freeze onset, otherwise None.
        """
        self._counter.recompute_banked(balls)

        was_frozen = self._counter.state.is_frozen
        self._counter.set_frozen(is_frozen)
        if not is_frozen or self._episode_over:
            return None

        outcome = None
        if not was_frozen:
            outcome = self._apply(self._policy.on_freeze(self._counter.state))
        self._counter.on_freeze()
        return outcome

    def on_action_received(
        self,
        action: Union[ActionRequest, Sequence[int], np.ndarray],
        pose: AgentPose,
        balls: Sequence[BallState],
        base_position: np.ndarray
    ) -> Intent:
        """
        Handle one requested action.

        Scores the shoot/seek requests, builds the intent and hands it to the
        movement engine and laser when they are wired.

        Args:
            action: ActionRequest or raw 5-branch action vector.
            pose: Current agent pose.
            balls: Every ball in the arena.
            base_position: World position of the agent's own base.

        Returns:
            The intent for this tick.
        """
        if not isinstance(action, ActionRequest):
            action = ActionRequest.from_array(action)

        if not self._episode_over:
            for outcome in self._policy.score_request(self._counter.state, action):
                self._apply(outcome)

        intent = self._selector.select(action, pose, balls, base_position)
        self._last_intent = intent

        if self._laser is not None:
            self._laser(intent.laser)
        if self._movement is not None:
            self._movement(intent.direction, intent.rotation)

        return intent

    def on_ball_collision(self, ball: BallState) -> bool:
        """
        Pickup attempt.

        Returns:
            True if the ball was taken.
        """
        if self._episode_over:
            return False
        accepted = self._counter.on_pickup(ball)
        self._apply(self._policy.on_pickup(self._counter.state, accepted))
        return accepted

    def on_wall_collision(self) -> Optional[RewardOutcome]:
        if self._episode_over:
            return None
        return self._apply(self._policy.on_wall(self._counter.state))

    def on_base_enter(self, base_team: int) -> Optional[RewardOutcome]:
        """
        Base trigger. Only the agent's own base counts.

        Returns:
            The terminal outcome, or None for other bases.
        """
        if base_team != self._team or self._episode_over:
            return None
        return self._apply(self._policy.on_base_arrival(self._counter.state))
