"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the collector agent running in
the host arena. Reward comes from the collector reward policy.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from cogs_arena.arena_core.actions import ACTION_BRANCHES, ActionRequest
from cogs_arena.arena_core.agent import CollectorAgent, EpisodeLedger
from cogs_arena.arena_core.config_loader import GameConfig, load_config
from cogs_arena.arena_core.world import ArenaWorld, HostEvents

NO_BANK = 0


class ArenaEnv(gym.Env):
    """
    Two-team ball collection arena as a Gymnasium environment.

    Action Space:
        MultiDiscrete([3, 3, 2, 2, 2])
        [forward/backward, rotate cw/ccw, shoot, seek nearest ball, seek base]

    Observation Space:
        Dict of raw host state: agent pose, counts, stun flag, time left and
        per-ball position/carried/bank owner (0 = no base).

    Reward:
        Collector reward policy output for the step.

    Termination:
        Reaching the agent's own base ends the episode; running out of
        ticks truncates it.
    """

    metadata = {
        "render_modes": [],
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        freeze_probability: Optional[float] = None,
        debug: bool = False,
    ):
        """
        Initialize arena environment.

        Args:
            config_path: Path to arena_config.yaml. Uses default if None.
            freeze_probability: Per-step chance of stunning the agent.
                Uses the config value if None.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        self._config = load_config(config_path)
        self._debug = debug
        if freeze_probability is None:
            freeze_probability = self._config.episode.freeze_probability
        self._freeze_probability = float(freeze_probability)

        self._world = ArenaWorld(config=self._config)
        self._ledger = EpisodeLedger()
        self._agent = CollectorAgent(
            team=self._config.arena.self_team,
            controller=self._ledger,
            config=self._config,
            debug=debug
        )

        self.action_space = spaces.MultiDiscrete(list(ACTION_BRANCHES))
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] ArenaEnv initialized")
            print(f"[DEBUG]   Arena half size: {self._config.arena.half_size}")
            print(f"[DEBUG]   Balls: {self._config.arena.num_balls}")
            print(f"[DEBUG]   Majority: banked > {self._config.strategy.majority_threshold}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        n = self._config.arena.num_balls
        limit = self._config.arena.half_size
        max_ticks = self._config.episode.max_ticks

        return spaces.Dict({
            "agent_position": spaces.Box(low=-limit, high=limit, shape=(3,), dtype=np.float32),
            "agent_forward": spaces.Box(low=-1, high=1, shape=(3,), dtype=np.float32),
            "base_position": spaces.Box(low=-limit, high=limit, shape=(3,), dtype=np.float32),
            "carried": spaces.Box(low=0, high=n, shape=(), dtype=np.int32),
            "banked": spaces.Box(low=0, high=n, shape=(), dtype=np.int32),
            "frozen": spaces.Discrete(2),
            "time_remaining": spaces.Box(low=0, high=max_ticks, shape=(), dtype=np.int32),
            "ball_position": spaces.Box(low=-limit, high=limit, shape=(n, 3), dtype=np.float32),
            "ball_carried": spaces.MultiBinary(n),
            "ball_bank_owner": spaces.Box(low=0, high=2, shape=(n,), dtype=np.int8),
        })

    def _get_obs(self) -> Dict[str, np.ndarray]:
        world = self._world
        pose = world.pose
        balls = world.balls
        return {
            "agent_position": pose.position.astype(np.float32),
            "agent_forward": pose.forward.astype(np.float32),
            "base_position": world.base_position().astype(np.float32),
            "carried": np.array(self._agent.carried, dtype=np.int32),
            "banked": np.array(self._agent.banked, dtype=np.int32),
            "frozen": int(world.is_frozen),
            "time_remaining": np.array(world.time_remaining, dtype=np.int32),
            "ball_position": np.array([b.position for b in balls], dtype=np.float32),
            "ball_carried": np.array([b.carried_by_agent for b in balls], dtype=np.int8),
            "ball_bank_owner": np.array(
                [b.bank_owner if b.bank_owner is not None else NO_BANK for b in balls],
                dtype=np.int8
            ),
        }

    def _get_info(self, event_names: Optional[List[str]] = None) -> Dict[str, Any]:
        return {
            "carried": self._agent.carried,
            "banked": self._agent.banked,
            "episode_return": self._ledger.cumulative_reward,
            "tick": self._world.tick,
            "events": event_names or [],
        }

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._world.reset(seed=seed)
        self._ledger.reset()
        self._agent.reset()
        self._agent.fixed_update(self._world.balls, self._world.is_frozen)

        return self._get_obs(), self._get_info()

    def step(
        self,
        action: Union[np.ndarray, List[int], ActionRequest]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one control tick.

        Args:
            action: 5-branch discrete action.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        world = self._world
        agent = self._agent

        self._ledger.begin_step()

        if self._freeze_probability > 0 and not world.is_frozen:
            if self.np_random.random() < self._freeze_probability:
                world.freeze()

        agent.fixed_update(world.balls, world.is_frozen)
        intent = agent.on_action_received(
            action, world.pose, world.balls, world.base_position()
        )

        events = world.apply_intent(intent)
        self._dispatch(events)

        outcomes = agent.drain_outcomes()
        event_names = [outcome.event.value for outcome in outcomes]

        reward = float(self._ledger.step_reward)
        terminated = self._ledger.ended
        truncated = not terminated and world.time_remaining == 0

        info = self._get_info(event_names)

        if self._debug:
            print(f"[DEBUG] Step {world.tick}: reward={reward:+.2f}, "
                  f"carried={agent.carried}, banked={agent.banked}, events={event_names}")
            if terminated:
                print(f"[DEBUG] TERMINATED: return={self._ledger.cumulative_reward:+.2f}")

        return self._get_obs(), reward, terminated, truncated, info

    def _dispatch(self, events: HostEvents) -> None:
        """Forward host contacts to the agent callbacks."""
        world = self._world
        agent = self._agent

        if events.wall_hit:
            agent.on_wall_collision()

        for ball in events.touched_balls:
            if agent.on_ball_collision(ball):
                world.attach(ball)

        for team in events.entered_bases:
            if team == agent.team:
                world.deposit(team)
            agent.on_base_enter(team)

    def close(self) -> None:
        """Nothing to release; kept for API symmetry."""

    @property
    def world(self) -> ArenaWorld:
        """Access to underlying arena (for debugging/tools)."""
        return self._world

    @property
    def agent(self) -> CollectorAgent:
        return self._agent

    @property
    def ledger(self) -> EpisodeLedger:
        return self._ledger

    @property
    def config(self) -> GameConfig:
        """Arena configuration."""
        return self._config
