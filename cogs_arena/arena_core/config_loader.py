"""
Configuration Loader
====================

Loads and validates arena_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import yaml


@dataclass(frozen=True)
class RewardConfig:
    """Reward values for every event the policy scores."""
    freeze: float
    pickup_good: float
    pickup_bad: float
    wall: float
    base_good: float
    base_bad: float
    shoot_good: float
    shoot_bad: float
    seek_target_good: float
    seek_target_bad: float
    seek_base_good: float
    seek_base_bad: float


@dataclass(frozen=True)
class StrategyConfig:
    """Thresholds shared by the reward policy and the intent selector."""
    majority_threshold: int       # Majority means banked > majority_threshold
    carry_capacity: int           # Balls carried before returning home
    heading_dead_band_deg: float  # Drive straight inside +/- this angle
    target_search_radius: float   # Balls further than this are ignored

    def has_majority(self, banked: int) -> bool:
        """True once the home base holds a strict majority."""
        return banked > self.majority_threshold


@dataclass(frozen=True)
class ArenaConfig:
    """Host arena geometry and kinematics."""
    half_size: float
    num_balls: int
    self_team: int
    opponent_team: int
    base_radius: float
    team_1_base: Tuple[float, float]
    team_2_base: Tuple[float, float]
    pickup_radius: float
    move_speed: float
    turn_speed_deg: float
    spawn_margin: float

    def base_xz(self, team: int) -> Tuple[float, float]:
        """Ground-plane position of a team's home base."""
        if team == 1:
            return self.team_1_base
        if team == 2:
            return self.team_2_base
        raise ValueError(f"Invalid team id: {team}")


@dataclass(frozen=True)
class EpisodeConfig:
    """Episode timing and stun settings."""
    max_ticks: int
    freeze_ticks: int
    freeze_probability: float


@dataclass(frozen=True)
class GameConfig:
    """
    Complete configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    rewards: RewardConfig
    strategy: StrategyConfig
    arena: ArenaConfig
    episode: EpisodeConfig


def _parse_point(point_data: List) -> Tuple[float, float]:
    """Parse an [x, z] ground-plane point from YAML."""
    if len(point_data) != 2:
        raise ValueError(f"Point must have 2 values [x, z], got {point_data}")
    return (float(point_data[0]), float(point_data[1]))


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    strategy = config.strategy
    arena = config.arena

    if strategy.majority_threshold < 0:
        raise ValueError(
            f"majority_threshold must be >= 0, got {strategy.majority_threshold}"
        )

    if strategy.carry_capacity < 1:
        raise ValueError(f"carry_capacity must be >= 1, got {strategy.carry_capacity}")

    if strategy.heading_dead_band_deg <= 0 or strategy.heading_dead_band_deg >= 180:
        raise ValueError(
            f"heading_dead_band_deg must be in (0, 180), got {strategy.heading_dead_band_deg}"
        )

    if strategy.target_search_radius <= 0:
        raise ValueError(
            f"target_search_radius must be positive, got {strategy.target_search_radius}"
        )

    # A majority has to be reachable with the balls in play
    if arena.num_balls <= strategy.majority_threshold:
        raise ValueError(
            f"num_balls ({arena.num_balls}) must exceed "
            f"majority_threshold ({strategy.majority_threshold})"
        )

    if arena.half_size <= 0:
        raise ValueError(f"half_size must be positive, got {arena.half_size}")

    teams = (arena.self_team, arena.opponent_team)
    if arena.self_team == arena.opponent_team or not set(teams) <= {1, 2}:
        raise ValueError(f"Teams must be 1 and 2 in some order, got {teams}")

    for team in teams:
        x, z = arena.base_xz(team)
        if abs(x) > arena.half_size or abs(z) > arena.half_size:
            raise ValueError(f"Base for team {team} lies outside the arena: {(x, z)}")

    if arena.spawn_margin < 0 or arena.spawn_margin >= arena.half_size:
        raise ValueError(
            f"spawn_margin ({arena.spawn_margin}) leaves no room to spawn balls"
        )

    if config.episode.max_ticks < 1:
        raise ValueError(f"max_ticks must be >= 1, got {config.episode.max_ticks}")

    if not 0.0 <= config.episode.freeze_probability <= 1.0:
        raise ValueError(
            f"freeze_probability must be in [0, 1], got {config.episode.freeze_probability}"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate arena configuration from YAML.

    Args:
        config_path: Path to arena_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "arena_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    rewards_data = raw["rewards"]
    rewards = RewardConfig(
        freeze=float(rewards_data["freeze"]),
        pickup_good=float(rewards_data["pickup_good"]),
        pickup_bad=float(rewards_data["pickup_bad"]),
        wall=float(rewards_data["wall"]),
        base_good=float(rewards_data["base_good"]),
        base_bad=float(rewards_data["base_bad"]),
        shoot_good=float(rewards_data["shoot_good"]),
        shoot_bad=float(rewards_data["shoot_bad"]),
        seek_target_good=float(rewards_data["seek_target_good"]),
        seek_target_bad=float(rewards_data["seek_target_bad"]),
        seek_base_good=float(rewards_data["seek_base_good"]),
        seek_base_bad=float(rewards_data["seek_base_bad"])
    )

    strategy_data = raw["strategy"]
    strategy = StrategyConfig(
        majority_threshold=int(strategy_data["majority_threshold"]),
        carry_capacity=int(strategy_data["carry_capacity"]),
        heading_dead_band_deg=float(strategy_data.get("heading_dead_band_deg", 5.0)),
        target_search_radius=float(strategy_data.get("target_search_radius", 200.0))
    )

    arena_data = raw["arena"]
    arena = ArenaConfig(
        half_size=float(arena_data["half_size"]),
        num_balls=int(arena_data["num_balls"]),
        self_team=int(arena_data.get("self_team", 1)),
        opponent_team=int(arena_data.get("opponent_team", 2)),
        base_radius=float(arena_data["base_radius"]),
        team_1_base=_parse_point(arena_data["team_1_base"]),
        team_2_base=_parse_point(arena_data["team_2_base"]),
        pickup_radius=float(arena_data["pickup_radius"]),
        move_speed=float(arena_data["move_speed"]),
        turn_speed_deg=float(arena_data["turn_speed_deg"]),
        spawn_margin=float(arena_data.get("spawn_margin", 5.0))
    )

    # Episode section is optional
    episode_data = raw.get("episode", {})
    episode = EpisodeConfig(
        max_ticks=int(episode_data.get("max_ticks", 1500)),
        freeze_ticks=int(episode_data.get("freeze_ticks", 20)),
        freeze_probability=float(episode_data.get("freeze_probability", 0.0))
    )

    config = GameConfig(
        rewards=rewards,
        strategy=strategy,
        arena=arena,
        episode=episode
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached arena configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
