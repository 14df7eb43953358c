"""
Arena Core - The collector policy and its host stand-ins.

Main exports:
- CollectorAgent: Per-tick policy wiring counter, intent and rewards
- RewardPolicy: Pure reward table
- IntentSelector: Movement/shoot intent from a requested action
- CarryBankCounter: Carried/banked ball counts
- ArenaWorld: Minimal kinematic host arena
- ArenaEnv: Gymnasium environment
- GameConfig: Configuration loaded from arena_config.yaml
"""

from cogs_arena.arena_core.config_loader import GameConfig, load_config
from cogs_arena.arena_core.actions import ActionRequest, MoveAxis, RotateAxis
from cogs_arena.arena_core.counters import AgentState, BallState, CarryBankCounter
from cogs_arena.arena_core.intent import AgentPose, Intent, IntentSelector
from cogs_arena.arena_core.rewards import EventKind, RewardOutcome, RewardPolicy
from cogs_arena.arena_core.agent import CollectorAgent, EpisodeLedger
from cogs_arena.arena_core.world import ArenaWorld, HostEvents
from cogs_arena.arena_core.env_gym import ArenaEnv

__all__ = [
    "GameConfig",
    "load_config",
    "ActionRequest",
    "MoveAxis",
    "RotateAxis",
    "AgentState",
    "BallState",
    "CarryBankCounter",
    "AgentPose",
    "Intent",
    "IntentSelector",
    "EventKind",
    "RewardOutcome",
    "RewardPolicy",
    "CollectorAgent",
    "EpisodeLedger",
    "ArenaWorld",
    "HostEvents",
    "ArenaEnv",
]
