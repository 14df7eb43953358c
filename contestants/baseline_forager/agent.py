"""
Baseline Forager Agent - Collects two balls at a time, then guards.

This is a simple scripted agent that never touches the manual movement
axes. It reads the carried/banked counts from the observation and picks
one of the high-level actions:

- No majority yet and room to carry: seek the nearest ball
- Full, or holding the ball that completes the majority: return to base
- Majority banked: shoot and head home

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark for comparing trained policies
"""

import numpy as np
from typing import Any, Dict


# Must agree with arena_config.yaml
MAJORITY_THRESHOLD = 4
CARRY_CAPACITY = 2

# Action vector indices
SHOOT, SEEK_TARGET, SEEK_BASE = 2, 3, 4


class ArenaAgent:
    """Scripted forager driven entirely by the carried/banked counts."""

    def __init__(self, debug: bool = False):
        """
        Initialize the agent.

        Args:
            debug: If True, print decisions to stdout.
        """
        self.debug = debug

    def reset(self) -> None:
        """Stateless; nothing to reset."""

    def act(self, observation: Dict[str, Any]) -> np.ndarray:
        """
        Choose this tick's action.

        Args:
            observation: Dict of numpy arrays from the environment.

        Returns:
            5-branch action vector.
        """
        carried = int(observation["carried"])
        banked = int(observation["banked"])

        action = np.zeros(5, dtype=np.int64)

        if banked > MAJORITY_THRESHOLD:
            action[SHOOT] = 1
            action[SEEK_BASE] = 1
        elif carried >= CARRY_CAPACITY or (carried == 1 and banked == MAJORITY_THRESHOLD):
            action[SEEK_BASE] = 1
        else:
            action[SEEK_TARGET] = 1

        if self.debug:
            print(f"[Forager] carried={carried}, banked={banked}, action={action.tolist()}")

        return action


def create_agent(**kwargs) -> ArenaAgent:
    """Factory function to create an agent instance."""
    return ArenaAgent(**kwargs)
