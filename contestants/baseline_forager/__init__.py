"""
Baseline Forager Agent Package

A scripted agent that follows the collect-two-then-return strategy using
only the high-level seek/shoot actions. Serves as a benchmark and example.
"""

from .agent import ArenaAgent, create_agent

__all__ = ["ArenaAgent", "create_agent"]
