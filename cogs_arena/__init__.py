"""
Cogs Arena Package
==================

Decision and reward-shaping policy for a ball-collecting agent in a
two-team capture-and-defend arena, plus the evaluation harness.

The core package holds:

- Carry/bank counting
- Intent selection (seek ball, return home, guard)
- Reward shaping and the terminal base-arrival rule

All tunable values live in arena_config.yaml.
"""
