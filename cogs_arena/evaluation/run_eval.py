"""
Evaluation Harness
==================

Runs agent submissions against the fixed seed bank and reports episode returns.

Usage:
    python -m cogs_arena.evaluation.run_eval --agent contestants/baseline_forager
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np

from cogs_arena.arena_core.env_gym import ArenaEnv


@dataclass
class EvalResult:
    """Result for a single seed."""
    seed: int
    episode_return: float
    banked: int
    ticks: int
    terminated: bool
    elapsed_time: float


@dataclass
class EvalSummary:
    """Summary of evaluation across all seeds."""
    mean_return: float
    std_return: float
    min_return: float
    max_return: float
    mean_banked: float
    terminal_rate: float
    total_time: float
    results: List[EvalResult]


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """
    Load the evaluation seed bank.

    Args:
        path: Path to seed_bank.json. Uses default if None.

    Returns:
        List of seeds.
    """
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")

    with open(path, "r") as f:
        data = json.load(f)

    return [int(seed) for seed in data["seeds"]]


def load_agent(agent_path: str) -> Callable:
    """
    Load an agent from a path.

    Args:
        agent_path: Path to agent directory or agent.py file.

    Returns:
        Agent's act function.
    """
    agent_path = Path(agent_path)

    if agent_path.is_dir():
        agent_file = agent_path / "agent.py"
    else:
        agent_file = agent_path

    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    spec = importlib.util.spec_from_file_location("agent_module", agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules["agent_module"] = module
    spec.loader.exec_module(module)

    # Look for ArenaAgent class or act function
    if hasattr(module, "ArenaAgent"):
        agent_instance = getattr(module, "ArenaAgent")()
        if hasattr(agent_instance, "act"):
            return agent_instance.act
        raise AttributeError("ArenaAgent class must have an 'act' method")

    elif hasattr(module, "act"):
        return getattr(module, "act")

    else:
        raise AttributeError(
            "Agent module must have either 'ArenaAgent' class with 'act' method "
            "or standalone 'act' function"
        )


def evaluate_single_seed(
    agent_fn: Callable,
    seed: int,
    config_path: Optional[str] = None,
    verbose: bool = False
) -> EvalResult:
    """
    Evaluate agent on a single seed.

    Args:
        agent_fn: Agent's act function (obs) -> action.
        seed: Random seed.
        config_path: Optional arena_config.yaml override.
        verbose: If True, print progress.

    Returns:
        EvalResult for this seed.
    """
    env = ArenaEnv(config_path=config_path)

    obs, info = env.reset(seed=seed)
    start_time = time.time()

    terminated = truncated = False
    while not (terminated or truncated):
        action = agent_fn(obs)
        obs, _, terminated, truncated, info = env.step(action)

    elapsed = time.time() - start_time

    result = EvalResult(
        seed=seed,
        episode_return=float(info["episode_return"]),
        banked=int(info["banked"]),
        ticks=int(info["tick"]),
        terminated=bool(terminated),
        elapsed_time=elapsed
    )

    env.close()

    if verbose:
        print(f"  Seed {seed}: return={result.episode_return:+.2f}, "
              f"banked={result.banked}, ticks={result.ticks}, time={elapsed:.2f}s")

    return result


def evaluate_agent(
    agent_fn: Callable,
    seeds: Optional[List[int]] = None,
    config_path: Optional[str] = None,
    verbose: bool = True
) -> EvalSummary:
    """
    Evaluate agent on all seeds in the seed bank.

    Args:
        agent_fn: Agent's act function (obs) -> action.
        seeds: List of seeds. Uses seed_bank.json if None.
        config_path: Optional arena_config.yaml override.
        verbose: If True, print progress.

    Returns:
        EvalSummary with aggregate statistics.
    """
    if seeds is None:
        seeds = load_seed_bank()

    if verbose:
        print(f"Evaluating on {len(seeds)} seeds...")

    results: List[EvalResult] = []
    total_start = time.time()

    for i, seed in enumerate(seeds):
        if verbose:
            print(f"[{i+1}/{len(seeds)}] Running seed {seed}...")

        results.append(evaluate_single_seed(
            agent_fn,
            seed,
            config_path=config_path,
            verbose=verbose
        ))

    total_time = time.time() - total_start

    returns = [r.episode_return for r in results]

    summary = EvalSummary(
        mean_return=float(np.mean(returns)),
        std_return=float(np.std(returns)),
        min_return=float(min(returns)),
        max_return=float(max(returns)),
        mean_banked=float(np.mean([r.banked for r in results])),
        terminal_rate=float(np.mean([r.terminated for r in results])),
        total_time=total_time,
        results=results
    )

    if verbose:
        print()
        print("=" * 50)
        print("EVALUATION SUMMARY")
        print("=" * 50)
        print(f"Seeds evaluated: {len(seeds)}")
        print(f"Mean return:     {summary.mean_return:+.2f}")
        print(f"Std deviation:   {summary.std_return:.2f}")
        print(f"Min return:      {summary.min_return:+.2f}")
        print(f"Max return:      {summary.max_return:+.2f}")
        print(f"Mean banked:     {summary.mean_banked:.2f}")
        print(f"Terminal rate:   {summary.terminal_rate:.0%}")
        print(f"Total time:      {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_results(
    summary: EvalSummary,
    agent_name: str,
    output_path: str
) -> None:
    """Save evaluation results to JSON."""
    data = {
        "agent": agent_name,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "mean_return": summary.mean_return,
        "std_return": summary.std_return,
        "min_return": summary.min_return,
        "max_return": summary.max_return,
        "mean_banked": summary.mean_banked,
        "terminal_rate": summary.terminal_rate,
        "total_time": summary.total_time,
        "results": [
            {
                "seed": r.seed,
                "episode_return": r.episode_return,
                "banked": r.banked,
                "ticks": r.ticks,
                "terminated": r.terminated,
                "elapsed_time": r.elapsed_time
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Evaluate an arena agent")
    parser.add_argument(
        "--agent",
        type=str,
        required=True,
        help="Path to agent directory or agent.py file"
    )
    parser.add_argument(
        "--seeds",
        type=str,
        default=None,
        help="Path to seed bank JSON (uses default if not specified)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to arena_config.yaml (uses default if not specified)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save results JSON"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce output verbosity"
    )

    args = parser.parse_args()

    print(f"Loading agent from {args.agent}...")
    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    seeds = None
    if args.seeds:
        seeds = load_seed_bank(args.seeds)

    summary = evaluate_agent(
        agent_fn,
        seeds=seeds,
        config_path=args.config,
        verbose=not args.quiet
    )

    if args.output:
        agent_name = Path(args.agent).name
        save_results(summary, agent_name, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
