"""
Tests for per-tick agent orchestration and the episode ledger.
"""

import numpy as np
import pytest

from cogs_arena.arena_core.agent import CollectorAgent, EpisodeLedger
from cogs_arena.arena_core.config_loader import load_config
from cogs_arena.arena_core.counters import BallState
from cogs_arena.arena_core.intent import AgentPose
from cogs_arena.arena_core.rewards import EventKind

TEAM = 1
OPPONENT = 2


def at(x, z):
    return np.array([x, 0.0, z])


def make_balls(banked=0, free=4):
    balls = [BallState(i, at(0, 0), bank_owner=TEAM) for i in range(banked)]
    balls += [BallState(banked + i, at(5 + i, 5)) for i in range(free)]
    return balls


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def ledger():
    return EpisodeLedger()


@pytest.fixture
def agent(config, ledger):
    return CollectorAgent(TEAM, controller=ledger, config=config)


@pytest.fixture
def pose():
    return AgentPose(position=at(0, 0), forward=np.array([0.0, 0.0, 1.0]))


def load_up(agent, balls, count):
    """Pick up ``count`` free balls."""
    free = [b for b in balls if b.bank_owner is None]
    for ball in free[:count]:
        assert agent.on_ball_collision(ball)
        ball.carried_by_agent = True


class TestEpisodeLedger:

    def test_add_accumulates(self, ledger):
        ledger.begin_step()
        ledger.add_reward(0.5)
        ledger.add_reward(-0.2)

        assert ledger.step_reward == pytest.approx(0.3)
        assert ledger.cumulative_reward == pytest.approx(0.3)

    def test_set_replaces_current_step(self, ledger):
        ledger.begin_step()
        ledger.add_reward(0.5)
        ledger.begin_step()
        ledger.add_reward(-0.5)
        ledger.set_reward(1.0)

        assert ledger.step_reward == pytest.approx(1.0)
        assert ledger.cumulative_reward == pytest.approx(1.5)

    def test_end_and_reset(self, ledger):
        ledger.begin_step()
        ledger.add_reward(1.0)
        ledger.end_episode()
        assert ledger.ended

        ledger.reset()
        assert not ledger.ended
        assert ledger.cumulative_reward == 0.0
        assert ledger.steps == 0


class TestFixedUpdate:

    def test_banked_is_rescanned(self, agent):
        balls = make_balls(banked=3)
        agent.fixed_update(balls, is_frozen=False)
        assert agent.banked == 3

        balls[0].bank_owner = None
        agent.fixed_update(balls, is_frozen=False)
        assert agent.banked == 2

    def test_freeze_onset_resets_carried_once(self, agent, ledger):
        balls = make_balls()
        agent.fixed_update(balls, is_frozen=False)
        load_up(agent, balls, 2)
        assert agent.carried == 2

        ledger.begin_step()
        outcome = agent.fixed_update(balls, is_frozen=True)

        assert outcome.event == EventKind.FREEZE
        assert agent.carried == 0
        assert ledger.step_reward == pytest.approx(-0.3)
        assert not ledger.ended

        # Still frozen: no second penalty
        ledger.begin_step()
        assert agent.fixed_update(balls, is_frozen=True) is None
        assert ledger.step_reward == 0.0

    def test_new_freeze_after_recovery_is_charged(self, agent, ledger):
        balls = make_balls()
        agent.fixed_update(balls, is_frozen=True)
        agent.fixed_update(balls, is_frozen=False)
        agent.fixed_update(balls, is_frozen=True)

        assert ledger.cumulative_reward == pytest.approx(-0.6)

    def test_frozen_agent_refuses_pickup(self, agent, ledger):
        balls = make_balls()
        agent.fixed_update(balls, is_frozen=True)

        assert not agent.on_ball_collision(balls[0])
        assert agent.carried == 0
        assert ledger.cumulative_reward == pytest.approx(-0.3)


class TestCollisions:

    def test_pickup_rewards(self, agent, ledger):
        balls = make_balls()
        agent.fixed_update(balls, is_frozen=False)
        load_up(agent, balls, 3)

        assert agent.carried == 3
        # +0.5, +0.5, then -0.5 for the third ball
        assert ledger.cumulative_reward == pytest.approx(0.5)

    def test_pickup_after_majority_is_penalised(self, agent, ledger):
        balls = make_balls(banked=5)
        agent.fixed_update(balls, is_frozen=False)
        load_up(agent, balls, 1)

        assert agent.carried == 1
        assert ledger.cumulative_reward == pytest.approx(-0.5)

    def test_refused_pickup_still_recorded(self, agent, ledger):
        balls = make_balls(banked=1)
        agent.fixed_update(balls, is_frozen=False)

        assert not agent.on_ball_collision(balls[0])
        assert [o.event for o in agent.drain_outcomes()] == [EventKind.PICKUP]
        assert ledger.cumulative_reward == 0.0

    def test_wall(self, agent, ledger):
        agent.on_wall_collision()

        assert ledger.cumulative_reward == pytest.approx(-0.7)
        assert not ledger.ended


class TestBaseArrival:

    def test_full_trip_ends_episode(self, agent, ledger):
        balls = make_balls(banked=3)
        agent.fixed_update(balls, is_frozen=False)
        load_up(agent, balls, 2)

        ledger.begin_step()
        outcome = agent.on_base_enter(TEAM)

        assert outcome.terminal
        assert agent.banked == 5
        assert agent.carried == 0
        assert ledger.ended
        assert ledger.step_reward == pytest.approx(1.0)
        assert agent.episode_over

    def test_terminal_reward_replaces_step_reward(self, agent, ledger, pose):
        balls = make_balls(banked=5)
        agent.fixed_update(balls, is_frozen=False)

        ledger.begin_step()
        agent.on_action_received([0, 0, 0, 1, 0], pose, balls, at(-30, 0))
        assert ledger.step_reward == pytest.approx(-0.2)

        agent.on_base_enter(TEAM)
        assert ledger.step_reward == pytest.approx(1.0)

    def test_opponent_base_is_ignored(self, agent, ledger):
        assert agent.on_base_enter(OPPONENT) is None
        assert not ledger.ended

    def test_events_after_terminal_are_ignored(self, agent, ledger):
        balls = make_balls()
        agent.fixed_update(balls, is_frozen=False)
        agent.on_base_enter(TEAM)
        total = ledger.cumulative_reward

        assert agent.on_wall_collision() is None
        assert not agent.on_ball_collision(balls[0])
        assert agent.on_base_enter(TEAM) is None
        assert ledger.cumulative_reward == total

    def test_reset_starts_fresh_episode(self, agent):
        balls = make_balls()
        agent.fixed_update(balls, is_frozen=False)
        load_up(agent, balls, 1)
        agent.on_base_enter(TEAM)
        agent.reset()

        assert not agent.episode_over
        assert agent.carried == 0
        assert agent.banked == 0


class TestActionHandling:

    def test_request_rewards_and_intent(self, agent, ledger, pose):
        balls = make_balls()
        agent.fixed_update(balls, is_frozen=False)

        intent = agent.on_action_received([0, 0, 1, 1, 1], pose, balls, at(-30, 0))

        # shoot -0.5, seek target +0.2, seek base -0.2
        assert ledger.cumulative_reward == pytest.approx(-0.5)
        assert intent.laser
        assert agent.last_intent is intent

    def test_collaborators_receive_intent(self, config, pose):
        moves = []
        lasers = []
        agent = CollectorAgent(
            TEAM,
            config=config,
            movement=lambda direction, rotation: moves.append((direction, rotation)),
            laser=lasers.append,
        )

        agent.on_action_received([1, 0, 1, 0, 0], pose, [], at(-30, 0))

        assert len(moves) == 1
        np.testing.assert_allclose(moves[0][0], [0.0, 0.0, 1.0])
        assert lasers == [True]

    def test_default_controller_is_ledger(self, config):
        agent = CollectorAgent(TEAM, config=config)

        assert isinstance(agent.controller, EpisodeLedger)
