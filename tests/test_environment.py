import numpy as np
import pytest

from qnav.domain.qlearning import EnvironmentModel, NavigationAgent
from qnav.domain.types import Obstacle, SimulationConfig, Target, distance, vec3
from qnav.utils.rng import SeededRNG


@pytest.fixture
def config():
    return SimulationConfig()


@pytest.fixture
def env(config):
    return EnvironmentModel(config)


def make_agent(config, position):
    agent = NavigationAgent(0, config)
    agent.position = position
    return agent


def test_collides_inside_radius(env):
    assert env.collides(vec3(0.0, 1.0, 4.0))
    assert env.collides(vec3(0.5, 0.5, 4.5))


def test_no_collision_in_open_space(env):
    assert not env.collides(vec3(-10.0, 0.5, -10.0))
    assert not env.collides(vec3(0.0, 0.5, 0.0))


def test_collision_uses_full_3d_distance(env):
    # 1.45 horizontally from (0, 1, 4) but 0.5 lower: sqrt(1.45^2 + 0.5^2) > 1.5
    assert not env.collides(vec3(1.45, 0.5, 4.0))
    assert env.collides(vec3(1.45, 1.0, 4.0))


def test_progress_reward_away_from_terminals(config, env):
    old = vec3(-10.0, 0.5, -10.0)
    new = vec3(-10.0, 0.5, -9.85)
    agent = make_agent(config, old)
    target = config.target.position

    expected = (distance(old, target) - distance(new, target)) * 10 - 0.1
    assert env.reward(agent, new) == pytest.approx(expected)
    assert 0 < env.reward(agent, new) < 100


def test_moving_away_is_penalized(config, env):
    agent = make_agent(config, vec3(-10.0, 0.5, -10.0))
    assert env.reward(agent, vec3(-10.15, 0.5, -10.0)) < -0.1


def test_goal_reward_short_circuits_collision():
    config = SimulationConfig(
        target=Target((8.0, 0.15, 8.0)),
        obstacles=[Obstacle((8.0, 0.5, 8.0))],
    )
    env = EnvironmentModel(config)
    agent = make_agent(config, vec3(7.9, 0.5, 8.0))

    new_position = vec3(7.9, 0.5, 8.15)
    assert env.collides(new_position)
    assert env.reward(agent, new_position) == 100


def test_collision_reward(config, env):
    agent = make_agent(config, vec3(0.0, 1.0, 4.0))
    for action in range(4):
        new_position = env.step(agent, action)
        assert env.reward(agent, new_position) == -50


def test_goal_scenario_reward(config, env):
    agent = make_agent(config, vec3(7.9, 0.5, 8.0))
    new_position = env.step(agent, 0)
    assert distance(new_position, config.target.position) < 1.5
    assert env.reward(agent, new_position) == 100


@pytest.mark.parametrize(
    ("action", "expected"),
    [
        (0, [0.0, 0.0, 0.15]),
        (1, [0.0, 0.0, -0.15]),
        (2, [-0.15, 0.0, 0.0]),
        (3, [0.15, 0.0, 0.0]),
    ],
)
def test_velocity_is_axis_aligned(env, action, expected):
    assert env.velocity_for(action) == pytest.approx(np.array(expected))


def test_velocity_scales_with_speed_multiplier(env):
    assert env.velocity_for(0, 2.0) == pytest.approx(np.array([0.0, 0.0, 0.3]))


@pytest.mark.parametrize("action", [-1, 4, 7])
def test_invalid_action_is_rejected(env, action):
    with pytest.raises(ValueError):
        env.velocity_for(action)


def test_step_does_not_move_agent(config, env):
    agent = make_agent(config, vec3(1.0, 0.5, 1.0))
    new_position = env.step(agent, 3)
    assert new_position == pytest.approx(np.array([1.15, 0.5, 1.0]))
    assert agent.position == pytest.approx(np.array([1.0, 0.5, 1.0]))


def test_step_clamps_at_boundary(config, env):
    agent = make_agent(config, vec3(13.95, 0.5, -13.95))
    assert env.step(agent, 3)[0] == 14.0
    assert env.step(agent, 1)[2] == -14.0


@pytest.mark.parametrize(
    "position",
    [
        vec3(20.0, 0.5, -30.0),
        vec3(-14.0, 0.5, 14.0),
        vec3(3.0, 7.0, -2.5),
        vec3(-100.0, -1.0, 100.0),
    ],
)
def test_clamp_is_idempotent_and_bounded(env, position):
    once = env.clamp(position)
    twice = env.clamp(once)
    assert once == pytest.approx(twice)
    assert -14.0 <= once[0] <= 14.0
    assert -14.0 <= once[2] <= 14.0
    assert once[1] == position[1]


def test_spawn_position_near_corner(env):
    rng = SeededRNG(5)
    for _ in range(100):
        position = env.spawn_position(rng)
        assert -8.0 <= position[0] < -6.0
        assert -8.0 <= position[2] < -6.0
        assert position[1] == 0.5


def test_reached_target(env):
    assert env.reached_target(vec3(8.0, 0.5, 8.0))
    assert not env.reached_target(vec3(6.0, 0.5, 8.0))


def test_exactly_capture_radius_gets_progress_reward():
    config = SimulationConfig(target=Target((8.0, 0.15, 8.0)), obstacles=[])
    env = EnvironmentModel(config)
    old = vec3(8.0, 0.15, 6.35)
    new = vec3(8.0, 0.15, 6.5)
    agent = make_agent(config, old)

    assert distance(new, config.target.position) == 1.5
    assert not env.reached_target(new)
    expected = (distance(old, config.target.position) - 1.5) * 10 - 0.1
    assert env.reward(agent, new) == pytest.approx(expected)


def test_exactly_collision_radius_gets_progress_reward():
    config = SimulationConfig(obstacles=[Obstacle((0.0, 1.0, 4.0))])
    env = EnvironmentModel(config)
    old = vec3(0.0, 1.0, 5.65)
    new = vec3(0.0, 1.0, 5.5)
    agent = make_agent(config, old)
    target = config.target.position

    assert distance(new, vec3(0.0, 1.0, 4.0)) == 1.5
    assert not env.collides(new)
    expected = (distance(old, target) - distance(new, target)) * 10 - 0.1
    assert env.reward(agent, new) == pytest.approx(expected)
    assert env.reward(agent, new) != -50
