"""Q-Learning navigation engine: state encoding, value table, policy and environment."""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import numpy as np

from .types import (
    ACTIONS, ACTION_DELTAS, ActionInt, Episode, GlobalStats, SimulationConfig,
    StateKey, distance,
)
from ..utils.rng import SeededRNG


class GridStateEncoder:
    """Maps a continuous world position to the grid cell containing it."""

    def __init__(self, grid_size: float = 2.0):
        self.grid_size = grid_size

    def encode(self, position: np.ndarray) -> StateKey:
        """Return (floor(x / G), floor(z / G)) for a world position."""
        return (
            math.floor(position[0] / self.grid_size),
            math.floor(position[2] / self.grid_size),
        )


class QTable:
    """
    Sparse per-agent table of (state, action) value estimates.

    Entries are created on first write and never evicted. The world is clamped
    to [-14, 14] on both horizontal axes, so with a cell size of 2 the encoder
    only ever produces cells -7..7 per axis: at most 15 * 15 states * 4 actions
    = 900 entries per agent.
    """

    def __init__(self):
        self._values: Dict[Tuple[StateKey, ActionInt], float] = {}

    def __len__(self) -> int:
        return len(self._values)

    def get(self, state: StateKey, action: ActionInt) -> float:
        """Get Q-value for state-action pair, 0.0 if never written."""
        return self._values.get((state, action), 0.0)

    def set(self, state: StateKey, action: ActionInt, value: float):
        """Set Q-value for state-action pair."""
        self._values[(state, action)] = float(value)

    def best(self, state: StateKey) -> Tuple[ActionInt, float]:
        """Get the highest-valued action for a state, lowest index on ties."""
        best_action = ACTIONS[0]
        best_value = self.get(state, best_action)
        for action in ACTIONS[1:]:
            value = self.get(state, action)
            if value > best_value:
                best_action = action
                best_value = value
        return best_action, best_value

    def max_value(self, state: StateKey) -> float:
        """Get the maximum Q-value for a state."""
        return self.best(state)[1]

    def clear(self):
        self._values.clear()


class ActionSelector:
    """Epsilon-greedy policy over the four movement actions."""

    def __init__(self, rng: SeededRNG):
        self.rng = rng

    def select(self, q_table: QTable, state: StateKey, epsilon: float) -> ActionInt:
        """Explore with probability epsilon, otherwise exploit the Q-table."""
        if self.rng.random() < epsilon:
            return self.rng.choice(ACTIONS)
        return q_table.best(state)[0]


class EnvironmentModel:
    """Static world: obstacles, target, boundary and the reward function."""

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.target_position = config.target.position
        self.target_radius = config.target.radius
        self._obstacles = [(obstacle.position, obstacle.radius) for obstacle in config.obstacles]

    def collides(self, position: np.ndarray) -> bool:
        """Check whether a position lies inside any obstacle's collision zone."""
        for center, radius in self._obstacles:
            if distance(position, center) < radius:
                return True
        return False

    def reached_target(self, position: np.ndarray) -> bool:
        """Check whether a position lies inside the target's capture radius."""
        return distance(position, self.target_position) < self.target_radius

    def reward(self, agent: "NavigationAgent", new_position: np.ndarray) -> float:
        """
        Reward for moving the agent from its current position to new_position.

        Reaching the target and colliding are terminal and short-circuit the
        progress term, in that order.
        """
        new_distance = distance(new_position, self.target_position)
        if new_distance < self.target_radius:
            return self.config.reward_goal

        if self.collides(new_position):
            return self.config.reward_collision

        old_distance = distance(agent.position, self.target_position)
        progress = (old_distance - new_distance) * self.config.progress_scale
        return progress + self.config.reward_step

    def velocity_for(self, action: ActionInt, speed_multiplier: float = 1.0) -> np.ndarray:
        """Axis-aligned velocity for an action; the other horizontal axis is zeroed."""
        if action not in ACTION_DELTAS:
            raise ValueError(f"Invalid action: {action!r}")
        dx, dz = ACTION_DELTAS[action]
        speed = self.config.base_speed * speed_multiplier
        return np.array([dx * speed, 0.0, dz * speed])

    def clamp(self, position: np.ndarray) -> np.ndarray:
        """Clip the horizontal axes to the world boundary."""
        bound = self.config.world_bound
        clamped = position.copy()
        clamped[0] = min(bound, max(-bound, clamped[0]))
        clamped[2] = min(bound, max(-bound, clamped[2]))
        return clamped

    def step(self, agent: "NavigationAgent", action: ActionInt,
             speed_multiplier: float = 1.0) -> np.ndarray:
        """Candidate position after applying an action. Does not move the agent."""
        return self.clamp(agent.position + self.velocity_for(action, speed_multiplier))

    def spawn_position(self, rng: SeededRNG) -> np.ndarray:
        """Random respawn point in the square just past the spawn corner."""
        corner_x, corner_z = self.config.spawn_corner
        jitter = self.config.spawn_jitter
        return np.array([
            corner_x + rng.random() * jitter,
            self.config.agent_height,
            corner_z + rng.random() * jitter,
        ])


@dataclass
class SimulationContext:
    """Everything a tick may read or write besides the agent itself."""
    config: SimulationConfig
    environment: EnvironmentModel
    stats: GlobalStats
    rng: SeededRNG
    selector: ActionSelector

    @classmethod
    def create(cls, config: Optional[SimulationConfig] = None,
               seed: Optional[int] = None) -> "SimulationContext":
        config = config or SimulationConfig()
        rng = SeededRNG(seed)
        return cls(
            config=config,
            environment=EnvironmentModel(config),
            stats=GlobalStats(),
            rng=rng,
            selector=ActionSelector(rng),
        )


class NavigationAgent:
    """Q-Learning agent navigating toward the shared target."""

    def __init__(self, agent_id: int, config: SimulationConfig):
        self.agent_id = agent_id
        self.q_table = QTable()
        self.encoder = GridStateEncoder(config.grid_size)
        self.max_path_points = config.max_path_points
        self.position = config.spawn_position
        self.velocity = np.zeros(3)
        self.episode_reward = 0.0
        self.step_count = 0
        self.path_points: List[np.ndarray] = []

    def update_q_value(self, context: SimulationContext, state: StateKey,
                       action: ActionInt, reward: float, next_state: StateKey):
        """Update Q-value using Q-learning update rule."""
        config = context.config
        current_q = self.q_table.get(state, action)
        next_q_max = self.q_table.max_value(next_state)

        target = reward + config.discount_factor * next_q_max
        new_q = current_q + config.learning_rate * (target - current_q)

        self.q_table.set(state, action, new_q)

    def tick(self, context: SimulationContext) -> Optional[Episode]:
        """
        Execute one simulation step.

        Returns the finished Episode when this step ended the agent's episode,
        in which case the agent has already been respawned.
        """
        config = context.config
        env = context.environment
        epsilon_used = config.epsilon

        state = self.encoder.encode(self.position)
        action = context.selector.select(self.q_table, state, epsilon_used)

        velocity = env.velocity_for(action, config.speed_multiplier)
        new_position = env.step(self, action, config.speed_multiplier)
        reward = env.reward(self, new_position)
        next_state = self.encoder.encode(new_position)

        self.update_q_value(context, state, action, reward, next_state)

        # Commit
        self.velocity = velocity
        self.position = new_position
        self.episode_reward += reward
        self.append_path_point(new_position)
        self.step_count += 1
        context.stats.steps += 1
        context.stats.total_reward += reward

        if env.reached_target(self.position):
            context.stats.success_count += 1
            return self._finish_episode(context, reached_goal=True, epsilon_used=epsilon_used)
        if env.collides(self.position) or self.step_count > config.max_steps_per_episode:
            return self._finish_episode(context, reached_goal=False, epsilon_used=epsilon_used)
        return None

    def _finish_episode(self, context: SimulationContext, reached_goal: bool,
                        epsilon_used: float) -> Episode:
        episode = Episode(
            number=context.stats.episodes,
            agent_id=self.agent_id,
            steps=self.step_count,
            total_reward=self.episode_reward,
            reached_goal=reached_goal,
            epsilon_used=epsilon_used
        )
        self.reset(context)
        return episode

    def append_path_point(self, point: np.ndarray):
        """Record a trail point, evicting the oldest past the cap."""
        self.path_points.append(point.copy())
        if len(self.path_points) > self.max_path_points:
            self.path_points.pop(0)

    def reset(self, context: SimulationContext):
        """Respawn for a new episode. The Q-table is kept."""
        self.position = context.environment.spawn_position(context.rng)
        self.velocity = np.zeros(3)
        self.episode_reward = 0.0
        self.step_count = 0
        context.stats.episodes += 1

    def clear_path(self):
        self.path_points = []

    def clear_q_table(self):
        self.q_table.clear()
