"""Core type definitions for the Q-learning navigation simulation."""

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Tuple
import numpy as np

# Discrete grid cell an agent occupies, (cell_x, cell_z)
StateKey = Tuple[int, int]

# Actions the agent can take: forward, backward, left, right
ActionInt = Literal[0, 1, 2, 3]  # Numerical representation

ACTIONS: Tuple[ActionInt, ...] = (0, 1, 2, 3)


def vec3(x: float, y: float, z: float) -> np.ndarray:
    """Build a world-space position/velocity vector."""
    return np.array([x, y, z], dtype=float)


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two world-space points."""
    return float(np.linalg.norm(a - b))


@dataclass(frozen=True)
class Obstacle:
    """Static obstacle with a spherical collision zone."""
    center: Tuple[float, float, float]
    radius: float = 1.5

    @property
    def position(self) -> np.ndarray:
        return vec3(*self.center)


@dataclass(frozen=True)
class Target:
    """The goal shared by every agent."""
    center: Tuple[float, float, float]
    radius: float = 1.5

    @property
    def position(self) -> np.ndarray:
        return vec3(*self.center)


def _default_obstacles() -> List[Obstacle]:
    return [
        Obstacle((0.0, 1.0, 4.0)),
        Obstacle((4.0, 1.0, 0.0)),
        Obstacle((-4.0, 1.0, 4.0)),
        Obstacle((4.0, 1.0, -4.0)),
        Obstacle((-6.0, 1.0, -6.0)),
    ]


@dataclass
class SimulationConfig:
    """Configuration for the navigation simulation."""
    # Live tunables (read fresh every tick)
    learning_rate: float = 0.1
    epsilon: float = 0.3
    speed_multiplier: float = 1.0
    # Fixed at construction, not exposed as a live tunable
    discount_factor: float = 0.95

    # World geometry
    grid_size: float = 2.0
    world_bound: float = 14.0
    base_speed: float = 0.15
    agent_height: float = 0.5
    spawn_corner: Tuple[float, float] = (-8.0, -8.0)
    spawn_jitter: float = 2.0
    target: Target = field(default_factory=lambda: Target((8.0, 0.15, 8.0)))
    obstacles: List[Obstacle] = field(default_factory=_default_obstacles)

    # Rewards
    reward_goal: float = 100.0
    reward_collision: float = -50.0
    reward_step: float = -0.1
    progress_scale: float = 10.0

    # Episode / population limits
    max_steps_per_episode: int = 200
    max_path_points: int = 100
    max_agents: int = 10
    initial_agents: int = 1

    @property
    def spawn_position(self) -> np.ndarray:
        """Exact spawn point used when an agent is first created."""
        return vec3(self.spawn_corner[0], self.agent_height, self.spawn_corner[1])


@dataclass
class Episode:
    """Represents a single finished agent episode."""
    number: int
    agent_id: int
    steps: int
    total_reward: float
    reached_goal: bool
    epsilon_used: float


@dataclass
class GlobalStats:
    """Process-wide counters shared by all agents."""
    episodes: int = 0
    steps: int = 0
    total_reward: float = 0.0
    success_count: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        return self.success_count / self.episodes if self.episodes > 0 else 0.0

    def reset(self) -> None:
        self.episodes = 0
        self.steps = 0
        self.total_reward = 0.0
        self.success_count = 0


# Unit direction on the (x, z) plane for each action
ACTION_DELTAS: Dict[ActionInt, Tuple[int, int]] = {
    0: (0, 1),    # forward (+z)
    1: (0, -1),   # backward (-z)
    2: (-1, 0),   # left (-x)
    3: (1, 0)     # right (+x)
}
