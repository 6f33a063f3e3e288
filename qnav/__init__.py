"""Q-Learning Navigation - multi-agent reinforcement learning demo.

Each agent keeps its own tabular Q-function over a discretized world and
learns to reach a shared target while avoiding static obstacles.
"""

__version__ = "1.0.0"
__author__ = "Q-Learning Navigation Demo"
