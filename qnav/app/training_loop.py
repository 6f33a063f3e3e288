"""Frame-driven training loop owning agents, tunables and global statistics."""

from typing import List, Optional

from ..domain.qlearning import NavigationAgent, SimulationContext
from ..domain.types import Episode, GlobalStats, SimulationConfig
from .fsm import RunStateMachine, RunState


class TrainingLoop:
    """
    Drives every agent once per frame and handles lifecycle commands.

    Ticks are synchronous: one agent's full step completes before the next
    agent's begins, in insertion order. Agents never observe each other; the
    only shared mutable state is the context's GlobalStats.
    """

    def __init__(self, config: Optional[SimulationConfig] = None, seed: Optional[int] = None):
        self.context = SimulationContext.create(config, seed)
        # Validate constructor-supplied tunables
        self.set_tunables(learning_rate=self.config.learning_rate, epsilon=self.config.epsilon,
                          speed_multiplier=self.config.speed_multiplier)
        self.state_machine = RunStateMachine()
        self.agents: List[NavigationAgent] = []
        self._next_agent_id = 0

        for _ in range(self.config.initial_agents):
            self.add_agent()

    # Properties

    @property
    def config(self) -> SimulationConfig:
        return self.context.config

    @property
    def stats(self) -> GlobalStats:
        return self.context.stats

    @property
    def current_state(self) -> RunState:
        return self.state_machine.current_state

    # Lifecycle commands

    def start(self) -> bool:
        """Start training, resuming if paused."""
        if self.state_machine.is_training():
            return True
        return self.state_machine.start_training()

    def toggle_pause(self) -> bool:
        """Flip between training and paused. Does nothing while stopped."""
        if self.state_machine.is_paused():
            return self.state_machine.resume()
        if self.state_machine.is_training():
            return self.state_machine.pause()
        return False

    def stop(self) -> bool:
        return self.state_machine.stop()

    def reset(self):
        """Clear every Q-table, trail and statistic and respawn all agents."""
        for agent in self.agents:
            agent.clear_q_table()
            agent.reset(self.context)
            agent.clear_path()
        self.stats.reset()

    def add_agent(self) -> Optional[NavigationAgent]:
        """Add a fresh agent at the spawn point, unless the population is full."""
        if len(self.agents) >= self.config.max_agents:
            return None
        agent = NavigationAgent(self._next_agent_id, self.config)
        self._next_agent_id += 1
        self.agents.append(agent)
        return agent

    def clear_trails(self):
        """Empty path trails without touching Q-tables or statistics."""
        for agent in self.agents:
            agent.clear_path()

    def set_tunables(self, learning_rate: Optional[float] = None,
                     epsilon: Optional[float] = None,
                     speed_multiplier: Optional[float] = None):
        """Update the live tunables read by every subsequent tick."""
        if learning_rate is not None and not 0.0 <= learning_rate <= 1.0:
            raise ValueError(f"learning_rate must be in [0, 1], got {learning_rate}")
        if epsilon is not None and not 0.0 <= epsilon <= 1.0:
            raise ValueError(f"epsilon must be in [0, 1], got {epsilon}")
        if speed_multiplier is not None and speed_multiplier <= 0:
            raise ValueError(f"speed_multiplier must be positive, got {speed_multiplier}")

        if learning_rate is not None:
            self.config.learning_rate = learning_rate
        if epsilon is not None:
            self.config.epsilon = epsilon
        if speed_multiplier is not None:
            self.config.speed_multiplier = speed_multiplier

    # Simulation

    def tick(self) -> List[Episode]:
        """Advance every agent by one step; no-op unless training."""
        if not self.state_machine.is_training():
            return []

        finished = []
        for agent in self.agents:
            episode = agent.tick(self.context)
            if episode is not None:
                finished.append(episode)
        return finished

    def get_statistics(self) -> dict:
        """Get current simulation statistics."""
        return {
            "episodes": self.stats.episodes,
            "steps": self.stats.steps,
            "total_reward": self.stats.total_reward,
            "success_count": self.stats.success_count,
            "success_rate": self.stats.success_rate,
            "agent_count": len(self.agents),
            "current_state": self.current_state.name.lower(),
            "state_description": self.state_machine.get_state_description(),
        }
