"""Finite State Machine for the training loop's run mode."""

from enum import Enum, auto
from typing import Dict, Callable, Optional


class RunState(Enum):
    """Run modes of the simulation."""
    STOPPED = auto()
    TRAINING = auto()
    PAUSED = auto()
    ERROR = auto()


class RunStateMachine:
    """State machine for managing training run modes."""

    def __init__(self):
        self.current_state = RunState.STOPPED
        self._enter_callbacks: Dict[RunState, Callable[[Optional[Dict]], None]] = {}

        # Define valid state transitions
        self._valid_transitions = {
            RunState.STOPPED: {RunState.TRAINING},
            RunState.TRAINING: {RunState.PAUSED, RunState.STOPPED, RunState.ERROR},
            RunState.PAUSED: {RunState.TRAINING, RunState.STOPPED},
            RunState.ERROR: {RunState.STOPPED},
        }

    def on_state_enter(self, state: RunState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state entry."""
        self._enter_callbacks[state] = callback

    def can_transition(self, to_state: RunState) -> bool:
        """Check if transition to target state is valid."""
        return to_state in self._valid_transitions.get(self.current_state, set())

    def transition(self, to_state: RunState, context: Optional[Dict] = None) -> bool:
        """Attempt to transition to target state."""
        if not self.can_transition(to_state):
            return False

        self.current_state = to_state

        if to_state in self._enter_callbacks:
            self._enter_callbacks[to_state](context)

        return True

    # Convenience methods for common transitions

    def start_training(self, context: Optional[Dict] = None) -> bool:
        """Start training, also clearing a pause."""
        return self.transition(RunState.TRAINING, context)

    def pause(self, context: Optional[Dict] = None) -> bool:
        """Pause training."""
        return self.transition(RunState.PAUSED, context)

    def resume(self, context: Optional[Dict] = None) -> bool:
        """Resume training from paused state."""
        if self.current_state == RunState.PAUSED:
            return self.transition(RunState.TRAINING, context)
        return False

    def stop(self, context: Optional[Dict] = None) -> bool:
        """Stop the run."""
        return self.transition(RunState.STOPPED, context)

    def fail_error(self, context: Optional[Dict] = None) -> bool:
        """Transition to error state."""
        return self.transition(RunState.ERROR, context)

    # State checking methods

    def is_stopped(self) -> bool:
        return self.current_state == RunState.STOPPED

    def is_training(self) -> bool:
        return self.current_state == RunState.TRAINING

    def is_paused(self) -> bool:
        return self.current_state == RunState.PAUSED

    def is_error(self) -> bool:
        return self.current_state == RunState.ERROR

    def get_state_description(self) -> str:
        """Get human-readable state description."""
        descriptions = {
            RunState.STOPPED: "Ready - press Start to begin training",
            RunState.TRAINING: "Training agents with Q-Learning",
            RunState.PAUSED: "Training paused",
            RunState.ERROR: "Error occurred during simulation",
        }
        return descriptions.get(self.current_state, "Unknown state")
