"""Application controller driving the training loop from a Qt frame timer."""

from typing import List, Optional
from PySide6.QtCore import QObject, QTimer, Signal

from ..domain.qlearning import NavigationAgent
from ..domain.types import SimulationConfig
from .fsm import RunState
from .training_loop import TrainingLoop


class SimulationController(QObject):
    """
    Controller that runs the simulation once per frame and connects a
    renderer or UI to the training loop.

    Signals:
        state_changed: Emitted when the run mode changes
        frame_completed: Emitted after every agent has been ticked for a frame
        episode_completed: Emitted for every finished agent episode
        stats_updated: Emitted with the statistics dict after each frame
        error_occurred: Emitted when an error occurs
    """

    # Qt Signals
    state_changed = Signal(object)  # RunState
    frame_completed = Signal()
    episode_completed = Signal(object)  # Episode
    stats_updated = Signal(object)  # dict
    error_occurred = Signal(str)  # Error message

    def __init__(self, config: Optional[SimulationConfig] = None, seed: Optional[int] = None,
                 frame_interval: int = 16):
        super().__init__()

        self._loop = TrainingLoop(config, seed)

        # Frame timer, ~60 fps by default
        self._timer = QTimer()
        self._timer.timeout.connect(self._on_frame)
        self._frame_interval = frame_interval
        self._frame_count = 0

        self._setup_state_callbacks()

    def _setup_state_callbacks(self):
        """Setup callbacks for state machine transitions."""
        state_machine = self._loop.state_machine
        for state in RunState:
            state_machine.on_state_enter(state, self._make_enter_callback(state))

    def _make_enter_callback(self, state: RunState):
        def on_enter(context):
            self.state_changed.emit(state)
        return on_enter

    # Properties

    @property
    def loop(self) -> TrainingLoop:
        return self._loop

    @property
    def agents(self) -> List[NavigationAgent]:
        """Agents whose position and path_points the renderer draws."""
        return self._loop.agents

    @property
    def current_state(self) -> RunState:
        return self._loop.current_state

    @property
    def frame_count(self) -> int:
        return self._frame_count

    # Frame driver

    def start_frames(self):
        """Begin delivering frame callbacks."""
        self._timer.start(self._frame_interval)

    def stop_frames(self):
        self._timer.stop()

    # Commands

    def start_training(self) -> bool:
        return self._loop.start()

    def toggle_pause(self) -> bool:
        return self._loop.toggle_pause()

    def reset(self) -> bool:
        """Full reset: Q-tables, statistics and trails. Recovers from an error."""
        if self._loop.state_machine.is_error():
            self._loop.stop()
        self._loop.reset()
        self.stats_updated.emit(self._loop.get_statistics())
        return True

    def add_agent(self) -> bool:
        added = self._loop.add_agent() is not None
        if added:
            self.stats_updated.emit(self._loop.get_statistics())
        return added

    def clear_trails(self):
        self._loop.clear_trails()

    def update_config(self, **kwargs) -> bool:
        """Update live tunables (learning_rate, epsilon, speed_multiplier)."""
        try:
            self._loop.set_tunables(**kwargs)
            return True
        except (TypeError, ValueError) as e:
            self.error_occurred.emit(f"Invalid setting: {str(e)}")
            return False

    def _on_frame(self):
        """Called once per frame by the timer."""
        try:
            episodes = self._loop.tick()
            self._frame_count += 1
            for episode in episodes:
                self.episode_completed.emit(episode)
            self.frame_completed.emit()
            self.stats_updated.emit(self._loop.get_statistics())
        except Exception as e:
            self._timer.stop()
            self._loop.state_machine.fail_error()
            self.error_occurred.emit(f"Frame error: {str(e)}")

    def cleanup(self):
        """Stop the frame timer before shutdown."""
        try:
            self._timer.stop()
        except RuntimeError:
            pass  # Qt object already deleted
        self._loop.stop()

    # Utility methods

    def get_statistics(self) -> dict:
        return self._loop.get_statistics()
