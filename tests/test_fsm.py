import pytest

from qnav.app.fsm import RunState, RunStateMachine


def test_initial_state_is_stopped():
    machine = RunStateMachine()
    assert machine.is_stopped()
    assert machine.get_state_description().startswith("Ready")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ([RunState.TRAINING], RunState.TRAINING),
        ([RunState.TRAINING, RunState.PAUSED], RunState.PAUSED),
        ([RunState.TRAINING, RunState.PAUSED, RunState.TRAINING], RunState.TRAINING),
        ([RunState.TRAINING, RunState.PAUSED, RunState.STOPPED], RunState.STOPPED),
        ([RunState.TRAINING, RunState.ERROR, RunState.STOPPED], RunState.STOPPED),
    ],
)
def test_valid_transitions(path, expected):
    machine = RunStateMachine()
    for state in path:
        assert machine.transition(state)
    assert machine.current_state == expected


def test_invalid_transitions_are_refused():
    machine = RunStateMachine()
    assert not machine.pause()
    assert not machine.resume()
    assert not machine.fail_error()
    assert machine.is_stopped()

    machine.start_training()
    machine.fail_error()
    assert not machine.start_training()
    assert machine.is_error()


def test_enter_callback_receives_context():
    machine = RunStateMachine()
    seen = []
    machine.on_state_enter(RunState.PAUSED, seen.append)

    machine.start_training()
    machine.pause({"reason": "user"})
    assert seen == [{"reason": "user"}]
