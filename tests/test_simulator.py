# tests/test_simulator.py
import pytest

from tuatara_sim.core.actions import (
    Direction, TMAction, DFSAAction, EMPTY_ACTION_SYMBOL, OTHERWISE_SYMBOL,
)
from tuatara_sim.core.exceptions import (
    ComputationCompleted, ComputationFailed, NondeterministicError, TapeBoundsError, UndefinedTransitionError,
)
from tuatara_sim.core.simulator import DFSASimulator, TMSimulator, create_simulator
from tuatara_sim.core.tape import Tape
from tuatara_sim.core.tm_machine import TMMachine


@pytest.fixture
def nested_machine():
    """
    Outer: p0 (start, runs `inner`) -(?/ε)-> p1 (final).
    Inner: s0 (start) -(1/0)-> s1 (final).
    """
    inner = TMMachine(name="inner")
    s0 = inner.add_state("s0", is_start=True)
    s1 = inner.add_state("s1", is_final=True)
    inner.add_transition(s0, s1, TMAction.write("1", "0"))

    outer = TMMachine(name="outer")
    p0 = outer.add_state("p0", is_start=True)
    p1 = outer.add_state("p1", is_final=True)
    outer.add_transition(p0, p1, TMAction.write(OTHERWISE_SYMBOL, EMPTY_ACTION_SYMBOL))
    outer.attach_submachine(p0, inner)
    return outer


def test_factory_picks_simulator(scan_machine, binary_dfsa):
    assert isinstance(create_simulator(scan_machine), TMSimulator)
    assert isinstance(create_simulator(binary_dfsa), DFSASimulator)
    with pytest.raises(TypeError):
        create_simulator(object())


def test_first_step_only_places_cursor(scan_machine):
    sim = TMSimulator(scan_machine, Tape("1110"))
    assert sim.current_state is None
    assert sim.get_next_transition() is None
    sim.step()
    assert sim.current_state.label == "q0"
    assert sim.tape.head_location() == 0


def test_scan_reaches_final_state_but_head_is_not_parked(scan_machine):
    sim = TMSimulator(scan_machine, Tape("1110"))
    assert sim.run_until_halt(0) is False
    assert sim.current_state.label == "q1"
    assert sim.is_halted()
    assert sim.tape.head_location() == 4
    assert not sim.is_accepted()


def test_halted_with_head_parked_is_accepted():
    machine = TMMachine()
    q0 = machine.add_state("q0", is_start=True)
    q1 = machine.add_state("q1", is_final=True)
    machine.add_transition(q0, q1, TMAction.write("1", "0"))
    sim = TMSimulator(machine, Tape("1"))
    assert sim.run_until_halt() is True
    assert sim.tape.contents() == "0"


def test_step_budget_stops_the_run(scan_machine):
    sim = TMSimulator(scan_machine, Tape("1111111"))
    assert sim.run_until_halt(3) is False
    assert not sim.is_halted()
    assert sim.budget_exhausted
    assert sim.tape.head_location() == 2


def test_preview_matches_next_step(scan_machine):
    sim = TMSimulator(scan_machine, Tape("10"))
    sim.step()
    preview = sim.get_next_transition()
    assert preview.action.input_symbol == "1"
    assert sim.tape.head_location() == 0
    sim.step()
    assert sim.get_next_transition().action.input_symbol == OTHERWISE_SYMBOL


def test_undefined_transition_propagates():
    machine = TMMachine()
    q0 = machine.add_state("q0", is_start=True)
    q1 = machine.add_state("q1", is_final=True)
    machine.add_transition(q0, q1, TMAction.move(Direction.RIGHT, "1"))
    sim = TMSimulator(machine, Tape("0"))
    with pytest.raises(UndefinedTransitionError):
        sim.run_until_halt()


def test_tape_bounds_error_propagates_and_simulator_survives():
    machine = TMMachine()
    q0 = machine.add_state("q0", is_start=True)
    q1 = machine.add_state("q1", is_final=True)
    machine.add_transition(q0, q1, TMAction.move(Direction.LEFT, "1"))
    sim = TMSimulator(machine, Tape("1"))
    sim.step()
    with pytest.raises(TapeBoundsError):
        sim.step()
    assert sim.current_state.label == "q0"
    sim.reset_machine()
    assert sim.current_state is None


def test_invalid_machine_is_not_run(scan_machine):
    scan_machine.add_state("extra", is_final=True)
    sim = TMSimulator(scan_machine, Tape("1"))
    with pytest.raises(NondeterministicError):
        sim.step()
    assert sim.current_state is None


def test_single_step_mode_surfaces_completion():
    machine = TMMachine()
    machine.add_state("q0", is_start=True, is_final=True)
    sim = TMSimulator(machine, Tape(""))
    sim.step()
    with pytest.raises(ComputationCompleted):
        sim.step()


def test_configuration_string(scan_machine):
    sim = TMSimulator(scan_machine, Tape("10"))
    assert sim.get_configuration() == "(λ, λ, 10)"
    sim.step()
    assert sim.get_configuration() == "(λ, q0, 10)"
    sim.step()
    assert sim.get_configuration() == "(1, q0, 0)"
    sim.step()
    assert sim.get_configuration() == "(10, q1, λ)"


def test_reset_leaves_tape_alone(scan_machine):
    sim = TMSimulator(scan_machine, Tape("10"))
    sim.step()
    sim.step()
    sim.reset_machine()
    assert sim.current_state is None
    assert sim.tape.head_location() == 1


def test_submachine_drains_before_parent_advances(nested_machine):
    sim = TMSimulator(nested_machine, Tape("1"))
    sim.step()
    assert sim.get_current_state_name() == "p0"

    sim.step()
    assert sim.get_current_state_name() == "p0 (s0)"
    assert [f.machine.name for f in sim.frame_stack()] == ["outer", "inner"]
    assert sim.get_next_transition().action.output_symbol == "0"

    sim.step()
    assert sim.current_state.label == "p0"
    assert sim.get_current_state_name() == "p0 (s1)"
    assert sim.tape.read() == "0"
    assert not sim.is_halted()

    sim.step()
    assert sim.get_current_state_name() == "p1"
    assert len(sim.frame_stack()) == 1
    assert sim.is_halted()
    assert sim.is_accepted()


def test_submachine_completion_does_not_end_the_run(nested_machine):
    sim = TMSimulator(nested_machine, Tape("1"))
    assert sim.run_until_halt() is True
    assert sim.current_state.label == "p1"


def test_submachine_frame_is_reused(nested_machine):
    sim = TMSimulator(nested_machine, Tape("1"))
    sim.run_until_halt()
    sim.reset_machine()
    sim.tape.set_contents("1")
    assert sim.run_until_halt() is True
    assert sim.tape.contents() == "0"


def test_signals_are_emitted(scan_machine, qtbot):
    sim = TMSimulator(scan_machine, Tape("1"))
    sim.step()
    with qtbot.waitSignal(sim.transitionTaken, timeout=1000) as blocker:
        sim.step()
    assert blocker.args == ["q0", "q0", "1/→"]
    with qtbot.waitSignal(sim.stateChanged, timeout=1000) as blocker:
        sim.step()
    assert blocker.args == ["q1"]


@pytest.mark.parametrize("text", ["", "0", "1", "0110", "1111100000"])
def test_binary_dfsa_accepts_every_string(binary_dfsa, text):
    sim = DFSASimulator(binary_dfsa, Tape(text))
    assert sim.run_until_halt() is True
    assert sim.is_halted()


def test_dfsa_rejects_in_non_final_state():
    from tuatara_sim.core.dfsa_machine import DFSAMachine
    machine = DFSAMachine()
    even = machine.add_state("even", is_start=True, is_final=True)
    odd = machine.add_state("odd")
    machine.add_transition(even, odd, DFSAAction("1"))
    machine.add_transition(even, even, DFSAAction("0"))
    machine.add_transition(odd, even, DFSAAction("1"))
    machine.add_transition(odd, odd, DFSAAction("0"))

    assert DFSASimulator(machine, Tape("1010")).run_until_halt() is True
    sim = DFSASimulator(machine, Tape("1000"))
    assert sim.run_until_halt() is False
    assert sim.get_configuration() == "odd"
    with pytest.raises(ComputationFailed):
        sim.step()


def test_dfsa_single_step_completion(binary_dfsa):
    sim = DFSASimulator(binary_dfsa, Tape("1"))
    sim.step()
    sim.step()
    with pytest.raises(ComputationCompleted):
        sim.step()


def test_action_log(scan_machine):
    sim = TMSimulator(scan_machine, Tape("0"))
    sim.step()
    sim.step()
    log = sim.get_last_executed_actions_log()
    assert log[0] == "[Step 1] Starting in state q0"
    assert log[1] == "[Step 2] q0 -> q1 [?/→]"
    assert sim.get_last_executed_actions_log() == []
