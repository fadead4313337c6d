# tuatara_sim/core/simulator.py
"""
Provides the execution engine that drives a machine over a tape.

A Simulator holds a Tape and a "current state" cursor for one machine and
exposes step / run_until_halt / reset_machine. Machines never hold execution
state themselves, so the same machine can be run by several simulators.

Hierarchical Turing machines are executed with an explicit stack of
ExecutionFrames instead of recursive simulator calls. Each frame pairs a
machine with its cursor. Frames for submachines are created lazily the first
time their state is visited and are reset (not destroyed) when the submachine
halts, ready for the next visit. The active stack is always derived by walking
from the root frame through states that hold a submachine.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .alphabet import BLANK_SYMBOL
from .dfsa_machine import DFSAMachine
from .exceptions import ComputationCompleted, ComputationFailed
from .machine import Machine
from .machine_ir import State, Transition
from .tape import Tape
from .tm_machine import TMMachine
from ..utils.config import EMPTY_STRING_MARKER

logger = logging.getLogger(__name__)


@dataclass
class ExecutionFrame:
    """One level of the execution stack: a machine and its state cursor."""
    machine: Machine
    state_id: Optional[int] = None

    def current_state(self) -> Optional[State]:
        if self.state_id is None:
            return None
        return self.machine.state(self.state_id)

    def is_halted(self) -> bool:
        state = self.current_state()
        return state is not None and state.is_final

    def reset(self) -> None:
        self.state_id = None


class Simulator(QObject):
    """
    Base class for the execution drivers.

    Subclasses implement `_advance`, `get_next_transition` and the halting
    predicates for their machine kind.
    """
    # Emitted with the (hierarchical) name of the new current state.
    stateChanged = pyqtSignal(str)
    transitionTaken = pyqtSignal(str, str, str)  # from_state, to_state, action
    step_processed = pyqtSignal(int, str)  # step count, configuration

    def __init__(self, machine: Machine, tape: Optional[Tape] = None, parent=None):
        super().__init__(parent)
        self._machine = machine
        self._tape = tape if tape is not None else Tape()
        self._root = ExecutionFrame(machine)
        self.current_step = 0
        # Set by run_until_halt when it stops on the step budget.
        self.budget_exhausted = False
        self._action_log: List[str] = []

    @property
    def machine(self) -> Machine:
        return self._machine

    @property
    def tape(self) -> Tape:
        return self._tape

    def set_tape(self, tape: Tape) -> None:
        self._tape = tape

    @property
    def current_state(self) -> Optional[State]:
        """The cursor of the outermost machine, or None before the first step."""
        return self._root.current_state()

    # ==========================================================================
    # Execution
    # ==========================================================================

    def step(self) -> None:
        """
        Perform one step.

        The first step after construction or `reset_machine()` only places the
        cursor on the start state. Raises NondeterministicError if the machine
        is invalid, and lets halting signals and tape errors propagate.
        """
        self._machine.validate()
        self.current_step += 1
        if self._root.state_id is None:
            start = self._machine.get_start_state()
            self._root.state_id = start.state_id
            self.log_action(f"Starting in state {start.label}")
            logger.info(f"Simulation of '{self._machine.name}' started in {start.label}.")
            self.stateChanged.emit(self.get_current_state_name())
        else:
            self._advance()
        self.step_processed.emit(self.current_step, self.get_configuration())

    def _advance(self) -> None:
        raise NotImplementedError

    def run_until_halt(self, max_steps: int = 0) -> bool:
        """
        Step until the machine halts or `max_steps` steps have been taken
        (0 means no limit).

        Returns True only if the machine halted within the budget and
        accepted: a Turing machine must end with its head parked, a DFSA in a
        final state. Validation, tape and undefined-transition errors are not
        caught here.
        """
        count = 0
        self.budget_exhausted = False
        try:
            while not self.is_halted():
                self.step()
                count += 1
                if max_steps and count >= max_steps:
                    self.budget_exhausted = not self.is_halted()
                    break
        except ComputationCompleted:
            accepted = self.is_accepted()
        except ComputationFailed as e:
            logger.info(f"Simulation of '{self._machine.name}' rejected: {e}")
            accepted = False
        else:
            accepted = self.is_halted() and self.is_accepted()
        if self.budget_exhausted:
            logger.info(f"Simulation of '{self._machine.name}' stopped after {count} step(s) without halting.")
        else:
            logger.info(f"Simulation of '{self._machine.name}' ended after {count} step(s); accepted={accepted}.")
        return accepted

    def reset_machine(self) -> None:
        """Clear the cursor (and any submachine cursors). The tape is left alone."""
        self._root.reset()
        self.current_step = 0
        self._action_log.clear()
        logger.info(f"Simulator for '{self._machine.name}' reset.")

    def is_halted(self) -> bool:
        raise NotImplementedError

    def is_accepted(self) -> bool:
        raise NotImplementedError

    def get_next_transition(self) -> Optional[Transition]:
        """The transition the next `step()` would take, without changing anything."""
        raise NotImplementedError

    # ==========================================================================
    # Inspection
    # ==========================================================================

    def frame_stack(self) -> List[ExecutionFrame]:
        """Active frames from the outermost machine inwards."""
        return [self._root]

    def get_current_state_name(self) -> str:
        """Returns the full hierarchical path of the current state, e.g. 'q1 (s0)'."""
        labels = [f.current_state().label for f in self.frame_stack() if f.state_id is not None]
        if not labels:
            return ""
        return " (".join(labels) + ")" * (len(labels) - 1)

    def get_configuration(self) -> str:
        raise NotImplementedError

    def log_action(self, msg: str) -> None:
        """Adds a message to the internal action log for the current step."""
        prefix = "[SUB] " * (len(self.frame_stack()) - 1)
        self._action_log.append(f"{prefix}[Step {self.current_step}] {msg}")

    def get_last_executed_actions_log(self) -> List[str]:
        """Returns and clears the log of actions since the last call."""
        log = self._action_log[:]
        self._action_log.clear()
        return log

    def _take(self, frame: ExecutionFrame, transition: Transition, new_state: State) -> None:
        machine = frame.machine
        from_label = machine.state(transition.from_id).label
        frame.state_id = new_state.state_id
        self.log_action(machine.describe_transition(transition))
        logger.debug(f"'{machine.name}': {machine.describe_transition(transition)}")
        self.transitionTaken.emit(from_label, new_state.label, str(transition.action))
        self.stateChanged.emit(self.get_current_state_name())


class TMSimulator(Simulator):
    """Drives a (possibly hierarchical) Turing machine."""

    def __init__(self, machine: TMMachine, tape: Optional[Tape] = None, parent=None):
        super().__init__(machine, tape, parent)
        # Submachine frames, keyed by the identity of the nested machine.
        self._frames: Dict[int, ExecutionFrame] = {}

    def _frame_for(self, submachine: TMMachine) -> ExecutionFrame:
        frame = self._frames.get(id(submachine))
        if frame is None or frame.machine is not submachine:
            frame = ExecutionFrame(submachine)
            self._frames[id(submachine)] = frame
        return frame

    def _existing_frame(self, submachine: TMMachine) -> Optional[ExecutionFrame]:
        frame = self._frames.get(id(submachine))
        if frame is not None and frame.machine is submachine:
            return frame
        return None

    def _advance(self) -> None:
        frame = self._root
        while True:
            state = frame.current_state()
            if state.submachine is None:
                self._resolve_and_step(frame)
                return

            child = self._frame_for(state.submachine)
            if child.is_halted():
                # The submachine has finished; move the parent past its state.
                self._resolve_and_step(frame)
                child.reset()
                return
            if child.state_id is None:
                start = child.machine.get_start_state()
                child.state_id = start.state_id
                self.log_action(f"Entering submachine '{child.machine.name}' at {start.label}")
                logger.debug(f"Entered submachine '{child.machine.name}' from state {state.label}.")
                self.stateChanged.emit(self.get_current_state_name())
                return
            frame = child

    def _resolve_and_step(self, frame: ExecutionFrame) -> None:
        machine = frame.machine
        state = frame.current_state()
        transition = machine.resolve_transition(state, self._tape.read())
        # Child frames are never stepped from their final state, so only the
        # root machine can complete here.
        try:
            new_state = machine.step(self._tape, state, transition)
        except ComputationCompleted:
            self.log_action(f"Halted in {state.label}")
            raise
        self._take(frame, transition, new_state)

    def reset_machine(self) -> None:
        for frame in self._frames.values():
            frame.reset()
        super().reset_machine()

    def is_halted(self) -> bool:
        return self._root.is_halted()

    def is_accepted(self) -> bool:
        """Halted in the final state with the head parked."""
        return self.is_halted() and self._tape.is_parked()

    def get_next_transition(self) -> Optional[Transition]:
        frame = self._root
        if frame.state_id is None:
            return None
        while True:
            state = frame.current_state()
            if state.submachine is not None:
                child = self._existing_frame(state.submachine)
                if child is None or child.state_id is None:
                    # The next step enters the submachine.
                    return None
                if not child.is_halted():
                    frame = child
                    continue
            return frame.machine.resolve_transition(state, self._tape.read())

    def frame_stack(self) -> List[ExecutionFrame]:
        stack = [self._root]
        frame = self._root
        while frame.state_id is not None:
            state = frame.current_state()
            if state.submachine is None:
                break
            child = self._existing_frame(state.submachine)
            if child is None or child.state_id is None:
                break
            stack.append(child)
            frame = child
        return stack

    def get_configuration(self) -> str:
        """The instantaneous description '(left, state, right)'."""
        head = self._tape.head_location()
        left = self._tape.partial_string(0, head)
        right = self._tape.partial_string(head, max(0, self._tape.length() - head))
        state = self.get_current_state_name()
        return (f"({left or EMPTY_STRING_MARKER}, {state or EMPTY_STRING_MARKER}, "
                f"{right or EMPTY_STRING_MARKER})")


class DFSASimulator(Simulator):
    """Drives a DFSA over the input written on the tape."""

    def _advance(self) -> None:
        state = self._root.current_state()
        transition = self._machine.resolve_transition(state, self._tape.read())
        try:
            new_state = self._machine.step(self._tape, state, transition)
        except (ComputationCompleted, ComputationFailed) as e:
            self.log_action(str(e))
            raise
        self._take(self._root, transition, new_state)

    def is_halted(self) -> bool:
        """Started and out of input."""
        return self._root.state_id is not None and self._tape.read() == BLANK_SYMBOL

    def is_accepted(self) -> bool:
        return self.is_halted() and self._root.current_state().is_final

    def get_next_transition(self) -> Optional[Transition]:
        state = self._root.current_state()
        if state is None:
            return None
        return self._machine.resolve_transition(state, self._tape.read())

    def get_configuration(self) -> str:
        return self.get_current_state_name() or EMPTY_STRING_MARKER


def create_simulator(machine: Machine, tape: Optional[Tape] = None, parent=None) -> Simulator:
    """Return the simulator matching the machine's kind."""
    if isinstance(machine, TMMachine):
        return TMSimulator(machine, tape, parent)
    if isinstance(machine, DFSAMachine):
        return DFSASimulator(machine, tape, parent)
    raise TypeError(f"No simulator for {type(machine).__name__}.")
