# tuatara_sim/core/dfsa_machine.py
"""
The deterministic finite-state acceptor variant.

A valid DFSA has one start state and a total transition function: every state
has exactly one outgoing transition for each symbol of the alphabet, and
nothing else. Any number of states may be final. The computation ends when the
head reaches a blank cell; the input is accepted if the current state is final.
"""

import logging
from typing import Optional, Set

from .actions import EMPTY_INPUT_SYMBOL, UNDEFINED_SYMBOL, DFSAAction
from .alphabet import BLANK_SYMBOL, Alphabet
from .exceptions import ComputationCompleted, ComputationFailed
from .machine import Machine, StateRef, TransitionRef
from .machine_ir import MachineKind, State, Transition
from .tape import Tape

logger = logging.getLogger(__name__)


class DFSAMachine(Machine):
    """A deterministic finite-state acceptor reading its input left to right."""

    kind = MachineKind.DFSA
    action_type = DFSAAction
    supports_wildcard = False

    def _find_defect(self) -> Optional[str]:
        start_count = 0
        for state in self._states.values():
            if state.is_start:
                start_count += 1
                if start_count > 1:
                    return "Machine has more than one start state."

            matched: Set[str] = set()
            for transition in self.get_state_transitions(state):
                inp = transition.input_symbol
                if inp == UNDEFINED_SYMBOL:
                    return f"Transition {self.describe_transition(transition)} has an undefined input."
                if inp == EMPTY_INPUT_SYMBOL:
                    return f"Transition {self.describe_transition(transition)} uses a lambda edge."
                if inp in matched:
                    return f"State {state.label} has more than one transition with input {inp}."
                if not self._alphabet.contains_symbol(inp):
                    return (f"Transition {self.describe_transition(transition)} has an input "
                            f"which is not in the alphabet.")
                matched.add(inp)

            for symbol in self._alphabet.symbols():
                if symbol not in matched:
                    return f"State {state.label} does not have a transition for input {symbol}."

        if start_count == 0:
            return "Machine has no start state."
        return None

    def _is_consistent(self, action: DFSAAction, alphabet: Alphabet) -> bool:
        inp = action.input_symbol
        return alphabet.contains_symbol(inp) or inp in (UNDEFINED_SYMBOL, EMPTY_INPUT_SYMBOL)

    def step(self, tape: Tape, ref: StateRef, transition: Optional[Transition]) -> State:
        state = self.state(ref)
        # Lambda edges may be taken even with no input left.
        if transition is not None and transition.input_symbol == EMPTY_INPUT_SYMBOL:
            return self._states[transition.to_id]

        if tape.read() == BLANK_SYMBOL:
            if state.is_final:
                raise ComputationCompleted("The input string was accepted.")
            raise ComputationFailed("The input string was not accepted.")

        if transition is None:
            raise ComputationFailed(f"Undefined transition from {state.label} on input {tape.read()}.")

        transition.action.perform(tape)
        return self._states[transition.to_id]

    def describe_transition(self, ref: TransitionRef) -> str:
        transition = self.transition(ref)
        from_label = self._states[transition.from_id].label
        to_label = self._states[transition.to_id].label
        return f"{from_label} -{transition.input_symbol}-> {to_label}"
