# tuatara_sim/core/tm_machine.py
"""
The Turing machine variant.

A Turing machine has exactly one start state and exactly one final state, and
the final state has no way out. Each state may hold a nested Turing machine
(a submachine) which runs to completion whenever that state is current; the
nesting must be acyclic, which is checked when a submachine is attached.
"""

import logging
from typing import List, Optional, Set, Tuple

from .actions import (
    EMPTY_ACTION_SYMBOL, OTHERWISE_SYMBOL, UNDEFINED_SYMBOL, TMAction,
)
from .alphabet import Alphabet
from .exceptions import (
    ComputationCompleted, NondeterministicError, SubmachineCycleError, UndefinedTransitionError,
)
from .machine import Machine, StateRef, TransitionRef
from .machine_ir import MachineKind, State, Transition
from .tape import Tape

logger = logging.getLogger(__name__)


class TMMachine(Machine):
    """A (possibly hierarchical) deterministic Turing machine."""

    kind = MachineKind.TM
    action_type = TMAction
    supports_wildcard = True

    # ==========================================================================
    # Submachines
    # ==========================================================================

    def attach_submachine(self, ref: StateRef, submachine: "TMMachine") -> None:
        """
        Nest `submachine` inside a state of this machine.

        Raises SubmachineCycleError if `submachine` is this machine or already
        contains it at any depth.
        """
        state = self.state(ref)
        if not isinstance(submachine, TMMachine):
            raise TypeError("Only Turing machines can be nested as submachines.")
        if submachine is self or submachine.contains_machine(self):
            raise SubmachineCycleError(
                f"Attaching '{submachine.name}' to state {state.label} of '{self.name}' "
                f"would make the machine contain itself.")
        state.submachine = submachine
        self._touch()
        logger.info(f"Submachine '{submachine.name}' attached to state {state.label} of '{self.name}'.")

    def detach_submachine(self, ref: StateRef) -> Optional["TMMachine"]:
        state = self.state(ref)
        submachine, state.submachine = state.submachine, None
        self._touch()
        return submachine

    def get_submachines(self) -> List["TMMachine"]:
        """Directly nested machines, one per state that holds one."""
        return [s.submachine for s in self._states.values() if s.submachine is not None]

    def contains_machine(self, other: "TMMachine") -> bool:
        """True if `other` is nested anywhere below this machine."""
        seen: Set[int] = set()
        pending = self.get_submachines()
        while pending:
            machine = pending.pop()
            if machine is other:
                return True
            if id(machine) in seen:
                continue
            seen.add(id(machine))
            pending.extend(machine.get_submachines())
        return False

    def revision_key(self) -> Tuple:
        # Nested machines are validated with us, so their edits count as ours.
        return super().revision_key() + tuple(m.revision_key() for m in self.get_submachines())

    # ==========================================================================
    # Validation
    # ==========================================================================

    def _find_defect(self) -> Optional[str]:
        start_count = 0
        final_count = 0
        for state in self._states.values():
            if state.submachine is not None:
                try:
                    state.submachine.validate()
                except NondeterministicError as e:
                    return f"Submachine of state {state.label}: {e}"

            if state.is_start:
                start_count += 1
                if start_count > 1:
                    return "Machine has more than one start state."

            transitions = self.get_state_transitions(state)
            if state.is_final:
                final_count += 1
                if final_count > 1:
                    return "Machine has more than one final state."
                if transitions:
                    return f"Machine has a transition leaving the final state {state.label}."

            used_symbols: Set[str] = set()
            for transition in transitions:
                action = transition.action
                inp = action.input_symbol
                out = action.output_symbol
                if inp == UNDEFINED_SYMBOL:
                    return f"Transition {self.describe_transition(transition)} has an undefined input."
                if out == UNDEFINED_SYMBOL:
                    return f"Transition {self.describe_transition(transition)} has an undefined action."
                if inp in used_symbols:
                    return f"State {state.label} has more than one transition with input {inp}."
                if not self._alphabet.contains_symbol(inp) and inp != OTHERWISE_SYMBOL:
                    return (f"Transition {self.describe_transition(transition)} has an input "
                            f"which is not in the alphabet.")
                if (not action.moves_head() and not self._alphabet.contains_symbol(out)
                        and out != EMPTY_ACTION_SYMBOL):
                    return (f"Transition {self.describe_transition(transition)} has an action "
                            f"which is not in the alphabet.")
                used_symbols.add(inp)

        if start_count == 0:
            return "Machine has no start state."
        if final_count == 0:
            return "Machine has no final state."
        return None

    def _is_consistent(self, action: TMAction, alphabet: Alphabet) -> bool:
        inp = action.input_symbol
        if not alphabet.contains_symbol(inp) and inp not in (UNDEFINED_SYMBOL, OTHERWISE_SYMBOL):
            return False
        if action.moves_head():
            return True
        out = action.output_symbol
        return alphabet.contains_symbol(out) or out in (UNDEFINED_SYMBOL, EMPTY_ACTION_SYMBOL)

    # ==========================================================================
    # Execution
    # ==========================================================================

    def get_final_state(self) -> Optional[State]:
        """The final state, or None. Unique once the machine has validated."""
        return next((s for s in self._states.values() if s.is_final), None)

    def step(self, tape: Tape, ref: StateRef, transition: Optional[Transition]) -> State:
        state = self.state(ref)
        if transition is not None:
            transition.action.perform(tape)
            return self._states[transition.to_id]

        if tape.is_parked() and state.is_final:
            raise ComputationCompleted(f"Machine '{self.name}' halted in {state.label}.")

        if not tape.is_parked() and not state.is_final:
            message = "The r/w head was not parked, and the last state was not an accepting state."
        elif not tape.is_parked():
            message = "The r/w head was not parked."
        else:
            message = "The last state was not an accepting state."
        raise UndefinedTransitionError(message)

    def describe_transition(self, ref: TransitionRef) -> str:
        transition = self.transition(ref)
        from_label = self._states[transition.from_id].label
        to_label = self._states[transition.to_id].label
        return f"{from_label} -> {to_label} [{transition.action}]"
