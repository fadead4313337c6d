# tuatara_sim/core/machine.py
"""
Provides the structure shared by every machine variant.

A Machine stores states and transitions in two arenas keyed by integer
handles, plus the tape Alphabet. It knows nothing about execution state; that
belongs to a Simulator. Concrete variants (TMMachine, DFSAMachine) supply the
determinism checks, the alphabet consistency rule and the step semantics.

Validation is memoised. The cached result is keyed by a revision tuple that
every structural mutator bumps, so `validate()` only re-runs the full
O(states x transitions) scan after something has actually changed.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple, Union

from .alphabet import Alphabet
from .exceptions import NondeterministicError
from .machine_ir import Action, MachineKind, State, Transition
from .actions import OTHERWISE_SYMBOL
from .tape import Tape

logger = logging.getLogger(__name__)

StateRef = Union[State, int]
TransitionRef = Union[Transition, int]


class Machine:
    """
    Base class for the machine variants.

    Subclasses must set `kind` and `action_type` and implement
    `_find_defect`, `_is_consistent` and `step`.
    """

    kind: MachineKind = None
    action_type = None
    # Whether the OTHERWISE symbol acts as a fallback during resolution.
    supports_wildcard = False

    def __init__(self, alphabet: Optional[Alphabet] = None, name: str = "Untitled"):
        self.name = name
        self._alphabet = alphabet if alphabet is not None else Alphabet()
        self._states: Dict[int, State] = {}
        self._transitions: Dict[int, Transition] = {}
        self._next_state_id = 0
        self._next_transition_id = 0
        self._revision = 0
        self._validated_key: Optional[Tuple] = None

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(name={self.name!r}, states={len(self._states)}, "
                f"transitions={len(self._transitions)})")

    # ==========================================================================
    # Validity memo
    # ==========================================================================

    def _touch(self) -> None:
        """Record a structural change; any cached validity is now stale."""
        self._revision += 1
        self._validated_key = None

    def revision_key(self) -> Tuple:
        """Changes whenever this machine or its alphabet is mutated."""
        return (self._revision, id(self._alphabet), self._alphabet.revision)

    @property
    def is_validated(self) -> bool:
        return self._validated_key is not None and self._validated_key == self.revision_key()

    def invalidate(self) -> None:
        self._validated_key = None

    def validate(self) -> None:
        """
        Raise NondeterministicError if this machine breaks any invariant of its variant.

        The result is cached until the next mutation; the machine itself is
        never modified.
        """
        key = self.revision_key()
        if self._validated_key == key:
            return
        defect = self._find_defect()
        if defect is not None:
            logger.warning(f"Machine '{self.name}' failed validation: {defect}")
            raise NondeterministicError(defect)
        self._validated_key = key
        logger.debug(f"Machine '{self.name}' validated.")

    def _find_defect(self) -> Optional[str]:
        """Return a description of the first invariant violation found, or None."""
        raise NotImplementedError

    # ==========================================================================
    # Alphabet
    # ==========================================================================

    @property
    def alphabet(self) -> Alphabet:
        return self._alphabet

    def set_alphabet(self, alphabet: Alphabet) -> None:
        self._alphabet = alphabet
        self._touch()

    def is_consistent_with_alphabet(self, alphabet: Optional[Alphabet] = None) -> bool:
        """True if every transition only uses symbols `alphabet` (default: our own) allows."""
        alphabet = alphabet or self._alphabet
        return all(self._is_consistent(t.action, alphabet) for t in self._transitions.values())

    def get_inconsistent_transitions(self, alphabet: Optional[Alphabet] = None) -> List[Transition]:
        alphabet = alphabet or self._alphabet
        return [t for t in self._transitions.values() if not self._is_consistent(t.action, alphabet)]

    def remove_inconsistent_transitions(self, alphabet: Optional[Alphabet] = None) -> int:
        """Delete transitions that fall outside the alphabet. Returns how many were removed."""
        doomed = self.get_inconsistent_transitions(alphabet)
        for transition in doomed:
            self.delete_transition(transition)
        if doomed:
            logger.info(f"Removed {len(doomed)} transition(s) inconsistent with the alphabet from '{self.name}'.")
        return len(doomed)

    def _is_consistent(self, action: Action, alphabet: Alphabet) -> bool:
        raise NotImplementedError

    # ==========================================================================
    # Lookup
    # ==========================================================================

    def state(self, ref: StateRef) -> State:
        """Resolve a state handle (or the state itself) to a state of this machine."""
        state_id = ref.state_id if isinstance(ref, State) else ref
        state = self._states.get(state_id)
        if state is None or (isinstance(ref, State) and state is not ref):
            raise ValueError(f"State {ref!r} does not belong to machine '{self.name}'.")
        return state

    def transition(self, ref: TransitionRef) -> Transition:
        transition_id = ref.transition_id if isinstance(ref, Transition) else ref
        transition = self._transitions.get(transition_id)
        if transition is None or (isinstance(ref, Transition) and transition is not ref):
            raise ValueError(f"Transition {ref!r} does not belong to machine '{self.name}'.")
        return transition

    def has_state(self, ref: StateRef) -> bool:
        try:
            self.state(ref)
        except ValueError:
            return False
        return True

    def get_states(self) -> List[State]:
        return list(self._states.values())

    def get_transitions(self) -> List[Transition]:
        return list(self._transitions.values())

    def get_state_transitions(self, ref: StateRef) -> List[Transition]:
        """Outgoing transitions of a state, in the order they were added."""
        return [self._transitions[tid] for tid in self.state(ref).transition_ids]

    def get_start_state(self) -> Optional[State]:
        """The start state, or None. Unique once the machine has validated."""
        return next((s for s in self._states.values() if s.is_start), None)

    def get_final_states(self) -> List[State]:
        return [s for s in self._states.values() if s.is_final]

    def get_transitions_to(self, ref: StateRef) -> List[Transition]:
        target = self.state(ref)
        return [t for t in self._transitions.values() if t.to_id == target.state_id]

    def get_label_set(self) -> Set[str]:
        """Labels currently in use, for an external label registry."""
        return {s.label for s in self._states.values()}

    def describe_transition(self, ref: TransitionRef) -> str:
        raise NotImplementedError

    # ==========================================================================
    # Structural mutators (each one invalidates the memo)
    # ==========================================================================

    def add_state(self, label: str, is_start: bool = False, is_final: bool = False) -> State:
        state = State(self._next_state_id, label, is_start, is_final)
        self._next_state_id += 1
        self._states[state.state_id] = state
        self._touch()
        return state

    def delete_state(self, ref: StateRef) -> bool:
        """Remove a state together with every transition entering or leaving it."""
        if not self.has_state(ref):
            return False
        state = self.state(ref)
        for transition in list(self._transitions.values()):
            if state.state_id in (transition.from_id, transition.to_id):
                self._detach_transition(transition)
        del self._states[state.state_id]
        self._touch()
        return True

    def add_transition(self, from_ref: StateRef, to_ref: StateRef, action: Action) -> Transition:
        from_state = self.state(from_ref)
        to_state = self.state(to_ref)
        self._check_action(action)
        transition = Transition(self._next_transition_id, from_state.state_id, to_state.state_id, action)
        self._next_transition_id += 1
        self._transitions[transition.transition_id] = transition
        from_state.transition_ids.append(transition.transition_id)
        self._touch()
        return transition

    def delete_transition(self, ref: TransitionRef) -> bool:
        try:
            transition = self.transition(ref)
        except ValueError:
            return False
        self._detach_transition(transition)
        self._touch()
        return True

    def _detach_transition(self, transition: Transition) -> None:
        # Machine-level and state-level collections are always updated together.
        del self._transitions[transition.transition_id]
        self._states[transition.from_id].transition_ids.remove(transition.transition_id)

    def set_transition_action(self, ref: TransitionRef, action: Action) -> None:
        """Replace the action (input and effect) of an existing transition."""
        transition = self.transition(ref)
        self._check_action(action)
        transition.action = action
        self._touch()

    def set_start_state(self, ref: StateRef, value: bool = True) -> None:
        self.state(ref).is_start = value
        self._touch()

    def set_final_state(self, ref: StateRef, value: bool = True) -> None:
        self.state(ref).is_final = value
        self._touch()

    def set_state_label(self, ref: StateRef, label: str) -> None:
        # Labels are for display only and take no part in validation.
        self.state(ref).label = label

    def _check_action(self, action: Action) -> None:
        if not isinstance(action, self.action_type):
            raise TypeError(f"{type(self).__name__} transitions need a {self.action_type.__name__}, "
                            f"got {type(action).__name__}.")

    # ==========================================================================
    # Execution
    # ==========================================================================

    def resolve_transition(self, ref: StateRef, symbol: str) -> Optional[Transition]:
        """
        Find the transition a state takes on `symbol`.

        An exact input match wins. Failing that, variants that support
        wildcards fall back to the state's OTHERWISE transition. Returns None
        when nothing applies. Validation guarantees at most one candidate.
        """
        otherwise = None
        for transition in self.get_state_transitions(ref):
            if transition.input_symbol == symbol:
                return transition
            if self.supports_wildcard and transition.input_symbol == OTHERWISE_SYMBOL and otherwise is None:
                otherwise = transition
        return otherwise

    def step(self, tape: Tape, ref: StateRef, transition: Optional[Transition]) -> State:
        """
        Take `transition` from the given state, mutating `tape`, and return the
        new current state. With no transition, decide whether the machine has
        halted and raise the matching control signal or error.
        """
        raise NotImplementedError
