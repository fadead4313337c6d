# tuatara_sim/core/machine_ir.py
"""
Defines the structural records a machine is built from.

States and transitions are plain data owned by exactly one machine, which
issues them stable integer handles. Equality is by identity: two states with
the same label are still different states. Nothing here should be mutated
directly by callers; use the owning Machine's methods so the validation cache
stays honest.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union, TYPE_CHECKING

from .actions import DFSAAction, TMAction

if TYPE_CHECKING:
    from .tm_machine import TMMachine

Action = Union[TMAction, DFSAAction]


class MachineKind(Enum):
    """Tag identifying which machine variant a structure belongs to."""
    TM = "TM"
    DFSA = "DFSA"


@dataclass(eq=False)
class State:
    """Represents a single state (node) of a machine."""
    state_id: int
    label: str
    is_start: bool = False
    is_final: bool = False
    # Handles of outgoing transitions, in insertion order.
    transition_ids: List[int] = field(default_factory=list)
    # For hierarchical Turing machines, the nested machine run in this state.
    submachine: Optional["TMMachine"] = None
    # Editor-side data such as canvas position; never read by the interpreter.
    properties: Dict[str, Any] = field(default_factory=dict)

    def has_submachine(self) -> bool:
        return self.submachine is not None


@dataclass(eq=False)
class Transition:
    """Represents a directed edge between two states of the same machine."""
    transition_id: int
    from_id: int
    to_id: int
    action: Action
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def input_symbol(self) -> str:
        """The symbol this edge matches, mirrored from its action."""
        return self.action.input_symbol
