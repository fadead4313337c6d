# tuatara_sim/core/__init__.py
"""
Initializes the core package and re-exports the interpreter's public API so
callers can import everything they need from `tuatara_sim.core`.
"""

from .exceptions import (
    MachineError,
    NondeterministicError,
    TapeBoundsError,
    UndefinedTransitionError,
    SubmachineCycleError,
    ComputationCompleted,
    ComputationFailed,
)
from .alphabet import Alphabet, BLANK_SYMBOL
from .tape import Tape
from .actions import (
    Direction,
    TMAction,
    DFSAAction,
    UNDEFINED_SYMBOL,
    OTHERWISE_SYMBOL,
    EMPTY_ACTION_SYMBOL,
    EMPTY_INPUT_SYMBOL,
)
from .machine_ir import MachineKind, State, Transition
from .machine import Machine
from .tm_machine import TMMachine
from .dfsa_machine import DFSAMachine
from .simulator import (
    ExecutionFrame,
    Simulator,
    TMSimulator,
    DFSASimulator,
    create_simulator,
)
from .machine_io import (
    machine_to_dict,
    machine_from_dict,
    save_machine,
    load_machine,
    save_tape,
    load_tape,
)

__all__ = [
    "MachineError",
    "NondeterministicError",
    "TapeBoundsError",
    "UndefinedTransitionError",
    "SubmachineCycleError",
    "ComputationCompleted",
    "ComputationFailed",
    "Alphabet",
    "BLANK_SYMBOL",
    "Tape",
    "Direction",
    "TMAction",
    "DFSAAction",
    "UNDEFINED_SYMBOL",
    "OTHERWISE_SYMBOL",
    "EMPTY_ACTION_SYMBOL",
    "EMPTY_INPUT_SYMBOL",
    "MachineKind",
    "State",
    "Transition",
    "Machine",
    "TMMachine",
    "DFSAMachine",
    "ExecutionFrame",
    "Simulator",
    "TMSimulator",
    "DFSASimulator",
    "create_simulator",
    "machine_to_dict",
    "machine_from_dict",
    "save_machine",
    "load_machine",
    "save_tape",
    "load_tape",
]
