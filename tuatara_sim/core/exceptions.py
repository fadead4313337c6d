# tuatara_sim/core/exceptions.py
"""
Exception types raised by the interpreter core.

Two families live here. Errors (`NondeterministicError`, `TapeBoundsError`,
`UndefinedTransitionError`, `SubmachineCycleError`) mean the current step
could not be carried out. Control signals (`ComputationCompleted`,
`ComputationFailed`) are expected flow: they report that a computation has
halted and are caught by the run loop.

None of them leave the Simulator unusable; only the step that raised is lost.
"""


class MachineError(Exception):
    """Base class for everything the interpreter raises."""
    pass


class NondeterministicError(MachineError):
    """A machine failed validation; the message names the offending part."""
    pass


class TapeBoundsError(MachineError):
    """The read/write head was asked to move left of the first cell."""

    def __init__(self, message: str = "The r/w head cannot move past the start of the tape."):
        super().__init__(message)


class UndefinedTransitionError(MachineError):
    """A Turing machine has no applicable transition and is not halted."""
    pass


class SubmachineCycleError(MachineError):
    """Attaching a submachine would make a machine contain itself."""
    pass


class ComputationCompleted(MachineError):
    """Control signal: the computation halted successfully."""

    def __init__(self, message: str = "The computation completed."):
        super().__init__(message)


class ComputationFailed(MachineError):
    """Control signal: the computation halted without accepting."""

    def __init__(self, message: str = "The computation failed."):
        super().__init__(message)
