# tuatara_sim/core/actions.py
"""
Actions: what happens to the tape when a transition is taken.

A Turing machine action either moves the head one cell or writes a symbol in
place. A DFSA action always consumes one input symbol by moving right, unless
it matches the empty string.
"""

from dataclasses import dataclass
from enum import Enum

from .tape import Tape

# ==============================================================================
# Reserved symbols
# ==============================================================================

# Marks an action whose input or output has not been configured yet.
UNDEFINED_SYMBOL = "!"
# Wildcard input for Turing machines: matches any symbol not matched exactly.
OTHERWISE_SYMBOL = "?"
# Turing machine output meaning "write nothing".
EMPTY_ACTION_SYMBOL = "ε"
# DFSA input matching the empty string (a lambda edge).
EMPTY_INPUT_SYMBOL = "λ"

LEFT_ARROW = "←"
RIGHT_ARROW = "→"


class Direction(Enum):
    """Head movement of a Turing machine action."""
    LEFT = -1
    NONE = 0
    RIGHT = 1

    @classmethod
    def from_name(cls, name: str) -> "Direction":
        return cls[name.upper()]


@dataclass
class TMAction:
    """
    A Turing machine action.

    `input_symbol` is the symbol the transition matches. `output_symbol` is
    only used when `direction` is NONE, in which case it is written to the
    current cell (EMPTY_ACTION_SYMBOL writes nothing).
    """
    direction: Direction = Direction.NONE
    input_symbol: str = UNDEFINED_SYMBOL
    output_symbol: str = UNDEFINED_SYMBOL

    @classmethod
    def move(cls, direction: Direction, input_symbol: str) -> "TMAction":
        return cls(direction, input_symbol, EMPTY_ACTION_SYMBOL)

    @classmethod
    def write(cls, input_symbol: str, output_symbol: str) -> "TMAction":
        return cls(Direction.NONE, input_symbol, output_symbol)

    def moves_head(self) -> bool:
        return self.direction is not Direction.NONE

    def perform(self, tape: Tape) -> None:
        if self.direction is Direction.LEFT:
            tape.head_left()
        elif self.direction is Direction.RIGHT:
            tape.head_right()
        elif self.output_symbol != EMPTY_ACTION_SYMBOL:
            tape.write(self.output_symbol)

    def __str__(self) -> str:
        if self.direction is Direction.LEFT:
            effect = LEFT_ARROW
        elif self.direction is Direction.RIGHT:
            effect = RIGHT_ARROW
        else:
            effect = self.output_symbol
        return f"{self.input_symbol}/{effect}"


@dataclass
class DFSAAction:
    """A DFSA action: match `input_symbol` and advance to the next input cell."""
    input_symbol: str = UNDEFINED_SYMBOL

    def moves_head(self) -> bool:
        return self.input_symbol != EMPTY_INPUT_SYMBOL

    def perform(self, tape: Tape) -> None:
        # Matching the empty string consumes nothing.
        if self.input_symbol != EMPTY_INPUT_SYMBOL:
            tape.head_right()

    def __str__(self) -> str:
        return self.input_symbol
