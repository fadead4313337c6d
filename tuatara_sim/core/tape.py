# tuatara_sim/core/tape.py
"""
A one-ended tape: bounded on the left, unbounded on the right.

Cells are kept in a Python list that doubles in size whenever the head moves
past its end, so the storage only ever grows. Any cell that was never written
reads as the blank symbol.

An optional observer callable is invoked after every mutation (head movement,
write, reset, clear, copy). Reads never notify. The hook is fire-and-forget;
the interpreter does not depend on anything it does.
"""

import logging
from typing import Callable, List, Optional

from .alphabet import BLANK_SYMBOL
from .exceptions import TapeBoundsError
from ..utils.config import DEFAULT_TAPE_CAPACITY

logger = logging.getLogger(__name__)

TapeObserver = Callable[[], None]


class Tape:
    """Read/write tape with a head offset that never goes below zero."""

    def __init__(self, initial: str = "", capacity: int = DEFAULT_TAPE_CAPACITY,
                 observer: Optional[TapeObserver] = None):
        self._capacity = max(1, capacity)
        self._cells: List[str] = []
        self._head = 0
        self._observer = observer
        self._load(initial)

    # --------------------------------------------------------------------------
    # Observer hook
    # --------------------------------------------------------------------------

    def set_observer(self, observer: Optional[TapeObserver]) -> None:
        """Attach (or with None, detach) the refresh hook. Attaching notifies once."""
        self._observer = observer
        self._notify()

    def _notify(self) -> None:
        if self._observer is not None:
            self._observer()

    # --------------------------------------------------------------------------
    # Head and cell operations
    # --------------------------------------------------------------------------

    def read(self) -> str:
        return self._cells[self._head]

    def head_left(self) -> None:
        """Move the head one cell left; at offset 0 raise TapeBoundsError and stay put."""
        if self._head == 0:
            raise TapeBoundsError()
        self._head -= 1
        self._notify()

    def head_right(self) -> None:
        """Move the head one cell right, doubling the storage when it runs out."""
        self._head += 1
        if self._head >= len(self._cells):
            old_size = len(self._cells)
            self._cells.extend([BLANK_SYMBOL] * old_size)
            logger.debug(f"Tape storage grown from {old_size} to {len(self._cells)} cells.")
        self._notify()

    def write(self, symbol: str) -> None:
        if symbol == " ":
            symbol = BLANK_SYMBOL
        self._cells[self._head] = symbol
        self._notify()

    def reset_head(self) -> None:
        self._head = 0
        self._notify()

    # Alias matching the "r/w head" wording used in messages.
    reset_rw_head = reset_head

    def is_parked(self) -> bool:
        return self._head == 0

    def head_location(self) -> int:
        return self._head

    # --------------------------------------------------------------------------
    # Whole-tape operations
    # --------------------------------------------------------------------------

    def clear_tape(self) -> None:
        """Make this the empty tape: all blank, head at offset 0."""
        self._cells = [BLANK_SYMBOL] * self._capacity
        self._head = 0
        self._notify()

    def copy_from(self, other: "Tape") -> None:
        """Take on exactly the characters of `other`; the head returns to the start."""
        self._load(other.contents())
        self._notify()

    def set_contents(self, text: str) -> None:
        """Replace the tape with `text` followed by blanks; the head returns to the start."""
        self._load(text)
        self._notify()

    def _load(self, text: str) -> None:
        text = (text or "").replace(" ", BLANK_SYMBOL)
        self._cells = list(text) + [BLANK_SYMBOL] * self._capacity
        self._head = 0

    def length(self) -> int:
        """
        Length of the string on the tape: the offset one past the last non-blank
        cell. Blanks in between non-blank cells are counted.
        """
        for i in range(len(self._cells) - 1, -1, -1):
            if self._cells[i] != BLANK_SYMBOL:
                return i + 1
        return 0

    def partial_string(self, begin: int, length: int) -> str:
        """
        Return exactly `length` characters starting at offset `begin`.

        Cells past the end of storage read as blank, so this never raises for a
        non-negative range regardless of how far it reaches.
        """
        if length <= 0:
            return ""
        begin = max(0, begin)
        chunk = self._cells[begin:begin + length]
        return "".join(chunk) + BLANK_SYMBOL * (length - len(chunk))

    def contents(self) -> str:
        """The string on the tape without the trailing infinite blanks."""
        return "".join(self._cells[:self.length()])

    def __str__(self) -> str:
        return "".join(self._cells)

    def __repr__(self) -> str:
        return f"Tape({self.contents()!r}, head={self._head})"
