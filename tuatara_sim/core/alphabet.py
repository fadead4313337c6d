# tuatara_sim/core/alphabet.py
"""
The tape alphabet: which letters, digits and the blank may appear on a tape.

Membership is tracked as two bitmaps (26 letters, 10 digits) plus a blank
flag. Letters are case-insensitive. Every mutation increments `revision`, which
machines fold into their validation cache key so an alphabet edit can never
leave a stale "valid" flag behind.
"""

import string
from typing import List

BLANK_SYMBOL = "_"


class Alphabet:
    """A finite set of tape symbols over A-Z, 0-9 and the blank."""

    def __init__(self, symbols: str = "01", blank: bool = True):
        self._letters: List[bool] = [False] * 26
        self._digits: List[bool] = [False] * 10
        self._blank = blank
        self.revision = 0
        for c in symbols:
            self.set_symbol(c, True)

    def contains_symbol(self, c: str) -> bool:
        """
        Determine if this alphabet contains the given symbol.

        Every character is classified: anything that is not an ASCII letter,
        a digit, a space or the blank symbol is simply not a member.
        """
        if not c or len(c) != 1:
            return False
        c = c.upper()
        if c in string.ascii_uppercase:
            return self._letters[ord(c) - ord("A")]
        if c in string.digits:
            return self._digits[ord(c) - ord("0")]
        if c == " " or c == BLANK_SYMBOL:
            return self._blank
        return False

    def __contains__(self, c: str) -> bool:
        return self.contains_symbol(c)

    def set_symbol(self, c: str, included: bool) -> None:
        """Add (included=True) or remove a single symbol. Unknown characters are ignored."""
        c = c.upper()
        if c in string.ascii_uppercase:
            self._letters[ord(c) - ord("A")] = included
        elif c in string.digits:
            self._digits[ord(c) - ord("0")] = included
        elif c == " " or c == BLANK_SYMBOL:
            self._blank = included
        else:
            return
        self.revision += 1

    def set_all_letters(self, included: bool) -> None:
        self._letters = [included] * 26
        self.revision += 1

    def set_all_digits(self, included: bool) -> None:
        self._digits = [included] * 10
        self.revision += 1

    def set_blank(self, included: bool) -> None:
        self._blank = included
        self.revision += 1

    def has_blank(self) -> bool:
        return self._blank

    def symbols(self) -> List[str]:
        """Member letters followed by member digits. The blank is not included."""
        result = [chr(ord("A") + i) for i, present in enumerate(self._letters) if present]
        result.extend(chr(ord("0") + i) for i, present in enumerate(self._digits) if present)
        return result

    def copy(self) -> "Alphabet":
        """Return an independent clone with the same membership."""
        clone = Alphabet(symbols="", blank=self._blank)
        clone._letters = list(self._letters)
        clone._digits = list(self._digits)
        return clone

    def to_string(self) -> str:
        """Compact form used by the file format, e.g. '01_'."""
        return "".join(self.symbols()) + (BLANK_SYMBOL if self._blank else "")

    @classmethod
    def from_string(cls, text: str) -> "Alphabet":
        return cls(symbols=text.replace(BLANK_SYMBOL, "").replace(" ", ""),
                   blank=BLANK_SYMBOL in text or " " in text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Alphabet):
            return NotImplemented
        return (self._letters == other._letters and self._digits == other._digits
                and self._blank == other._blank)

    def __repr__(self) -> str:
        return f"Alphabet({self.to_string()!r})"
