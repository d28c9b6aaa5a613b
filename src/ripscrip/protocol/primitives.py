"""
RIPscrip Primitive Decoders
===========================

Decoders for the protocol's elementary lexical units. Each decoder reads
from a Scanner, advances it past what it consumed, and returns a plain
Python value or a value type from ripscrip.protocol.types.

Lexical Units
-------------
| Unit        | Width  | Alphabet            | Range    |
|-------------|--------|---------------------|----------|
| boolean     | 1 char | 0 1                 | False/True |
| meganum     | 2 char | 0-9 A-Z (any case)  | 0..1295  |
| enum digit  | 1 char | 0-9 A-Z (any case)  | per enum |

Streaming
---------
A Scanner is either *final* (the whole input is present) or streaming.
When a decoder runs out of characters on a streaming scanner it raises
NeedMoreInput, because the missing bytes may still arrive. The same
shortfall on a final scanner is a hard decode error. A character that is
present but outside the unit's alphabet is always a hard error.

Example
-------
>>> decode_meganum("0Z")
35
>>> scanner = Scanner("1ZZ")
>>> read_boolean(scanner), read_meganum(scanner)
(True, 1295)
"""

import string
from enum import IntEnum
from typing import TypeVar

from ripscrip.errors import (
    InvalidBooleanError,
    InvalidEnumValueError,
    InvalidNumeralError,
    NeedMoreInput,
    StreamLocation,
    ValueOutOfRangeError,
)
from ripscrip.protocol.types import (
    EGA_COLOR_COUNT,
    MEGANUM_MAX,
    PALETTE_SIZE,
    EGAColor,
    PaletteColor,
    WriteMode,
)

E = TypeVar("E", bound=IntEnum)

BASE36_DIGITS = string.digits + string.ascii_uppercase


# =============================================================================
# Scanner
# =============================================================================

class Scanner:
    """
    Left-to-right cursor over protocol text.

    Attributes:
        source: The text being decoded
        pos: Index of the next unread character
        final: True when no more input will follow `source`
        base_offset: Absolute stream offset of source[0], for error reports
    """

    def __init__(self, source: str, pos: int = 0, final: bool = True, base_offset: int = 0):
        self.source = source
        self.pos = pos
        self.final = final
        self.base_offset = base_offset

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        """Return the character at pos + offset, or '' past the end."""
        pos = self.pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def advance(self) -> str:
        char = self.peek()
        if char:
            self.pos += 1
        return char

    def location(self, pos: int | None = None) -> StreamLocation:
        return StreamLocation(self.base_offset + (self.pos if pos is None else pos))

    def need_more(self) -> NeedMoreInput:
        return NeedMoreInput(self.base_offset + self.pos)


# =============================================================================
# Digit Helpers
# =============================================================================

def base36_value(char: str) -> int:
    """Value of one base-36 digit, or -1 if `char` is not one."""
    if len(char) != 1:
        return -1
    return BASE36_DIGITS.find(char.upper())


# =============================================================================
# Primitive Decoders
# =============================================================================

def read_boolean(scanner: Scanner) -> bool:
    """Consume one '0'/'1' character."""
    char = scanner.peek()
    if not char:
        if scanner.final:
            raise InvalidBooleanError("expected boolean digit, found end of input",
                                      scanner.location())
        raise scanner.need_more()
    if char not in "01":
        raise InvalidBooleanError(f"expected '0' or '1', found {char!r}", scanner.location())
    scanner.advance()
    return char == "1"


def read_meganum(scanner: Scanner) -> int:
    """
    Consume a two-digit base-36 numeral.

    Both characters are checked before either is consumed, so a failed
    read leaves the scanner where it was.
    """
    start = scanner.pos
    value = 0
    for i in range(2):
        char = scanner.peek(i)
        if not char:
            if scanner.final:
                raise InvalidNumeralError(
                    f"meganum needs 2 digits, found {i}",
                    scanner.location(start),
                )
            raise NeedMoreInput(scanner.base_offset + start + i)
        digit = base36_value(char)
        if digit < 0:
            raise InvalidNumeralError(
                f"invalid base-36 digit {char!r} in meganum",
                scanner.location(start + i),
            )
        value = value * 36 + digit
    scanner.pos = start + 2
    return value


def read_bounded(scanner: Scanner, limit: int, field: str) -> int:
    """Consume a meganum and require it to be < `limit`."""
    start = scanner.pos
    value = read_meganum(scanner)
    if value >= limit:
        raise ValueOutOfRangeError(value, limit, field, scanner.location(start))
    return value


def read_palette_color(scanner: Scanner) -> PaletteColor:
    return PaletteColor(read_bounded(scanner, PALETTE_SIZE, "palette color"))


def read_ega_color(scanner: Scanner) -> EGAColor:
    return EGAColor(read_bounded(scanner, EGA_COLOR_COUNT, "EGA color"))


def read_write_mode(scanner: Scanner) -> WriteMode:
    return WriteMode(read_bounded(scanner, len(WriteMode), "write mode"))


def read_enum_digit(scanner: Scanner, enum_type: type[E]) -> E:
    """Consume one base-36 digit and map it onto `enum_type`."""
    char = scanner.peek()
    if not char:
        if scanner.final:
            raise InvalidEnumValueError(
                f"expected {enum_type.__name__} digit, found end of input",
                scanner.location(),
            )
        raise scanner.need_more()
    digit = base36_value(char)
    try:
        value = enum_type(digit)
    except ValueError:
        valid = "".join(BASE36_DIGITS[m.value] for m in enum_type)
        raise InvalidEnumValueError(
            f"{char!r} is not a valid {enum_type.__name__}",
            scanner.location(),
            hint=f"expected one of {valid!r}",
        ) from None
    scanner.advance()
    return value


# =============================================================================
# String Helpers
# =============================================================================

def decode_meganum(text: str) -> int:
    """Decode a complete two-character meganum string."""
    if len(text) != 2:
        raise InvalidNumeralError(f"meganum must be 2 characters, got {len(text)}")
    return read_meganum(Scanner(text))


def decode_boolean(text: str) -> bool:
    """Decode a complete single-character boolean string."""
    if len(text) != 1:
        raise InvalidBooleanError(f"boolean must be 1 character, got {len(text)}")
    return read_boolean(Scanner(text))


def encode_meganum(value: int) -> str:
    """Encode 0..1295 as two upper-case base-36 digits."""
    if not 0 <= value <= MEGANUM_MAX:
        raise ValueError(f"meganum value must be in 0..{MEGANUM_MAX}, got {value}")
    high, low = divmod(value, 36)
    return BASE36_DIGITS[high] + BASE36_DIGITS[low]
