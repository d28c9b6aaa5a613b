"""
RIPscrip Toolkit Error Hierarchy
================================

This module defines the exception hierarchy for the whole toolkit.
All exceptions inherit from RipError, allowing callers to catch every
toolkit error with a single except clause if desired.

Exception Hierarchy
-------------------
RipError (base)
├── DecodeError (protocol decoding)
│   ├── InvalidBooleanError - boolean field is not '0' or '1'
│   ├── InvalidNumeralError - malformed or truncated base-36 numeral
│   ├── ValueOutOfRangeError - numeral decoded but outside legal range
│   ├── InvalidEnumValueError - enum digit not in its lookup table
│   └── FramingError - missing '!' or '|', or symbol outside the alphabet
├── NeedMoreInput - valid prefix, more bytes required (recoverable)
├── EncodeError - command has no wire encoding
├── InterpreterError (display interpreter)
│   └── InvalidGeometryError - rectangle with inverted corners
└── TransportError (byte sources)
    └── ConnectionError - cannot open serial port

Error messages follow this format:
    offset 12 (symbol 'c'): error: description
    hint: suggestion for fixing (when available)

NeedMoreInput deliberately sits outside DecodeError: a streaming caller
that catches DecodeError must never swallow the "buffer and retry"
signal by accident.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class RipError(Exception):
    """
    Base exception for all RIPscrip toolkit errors.

        try:
            commands = decode(data)
        except RipError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Stream Location Tracking
# =============================================================================

@dataclass(frozen=True)
class StreamLocation:
    """
    Position in the protocol stream for error reporting.

    Attributes:
        offset: Absolute character offset in the stream (0-indexed)
        symbol: Dispatch symbol of the command being decoded, if known
    """
    offset: int
    symbol: Optional[str] = None

    def __str__(self) -> str:
        if self.symbol is not None:
            return f"offset {self.offset} (symbol {self.symbol!r})"
        return f"offset {self.offset}"


# =============================================================================
# Decoder Exceptions
# =============================================================================

class DecodeError(RipError):
    """
    Base exception for protocol decode failures.

    A decode failure aborts the batch it occurred in. The protocol has
    no reliable resynchronization point mid-command, so these are never
    retried automatically.

    Attributes:
        message: The error description
        location: Where in the stream the error occurred (optional)
        hint: A suggestion for diagnosing the stream (optional)
    """

    kind = "DecodeError"

    def __init__(
        self,
        message: str,
        location: Optional[StreamLocation] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        # Commands from batches completed before the failing one (StreamDecoder.feed)
        self.decoded: list = []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []
        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")
        if self.hint:
            parts.append(f"hint: {self.hint}")
        return "\n".join(parts)

    def with_symbol(self, symbol: str) -> "DecodeError":
        """Attach the dispatch symbol to an error raised by a field decoder."""
        offset = self.location.offset if self.location else 0
        self.location = StreamLocation(offset, symbol)
        self.args = (self._format_message(),)
        return self


class InvalidBooleanError(DecodeError):
    """A boolean field held something other than '0' or '1'."""

    kind = "InvalidBoolean"


class InvalidNumeralError(DecodeError):
    """
    Malformed or insufficient base-36 digits.

    On a streaming scan, running out of digits raises NeedMoreInput
    instead; this error only reports truncation once input is final.
    """

    kind = "InvalidNumeral"


class ValueOutOfRangeError(DecodeError):
    """
    A numeral decoded cleanly but is outside the field's legal range.

    The characters are consumed; the command carrying them is rejected.
    """

    kind = "ValueOutOfRange"

    def __init__(
        self,
        value: int,
        limit: int,
        field: str,
        location: Optional[StreamLocation] = None,
    ):
        self.value = value
        self.limit = limit
        self.field = field
        super().__init__(
            f"{field} value {value} is out of range (must be < {limit})",
            location=location,
        )


class InvalidEnumValueError(DecodeError):
    """An enumerated single-digit field is not in its lookup table."""

    kind = "InvalidEnumValue"


class FramingError(DecodeError):
    """
    Batch or command framing is broken.

    Raised when a batch does not start with '!', a command does not
    start with '|', or the dispatch symbol is not printable ASCII.
    """

    kind = "InvalidFraming"


# =============================================================================
# Streaming Signal
# =============================================================================

class NeedMoreInput(RipError):
    """
    The input is a valid prefix but ends mid-token or mid-batch.

    Not a failure: the caller buffers what it has and retries the same
    decode call once more bytes arrive.

    Attributes:
        offset: Where the decoder ran out of input
        until_terminator: Only a CR or LF can complete the batch (an
                          unrecognized command is swallowing its tail)
    """

    kind = "NeedMoreInput"

    def __init__(self, offset: int, until_terminator: bool = False):
        self.offset = offset
        self.until_terminator = until_terminator
        super().__init__(f"need more input at offset {offset}")


# =============================================================================
# Encoder Exceptions
# =============================================================================

class EncodeError(RipError):
    """Raised when a command has no wire encoding in the current command set."""
    pass


# =============================================================================
# Interpreter Exceptions
# =============================================================================

class InterpreterError(RipError):
    """
    Base exception for display interpreter errors.

    The affected command's effect is skipped; Display State stays well
    defined and processing continues with the next command.
    """

    kind = "InterpreterError"

    def __init__(self, message: str, command: object = None):
        self.message = message
        self.command = command
        super().__init__(message)


class InvalidGeometryError(InterpreterError):
    """A rectangle command has x1 < x0 or y1 < y0."""

    kind = "InvalidGeometry"


# =============================================================================
# Transport Exceptions
# =============================================================================

class TransportError(RipError):
    """Base exception for byte-source errors."""
    pass


class ConnectionError(TransportError):
    """
    Cannot open the serial port.

    Raised when:
    - Serial port not found
    - Permission denied
    - Port busy
    """
    pass


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects errors for batch reporting.

    Used for both decode errors (dropped batches) and interpreter errors
    (skipped commands). Processing keeps going after each one, so a
    whole scene can be rendered and every problem reported at the end.

    Example:
        collector = ErrorCollector(max_errors=100)
        collector.add(InvalidGeometryError("viewport x1 < x0"))
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        self.errors: list[RipError] = []
        self.max_errors = max_errors
        self.dropped = 0

    def add(self, error: RipError) -> None:
        """Add an error; errors beyond max_errors are only counted."""
        if len(self.errors) >= self.max_errors:
            self.dropped += 1
            return
        self.errors.append(error)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def error_count(self) -> int:
        return len(self.errors) + self.dropped

    def report(self) -> str:
        """Format all errors for display."""
        lines = [str(error) for error in self.errors]
        if self.dropped:
            lines.append(f"... {self.dropped} more not shown")
        count = self.error_count()
        error_word = "error" if count == 1 else "errors"
        lines.append(f"{count} {error_word}")
        return "\n".join(lines)

    def clear(self) -> None:
        self.errors.clear()
        self.dropped = 0
