"""
RIPscrip Command Decoder
========================

Turns protocol text into Command values.

Grammar
-------
    batch   := '!' command+
    command := '|' level symbol args
    level   := 0-9 decimal digits       (empty = base level)
    symbol  := one printable ASCII character (space .. '~')

A batch ends at the first character after a complete command that is
not '|'; RIPscrip hosts end each batch with CR/LF. Text outside batches
is ordinary terminal text and is skipped by the stream decoder.

The (level, symbol) pair selects a field decoder from COMMAND_TABLE.
Only the base level is wired; everything else decodes to Unknown, which
swallows the rest of its batch (up to the next CR/LF). Field decode
failures abort the whole batch: no partial command and no command from
that batch is delivered.

Wired Commands
--------------
| Symbol | Command      | Fields                                   |
|--------|--------------|------------------------------------------|
| w      | TextWindow   | x0 y0 x1 y1 (meganum), wrap (bool), size |
| v      | Viewport     | x0 y0 x1 y1 (meganum)                    |
| *      | ResetWindows |                                          |
| e      | EraseWindow  |                                          |
| E      | EraseView    |                                          |
| g      | Gotoxy       | x y (meganum)                            |
| H      | Home         |                                          |
| >      | EraseEol     |                                          |
| c      | Color        | color (meganum < 16)                     |
| Q      | SetPalette   | 16 x color (meganum < 64)                |
| a      | OnePalette   | color (< 16), value (< 64)               |
| W      | WriteMode    | mode (meganum < 2)                       |

Decoding Strategies
-------------------
parse_batch() is the single parser. It works on a prefix of the stream:
when the input stops in the middle of a token, or right after a command
where the batch could still continue, it raises NeedMoreInput and the
caller retries once more bytes are buffered. StreamDecoder does that
buffering. decode() handles a complete buffer by feeding it to a
StreamDecoder and finishing, which turns any shortfall into a hard
error.

Example
-------
>>> from ripscrip.protocol.decoder import decode
>>> decode("!|c03")
[Color(color=PaletteColor(index=3))]
"""

import logging
import string
from dataclasses import dataclass
from typing import Callable, Optional

from ripscrip.errors import DecodeError, FramingError, NeedMoreInput, StreamLocation
from ripscrip.protocol import commands
from ripscrip.protocol.commands import Command
from ripscrip.protocol.primitives import (
    Scanner,
    read_boolean,
    read_ega_color,
    read_enum_digit,
    read_meganum,
    read_palette_color,
    read_write_mode,
)
from ripscrip.protocol.types import PALETTE_SIZE, XY, TextWindowSize

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

BATCH_START = "!"
COMMAND_START = "|"
LINE_TERMINATORS = "\r\n"

BASE_LEVEL = ""
MAX_LEVEL_DIGITS = 9

# Space through '~': the 95 printable ASCII characters.
COMMAND_ALPHABET = "".join(chr(c) for c in range(0x20, 0x7F))

DEFAULT_ENCODING = "cp437"

# Longest incomplete batch StreamDecoder buffers before giving up on it.
MAX_PENDING_BATCH = 64 * 1024


# =============================================================================
# Field Decoders
# =============================================================================

FieldDecoder = Callable[[Scanner], Command]


def _read_xy(scanner: Scanner) -> XY:
    x = read_meganum(scanner)
    y = read_meganum(scanner)
    return XY(x, y)


def _read_corners(scanner: Scanner) -> tuple[XY, XY]:
    return _read_xy(scanner), _read_xy(scanner)


def _text_window(scanner: Scanner) -> Command:
    corners = _read_corners(scanner)
    wrap = read_boolean(scanner)
    size = read_enum_digit(scanner, TextWindowSize)
    return commands.TextWindow(corners=corners, wrap=wrap, size=size)


def _viewport(scanner: Scanner) -> Command:
    return commands.Viewport(corners=_read_corners(scanner))


def _gotoxy(scanner: Scanner) -> Command:
    return commands.Gotoxy(position=_read_xy(scanner))


def _color(scanner: Scanner) -> Command:
    return commands.Color(color=read_palette_color(scanner))


def _set_palette(scanner: Scanner) -> Command:
    colors = tuple(read_ega_color(scanner) for _ in range(PALETTE_SIZE))
    return commands.SetPalette(colors=colors)


def _one_palette(scanner: Scanner) -> Command:
    color = read_palette_color(scanner)
    value = read_ega_color(scanner)
    return commands.OnePalette(color=color, value=value)


def _write_mode(scanner: Scanner) -> Command:
    return commands.WriteMode(mode=read_write_mode(scanner))


def _no_args(command_type: type[Command]) -> FieldDecoder:
    def decode_fields(scanner: Scanner) -> Command:
        return command_type()
    return decode_fields


COMMAND_TABLE: dict[tuple[str, str], FieldDecoder] = {
    (BASE_LEVEL, "w"): _text_window,
    (BASE_LEVEL, "v"): _viewport,
    (BASE_LEVEL, "*"): _no_args(commands.ResetWindows),
    (BASE_LEVEL, "e"): _no_args(commands.EraseWindow),
    (BASE_LEVEL, "E"): _no_args(commands.EraseView),
    (BASE_LEVEL, "g"): _gotoxy,
    (BASE_LEVEL, "H"): _no_args(commands.Home),
    (BASE_LEVEL, ">"): _no_args(commands.EraseEol),
    (BASE_LEVEL, "c"): _color,
    (BASE_LEVEL, "Q"): _set_palette,
    (BASE_LEVEL, "a"): _one_palette,
    (BASE_LEVEL, "W"): _write_mode,
}


# =============================================================================
# Batch Parser
# =============================================================================

@dataclass
class Batch:
    """
    One decoded batch.

    Attributes:
        commands: Commands in protocol order
        start: Index of the '!' in the parsed source
        end: Index just past the last character consumed
    """
    commands: list[Command]
    start: int
    end: int


def find_terminator(source: str, pos: int) -> int:
    """Index of the first CR or LF at or after `pos`, or -1."""
    indexes = [i for i in (source.find(t, pos) for t in LINE_TERMINATORS) if i >= 0]
    return min(indexes) if indexes else -1


def parse_batch(source: str, pos: int = 0, *, final: bool = False, base_offset: int = 0) -> Batch:
    """
    Parse one batch starting at source[pos], which must be '!'.

    Args:
        source: Protocol text
        pos: Index of the batch's '!'
        final: True if no more input will follow `source`
        base_offset: Absolute stream offset of source[0], for error reports

    Returns:
        The decoded Batch.

    Raises:
        NeedMoreInput: The batch is valid so far but not complete.
        DecodeError: The batch is malformed.
    """
    scanner = Scanner(source, pos, final=final, base_offset=base_offset)

    char = scanner.peek()
    if not char:
        if final:
            raise FramingError("expected '!' to start a batch, found end of input",
                               scanner.location())
        raise scanner.need_more()
    if char != BATCH_START:
        raise FramingError(f"expected '!' to start a batch, found {char!r}", scanner.location())
    scanner.advance()

    decoded: list[Command] = []
    while True:
        char = scanner.peek()
        if not char:
            if not final:
                # The next chunk may start with another '|'.
                raise scanner.need_more()
            if decoded:
                break
            raise FramingError("batch contains no commands", scanner.location())
        if char != COMMAND_START:
            if decoded:
                break
            raise FramingError(f"expected '|' after '!', found {char!r}", scanner.location())

        command = _parse_command(scanner)
        decoded.append(command)
        if isinstance(command, commands.Unknown):
            break

    return Batch(commands=decoded, start=pos, end=scanner.pos)


def _is_level_digit(char: str) -> bool:
    # Note: must check for non-empty string first because '' in a string is True
    return bool(char) and char in string.digits


def _parse_command(scanner: Scanner) -> Command:
    """Parse one '|'-framed command; the scanner sits on the '|'."""
    start = scanner.pos
    scanner.advance()

    level_start = scanner.pos
    while scanner.pos - level_start < MAX_LEVEL_DIGITS and _is_level_digit(scanner.peek()):
        scanner.advance()
    level = scanner.source[level_start:scanner.pos]

    symbol = scanner.peek()
    if not symbol:
        if scanner.final:
            raise FramingError("command ends before its symbol", scanner.location(start))
        raise scanner.need_more()
    if symbol not in COMMAND_ALPHABET:
        raise FramingError(f"invalid command symbol {symbol!r}", scanner.location())
    scanner.advance()

    decode_fields = COMMAND_TABLE.get((level, symbol))
    if decode_fields is None:
        return _parse_unknown(scanner, level, symbol)

    try:
        command = decode_fields(scanner)
    except DecodeError as e:
        raise e.with_symbol(symbol)
    logger.debug("offset %d: %r", scanner.base_offset + start, command)
    return command


def _parse_unknown(scanner: Scanner, level: str, symbol: str) -> Command:
    """Swallow the rest of the batch behind an unrecognized command."""
    end = find_terminator(scanner.source, scanner.pos)
    if end < 0:
        if not scanner.final:
            raise NeedMoreInput(scanner.base_offset + len(scanner.source),
                                until_terminator=True)
        end = len(scanner.source)
    skipped = scanner.source[scanner.pos:end]
    scanner.pos = end
    logger.debug(
        "unrecognized command level=%r symbol=%r, discarding %d chars",
        level, symbol, len(skipped),
    )
    return commands.Unknown(level=level, dispatch_symbol=symbol, skipped=skipped)


# =============================================================================
# Stream Decoder
# =============================================================================

class StreamDecoder:
    """
    Incremental decoder for a RIPscrip byte stream.

    Chunks are appended with push() (or feed()); complete batches are
    taken out with next_batch(). A batch that is still arriving stays in
    the buffer until it is complete, so a batch is always delivered as a
    whole or not at all.

    Usage:
        decoder = StreamDecoder()
        for chunk in chunks:
            for command in decoder.feed(chunk):
                interpreter.apply(command)
        for command in decoder.finish():
            interpreter.apply(command)

    Attributes:
        encoding: Codec for byte chunks (RIPscrip hosts send code page 437)
        batches: Number of batches decoded so far
        text_skipped: Characters of plain terminal text skipped so far
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING):
        self.encoding = encoding
        self.batches = 0
        self.text_skipped = 0
        self._buffer = ""
        self._offset = 0          # absolute stream offset of _buffer[0]
        self._discarding = False  # skipping the tail of a failed batch
        self._final = False
        # Absolute offset to resume the CR/LF search for a pending unknown tail
        self._terminator_scan: Optional[int] = None

    @property
    def pending(self) -> str:
        """Buffered text not yet decoded."""
        return self._buffer

    @property
    def offset(self) -> int:
        """Absolute stream offset of the first undecoded character."""
        return self._offset

    def push(self, data: bytes | str) -> None:
        """Append a chunk to the buffer without decoding."""
        if isinstance(data, bytes):
            data = data.decode(self.encoding)
        self._buffer += data

    def feed(self, data: bytes | str) -> list[Command]:
        """
        Append a chunk and return the commands of every batch it completes.

        Raises:
            DecodeError: A batch failed to decode. That batch is dropped
                (up to its line terminator) and decoding can continue
                with the next feed(). Commands from batches completed
                earlier in this call are attached as `error.decoded`.
        """
        self.push(data)
        return self._collect()

    def close(self) -> None:
        """
        Mark the end of input without decoding.

        Subsequent next_batch() calls treat a truncated batch as an error
        instead of waiting for more bytes.
        """
        self._final = True

    def finish(self) -> list[Command]:
        """Decode whatever is left, treating the end of input as final."""
        self.close()
        try:
            return self._collect()
        finally:
            self._buffer = ""
            self._discarding = False
            self._final = False
            self._terminator_scan = None

    def next_batch(self) -> Optional[list[Command]]:
        """
        Decode the next complete batch from the buffer.

        Returns:
            The batch's commands, or None if the buffer holds no
            complete batch yet.

        Raises:
            DecodeError: The next batch is malformed. Its remainder is
                discarded before the error propagates.
        """
        buf = self._buffer
        pos = 0
        try:
            while pos < len(buf):
                if self._discarding:
                    end = find_terminator(buf, pos)
                    if end < 0:
                        pos = len(buf)
                        break
                    pos = end
                    self._discarding = False
                    continue

                bang = buf.find(BATCH_START, pos)
                if bang < 0:
                    self.text_skipped += len(buf) - pos
                    pos = len(buf)
                    break
                self.text_skipped += bang - pos
                pos = bang

                if bang + 1 >= len(buf):
                    if self._final:
                        self.text_skipped += 1
                        pos += 1
                    break
                if buf[bang + 1] != COMMAND_START:
                    # A lone '!' in plain text.
                    self.text_skipped += 1
                    pos += 1
                    continue

                if self._terminator_scan is not None and not self._final:
                    # Only a line terminator can complete the pending batch.
                    if find_terminator(buf, self._terminator_scan - self._offset) < 0:
                        self._terminator_scan = self._offset + len(buf)
                        if len(buf) - pos > MAX_PENDING_BATCH:
                            error = self._drop_oversized(pos)
                            pos = len(buf)
                            raise error
                        break
                self._terminator_scan = None

                try:
                    batch = parse_batch(buf, pos, final=self._final, base_offset=self._offset)
                except NeedMoreInput as e:
                    if len(buf) - pos > MAX_PENDING_BATCH:
                        error = self._drop_oversized(pos)
                        pos = len(buf)
                        raise error from None
                    if e.until_terminator:
                        self._terminator_scan = self._offset + len(buf)
                    break
                except DecodeError as e:
                    logger.warning("discarding batch at offset %d: %s",
                                   self._offset + pos, e.message)
                    self._discarding = True
                    pos += 1
                    raise

                pos = batch.end
                self.batches += 1
                return batch.commands
            return None
        finally:
            self._buffer = buf[pos:]
            self._offset += pos

    def _drop_oversized(self, pos: int) -> FramingError:
        error = FramingError(
            f"batch exceeds {MAX_PENDING_BATCH} characters without completing",
            StreamLocation(self._offset + pos),
        )
        logger.warning("discarding batch at offset %d: %s", self._offset + pos, error.message)
        self._discarding = True
        self._terminator_scan = None
        return error

    def _collect(self) -> list[Command]:
        decoded: list[Command] = []
        while True:
            try:
                batch = self.next_batch()
            except DecodeError as e:
                e.decoded = decoded
                raise
            if batch is None:
                return decoded
            decoded.extend(batch)


# =============================================================================
# Convenience Functions
# =============================================================================

def decode(data: bytes | str, encoding: str = DEFAULT_ENCODING) -> list[Command]:
    """
    Decode a complete buffer.

    Args:
        data: Protocol text or bytes, possibly several batches
        encoding: Codec for byte input

    Returns:
        Every decoded command, in protocol order.

    Raises:
        DecodeError: Any batch failed to decode (including truncation).
    """
    decoder = StreamDecoder(encoding)
    decoded = decoder.feed(data)
    decoded.extend(decoder.finish())
    return decoded


def decode_command(text: str) -> Command:
    """Decode a single '|'-framed command, e.g. '|c03'."""
    batch = parse_batch(BATCH_START + text, final=True)
    if len(batch.commands) != 1 or batch.end != len(text) + 1:
        raise FramingError(
            f"expected exactly one command, got {len(batch.commands)}",
            StreamLocation(batch.end),
        )
    return batch.commands[0]
