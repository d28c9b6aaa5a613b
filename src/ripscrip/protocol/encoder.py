"""
RIPscrip Command Encoder
========================

Produces the canonical wire form of the commands the decoder recognizes:
upper-case meganums, base level, no padding. Useful for generating test
scenes and for checking that decode(encode(x)) recovers x.

>>> from ripscrip.protocol import commands
>>> from ripscrip.protocol.types import XY
>>> encode_command(commands.Viewport(corners=(XY(0, 0), XY(35, 35))))
'|v00000Z0Z'
"""

from typing import Callable, Iterable

from ripscrip.errors import EncodeError
from ripscrip.protocol import commands
from ripscrip.protocol.commands import Command
from ripscrip.protocol.decoder import BATCH_START, COMMAND_START
from ripscrip.protocol.primitives import BASE36_DIGITS, encode_meganum
from ripscrip.protocol.types import XY


def _xy(point: XY) -> str:
    return encode_meganum(point.x) + encode_meganum(point.y)


def _corners(corners: tuple[XY, XY]) -> str:
    return _xy(corners[0]) + _xy(corners[1])


FIELD_ENCODERS: dict[type[Command], Callable] = {
    commands.TextWindow: lambda c: (
        _corners(c.corners) + ("1" if c.wrap else "0") + BASE36_DIGITS[int(c.size)]
    ),
    commands.Viewport: lambda c: _corners(c.corners),
    commands.ResetWindows: lambda c: "",
    commands.EraseWindow: lambda c: "",
    commands.EraseView: lambda c: "",
    commands.Gotoxy: lambda c: _xy(c.position),
    commands.Home: lambda c: "",
    commands.EraseEol: lambda c: "",
    commands.Color: lambda c: encode_meganum(int(c.color)),
    commands.SetPalette: lambda c: "".join(encode_meganum(int(v)) for v in c.colors),
    commands.OnePalette: lambda c: encode_meganum(int(c.color)) + encode_meganum(int(c.value)),
    commands.WriteMode: lambda c: encode_meganum(int(c.mode)),
}


def encode_command(command: Command) -> str:
    """Encode one command as '|' + symbol + fields."""
    encode_fields = FIELD_ENCODERS.get(type(command))
    if encode_fields is None:
        raise EncodeError(f"{command.name} has no wire encoding")
    return COMMAND_START + command.symbol + encode_fields(command)


def encode_batch(batch: Iterable[Command]) -> str:
    """Encode commands as one '!'-framed batch (without line terminator)."""
    encoded = [encode_command(c) for c in batch]
    if not encoded:
        raise EncodeError("a batch needs at least one command")
    return BATCH_START + "".join(encoded)
