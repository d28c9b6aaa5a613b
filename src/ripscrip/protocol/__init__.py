"""
RIPscrip Protocol Layer
=======================

Everything between raw protocol text and typed Command values.

Main Components
---------------
- **types**: Value types (XY, PaletteColor, EGAColor, WriteMode, enums, flags)
- **commands**: The closed set of Command variants
- **primitives**: Decoders for booleans, meganums and enum digits
- **decoder**: Batch grammar, symbol table and the streaming decoder
- **encoder**: Canonical wire form of the decoder-wired commands

Example
-------
>>> from ripscrip.protocol import StreamDecoder
>>> decoder = StreamDecoder()
>>> decoder.feed("!|c0")
[]
>>> decoder.feed("3\\r\\n")
[Color(color=PaletteColor(index=3))]
"""

from ripscrip.protocol import commands, types
from ripscrip.protocol.commands import ALL_COMMANDS, Command
from ripscrip.protocol.decoder import (
    COMMAND_ALPHABET,
    COMMAND_TABLE,
    Batch,
    StreamDecoder,
    decode,
    decode_command,
    parse_batch,
)
from ripscrip.protocol.encoder import encode_batch, encode_command
from ripscrip.protocol.primitives import (
    Scanner,
    decode_boolean,
    decode_meganum,
    encode_meganum,
)
from ripscrip.protocol.types import (
    DEFAULT_PALETTE,
    XY,
    EGAColor,
    PaletteColor,
    WriteMode,
)

__all__ = [
    "commands",
    "types",
    "ALL_COMMANDS",
    "Command",
    "COMMAND_ALPHABET",
    "COMMAND_TABLE",
    "Batch",
    "StreamDecoder",
    "decode",
    "decode_command",
    "parse_batch",
    "encode_batch",
    "encode_command",
    "Scanner",
    "decode_boolean",
    "decode_meganum",
    "encode_meganum",
    "DEFAULT_PALETTE",
    "XY",
    "EGAColor",
    "PaletteColor",
    "WriteMode",
]
