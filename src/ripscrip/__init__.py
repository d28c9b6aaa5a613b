"""
RIPscrip Toolkit - Decoder and Display Interpreter for RIPscrip Graphics
========================================================================

RIPscrip (Remote Imaging Protocol script) is the vector graphics
protocol BBS hosts sent over modem lines in the early 1990s. Commands
travel as printable ASCII, framed as '!' batches of '|' commands, with
coordinates and colors packed into two-digit base-36 "meganums".

Main Components
---------------
- **protocol**: Typed command model, streaming decoder and encoder
- **display**: Display State, the Canvas contract and the interpreter
- **session**: Decoder and interpreter glued to a byte stream
- **transport**: Byte chunks from files and serial ports
- **cli**: The ripview command-line tool

Quick Start
-----------
Decode a scene:
    >>> from ripscrip import decode
    >>> decode("!|c03")
    [Color(color=PaletteColor(index=3))]

Render a scene to PNG:
    >>> from ripscrip import ImageCanvas, Session
    >>> canvas = ImageCanvas()
    >>> session = Session(canvas)
    >>> session.run([b"!|*|c0E\\r\\n"])
    2
    >>> canvas.frames
    1

Or use the command-line tool:
    $ ripview render welcome.rip -o welcome.png

Version History
---------------
1.0.0 - Initial release with decoder, interpreter and Pillow canvas
"""

__version__ = "1.0.0"
__author__ = "Hugo José Pinto & Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from ripscrip.errors import (
    RipError,
    DecodeError,
    InvalidBooleanError,
    InvalidNumeralError,
    ValueOutOfRangeError,
    InvalidEnumValueError,
    FramingError,
    NeedMoreInput,
    EncodeError,
    InterpreterError,
    InvalidGeometryError,
    TransportError,
    ConnectionError as RipConnectionError,  # Avoid collision with builtin
    ErrorCollector,
    StreamLocation,
)

from ripscrip.protocol import (
    ALL_COMMANDS,
    Command,
    StreamDecoder,
    decode,
    decode_command,
    encode_batch,
    encode_command,
    parse_batch,
)

from ripscrip.display import (
    Canvas,
    DisplayState,
    ImageCanvas,
    Interpreter,
)

from ripscrip.session import Session
from ripscrip.config import ViewerConfig

__all__ = [
    "__version__",
    # Errors
    "RipError",
    "DecodeError",
    "InvalidBooleanError",
    "InvalidNumeralError",
    "ValueOutOfRangeError",
    "InvalidEnumValueError",
    "FramingError",
    "NeedMoreInput",
    "EncodeError",
    "InterpreterError",
    "InvalidGeometryError",
    "TransportError",
    "RipConnectionError",
    "ErrorCollector",
    "StreamLocation",
    # Protocol
    "ALL_COMMANDS",
    "Command",
    "StreamDecoder",
    "decode",
    "decode_command",
    "encode_batch",
    "encode_command",
    "parse_batch",
    # Display
    "Canvas",
    "DisplayState",
    "ImageCanvas",
    "Interpreter",
    # Session
    "Session",
    "ViewerConfig",
]
