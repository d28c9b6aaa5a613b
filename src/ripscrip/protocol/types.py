"""
RIPscrip Value Types
====================

Value types shared by the command model, the decoder and the display
interpreter: coordinates, the two color spaces, and the enumerations and
bit-packed flag sets carried by command payloads.

Color Spaces
------------
RIPscrip draws with a 16-slot palette. Commands name a slot with a
PaletteColor (0-15); each slot holds an EGAColor (0-63), a 6-bit
hardware color with two bits per channel laid out as:

    bit:   5  4  3  2  1  0
           r  g  b  R  G  B     (lower case = low bit, upper case = high bit)

Each channel converts to 8 bits as 0x55 * (low + 2 * high), so the four
channel levels are 0x00, 0x55, 0xAA and 0xFF.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag


# =============================================================================
# Numeric Limits
# =============================================================================

MEGANUM_MAX = 36 * 36 - 1   # 1295
PALETTE_SIZE = 16
EGA_COLOR_COUNT = 64


# =============================================================================
# Coordinates
# =============================================================================

@dataclass(frozen=True)
class XY:
    """An unsigned (x, y) pair, each bounded by the meganum range."""
    x: int
    y: int

    def __post_init__(self) -> None:
        if not (0 <= self.x <= MEGANUM_MAX and 0 <= self.y <= MEGANUM_MAX):
            raise ValueError(
                f"coordinates must be in 0..{MEGANUM_MAX}, got ({self.x}, {self.y})"
            )

    def __iter__(self):
        yield self.x
        yield self.y


# =============================================================================
# Colors
# =============================================================================

@dataclass(frozen=True)
class PaletteColor:
    """Index into the current 16-slot palette."""
    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index < PALETTE_SIZE:
            raise ValueError(
                f"palette colors must be in range 0..{PALETTE_SIZE - 1}, got {self.index}"
            )

    def __int__(self) -> int:
        return self.index

    __index__ = __int__


@dataclass(frozen=True)
class EGAColor:
    """6-bit EGA hardware color (0-63)."""
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value < EGA_COLOR_COUNT:
            raise ValueError(
                f"EGA colors must be in range 0..{EGA_COLOR_COUNT - 1}, got {self.value}"
            )

    def __int__(self) -> int:
        return self.value

    __index__ = __int__

    def to_rgb(self) -> tuple[int, int, int]:
        """Convert to an 8-bit-per-channel (r, g, b) triple."""
        v = self.value
        r = 0x55 * (((v >> 5) & 1) + ((v >> 1) & 2))
        g = 0x55 * (((v >> 4) & 1) + (v & 2))
        b = 0x55 * (((v >> 3) & 1) + ((v << 1) & 2))
        return (r, g, b)


# Standard EGA power-on palette: slot 6 is brown (20), slots 8-15 bright.
DEFAULT_PALETTE: tuple[EGAColor, ...] = tuple(
    EGAColor(v) for v in (0, 1, 2, 3, 4, 5, 20, 7, 56, 57, 58, 59, 60, 61, 62, 63)
)


# =============================================================================
# Enumerations
# =============================================================================

class WriteMode(IntEnum):
    """Raster combine mode for subsequent drawing."""
    NORMAL = 0
    XOR = 1


class TextWindowSize(IntEnum):
    """
    Text window font size selected by RIP_TEXT_WINDOW.

    The comment on each member gives the character cell in pixels and
    the resulting screen grid.
    """
    SIZE_8X8 = 0     # 80 x 43
    SIZE_7X8 = 1     # 91 x 43
    SIZE_8X14 = 2    # 80 x 25
    SIZE_7X14 = 3    # 91 x 25
    SIZE_16X14 = 4   # 40 x 25

    @property
    def cell(self) -> tuple[int, int]:
        """Character cell (width, height) in pixels."""
        return _TEXT_CELLS[self]


_TEXT_CELLS = {
    TextWindowSize.SIZE_8X8: (8, 8),
    TextWindowSize.SIZE_7X8: (7, 8),
    TextWindowSize.SIZE_8X14: (8, 14),
    TextWindowSize.SIZE_7X14: (7, 14),
    TextWindowSize.SIZE_16X14: (16, 14),
}


class Font(IntEnum):
    DEFAULT = 0
    TRIPLEX = 1
    SMALL = 2
    SANS_SERIF = 3
    GOTHIC = 4
    SCRIPT = 5
    SIMPLEX = 6
    TRIPLEX_SCRIPT = 7
    COMPLEX = 8
    EUROPEAN = 9
    BOLD = 10


class FontDirection(IntEnum):
    HORIZONTAL = 0
    VERTICAL = 1


class LineStyle(IntEnum):
    """Line pattern kinds; CUSTOM uses the 16-bit user pattern."""
    SOLID = 0
    DOTTED = 1
    CENTERED = 2
    DASHED = 3
    CUSTOM = 4


class FillPattern(IntEnum):
    """
    Predefined fill patterns.

    BACKGROUND fills with the background color; USER selects the
    8x8 pattern set by RIP_FILL_PATTERN.
    """
    BACKGROUND = 0
    SOLID = 1
    LINE = 2
    LIGHT_SLASH = 3
    NORMAL_SLASH = 4
    NORMAL_BACKSLASH = 5
    LIGHT_BACKSLASH = 6
    LIGHT_HATCH = 7
    HEAVY_CROSS_HATCH = 8
    INTERLEAVING_LINE = 9
    WIDELY_SPACED_DOT = 10
    CLOSELY_SPACED_DOT = 11
    USER = 12


class PasteMode(IntEnum):
    COPY = 0
    XOR = 1
    OR = 2
    AND = 3
    NOT = 4


class LabelOrientation(IntEnum):
    ABOVE = 0
    LEFT = 1
    CENTER = 2
    RIGHT = 3
    BENEATH = 4


class QueryMode(IntEnum):
    NOW = 0
    GRAPHICS_CLICKED = 1
    TEXT_CLICKED = 2


class FileQueryMode(IntEnum):
    BASIC = 0
    BASIC_CR = 1
    FILE_SIZE = 2
    EXTENDED = 3
    EXTENDED_PERIOD = 4


class BlockMode(IntEnum):
    DOWNLOAD = 0
    UPLOAD = 1


class TransferProtocol(Enum):
    XMODEM_CHECKSUM = "xmodem-checksum"
    XMODEM_CRC = "xmodem-crc"
    XMODEM_1K = "xmodem-1k"
    XMODEM_1K_G = "xmodem-1k-g"
    KERMIT = "kermit"
    YMODEM_BATCH = "ymodem-batch"
    YMODEM_G = "ymodem-g"
    ZMODEM = "zmodem"


class BlockFileType(IntEnum):
    RIP_DISPLAY = 0
    RIP_STORE = 1
    ICN = 2
    HLP = 3
    COMPOSITE = 4
    ACTIVE = 5


# =============================================================================
# Flag Sets
# =============================================================================

class ButtonStyleFlags(IntFlag):
    """Primary button style flags (RIP_BUTTON_STYLE 'flags' field)."""
    CLIPBOARD = 0x0001
    INVERTABLE = 0x0002
    RESET = 0x0004
    CHISEL = 0x0008
    RECESSED = 0x0010
    DROPSHADOW = 0x0020
    AUTO_STAMP = 0x0040
    ICON = 0x0080
    PLAIN = 0x0100
    BEVEL = 0x0200
    MOUSE = 0x0400
    UNDERLINE_HOTKEY = 0x0800
    HOT_ICONS = 0x1000
    VERTICAL_CENTER = 0x2000
    RADIO_GROUP = 0x4000
    SUNKEN = 0x8000


class ButtonStyleFlags2(IntFlag):
    """Secondary button style flags (RIP_BUTTON_STYLE 'flags2' field)."""
    CHECKBOX_GROUP = 0x01
    HIGHLIGHT_HOTKEY = 0x02
    EXPLODE = 0x04
    LEFT_JUSTIFY = 0x08
    RIGHT_JUSTIFY = 0x10


class ButtonFlags(IntFlag):
    ALREADY_SELECTED = 0x01
    DEFAULT_ENTER = 0x02


class DefineFlags(IntFlag):
    DATABASE = 0x01
    NON_BLANK = 0x02
    NON_INTERACTIVE = 0x04
