"""
RIPscrip Command Model
======================

The closed set of commands a RIPscrip stream can carry. Every command is
an immutable (frozen) dataclass deriving from Command; the payload of
each variant is exactly the fields needed to apply it.

Variants are grouped as the protocol groups them:

- Window/viewport: TextWindow, Viewport, ResetWindows, EraseWindow, EraseView
- Cursor/text: Gotoxy, Home, EraseEol, Move, Text, TextXy, FontStyle,
  BeginText, RegionText, EndText
- Color/mode: Color, SetPalette, OnePalette, WriteMode, LineStyle,
  FillStyle, FillPattern
- Geometry: Pixel, Line, Rectangle, Bar, Circle, Oval, FilledOval, Arc,
  OvalArc, PieSlice, OvalPieSlice, Bezier, Polygon, FillPolygon,
  Polyline, Fill
- Image/IO: GetImage, PutImage, WriteIcon, LoadIcon, CopyRegion, ReadScene
- UI widgets: Mouse, KillMouseFields, ButtonStyle, Button, Define, Query
- File transfer: FileQuery, EnterBlockMode
- Sentinels: NoMore, Unknown

ALL_COMMANDS lists every variant; consumers that dispatch on command
type check themselves against it.

Example
-------
>>> from ripscrip.protocol import commands, types
>>> cmd = commands.Color(color=types.PaletteColor(3))
>>> cmd.name
'Color'
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from ripscrip.protocol import types
from ripscrip.protocol.types import XY, EGAColor, PaletteColor


Corners = tuple[XY, XY]


class Command:
    """Base class for every decoded command."""

    __slots__ = ()

    # Wire symbol for commands the decoder recognizes; None otherwise.
    symbol: ClassVar[Optional[str]] = None

    @property
    def name(self) -> str:
        return type(self).__name__


# =============================================================================
# Window and Viewport Management
# =============================================================================

@dataclass(frozen=True)
class TextWindow(Command):
    """Define the text window in character cells."""
    symbol: ClassVar[str] = "w"

    corners: Corners
    wrap: bool
    size: types.TextWindowSize


@dataclass(frozen=True)
class Viewport(Command):
    """Define the graphics viewport in pixels."""
    symbol: ClassVar[str] = "v"

    corners: Corners


@dataclass(frozen=True)
class ResetWindows(Command):
    symbol: ClassVar[str] = "*"


@dataclass(frozen=True)
class EraseWindow(Command):
    symbol: ClassVar[str] = "e"


@dataclass(frozen=True)
class EraseView(Command):
    symbol: ClassVar[str] = "E"


# =============================================================================
# Cursor and Text
# =============================================================================

@dataclass(frozen=True)
class Gotoxy(Command):
    symbol: ClassVar[str] = "g"

    position: XY


@dataclass(frozen=True)
class Home(Command):
    symbol: ClassVar[str] = "H"


@dataclass(frozen=True)
class EraseEol(Command):
    symbol: ClassVar[str] = ">"


@dataclass(frozen=True)
class Move(Command):
    """Move the graphics draw position."""
    position: XY


@dataclass(frozen=True)
class Text(Command):
    """Draw text at the current draw position."""
    text: str


@dataclass(frozen=True)
class TextXy(Command):
    position: XY
    text: str


@dataclass(frozen=True)
class FontStyle(Command):
    font: types.Font
    direction: types.FontDirection
    size: int = 1


@dataclass(frozen=True)
class BeginText(Command):
    corners: Corners


@dataclass(frozen=True)
class RegionText(Command):
    justify: bool
    text: str


@dataclass(frozen=True)
class EndText(Command):
    pass


# =============================================================================
# Color and Drawing Modes
# =============================================================================

@dataclass(frozen=True)
class Color(Command):
    """Set the drawing (foreground) color."""
    symbol: ClassVar[str] = "c"

    color: PaletteColor


@dataclass(frozen=True)
class SetPalette(Command):
    """Replace all 16 palette entries, in index order."""
    symbol: ClassVar[str] = "Q"

    colors: tuple[EGAColor, ...]

    def __post_init__(self) -> None:
        if len(self.colors) != types.PALETTE_SIZE:
            raise ValueError(
                f"SetPalette needs {types.PALETTE_SIZE} colors, got {len(self.colors)}"
            )


@dataclass(frozen=True)
class OnePalette(Command):
    symbol: ClassVar[str] = "a"

    color: PaletteColor
    value: EGAColor


@dataclass(frozen=True)
class WriteMode(Command):
    symbol: ClassVar[str] = "W"

    mode: types.WriteMode


@dataclass(frozen=True)
class LineStyle(Command):
    style: types.LineStyle
    user_pattern: int = 0xFFFF
    thickness: int = 1


@dataclass(frozen=True)
class FillStyle(Command):
    pattern: types.FillPattern
    color: PaletteColor


@dataclass(frozen=True)
class FillPattern(Command):
    """Set a user-defined 8x8 fill pattern, one byte per row."""
    rows: tuple[int, ...]
    color: PaletteColor

    def __post_init__(self) -> None:
        if len(self.rows) != 8 or any(not 0 <= r <= 0xFF for r in self.rows):
            raise ValueError("FillPattern needs exactly 8 row bytes")


# =============================================================================
# Geometry
# =============================================================================

@dataclass(frozen=True)
class Pixel(Command):
    position: XY


@dataclass(frozen=True)
class Line(Command):
    ends: Corners


@dataclass(frozen=True)
class Rectangle(Command):
    corners: Corners


@dataclass(frozen=True)
class Bar(Command):
    """Filled rectangle without a border."""
    corners: Corners


@dataclass(frozen=True)
class Circle(Command):
    center: XY
    radius: int


@dataclass(frozen=True)
class Oval(Command):
    center: XY
    start_angle: int
    end_angle: int
    radii: XY


@dataclass(frozen=True)
class FilledOval(Command):
    center: XY
    radii: XY


@dataclass(frozen=True)
class Arc(Command):
    center: XY
    start_angle: int
    end_angle: int
    radius: int


@dataclass(frozen=True)
class OvalArc(Command):
    center: XY
    start_angle: int
    end_angle: int
    radii: XY


@dataclass(frozen=True)
class PieSlice(Command):
    center: XY
    start_angle: int
    end_angle: int
    radius: int


@dataclass(frozen=True)
class OvalPieSlice(Command):
    center: XY
    start_angle: int
    end_angle: int
    radii: XY


@dataclass(frozen=True)
class Bezier(Command):
    """Cubic bezier through four control points, drawn as `segments` lines."""
    control_points: tuple[XY, XY, XY, XY]
    segments: int


@dataclass(frozen=True)
class Polygon(Command):
    points: tuple[XY, ...]


@dataclass(frozen=True)
class FillPolygon(Command):
    points: tuple[XY, ...]


@dataclass(frozen=True)
class Polyline(Command):
    points: tuple[XY, ...]


@dataclass(frozen=True)
class Fill(Command):
    """Flood fill from `start` until the `border` color is reached."""
    start: XY
    border: PaletteColor


# =============================================================================
# Image and IO
# =============================================================================

@dataclass(frozen=True)
class GetImage(Command):
    corners: Corners


@dataclass(frozen=True)
class PutImage(Command):
    position: XY
    mode: types.PasteMode


@dataclass(frozen=True)
class WriteIcon(Command):
    filename: str


@dataclass(frozen=True)
class LoadIcon(Command):
    position: XY
    mode: types.PasteMode
    clipboard: bool
    filename: str


@dataclass(frozen=True)
class CopyRegion(Command):
    corners: Corners
    dest_line: int


@dataclass(frozen=True)
class ReadScene(Command):
    filename: str


# =============================================================================
# UI Widgets
# =============================================================================

@dataclass(frozen=True)
class Mouse(Command):
    corners: Corners
    clicked: bool
    clear_screen: bool
    text: str
    number: int = 0


@dataclass(frozen=True)
class KillMouseFields(Command):
    pass


@dataclass(frozen=True)
class ButtonStyle(Command):
    dimensions: XY
    orientation: types.LabelOrientation
    flags: types.ButtonStyleFlags
    bevel_size: int
    dfore: PaletteColor
    dback: PaletteColor
    bright: PaletteColor
    dark: PaletteColor
    surface: PaletteColor
    group: int
    flags2: types.ButtonStyleFlags2
    underline_color: PaletteColor
    corner_color: PaletteColor


@dataclass(frozen=True)
class Button(Command):
    corners: Corners
    hotkey: int
    flags: types.ButtonFlags
    icon_file: Optional[str] = None
    text_label: Optional[str] = None
    host_command: Optional[str] = None


@dataclass(frozen=True)
class Define(Command):
    flags: types.DefineFlags
    identifier: str
    field_width: int
    question: str
    default: str = ""


@dataclass(frozen=True)
class Query(Command):
    mode: types.QueryMode
    text: str


# =============================================================================
# File Transfer Metadata
# =============================================================================

@dataclass(frozen=True)
class FileQuery(Command):
    mode: types.FileQueryMode
    filename: str


@dataclass(frozen=True)
class EnterBlockMode(Command):
    mode: types.BlockMode
    protocol: types.TransferProtocol
    file_type: types.BlockFileType
    filename: str = ""


# =============================================================================
# Sentinels
# =============================================================================

@dataclass(frozen=True)
class NoMore(Command):
    pass


@dataclass(frozen=True)
class Unknown(Command):
    """
    A framed command the decoder does not recognize.

    `level` and `dispatch_symbol` record what was read; `skipped` is the
    rest of the batch that was discarded along with it.
    """
    level: str = ""
    dispatch_symbol: str = ""
    skipped: str = field(default="", repr=False)


# =============================================================================
# Registry
# =============================================================================

ALL_COMMANDS: tuple[type[Command], ...] = (
    TextWindow, Viewport, ResetWindows, EraseWindow, EraseView,
    Gotoxy, Home, EraseEol, Move, Text, TextXy, FontStyle,
    BeginText, RegionText, EndText,
    Color, SetPalette, OnePalette, WriteMode, LineStyle, FillStyle, FillPattern,
    Pixel, Line, Rectangle, Bar, Circle, Oval, FilledOval, Arc, OvalArc,
    PieSlice, OvalPieSlice, Bezier, Polygon, FillPolygon, Polyline, Fill,
    GetImage, PutImage, WriteIcon, LoadIcon, CopyRegion, ReadScene,
    Mouse, KillMouseFields, ButtonStyle, Button, Define, Query,
    FileQuery, EnterBlockMode,
    NoMore, Unknown,
)
