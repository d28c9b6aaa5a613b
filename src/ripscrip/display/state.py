"""
Display State
=============

Cumulative state owned by the interpreter for one session. Commands read
state written by earlier commands (palette, viewport, cursor), which is
why the interpreter applies them strictly in protocol order.
"""

from dataclasses import dataclass, field

from ripscrip.errors import InvalidGeometryError
from ripscrip.protocol.types import (
    DEFAULT_PALETTE,
    XY,
    EGAColor,
    FillPattern,
    Font,
    FontDirection,
    LineStyle,
    PaletteColor,
    TextWindowSize,
    WriteMode,
)

# Full EGA screen; RIPscrip scenes are authored against 640x350.
SCREEN_WIDTH = 640
SCREEN_HEIGHT = 350


@dataclass(frozen=True)
class Rect:
    """Rectangle given by two inclusive-exclusive corners (x0, y0)-(x1, y1)."""
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @classmethod
    def from_corners(cls, corners: tuple[XY, XY], what: str, command: object = None) -> "Rect":
        """
        Build a Rect from command corners, rejecting inverted ones.

        Raises:
            InvalidGeometryError: x1 < x0 or y1 < y0
        """
        (x0, y0), (x1, y1) = corners
        if x1 < x0 or y1 < y0:
            raise InvalidGeometryError(
                f"{what} corners inverted: ({x0},{y0})-({x1},{y1})",
                command=command,
            )
        return cls(x0, y0, x1, y1)


DEFAULT_VIEWPORT = Rect(0, 0, SCREEN_WIDTH, SCREEN_HEIGHT)
DEFAULT_TEXT_WINDOW = Rect(0, 0, 79, 42)   # in character cells


@dataclass
class DisplayState:
    """
    Complete display state for one session.

    Attributes:
        viewport: Active graphics viewport, in screen pixels
        text_window: Active text window, in character cells
        text_wrap: Wrap text at the right edge of the text window
        text_size: Text window font size
        palette: 16 EGA colors, indexed by PaletteColor
        cursor: Text cursor, in cells relative to the text window
        draw_position: Graphics pen position, viewport-relative
        write_mode: Raster combine mode for line drawing
        color: Drawing (foreground) color
        background: Background color used by clears
        line_style, line_pattern, line_thickness: Line drawing style
        fill_pattern, fill_color, fill_rows: Fill style and user pattern
        font, font_direction, font_size: Graphics text style
    """
    viewport: Rect = DEFAULT_VIEWPORT
    text_window: Rect = DEFAULT_TEXT_WINDOW
    text_wrap: bool = True
    text_size: TextWindowSize = TextWindowSize.SIZE_8X8
    palette: tuple[EGAColor, ...] = DEFAULT_PALETTE
    cursor: XY = field(default_factory=lambda: XY(0, 0))
    draw_position: XY = field(default_factory=lambda: XY(0, 0))
    write_mode: WriteMode = WriteMode.NORMAL
    color: PaletteColor = field(default_factory=lambda: PaletteColor(15))
    background: PaletteColor = field(default_factory=lambda: PaletteColor(0))
    line_style: LineStyle = LineStyle.SOLID
    line_pattern: int = 0xFFFF
    line_thickness: int = 1
    fill_pattern: FillPattern = FillPattern.SOLID
    fill_color: PaletteColor = field(default_factory=lambda: PaletteColor(15))
    fill_rows: tuple[int, ...] = (0xFF,) * 8
    font: Font = Font.DEFAULT
    font_direction: FontDirection = FontDirection.HORIZONTAL
    font_size: int = 1

    def rgb(self, color: PaletteColor) -> tuple[int, int, int]:
        """Resolve a palette slot to display RGB through the current palette."""
        return self.palette[int(color)].to_rgb()
