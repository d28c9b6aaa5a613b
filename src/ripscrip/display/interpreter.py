"""
RIPscrip Display Interpreter
============================

Applies decoded commands, in protocol order, to a DisplayState and turns
them into Canvas calls.

Each handler computes everything it needs (validated geometry, resolved
colors) before touching state or the canvas, so a command that fails
leaves the Display State exactly as it was. Errors from one command do
not stop the stream: run() records them and moves on.

Command Groups
--------------
- Window: TextWindow, Viewport, ResetWindows, EraseWindow, EraseView
- Cursor: Gotoxy, Home, EraseEol, Move
- Palette: Color, SetPalette, OnePalette, WriteMode
- Style: LineStyle, FillStyle, FillPattern, FontStyle
- Drawing: Pixel, Line, Rectangle, Bar, Circle, Oval, FilledOval, Arc,
  OvalArc, PieSlice, OvalPieSlice, Bezier, Polygon, FillPolygon,
  Polyline, Fill, Text, TextXy
- Accepted without effect: text blocks, clipboard and icons, mouse
  regions and buttons, queries, file transfer, NoMore, Unknown

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
from typing import Callable, Iterable, Optional

from ripscrip.display.canvas import (
    RGB,
    Box,
    Canvas,
    Curve,
    Dot,
    Ellipse,
    EllipseKind,
    Flood,
    Label,
    Point,
    Poly,
    Primitive,
    Segment,
)
from ripscrip.display.state import (
    DEFAULT_TEXT_WINDOW,
    DEFAULT_VIEWPORT,
    DisplayState,
    Rect,
)
from ripscrip.errors import ErrorCollector, InterpreterError, InvalidGeometryError
from ripscrip.protocol import commands, types
from ripscrip.protocol.commands import Command
from ripscrip.protocol.types import DEFAULT_PALETTE, XY

logger = logging.getLogger(__name__)

Handler = Callable[[Command], None]

# Commands accepted and logged, but with no display effect.
PASSIVE_COMMANDS: tuple[type[Command], ...] = (
    commands.BeginText,
    commands.RegionText,
    commands.EndText,
    commands.GetImage,
    commands.PutImage,
    commands.WriteIcon,
    commands.LoadIcon,
    commands.CopyRegion,
    commands.ReadScene,
    commands.Mouse,
    commands.KillMouseFields,
    commands.ButtonStyle,
    commands.Button,
    commands.Define,
    commands.Query,
    commands.FileQuery,
    commands.EnterBlockMode,
)


def _box(corners: tuple[XY, XY], filled: bool = False, thickness: int = 1) -> Box:
    (x0, y0), (x1, y1) = corners
    return Box(min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1),
               filled=filled, thickness=thickness)


def _points(points: Iterable[XY]) -> tuple[Point, ...]:
    return tuple((p.x, p.y) for p in points)


class Interpreter:
    """
    Stateful command interpreter bound to one Canvas.

    Attributes:
        canvas: Display surface receiving drawing calls
        state: Current Display State
        errors: Errors recorded by run()
        applied: Number of commands applied successfully

    Example:
        interpreter = Interpreter(ImageCanvas())
        interpreter.run(decode("!|*|c0E|v00002S2S"))
    """

    def __init__(self, canvas: Canvas, state: Optional[DisplayState] = None,
                 max_errors: int = 100):
        self.canvas = canvas
        self.state = state if state is not None else DisplayState()
        self.errors = ErrorCollector(max_errors)
        self.applied = 0

        self._handlers: dict[type[Command], Handler] = {
            commands.TextWindow: self._text_window,
            commands.Viewport: self._viewport,
            commands.ResetWindows: self._reset_windows,
            commands.EraseWindow: self._erase_window,
            commands.EraseView: self._erase_view,
            commands.Gotoxy: self._gotoxy,
            commands.Home: self._home,
            commands.EraseEol: self._erase_eol,
            commands.Move: self._move,
            commands.Text: self._text,
            commands.TextXy: self._text_xy,
            commands.FontStyle: self._font_style,
            commands.Color: self._color,
            commands.SetPalette: self._set_palette,
            commands.OnePalette: self._one_palette,
            commands.WriteMode: self._write_mode,
            commands.LineStyle: self._line_style,
            commands.FillStyle: self._fill_style,
            commands.FillPattern: self._fill_pattern,
            commands.Pixel: self._pixel,
            commands.Line: self._line,
            commands.Rectangle: self._rectangle,
            commands.Bar: self._bar,
            commands.Circle: self._circle,
            commands.Oval: self._oval,
            commands.FilledOval: self._filled_oval,
            commands.Arc: self._arc,
            commands.OvalArc: self._oval_arc,
            commands.PieSlice: self._pie_slice,
            commands.OvalPieSlice: self._oval_pie_slice,
            commands.Bezier: self._bezier,
            commands.Polygon: self._polygon,
            commands.FillPolygon: self._fill_polygon,
            commands.Polyline: self._polyline,
            commands.Fill: self._fill,
            commands.NoMore: self._ignore,
            commands.Unknown: self._unknown,
        }
        for command_type in PASSIVE_COMMANDS:
            self._handlers[command_type] = self._passive

    # =========================================================================
    # Public Interface
    # =========================================================================

    def handles(self, command_type: type[Command]) -> bool:
        """True if this interpreter has a handler for the command type."""
        return command_type in self._handlers

    def apply(self, command: Command) -> None:
        """
        Apply one command.

        Raises:
            InterpreterError: The command was rejected; state is unchanged.
            TypeError: `command` is not a Command variant.
        """
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"not a RIPscrip command: {command!r}")
        handler(command)
        self.applied += 1

    def run(self, batch: Iterable[Command]) -> int:
        """
        Apply commands in order, recording failures instead of raising.

        Returns:
            Number of commands applied successfully.
        """
        count = 0
        for command in batch:
            try:
                self.apply(command)
            except InterpreterError as e:
                logger.warning("skipping %s: %s", command.name, e.message)
                self.errors.add(e)
                continue
            count += 1
        return count

    # =========================================================================
    # Color Resolution
    # =========================================================================

    def _foreground(self) -> RGB:
        return self.state.rgb(self.state.color)

    def _background(self) -> RGB:
        return self.state.rgb(self.state.background)

    def _fill_rgb(self) -> RGB:
        if self.state.fill_pattern == types.FillPattern.BACKGROUND:
            return self._background()
        return self.state.rgb(self.state.fill_color)

    def _outline(self, primitive: Primitive) -> None:
        self.canvas.draw(primitive, self._foreground(), self.state.write_mode)

    def _solid(self, primitive: Primitive) -> None:
        self.canvas.draw(primitive, self._fill_rgb(), self.state.write_mode)

    def _clear(self) -> None:
        self.canvas.clear(self._background())
        self.canvas.present()

    # =========================================================================
    # Window Commands
    # =========================================================================

    def _text_window(self, command: commands.TextWindow) -> None:
        rect = Rect.from_corners(command.corners, "text window", command)
        state = self.state
        state.text_window = rect
        state.text_wrap = command.wrap
        state.text_size = command.size
        state.cursor = XY(0, 0)

    def _viewport(self, command: commands.Viewport) -> None:
        rect = Rect.from_corners(command.corners, "viewport", command)
        self.canvas.create_or_resize(rect.width, rect.height)
        self.state.viewport = rect
        logger.debug("viewport %dx%d at (%d,%d)", rect.width, rect.height, rect.x0, rect.y0)

    def _reset_windows(self, command: commands.ResetWindows) -> None:
        self.canvas.create_or_resize(DEFAULT_VIEWPORT.width, DEFAULT_VIEWPORT.height)
        state = self.state
        state.viewport = DEFAULT_VIEWPORT
        state.text_window = DEFAULT_TEXT_WINDOW
        state.text_wrap = True
        state.text_size = types.TextWindowSize.SIZE_8X8
        state.palette = DEFAULT_PALETTE
        state.cursor = XY(0, 0)
        self._clear()

    def _erase_window(self, command: commands.EraseWindow) -> None:
        self._clear()
        self.state.cursor = XY(0, 0)

    def _erase_view(self, command: commands.EraseView) -> None:
        self._clear()

    # =========================================================================
    # Cursor Commands
    # =========================================================================

    def _gotoxy(self, command: commands.Gotoxy) -> None:
        self.state.cursor = command.position

    def _home(self, command: commands.Home) -> None:
        self.state.cursor = XY(0, 0)

    def _erase_eol(self, command: commands.EraseEol) -> None:
        state = self.state
        cell_w, cell_h = state.text_size.cell
        window = state.text_window
        row = window.y0 + state.cursor.y
        x0 = (window.x0 + state.cursor.x) * cell_w - state.viewport.x0
        x1 = (window.x1 + 1) * cell_w - 1 - state.viewport.x0
        y0 = row * cell_h - state.viewport.y0
        y1 = y0 + cell_h - 1
        if x1 < x0:
            return
        self.canvas.draw(Box(x0, y0, x1, y1, filled=True), self._background(),
                         state.write_mode)

    def _move(self, command: commands.Move) -> None:
        self.state.draw_position = command.position

    # =========================================================================
    # Graphics Text
    # =========================================================================

    def _label(self, position: XY, text: str) -> Label:
        state = self.state
        return Label(position.x, position.y, text, font=state.font,
                     direction=state.font_direction, size=state.font_size)

    def _text(self, command: commands.Text) -> None:
        self._outline(self._label(self.state.draw_position, command.text))

    def _text_xy(self, command: commands.TextXy) -> None:
        self._outline(self._label(command.position, command.text))
        self.state.draw_position = command.position

    def _font_style(self, command: commands.FontStyle) -> None:
        state = self.state
        state.font = command.font
        state.font_direction = command.direction
        state.font_size = command.size

    # =========================================================================
    # Palette and Style Commands
    # =========================================================================

    def _color(self, command: commands.Color) -> None:
        self.state.color = command.color

    def _set_palette(self, command: commands.SetPalette) -> None:
        self.state.palette = tuple(command.colors)

    def _one_palette(self, command: commands.OnePalette) -> None:
        palette = list(self.state.palette)
        palette[int(command.color)] = command.value
        self.state.palette = tuple(palette)

    def _write_mode(self, command: commands.WriteMode) -> None:
        self.state.write_mode = command.mode

    def _line_style(self, command: commands.LineStyle) -> None:
        if command.thickness < 1:
            raise InterpreterError(f"line thickness {command.thickness} < 1", command)
        state = self.state
        state.line_style = command.style
        state.line_pattern = command.user_pattern
        state.line_thickness = command.thickness

    def _fill_style(self, command: commands.FillStyle) -> None:
        self.state.fill_pattern = command.pattern
        self.state.fill_color = command.color

    def _fill_pattern(self, command: commands.FillPattern) -> None:
        state = self.state
        state.fill_pattern = types.FillPattern.USER
        state.fill_rows = tuple(command.rows)
        state.fill_color = command.color

    # =========================================================================
    # Drawing Commands
    # =========================================================================

    def _pixel(self, command: commands.Pixel) -> None:
        x, y = command.position
        self._outline(Dot(x, y))

    def _line(self, command: commands.Line) -> None:
        (x0, y0), (x1, y1) = command.ends
        self._outline(Segment(x0, y0, x1, y1, thickness=self.state.line_thickness))
        self.state.draw_position = command.ends[1]

    def _rectangle(self, command: commands.Rectangle) -> None:
        self._outline(_box(command.corners, thickness=self.state.line_thickness))

    def _bar(self, command: commands.Bar) -> None:
        self._solid(_box(command.corners, filled=True))

    def _ellipse(self, center: XY, rx: int, ry: int, kind: EllipseKind,
                 start: int = 0, end: int = 360, filled: bool = False) -> None:
        thickness = self.state.line_thickness
        if filled:
            self._solid(Ellipse(center.x, center.y, rx, ry, kind, start, end, filled=True))
        self._outline(Ellipse(center.x, center.y, rx, ry, kind, start, end,
                              thickness=thickness))

    def _circle(self, command: commands.Circle) -> None:
        self._ellipse(command.center, command.radius, command.radius, EllipseKind.FULL)

    def _oval(self, command: commands.Oval) -> None:
        rx, ry = command.radii
        self._ellipse(command.center, rx, ry, EllipseKind.ARC,
                      command.start_angle, command.end_angle)

    def _filled_oval(self, command: commands.FilledOval) -> None:
        rx, ry = command.radii
        self._ellipse(command.center, rx, ry, EllipseKind.FULL, filled=True)

    def _arc(self, command: commands.Arc) -> None:
        self._ellipse(command.center, command.radius, command.radius, EllipseKind.ARC,
                      command.start_angle, command.end_angle)

    def _oval_arc(self, command: commands.OvalArc) -> None:
        rx, ry = command.radii
        self._ellipse(command.center, rx, ry, EllipseKind.ARC,
                      command.start_angle, command.end_angle)

    def _pie_slice(self, command: commands.PieSlice) -> None:
        self._ellipse(command.center, command.radius, command.radius, EllipseKind.PIE,
                      command.start_angle, command.end_angle, filled=True)

    def _oval_pie_slice(self, command: commands.OvalPieSlice) -> None:
        rx, ry = command.radii
        self._ellipse(command.center, rx, ry, EllipseKind.PIE,
                      command.start_angle, command.end_angle, filled=True)

    def _bezier(self, command: commands.Bezier) -> None:
        if command.segments < 1:
            raise InterpreterError(f"bezier needs at least 1 segment, got {command.segments}",
                                   command)
        self._outline(Curve(_points(command.control_points), command.segments,
                            thickness=self.state.line_thickness))

    def _require_points(self, command: Command, points: tuple, minimum: int) -> None:
        if len(points) < minimum:
            raise InvalidGeometryError(
                f"{command.name} needs at least {minimum} points, got {len(points)}",
                command=command,
            )

    def _polygon(self, command: commands.Polygon) -> None:
        self._require_points(command, command.points, 2)
        self._outline(Poly(_points(command.points), closed=True,
                           thickness=self.state.line_thickness))

    def _fill_polygon(self, command: commands.FillPolygon) -> None:
        self._require_points(command, command.points, 2)
        points = _points(command.points)
        self._solid(Poly(points, closed=True, filled=True))
        self._outline(Poly(points, closed=True, thickness=self.state.line_thickness))

    def _polyline(self, command: commands.Polyline) -> None:
        self._require_points(command, command.points, 2)
        self._outline(Poly(_points(command.points), closed=False,
                           thickness=self.state.line_thickness))

    def _fill(self, command: commands.Fill) -> None:
        x, y = command.start
        self._solid(Flood(x, y, self.state.rgb(command.border)))

    # =========================================================================
    # Commands Without Display Effect
    # =========================================================================

    def _passive(self, command: Command) -> None:
        logger.debug("%s accepted, no display effect", command.name)

    def _unknown(self, command: commands.Unknown) -> None:
        logger.debug("ignoring unrecognized command level=%r symbol=%r",
                     command.level, command.dispatch_symbol)

    def _ignore(self, command: Command) -> None:
        pass
