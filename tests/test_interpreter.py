"""
Tests for the Display Interpreter
=================================

The Canvas is replaced by Mock(spec=Canvas) so every collaborator call
can be checked exactly.

Test Categories
---------------
1. Dispatch Tests: every command variant has a handler
2. Window Tests: Viewport, TextWindow, ResetWindows and clears
3. Palette Tests: Color, SetPalette, OnePalette, WriteMode
4. Drawing Tests: primitives, colors, write modes, draw position
5. Error Tests: rejected commands leave state unchanged
"""

from unittest.mock import Mock, call

import pytest

from ripscrip.display.canvas import (
    Box,
    Canvas,
    Curve,
    Dot,
    Ellipse,
    EllipseKind,
    Flood,
    Label,
    Poly,
    Segment,
)
from ripscrip.display.interpreter import PASSIVE_COMMANDS, Interpreter
from ripscrip.display.state import DEFAULT_TEXT_WINDOW, DEFAULT_VIEWPORT, DisplayState, Rect
from ripscrip.errors import InterpreterError, InvalidGeometryError
from ripscrip.protocol import commands, types
from ripscrip.protocol.decoder import decode
from ripscrip.protocol.types import DEFAULT_PALETTE, XY, EGAColor, PaletteColor

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
NORMAL = types.WriteMode.NORMAL


@pytest.fixture
def canvas():
    return Mock(spec=Canvas)


@pytest.fixture
def interpreter(canvas):
    return Interpreter(canvas)


def corners(x0, y0, x1, y1):
    return (XY(x0, y0), XY(x1, y1))


# =============================================================================
# Dispatch Tests
# =============================================================================

class TestDispatch:
    """The handler table is total over the command model."""

    def test_every_command_has_a_handler(self, interpreter):
        missing = [c.__name__ for c in commands.ALL_COMMANDS if not interpreter.handles(c)]
        assert missing == []

    def test_non_command_rejected(self, interpreter):
        with pytest.raises(TypeError):
            interpreter.apply("|c03")

    def test_fresh_state_defaults(self, interpreter):
        state = interpreter.state
        assert state.viewport == DEFAULT_VIEWPORT
        assert state.text_window == DEFAULT_TEXT_WINDOW
        assert state.palette == DEFAULT_PALETTE
        assert state.cursor == XY(0, 0)
        assert state.write_mode == NORMAL
        assert state.color == PaletteColor(15)
        assert state.background == PaletteColor(0)

    def test_construction_does_not_touch_canvas(self, canvas, interpreter):
        assert canvas.method_calls == []

    def test_applied_counter(self, interpreter):
        interpreter.run([commands.Home(), commands.Home()])
        assert interpreter.applied == 2


# =============================================================================
# Window Tests
# =============================================================================

class TestWindows:
    """Viewport, text window and clearing commands."""

    def test_reset_windows_on_fresh_interpreter(self, canvas, interpreter):
        interpreter.run(decode("!|*"))

        assert interpreter.state.viewport == DEFAULT_VIEWPORT
        canvas.clear.assert_called_once_with(BLACK)
        canvas.present.assert_called_once_with()
        assert canvas.method_calls == [
            call.create_or_resize(640, 350),
            call.clear(BLACK),
            call.present(),
        ]

    def test_reset_windows_restores_defaults(self, interpreter):
        state = interpreter.state
        interpreter.run([
            commands.Viewport(corners=corners(10, 10, 100, 100)),
            commands.TextWindow(corners=corners(1, 1, 20, 10), wrap=False,
                                size=types.TextWindowSize.SIZE_8X14),
            commands.OnePalette(color=PaletteColor(0), value=EGAColor(1)),
            commands.Gotoxy(position=XY(5, 5)),
            commands.ResetWindows(),
        ])
        assert state.viewport == DEFAULT_VIEWPORT
        assert state.text_window == DEFAULT_TEXT_WINDOW
        assert state.text_wrap is True
        assert state.text_size == types.TextWindowSize.SIZE_8X8
        assert state.palette == DEFAULT_PALETTE
        assert state.cursor == XY(0, 0)

    def test_viewport_resizes_canvas(self, canvas, interpreter):
        interpreter.apply(commands.Viewport(corners=corners(10, 20, 110, 70)))
        canvas.create_or_resize.assert_called_once_with(100, 50)
        assert interpreter.state.viewport == Rect(10, 20, 110, 70)

    def test_zero_size_viewport_allowed(self, canvas, interpreter):
        interpreter.apply(commands.Viewport(corners=corners(5, 5, 5, 5)))
        canvas.create_or_resize.assert_called_once_with(0, 0)

    def test_text_window_sets_state_and_homes_cursor(self, canvas, interpreter):
        interpreter.apply(commands.Gotoxy(position=XY(7, 3)))
        interpreter.apply(commands.TextWindow(corners=corners(2, 2, 40, 20), wrap=False,
                                              size=types.TextWindowSize.SIZE_7X14))
        state = interpreter.state
        assert state.text_window == Rect(2, 2, 40, 20)
        assert state.text_wrap is False
        assert state.text_size == types.TextWindowSize.SIZE_7X14
        assert state.cursor == XY(0, 0)
        canvas.create_or_resize.assert_not_called()

    def test_erase_view_clears_with_background(self, canvas, interpreter):
        interpreter.apply(commands.EraseView())
        assert canvas.method_calls == [call.clear(BLACK), call.present()]

    def test_clear_color_goes_through_palette(self, canvas, interpreter):
        interpreter.apply(commands.OnePalette(color=PaletteColor(0), value=EGAColor(1)))
        interpreter.apply(commands.EraseView())
        canvas.clear.assert_called_once_with((0, 0, 170))

    def test_erase_window_homes_cursor(self, canvas, interpreter):
        interpreter.apply(commands.Gotoxy(position=XY(4, 4)))
        interpreter.apply(commands.EraseWindow())
        assert interpreter.state.cursor == XY(0, 0)
        assert canvas.method_calls == [call.clear(BLACK), call.present()]

    def test_gotoxy_and_home(self, interpreter):
        interpreter.apply(commands.Gotoxy(position=XY(12, 3)))
        assert interpreter.state.cursor == XY(12, 3)
        interpreter.apply(commands.Home())
        assert interpreter.state.cursor == XY(0, 0)


# =============================================================================
# Palette Tests
# =============================================================================

class TestPalette:
    """Color, palette and write mode state."""

    def test_color_from_stream(self, interpreter):
        interpreter.run(decode("!|c03"))
        assert interpreter.state.color == PaletteColor(3)

    def test_set_palette_replaces_all_entries(self, interpreter):
        colors = tuple(EGAColor(63 - i) for i in range(16))
        interpreter.apply(commands.SetPalette(colors=colors))
        assert interpreter.state.palette == colors

    def test_one_palette_changes_one_entry(self, interpreter):
        interpreter.apply(commands.OnePalette(color=PaletteColor(3), value=EGAColor(9)))
        palette = interpreter.state.palette
        assert palette[3] == EGAColor(9)
        assert palette[:3] == DEFAULT_PALETTE[:3]
        assert palette[4:] == DEFAULT_PALETTE[4:]

    def test_one_palette_does_not_alias_default(self, interpreter):
        interpreter.apply(commands.OnePalette(color=PaletteColor(0), value=EGAColor(63)))
        assert DEFAULT_PALETTE[0] == EGAColor(0)

    def test_write_mode(self, interpreter):
        interpreter.apply(commands.WriteMode(mode=types.WriteMode.XOR))
        assert interpreter.state.write_mode == types.WriteMode.XOR

    def test_palette_change_recolors_later_draws(self, canvas, interpreter):
        interpreter.apply(commands.OnePalette(color=PaletteColor(15), value=EGAColor(4)))
        interpreter.apply(commands.Pixel(position=XY(0, 0)))
        canvas.draw.assert_called_once_with(Dot(0, 0), (170, 0, 0), NORMAL)

    def test_style_commands(self, interpreter):
        interpreter.apply(commands.LineStyle(style=types.LineStyle.DASHED, thickness=3))
        interpreter.apply(commands.FillStyle(pattern=types.FillPattern.LIGHT_HATCH,
                                             color=PaletteColor(2)))
        interpreter.apply(commands.FontStyle(font=types.Font.GOTHIC,
                                             direction=types.FontDirection.VERTICAL, size=4))
        state = interpreter.state
        assert state.line_style == types.LineStyle.DASHED
        assert state.line_thickness == 3
        assert state.fill_pattern == types.FillPattern.LIGHT_HATCH
        assert state.fill_color == PaletteColor(2)
        assert state.font == types.Font.GOTHIC
        assert state.font_direction == types.FontDirection.VERTICAL
        assert state.font_size == 4

    def test_fill_pattern_selects_user_pattern(self, interpreter):
        rows = (0xAA, 0x55) * 4
        interpreter.apply(commands.FillPattern(rows=rows, color=PaletteColor(4)))
        assert interpreter.state.fill_pattern == types.FillPattern.USER
        assert interpreter.state.fill_rows == rows


# =============================================================================
# Drawing Tests
# =============================================================================

class TestDrawing:
    """Drawing commands become canvas primitives."""

    def test_pixel(self, canvas, interpreter):
        interpreter.apply(commands.Pixel(position=XY(5, 6)))
        canvas.draw.assert_called_once_with(Dot(5, 6), WHITE, NORMAL)

    def test_line_updates_draw_position(self, canvas, interpreter):
        interpreter.apply(commands.LineStyle(style=types.LineStyle.SOLID, thickness=3))
        interpreter.apply(commands.Line(ends=(XY(1, 2), XY(30, 40))))
        canvas.draw.assert_called_once_with(Segment(1, 2, 30, 40, thickness=3), WHITE, NORMAL)
        assert interpreter.state.draw_position == XY(30, 40)

    def test_move_updates_draw_position(self, canvas, interpreter):
        interpreter.apply(commands.Move(position=XY(9, 9)))
        assert interpreter.state.draw_position == XY(9, 9)
        canvas.draw.assert_not_called()

    def test_rectangle_corners_normalized(self, canvas, interpreter):
        interpreter.apply(commands.Rectangle(corners=corners(50, 60, 10, 20)))
        canvas.draw.assert_called_once_with(Box(10, 20, 50, 60), WHITE, NORMAL)

    def test_bar_uses_fill_color(self, canvas, interpreter):
        interpreter.apply(commands.FillStyle(pattern=types.FillPattern.SOLID,
                                             color=PaletteColor(1)))
        interpreter.apply(commands.Bar(corners=corners(0, 0, 10, 10)))
        canvas.draw.assert_called_once_with(Box(0, 0, 10, 10, filled=True), (0, 0, 170), NORMAL)

    def test_background_fill_pattern_uses_background(self, canvas, interpreter):
        interpreter.apply(commands.FillStyle(pattern=types.FillPattern.BACKGROUND,
                                             color=PaletteColor(1)))
        interpreter.apply(commands.Bar(corners=corners(0, 0, 10, 10)))
        canvas.draw.assert_called_once_with(Box(0, 0, 10, 10, filled=True), BLACK, NORMAL)

    def test_circle(self, canvas, interpreter):
        interpreter.apply(commands.Circle(center=XY(100, 100), radius=25))
        canvas.draw.assert_called_once_with(
            Ellipse(100, 100, 25, 25, EllipseKind.FULL), WHITE, NORMAL)

    def test_arc_keeps_angles(self, canvas, interpreter):
        interpreter.apply(commands.Arc(center=XY(50, 50), start_angle=0, end_angle=90,
                                       radius=10))
        canvas.draw.assert_called_once_with(
            Ellipse(50, 50, 10, 10, EllipseKind.ARC, 0, 90), WHITE, NORMAL)

    def test_oval_arc_uses_radii(self, canvas, interpreter):
        interpreter.apply(commands.OvalArc(center=XY(50, 50), start_angle=45, end_angle=180,
                                           radii=XY(30, 10)))
        primitive = canvas.draw.call_args.args[0]
        assert (primitive.rx, primitive.ry) == (30, 10)
        assert primitive.kind == EllipseKind.ARC

    def test_filled_oval_fills_then_outlines(self, canvas, interpreter):
        interpreter.apply(commands.FillStyle(pattern=types.FillPattern.SOLID,
                                             color=PaletteColor(2)))
        interpreter.apply(commands.FilledOval(center=XY(40, 30), radii=XY(20, 10)))
        assert canvas.draw.call_args_list == [
            call(Ellipse(40, 30, 20, 10, EllipseKind.FULL, filled=True), (0, 170, 0), NORMAL),
            call(Ellipse(40, 30, 20, 10, EllipseKind.FULL), WHITE, NORMAL),
        ]

    def test_pie_slice_fills_then_outlines(self, canvas, interpreter):
        interpreter.apply(commands.PieSlice(center=XY(60, 60), start_angle=0, end_angle=120,
                                            radius=15))
        fill, outline = canvas.draw.call_args_list
        assert fill.args[0].filled is True
        assert fill.args[0].kind == EllipseKind.PIE
        assert outline.args[0].filled is False
        assert outline.args[1] == WHITE

    def test_oval_pie_slice(self, canvas, interpreter):
        interpreter.apply(commands.OvalPieSlice(center=XY(60, 60), start_angle=90,
                                                end_angle=270, radii=XY(20, 12)))
        assert canvas.draw.call_count == 2

    def test_bezier(self, canvas, interpreter):
        points = (XY(0, 0), XY(10, 0), XY(10, 10), XY(20, 10))
        interpreter.apply(commands.Bezier(control_points=points, segments=8))
        canvas.draw.assert_called_once_with(
            Curve(((0, 0), (10, 0), (10, 10), (20, 10)), 8), WHITE, NORMAL)

    def test_polygon_and_polyline(self, canvas, interpreter):
        points = (XY(0, 0), XY(10, 0), XY(5, 8))
        interpreter.apply(commands.Polygon(points=points))
        interpreter.apply(commands.Polyline(points=points))
        closed, open_ = canvas.draw.call_args_list
        assert closed.args[0] == Poly(((0, 0), (10, 0), (5, 8)), closed=True)
        assert open_.args[0] == Poly(((0, 0), (10, 0), (5, 8)), closed=False)

    def test_fill_polygon_fills_then_outlines(self, canvas, interpreter):
        points = (XY(0, 0), XY(10, 0), XY(5, 8))
        interpreter.apply(commands.FillPolygon(points=points))
        fill, outline = canvas.draw.call_args_list
        assert fill.args[0].filled is True
        assert outline.args[0].filled is False

    def test_flood_fill_border_resolved(self, canvas, interpreter):
        interpreter.apply(commands.Fill(start=XY(3, 3), border=PaletteColor(15)))
        canvas.draw.assert_called_once_with(Flood(3, 3, WHITE), WHITE, NORMAL)

    def test_flood_fill_border_is_a_palette_slot(self, canvas, interpreter):
        """The border follows palette changes, like every other drawing color."""
        interpreter.apply(commands.OnePalette(color=PaletteColor(9), value=EGAColor(4)))
        interpreter.apply(commands.Fill(start=XY(3, 3), border=PaletteColor(9)))
        primitive = canvas.draw.call_args.args[0]
        assert primitive.border == (170, 0, 0)

    def test_text_at_draw_position(self, canvas, interpreter):
        interpreter.apply(commands.Move(position=XY(20, 30)))
        interpreter.apply(commands.Text(text="Hello"))
        canvas.draw.assert_called_once_with(Label(20, 30, "Hello"), WHITE, NORMAL)

    def test_text_xy_moves_draw_position(self, canvas, interpreter):
        interpreter.apply(commands.TextXy(position=XY(5, 7), text="Hi"))
        assert canvas.draw.call_args.args[0] == Label(5, 7, "Hi")
        assert interpreter.state.draw_position == XY(5, 7)

    def test_erase_eol_blanks_rest_of_row(self, canvas, interpreter):
        interpreter.apply(commands.Gotoxy(position=XY(2, 1)))
        interpreter.apply(commands.EraseEol())
        canvas.draw.assert_called_once_with(Box(16, 8, 639, 15, filled=True), BLACK, NORMAL)

    def test_erase_eol_is_viewport_relative(self, canvas, interpreter):
        interpreter.apply(commands.Viewport(corners=corners(8, 8, 648, 358)))
        interpreter.apply(commands.EraseEol())
        canvas.draw.assert_called_once_with(Box(-8, -8, 631, -1, filled=True), BLACK, NORMAL)

    def test_xor_write_mode_forwarded(self, canvas, interpreter):
        interpreter.run(decode("!|W01"))
        interpreter.apply(commands.Pixel(position=XY(1, 1)))
        canvas.draw.assert_called_once_with(Dot(1, 1), WHITE, types.WriteMode.XOR)


# =============================================================================
# Commands Without Display Effect
# =============================================================================

class TestPassiveCommands:
    """UI, image and transfer commands are accepted and do nothing."""

    @pytest.mark.parametrize("command", [
        commands.BeginText(corners=corners(0, 0, 10, 10)),
        commands.RegionText(justify=False, text="line"),
        commands.EndText(),
        commands.GetImage(corners=corners(0, 0, 10, 10)),
        commands.PutImage(position=XY(0, 0), mode=types.PasteMode.XOR),
        commands.WriteIcon(filename="CLIP.ICN"),
        commands.ReadScene(filename="MAIN.RIP"),
        commands.Mouse(corners=corners(0, 0, 10, 10), clicked=True, clear_screen=False,
                       text="M"),
        commands.KillMouseFields(),
        commands.Query(mode=types.QueryMode.NOW, text="$DATE$"),
        commands.FileQuery(mode=types.FileQueryMode.BASIC, filename="A.ICN"),
        commands.EnterBlockMode(mode=types.BlockMode.DOWNLOAD,
                                protocol=types.TransferProtocol.ZMODEM,
                                file_type=types.BlockFileType.ICN),
        commands.NoMore(),
        commands.Unknown(level="1", dispatch_symbol="K"),
    ], ids=lambda c: c.name)
    def test_no_canvas_calls(self, canvas, interpreter, command):
        before = DisplayState()
        interpreter.apply(command)
        assert canvas.method_calls == []
        assert interpreter.state == before

    def test_passive_set_is_part_of_model(self):
        assert set(PASSIVE_COMMANDS) <= set(commands.ALL_COMMANDS)


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Rejected commands are skipped and leave state unchanged."""

    def test_inverted_viewport_raises(self, canvas, interpreter):
        with pytest.raises(InvalidGeometryError) as exc_info:
            interpreter.apply(commands.Viewport(corners=corners(100, 0, 50, 10)))
        assert exc_info.value.kind == "InvalidGeometry"
        assert interpreter.state.viewport == DEFAULT_VIEWPORT
        canvas.create_or_resize.assert_not_called()

    def test_inverted_text_window_raises(self, interpreter):
        interpreter.apply(commands.Gotoxy(position=XY(3, 3)))
        with pytest.raises(InvalidGeometryError):
            interpreter.apply(commands.TextWindow(corners=corners(0, 10, 10, 5), wrap=True,
                                                  size=types.TextWindowSize.SIZE_8X8))
        assert interpreter.state.text_window == DEFAULT_TEXT_WINDOW
        assert interpreter.state.cursor == XY(3, 3)

    def test_run_continues_after_error(self, interpreter):
        applied = interpreter.run([
            commands.Viewport(corners=corners(100, 0, 50, 10)),
            commands.Color(color=PaletteColor(3)),
        ])
        assert applied == 1
        assert interpreter.state.color == PaletteColor(3)
        assert interpreter.errors.error_count() == 1
        assert isinstance(interpreter.errors.errors[0], InvalidGeometryError)

    def test_run_logs_warning(self, interpreter, caplog):
        with caplog.at_level("WARNING", logger="ripscrip.display.interpreter"):
            interpreter.run([commands.Viewport(corners=corners(9, 9, 0, 0))])
        assert "skipping Viewport" in caplog.text

    def test_bad_line_thickness(self, interpreter):
        with pytest.raises(InterpreterError):
            interpreter.apply(commands.LineStyle(style=types.LineStyle.DOTTED, thickness=0))
        assert interpreter.state.line_style == types.LineStyle.SOLID

    def test_bezier_needs_segments(self, canvas, interpreter):
        points = (XY(0, 0),) * 4
        with pytest.raises(InterpreterError):
            interpreter.apply(commands.Bezier(control_points=points, segments=0))
        canvas.draw.assert_not_called()

    def test_polygon_needs_two_points(self, canvas, interpreter):
        with pytest.raises(InvalidGeometryError):
            interpreter.apply(commands.Polygon(points=(XY(1, 1),)))
        canvas.draw.assert_not_called()

    def test_failed_command_not_counted(self, interpreter):
        interpreter.run([commands.Polygon(points=())])
        assert interpreter.applied == 0
