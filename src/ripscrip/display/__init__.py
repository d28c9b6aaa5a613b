"""
RIPscrip Display Layer
======================

Interpretation of decoded commands against a Display State, and the
Canvas surfaces they are drawn on.

Main Components
---------------
- **state**: DisplayState and viewport geometry
- **canvas**: The Canvas protocol and its drawing primitives
- **interpreter**: Command handlers driving a Canvas
- **image_canvas**: Pillow implementation of Canvas
"""

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
    Primitive,
    Segment,
)
from ripscrip.display.image_canvas import ImageCanvas
from ripscrip.display.interpreter import PASSIVE_COMMANDS, Interpreter
from ripscrip.display.state import (
    DEFAULT_TEXT_WINDOW,
    DEFAULT_VIEWPORT,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    DisplayState,
    Rect,
)

__all__ = [
    "Box",
    "Canvas",
    "Curve",
    "Dot",
    "Ellipse",
    "EllipseKind",
    "Flood",
    "Label",
    "Poly",
    "Primitive",
    "Segment",
    "ImageCanvas",
    "PASSIVE_COMMANDS",
    "Interpreter",
    "DEFAULT_TEXT_WINDOW",
    "DEFAULT_VIEWPORT",
    "SCREEN_HEIGHT",
    "SCREEN_WIDTH",
    "DisplayState",
    "Rect",
]
