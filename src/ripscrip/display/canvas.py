"""
Canvas Collaborator Contract
============================

The interpreter never rasterizes. It resolves each drawing command into
a primitive shape plus an RGB color and hands both to a Canvas, which
owns the pixel surface and the window around it.

Coordinates in every primitive are relative to the active viewport
origin, which is also the origin of the canvas surface (the surface is
recreated at viewport size whenever the viewport changes).

Angles follow the protocol: degrees, counter-clockwise, 0 at 3 o'clock.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Union

from ripscrip.protocol.types import Font, FontDirection, WriteMode

RGB = tuple[int, int, int]
Point = tuple[int, int]


# =============================================================================
# Drawing Primitives
# =============================================================================

@dataclass(frozen=True)
class Dot:
    x: int
    y: int


@dataclass(frozen=True)
class Segment:
    x0: int
    y0: int
    x1: int
    y1: int
    thickness: int = 1


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle; corners are normalized by the interpreter."""
    x0: int
    y0: int
    x1: int
    y1: int
    filled: bool = False
    thickness: int = 1


class EllipseKind(Enum):
    FULL = "full"   # whole ellipse, angles ignored
    ARC = "arc"     # outline between start and end angle
    PIE = "pie"     # wedge between start and end angle


@dataclass(frozen=True)
class Ellipse:
    cx: int
    cy: int
    rx: int
    ry: int
    kind: EllipseKind = EllipseKind.FULL
    start_angle: int = 0
    end_angle: int = 360
    filled: bool = False
    thickness: int = 1


@dataclass(frozen=True)
class Curve:
    """Cubic bezier through four control points, tessellated into `segments` lines."""
    control_points: tuple[Point, Point, Point, Point]
    segments: int
    thickness: int = 1


@dataclass(frozen=True)
class Poly:
    points: tuple[Point, ...]
    closed: bool = True
    filled: bool = False
    thickness: int = 1


@dataclass(frozen=True)
class Flood:
    """Flood fill from (x, y) until the border color is reached."""
    x: int
    y: int
    border: RGB


@dataclass(frozen=True)
class Label:
    x: int
    y: int
    text: str
    font: Font = Font.DEFAULT
    direction: FontDirection = FontDirection.HORIZONTAL
    size: int = 1


Primitive = Union[Dot, Segment, Box, Ellipse, Curve, Poly, Flood, Label]


# =============================================================================
# Canvas Protocol
# =============================================================================

class Canvas(Protocol):
    """
    Protocol defining the display surface interface.

    The interpreter is the only caller, and calls are strictly
    sequential; implementations need no locking.
    """

    def create_or_resize(self, width: int, height: int) -> None:
        """Recreate the surface at the given size."""
        ...

    def clear(self, color: RGB) -> None:
        """Fill the whole surface with `color`."""
        ...

    def present(self) -> None:
        """Make the current surface contents visible."""
        ...

    def draw(self, primitive: Primitive, color: RGB, write_mode: WriteMode) -> None:
        """Rasterize one primitive."""
        ...
