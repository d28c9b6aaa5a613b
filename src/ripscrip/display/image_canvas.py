"""
Pillow-backed Canvas
====================

Rasterizes primitives into an in-memory RGB image. Used by the ripview
CLI to render scenes to PNG and by tests to check pixels.

Write Modes
-----------
NORMAL paints the primitive's pixels in the given color. XOR renders
the primitive into a 1-bit mask first and then XORs the color into
every masked pixel, so drawing the same shape twice restores the image.

Limitations
-----------
Fill patterns and dashed line styles are drawn solid. Labels use
Pillow's default bitmap font whatever font the scene selects, and
vertical text is drawn horizontally.
"""

import io
import logging
from typing import Callable, Optional

from PIL import Image, ImageDraw, ImageFont

from ripscrip.display.canvas import (
    RGB,
    Box,
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
from ripscrip.display.state import SCREEN_HEIGHT, SCREEN_WIDTH
from ripscrip.protocol.types import WriteMode

logger = logging.getLogger(__name__)

PresentCallback = Callable[[Image.Image], None]


def bezier_points(control_points: tuple[Point, Point, Point, Point], segments: int) -> list[Point]:
    """
    Tessellate a cubic bezier into segments + 1 points.

    >>> bezier_points(((0, 0), (0, 0), (10, 10), (10, 10)), 2)
    [(0, 0), (5, 5), (10, 10)]
    """
    (x0, y0), (x1, y1), (x2, y2), (x3, y3) = control_points
    points = []
    for i in range(segments + 1):
        t = i / segments
        u = 1 - t
        a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        points.append((
            round(a * x0 + b * x1 + c * x2 + d * x3),
            round(a * y0 + b * y1 + c * y2 + d * y3),
        ))
    return points


def _pillow_angles(start: int, end: int) -> tuple[int, int]:
    # Pillow measures clockwise from 3 o'clock; the protocol counter-clockwise.
    return -end, -start


class ImageCanvas:
    """
    Canvas drawing into a Pillow image.

    Attributes:
        image: Current surface
        frames: Number of present() calls so far

    Example:
        canvas = ImageCanvas()
        canvas.draw(Segment(0, 0, 639, 349), (255, 255, 255), WriteMode.NORMAL)
        png = canvas.to_png(scale=2)
    """

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT,
                 on_present: Optional[PresentCallback] = None):
        self.image = self._new_surface(width, height)
        self.frames = 0
        self._on_present = on_present
        self._font = ImageFont.load_default()

    @staticmethod
    def _new_surface(width: int, height: int) -> Image.Image:
        # Pillow cannot draw on a zero-sized image.
        return Image.new("RGB", (max(width, 1), max(height, 1)), (0, 0, 0))

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    # =========================================================================
    # Canvas Protocol
    # =========================================================================

    def create_or_resize(self, width: int, height: int) -> None:
        self.image = self._new_surface(width, height)
        logger.debug("surface recreated at %dx%d", *self.image.size)

    def clear(self, color: RGB) -> None:
        self.image.paste(color, (0, 0, *self.image.size))

    def present(self) -> None:
        self.frames += 1
        if self._on_present is not None:
            self._on_present(self.image)

    def draw(self, primitive: Primitive, color: RGB, write_mode: WriteMode) -> None:
        if isinstance(primitive, Flood):
            # Flood fills always paint; XOR does not apply.
            ImageDraw.floodfill(self.image, (primitive.x, primitive.y), color,
                                border=primitive.border)
            return

        if write_mode == WriteMode.XOR:
            mask = Image.new("1", self.image.size, 0)
            self._render(ImageDraw.Draw(mask), primitive, 1)
            self._xor(mask, color)
        else:
            self._render(ImageDraw.Draw(self.image), primitive, color)

    # =========================================================================
    # Rasterization
    # =========================================================================

    def _render(self, draw: ImageDraw.ImageDraw, primitive: Primitive, ink) -> None:
        if isinstance(primitive, Dot):
            draw.point((primitive.x, primitive.y), fill=ink)

        elif isinstance(primitive, Segment):
            draw.line([(primitive.x0, primitive.y0), (primitive.x1, primitive.y1)],
                      fill=ink, width=primitive.thickness)

        elif isinstance(primitive, Box):
            xy = [primitive.x0, primitive.y0, primitive.x1, primitive.y1]
            if primitive.filled:
                draw.rectangle(xy, fill=ink)
            else:
                draw.rectangle(xy, outline=ink, width=primitive.thickness)

        elif isinstance(primitive, Ellipse):
            self._render_ellipse(draw, primitive, ink)

        elif isinstance(primitive, Curve):
            points = bezier_points(primitive.control_points, primitive.segments)
            draw.line(points, fill=ink, width=primitive.thickness)

        elif isinstance(primitive, Poly):
            points = list(primitive.points)
            if primitive.filled:
                draw.polygon(points, fill=ink)
            else:
                if primitive.closed:
                    points.append(points[0])
                draw.line(points, fill=ink, width=primitive.thickness)

        elif isinstance(primitive, Label):
            draw.text((primitive.x, primitive.y), primitive.text, fill=ink, font=self._font)

        else:
            raise TypeError(f"unsupported primitive: {primitive!r}")

    def _render_ellipse(self, draw: ImageDraw.ImageDraw, ellipse: Ellipse, ink) -> None:
        bbox = [ellipse.cx - ellipse.rx, ellipse.cy - ellipse.ry,
                ellipse.cx + ellipse.rx, ellipse.cy + ellipse.ry]

        if ellipse.kind == EllipseKind.FULL:
            if ellipse.filled:
                draw.ellipse(bbox, fill=ink)
            else:
                draw.ellipse(bbox, outline=ink, width=ellipse.thickness)
            return

        start, end = _pillow_angles(ellipse.start_angle, ellipse.end_angle)
        if ellipse.kind == EllipseKind.ARC:
            draw.arc(bbox, start, end, fill=ink, width=ellipse.thickness)
        elif ellipse.filled:
            draw.pieslice(bbox, start, end, fill=ink)
        else:
            draw.pieslice(bbox, start, end, outline=ink, width=ellipse.thickness)

    def _xor(self, mask: Image.Image, color: RGB) -> None:
        bbox = mask.getbbox()
        if bbox is None:
            return
        left, top, right, bottom = bbox
        pixels = self.image.load()
        bits = mask.load()
        cr, cg, cb = color
        for y in range(top, bottom):
            for x in range(left, right):
                if bits[x, y]:
                    r, g, b = pixels[x, y]
                    pixels[x, y] = (r ^ cr, g ^ cg, b ^ cb)

    # =========================================================================
    # Export
    # =========================================================================

    def scaled(self, scale: int = 1) -> Image.Image:
        """Copy of the surface enlarged by an integer factor."""
        if scale < 1:
            raise ValueError(f"scale must be >= 1, got {scale}")
        if scale == 1:
            return self.image.copy()
        width, height = self.image.size
        return self.image.resize((width * scale, height * scale), Image.Resampling.NEAREST)

    def to_png(self, scale: int = 1) -> bytes:
        """Render the surface as PNG bytes."""
        buffer = io.BytesIO()
        self.scaled(scale).save(buffer, format="PNG")
        return buffer.getvalue()

    def save(self, path, scale: int = 1) -> None:
        """Write the surface to an image file; the format follows the suffix."""
        self.scaled(scale).save(path)

    def pixel(self, x: int, y: int) -> RGB:
        """RGB value at (x, y)."""
        return self.image.getpixel((x, y))
