"""Path construction.

:class:`PathBuilder` accumulates subpaths in user space as the path
construction operators (``m l c v y h re``) arrive. A paint or clip operator
calls :meth:`PathBuilder.build`, which transforms the accumulated geometry
through the CTM into an immutable device space :class:`Path` and clears the
builder.

Curves are kept as exact cubic control points. :meth:`Path.flatten` exists
for consumers that need polygons (hit testing, rasterisation).
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np

from .utils.pdf_geometry import Box, Matrix, bounding_box, transform_point

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

CURVE_STEPS = 16


@dataclass(frozen=True)
class LineSegment:
    end: Point

    def transformed(self, m: Matrix) -> "LineSegment":
        return LineSegment(transform_point(m, *self.end))

    @property
    def points(self) -> Tuple[Point, ...]:
        return (self.end,)


@dataclass(frozen=True)
class CurveSegment:
    c1: Point
    c2: Point
    end: Point

    def transformed(self, m: Matrix) -> "CurveSegment":
        return CurveSegment(
            transform_point(m, *self.c1),
            transform_point(m, *self.c2),
            transform_point(m, *self.end),
        )

    @property
    def points(self) -> Tuple[Point, ...]:
        return (self.c1, self.c2, self.end)


Segment = Union[LineSegment, CurveSegment]


@dataclass(frozen=True)
class Subpath:
    """A run of connected segments starting at ``start``."""

    start: Point
    segments: Tuple[Segment, ...]
    closed: bool = False

    def transformed(self, m: Matrix) -> "Subpath":
        return Subpath(
            transform_point(m, *self.start),
            tuple(seg.transformed(m) for seg in self.segments),
            self.closed,
        )

    def points(self) -> List[Point]:
        pts = [self.start]
        for seg in self.segments:
            pts.extend(seg.points)
        return pts

    def flatten(self, steps: int = CURVE_STEPS) -> np.ndarray:
        """Approximate the subpath by a polyline, returned as ``(N, 2)``."""
        pts = [np.array(self.start, dtype=float)]
        current = pts[0]
        t = np.linspace(0.0, 1.0, steps + 1)[1:, None]
        for seg in self.segments:
            if isinstance(seg, LineSegment):
                current = np.array(seg.end, dtype=float)
                pts.append(current)
                continue
            p0 = current
            p1, p2, p3 = (np.array(p, dtype=float) for p in seg.points)
            curve = (
                (1 - t) ** 3 * p0
                + 3 * (1 - t) ** 2 * t * p1
                + 3 * (1 - t) * t**2 * p2
                + t**3 * p3
            )
            pts.extend(curve)
            current = p3
        return np.vstack(pts)


@dataclass(frozen=True)
class Path:
    """An immutable sequence of subpaths."""

    subpaths: Tuple[Subpath, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.subpaths

    def transformed(self, m: Matrix) -> "Path":
        return Path(tuple(sp.transformed(m) for sp in self.subpaths))

    def points(self) -> List[Point]:
        pts: List[Point] = []
        for sp in self.subpaths:
            pts.extend(sp.points())
        return pts

    def bounds(self) -> Optional[Box]:
        """Bounding box of all points, control points included."""
        return bounding_box(self.points())

    def flatten(self, steps: int = CURVE_STEPS) -> List[np.ndarray]:
        return [sp.flatten(steps) for sp in self.subpaths]

    def winding_number(self, x: float, y: float) -> int:
        """Winding number of the point, every subpath implicitly closed."""
        winding = 0
        for poly in self.flatten():
            if len(poly) < 2:
                continue
            x0, y0 = poly[:, 0], poly[:, 1]
            x1, y1 = np.roll(x0, -1), np.roll(y0, -1)
            # side > 0 means the point is left of the edge
            side = (x1 - x0) * (y - y0) - (x - x0) * (y1 - y0)
            upward = (y0 <= y) & (y1 > y) & (side > 0)
            downward = (y0 > y) & (y1 <= y) & (side < 0)
            winding += int(upward.sum()) - int(downward.sum())
        return winding

    def contains(self, x: float, y: float, even_odd: bool = False) -> bool:
        winding = self.winding_number(x, y)
        if even_odd:
            return winding % 2 != 0
        return winding != 0

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> "Path":
        builder = PathBuilder()
        builder.rect(x, y, width, height)
        return builder.build()


class PathBuilder:
    """Accumulates the path under construction in user space."""

    def __init__(self):
        self._subpaths: List[Subpath] = []
        self._start: Optional[Point] = None
        self._segments: List[Segment] = []
        self._closed = False
        self._current: Optional[Point] = None

    @property
    def current_point(self) -> Optional[Point]:
        return self._current

    @property
    def is_empty(self) -> bool:
        return not self._subpaths and not self._segments

    def move_to(self, x: float, y: float) -> None:
        self._flush()
        self._start = self._current = (float(x), float(y))

    def line_to(self, x: float, y: float) -> None:
        if not self._begin_segment("l"):
            return
        end = (float(x), float(y))
        self._segments.append(LineSegment(end))
        self._current = end

    def curve_to(
        self, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float
    ) -> None:
        if not self._begin_segment("c"):
            return
        end = (float(x3), float(y3))
        self._segments.append(
            CurveSegment((float(x1), float(y1)), (float(x2), float(y2)), end)
        )
        self._current = end

    def curve_to_v(self, x2: float, y2: float, x3: float, y3: float) -> None:
        """``v``: the first control point is the current point."""
        if self._current is None:
            logger.debug("Ignoring v without a current point")
            return
        self.curve_to(*self._current, x2, y2, x3, y3)

    def curve_to_y(self, x1: float, y1: float, x3: float, y3: float) -> None:
        """``y``: the second control point is the end point."""
        self.curve_to(x1, y1, x3, y3, x3, y3)

    def close_path(self) -> None:
        if self._start is None or self._closed or not self._segments:
            return
        self._closed = True
        self._current = self._start

    def rect(self, x: float, y: float, width: float, height: float) -> None:
        self.move_to(x, y)
        self.line_to(x + width, y)
        self.line_to(x + width, y + height)
        self.line_to(x, y + height)
        self.close_path()

    def build(self, ctm: Optional[Matrix] = None) -> Path:
        """Finalise the path, transformed by ``ctm``, and clear the builder."""
        self._flush()
        path = Path(tuple(self._subpaths))
        if ctm is not None:
            path = path.transformed(ctm)
        self.clear()
        return path

    def clear(self) -> None:
        self._subpaths = []
        self._start = None
        self._segments = []
        self._closed = False
        self._current = None

    def _begin_segment(self, op: str) -> bool:
        if self._start is None:
            # Segments before the first moveto are dropped
            logger.debug("Ignoring %s without a current point", op)
            return False
        if self._closed:
            # A segment after closepath starts a new subpath at the old start
            start = self._start
            self._flush()
            self._start = self._current = start
        return True

    def _flush(self) -> None:
        if self._start is not None and self._segments:
            self._subpaths.append(
                Subpath(self._start, tuple(self._segments), self._closed)
            )
        self._start = None
        self._segments = []
        self._closed = False
