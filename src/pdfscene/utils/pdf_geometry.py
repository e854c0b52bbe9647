"""
Geometry utilities for PDF matrices, points and boxes.

Matrices are stored as 6-tuples ``(a, b, c, d, e, f)`` and expanded to 3x3
numpy arrays for arithmetic. PDF uses row vectors, so a point is transformed
as ``[x, y, 1] @ M`` and ``A @ B`` means "apply A, then B".
"""
import math
from typing import Any, Iterable, Optional, Sequence, Tuple

import numpy as np

Matrix = Tuple[float, float, float, float, float, float]
Box = Tuple[float, float, float, float]

IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def to_matrix(values: Sequence[Any]) -> Matrix:
    """Coerce a 6-element sequence into a matrix tuple.

    Raises:
        ValueError: If ``values`` does not hold exactly six numbers.
    """
    items = [float(v) for v in values]
    if len(items) != 6:
        raise ValueError(f"A matrix needs 6 numbers, got {len(items)}")
    return tuple(items)  # type: ignore[return-value]


def matrix_to_np(m: Any) -> np.ndarray:
    # safeguard
    if isinstance(m, np.ndarray):
        return m
    return np.array(
        [[m[0], m[1], 0.0], [m[2], m[3], 0.0], [m[4], m[5], 1.0]], dtype=float
    )


def np_to_matrix(arr: np.ndarray) -> Matrix:
    return (
        float(arr[0, 0]),
        float(arr[0, 1]),
        float(arr[1, 0]),
        float(arr[1, 1]),
        float(arr[2, 0]),
        float(arr[2, 1]),
    )


def multiply(first: Matrix, second: Matrix) -> Matrix:
    """Return the matrix that applies ``first`` and then ``second``."""
    return np_to_matrix(matrix_to_np(first) @ matrix_to_np(second))


def translation(tx: float, ty: float) -> Matrix:
    return (1.0, 0.0, 0.0, 1.0, float(tx), float(ty))


def scaling(sx: float, sy: float) -> Matrix:
    return (float(sx), 0.0, 0.0, float(sy), 0.0, 0.0)


def rotation(angle_degrees_ccw: float) -> Matrix:
    angle = math.radians(angle_degrees_ccw)
    c, s = math.cos(angle), math.sin(angle)
    # Snap quarter turns so page rotations stay exact
    c, s = round(c, 12), round(s, 12)
    return (c, s, -s, c, 0.0, 0.0)


def determinant(m: Matrix) -> float:
    return m[0] * m[3] - m[1] * m[2]


def transform_point(m: Matrix, x: float, y: float) -> Tuple[float, float]:
    """Transform a single point.

    x' = x*a + y*c + e
    y' = x*b + y*d + f
    """
    return (x * m[0] + y * m[2] + m[4], x * m[1] + y * m[3] + m[5])


def transform_points(m: Matrix, points: np.ndarray) -> np.ndarray:
    """Transform an ``(N, 2)`` array of points."""
    if len(points) == 0:
        return np.zeros((0, 2))
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    return (homogeneous @ matrix_to_np(m))[:, :2]


def bounding_box(points: Iterable[Tuple[float, float]]) -> Optional[Box]:
    pts = np.asarray(list(points), dtype=float)
    if pts.size == 0:
        return None
    return (
        float(pts[:, 0].min()),
        float(pts[:, 1].min()),
        float(pts[:, 0].max()),
        float(pts[:, 1].max()),
    )


def intersect_boxes(first: Box, second: Box) -> Optional[Box]:
    """Return the overlap of two boxes, or ``None`` when they are disjoint."""
    x0, y0 = max(first[0], second[0]), max(first[1], second[1])
    x1, y1 = min(first[2], second[2]), min(first[3], second[3])
    if x0 > x1 or y0 > y1:
        return None
    return (x0, y0, x1, y1)


def normalize_rect(values: Sequence[Any]) -> Box:
    """Normalise a PDF rectangle ``[x0 y0 x1 y1]`` given in any corner order."""
    x0, y0, x1, y1 = (float(v) for v in values)
    return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))
