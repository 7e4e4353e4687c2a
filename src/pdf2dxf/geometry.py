"""
Geometry Module

Plain value types shared by every stage of the conversion:
points, line segments, 2D affine transforms and cubic Bezier flattening.
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple


# Number of line segments used to flatten one cubic Bezier curve
DEFAULT_CURVE_SEGMENTS = 10

# Segments shorter than this on both axes carry no visible geometry
DEGENERACY_EPSILON = 0.001


@dataclass(frozen=True)
class Point:
    """2D point with x, y coordinates"""
    x: float
    y: float


@dataclass(frozen=True)
class LineSegment:
    """A line segment from start to end, in output coordinates"""
    start: Point
    end: Point

    def is_degenerate(self, epsilon: float = DEGENERACY_EPSILON) -> bool:
        """True when both endpoints coincide within epsilon on each axis"""
        return (abs(self.start.x - self.end.x) <= epsilon and
                abs(self.start.y - self.end.y) <= epsilon)

    def scaled(self, factor: float) -> 'LineSegment':
        return LineSegment(
            Point(self.start.x * factor, self.start.y * factor),
            Point(self.end.x * factor, self.end.y * factor),
        )


@dataclass(frozen=True)
class AffineTransform:
    """
    2D affine transform mapping (x, y) to (a*x + c*y + e, b*x + d*y + f).

    The six values are in the order PDF uses for ``cm`` operands and
    ``/Matrix`` arrays.
    """
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> 'AffineTransform':
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> 'AffineTransform':
        return cls(1.0, 0.0, 0.0, 1.0, tx, ty)

    @classmethod
    def scaling(cls, sx: float, sy: float) -> 'AffineTransform':
        return cls(sx, 0.0, 0.0, sy, 0.0, 0.0)

    @classmethod
    def from_values(cls, values: Iterable[float]) -> 'AffineTransform':
        """
        Build a transform from six numbers [a b c d e f].

        Raises:
            ValueError: if there are not exactly six values
        """
        values = [float(v) for v in values]
        if len(values) != 6:
            raise ValueError(f"Affine transform needs 6 values, got {len(values)}")
        return cls(*values)

    def compose(self, other: 'AffineTransform') -> 'AffineTransform':
        """
        Return self o other: ``other`` is applied to a point first, then self.

        A ``cm`` operator inside a content stream therefore updates the CTM
        with ``ctm = ctm.compose(matrix)``.
        """
        return AffineTransform(
            a=self.a * other.a + self.c * other.b,
            b=self.b * other.a + self.d * other.b,
            c=self.a * other.c + self.c * other.d,
            d=self.b * other.c + self.d * other.d,
            e=self.a * other.e + self.c * other.f + self.e,
            f=self.b * other.e + self.d * other.f + self.f,
        )

    def apply(self, point: Point) -> Point:
        """Map a point through the transform, translation included"""
        return Point(
            self.a * point.x + self.c * point.y + self.e,
            self.b * point.x + self.d * point.y + self.f,
        )

    def to_tuple(self) -> Tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)


def flatten_cubic(p0: Point, p1: Point, p2: Point, p3: Point,
                  segment_count: int = DEFAULT_CURVE_SEGMENTS) -> List[LineSegment]:
    """
    Convert a cubic bezier curve into a chain of line segments.

    The curve is evaluated at t = i / segment_count for i = 1..segment_count
    and each evaluated point is joined to the previous one, starting at p0.
    The ``v`` and ``y`` path operators are handled by passing a repeated
    control point.

    Args:
        p0, p1, p2, p3: Control points of the cubic bezier
        segment_count: Number of line segments to produce

    Returns:
        List of exactly ``segment_count`` line segments
    """
    if segment_count < 1:
        raise ValueError(f"segment_count must be at least 1, got {segment_count}")

    segments = []
    previous = p0
    for i in range(1, segment_count + 1):
        t = i / segment_count
        t2 = t * t
        t3 = t2 * t
        mt = 1 - t
        mt2 = mt * mt
        mt3 = mt2 * mt

        x = mt3 * p0.x + 3 * mt2 * t * p1.x + 3 * mt * t2 * p2.x + t3 * p3.x
        y = mt3 * p0.y + 3 * mt2 * t * p1.y + 3 * mt * t2 * p2.y + t3 * p3.y

        current = Point(x, y)
        segments.append(LineSegment(previous, current))
        previous = current
    return segments
