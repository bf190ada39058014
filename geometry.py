import math
import numpy as np

from dataclasses import dataclass
from fractions import Fraction
from typing import Protocol, Sequence


class InvalidPointSetError(ValueError):
    pass


class Location(Protocol):
    """
    Anything with planar coordinates can be used as a point.
    """
    @property
    def x(self) -> float: ...

    @property
    def y(self) -> float: ...


@dataclass(frozen=True)
class Point:
    x: float
    y: float


# Shewchuk's bound for the non-adaptive orient2d stage.
_EPSILON = 2.0 ** -53
_CCW_ERRBOUND = (3.0 + 16.0 * _EPSILON) * _EPSILON


def points_from_array(array) -> list[Point]:
    """
    Convert an (N, 2) array-like of coordinates into a list of points.
    """
    coords = np.asarray(array, dtype=np.float64)
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise InvalidPointSetError(f'Expected an (N, 2) array, got shape {coords.shape}')
    return [Point(float(x), float(y)) for x, y in coords]


def validate_points(points: Sequence[Location]) -> None:
    if len(points) == 0:
        raise InvalidPointSetError('Point set is empty')
    for i, p in enumerate(points):
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            raise InvalidPointSetError(f'Point {i} has non-finite coordinates: ({p.x}, {p.y})')


def orientation(a: Location, b: Location, c: Location) -> float:
    """
    Cross product of segments ab and ac.

    Positive if c lies to the left of the directed line a -> b,
    negative if to the right, zero if the three points are collinear.
    Only the sign is reliable: when the floating point result is too
    close to zero to trust, it is recomputed in exact rational arithmetic.
    """
    detleft = (b.x - a.x) * (c.y - a.y)
    detright = (b.y - a.y) * (c.x - a.x)
    det = detleft - detright

    errbound = _CCW_ERRBOUND * (abs(detleft) + abs(detright))
    if det > errbound or -det > errbound:
        return det

    return _exact_orientation(a, b, c)


def _exact_orientation(a: Location, b: Location, c: Location) -> float:
    ax, ay = Fraction(a.x), Fraction(a.y)
    exact = (Fraction(b.x) - ax) * (Fraction(c.y) - ay) - (Fraction(b.y) - ay) * (Fraction(c.x) - ax)
    try:
        value = float(exact)
    except OverflowError:
        return math.inf if exact > 0 else -math.inf
    if value == 0.0 and exact != 0:
        # underflow must not turn a turn into a collinear triple
        return math.ulp(0.0) if exact > 0 else -math.ulp(0.0)
    return value


def point_in_polygon(point: Location, polygon: Sequence[Location]) -> bool:
    """
    Even-odd ray casting test. Points exactly on the boundary
    get an unspecified answer.
    """
    x, y = point.x, point.y
    inside = False

    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y

        # the division only runs when yi != yj
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside

        j = i

    return inside
