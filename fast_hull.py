import logging

from typing import Iterable, Sequence

from geometry import Location, orientation, point_in_polygon, validate_points


logger = logging.getLogger(__name__)


def extremal_indices(points: Sequence[Location]) -> tuple[int, int, int, int]:
    """
    Indices of the leftmost, topmost (min y), rightmost and bottommost (max y) points.
    Ties keep the earliest index.
    """
    left = top = right = bottom = 0
    for i in range(1, len(points)):
        p = points[i]
        if p.x < points[left].x:
            left = i
        if p.x > points[right].x:
            right = i
        if p.y < points[top].y:
            top = i
        if p.y > points[bottom].y:
            bottom = i
    return left, top, right, bottom


def candidate_indices(points: Sequence[Location]) -> list[int]:
    """
    Cull points lying inside the quadrilateral spanned by the four extremal points.

    The result always starts with the extremal indices and may contain
    an index twice. Points inside the quad cannot be hull vertices,
    so the candidates are enough to rebuild the full hull.

    Ray casting rounds the edge intersection, so a point is only culled
    when the exact orientation test confirms it is strictly inside.
    """
    extremal = extremal_indices(points)
    quad = [points[i] for i in extremal]

    candidates = list(extremal)
    for i, p in enumerate(points):
        if not (point_in_polygon(p, quad) and strictly_inside(p, quad)):
            candidates.append(i)
    return candidates


def strictly_inside(point: Location, polygon: Sequence[Location]) -> bool:
    """
    Exact test against a counter-clockwise convex polygon (y axis up).
    Zero-length edges are skipped; a polygon without area contains nothing.
    """
    edges = 0
    for k in range(len(polygon)):
        a, b = polygon[k - 1], polygon[k]
        if a.x == b.x and a.y == b.y:
            continue
        if orientation(a, b, point) <= 0:
            return False
        edges += 1
    return edges > 0


def monotone_chain(points: Sequence[Location], candidates: Iterable[int]) -> list[int]:
    """
    Andrew's monotone chain algorithm over point indices.

    Returns hull vertex indices in counter-clockwise order (y axis up),
    without repeating the first vertex. Collinear boundary points are dropped.
    Time complexity: O(k*log(k)) for k candidates.
    """
    order = sorted(set(candidates), key=lambda i: (points[i].x, points[i].y, i))
    if len(order) <= 1:
        return order

    lower = []  # lower hull
    for i in order:
        while len(lower) >= 2 and orientation(points[lower[-2]], points[lower[-1]], points[i]) <= 0:
            lower.pop()
        lower.append(i)

    upper = []  # upper hull
    for i in reversed(order):
        while len(upper) >= 2 and orientation(points[upper[-2]], points[upper[-1]], points[i]) <= 0:
            upper.pop()
        upper.append(i)

    hull = lower[:-1] + upper[:-1]

    # all candidates share one location
    if len(hull) == 2:
        first, last = points[hull[0]], points[hull[1]]
        if first.x == last.x and first.y == last.y:
            return hull[:1]
    return hull


def fast_convex_hull(points: Sequence[Location]) -> list[int]:
    """
    Convex hull of the point set as indices into `points`.
    Raises InvalidPointSetError for empty input or non-finite coordinates.
    """
    validate_points(points)

    candidates = candidate_indices(points)
    logger.debug("culling kept %d candidates out of %d points", len(candidates), len(points))

    hull = monotone_chain(points, candidates)
    logger.debug("convex hull has %d vertices", len(hull))
    return hull
