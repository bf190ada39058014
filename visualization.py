import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from typing import Sequence

from geometry import Location


def _axes(ax: Axes | None) -> Axes:
    return plt.gca() if ax is None else ax


def plot_points(points: Sequence[Location], ax: Axes | None = None, s: float = 4) -> Axes:
    ax = _axes(ax)
    ax.scatter([p.x for p in points], [p.y for p in points], s=s, c='k')
    return ax


def plot_hull(
    hull: Sequence[tuple[float, float]],
    ax: Axes | None = None,
    color: str = 'r',
    label: str | None = None,
) -> Axes:
    """
    Draw a hull given as coordinate pairs, closing it back to the first vertex.
    """
    ax = _axes(ax)
    if not hull:
        return ax

    xs = [x for x, _ in hull] + [hull[0][0]]
    ys = [y for _, y in hull] + [hull[0][1]]
    ax.plot(xs, ys, c=color, label=label)
    return ax


def plot_hulls(
    points: Sequence[Location],
    convex: Sequence[tuple[float, float]],
    concave: Sequence[tuple[float, float]] | None = None,
    ax: Axes | None = None,
) -> Axes:
    ax = plot_points(points, ax)
    plot_hull(convex, ax, color='b', label='convex')
    if concave is not None:
        plot_hull(concave, ax, color='r', label='concave')
    ax.legend()
    ax.grid()
    return ax
