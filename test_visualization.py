import matplotlib
matplotlib.use("Agg")

import pytest
import matplotlib.pyplot as plt

from geometry import Point
from refinement import compute_convex_hull
from visualization import plot_hull, plot_hulls, plot_points


@pytest.fixture
def ax():
    fig, ax = plt.subplots()
    yield ax
    plt.close(fig)


@pytest.fixture
def points():
    return [Point(0, 0), Point(0, 1), Point(1, 1), Point(1, 0), Point(0.5, 0.5)]


def test_plot_hull_is_closed(ax, points):
    hull = compute_convex_hull(points)
    plot_hull(hull, ax)

    (line,) = ax.get_lines()
    xs, ys = line.get_data()
    assert len(xs) == len(hull) + 1
    assert (xs[0], ys[0]) == (xs[-1], ys[-1])


def test_plot_empty_hull(ax):
    assert plot_hull([], ax) is ax
    assert len(ax.get_lines()) == 0


def test_plot_hulls(ax, points):
    convex = compute_convex_hull(points)
    concave = [(0.0, 0.0), (1.0, 0.0), (0.5, 0.5), (1.0, 1.0), (0.0, 1.0)]
    plot_hulls(points, convex, concave, ax=ax)

    assert len(ax.get_lines()) == 2
    assert len(ax.collections) == 1
    labels = [text.get_text() for text in ax.get_legend().get_texts()]
    assert labels == ["convex", "concave"]


def test_plot_points(ax, points):
    plot_points(points, ax)
    offsets = ax.collections[0].get_offsets()
    assert len(offsets) == len(points)
