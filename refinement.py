import ctypes
import ctypes.util
import functools
import logging
import os
import numpy as np

from typing import Protocol, Sequence

from fast_hull import fast_convex_hull
from geometry import Location


logger = logging.getLogger(__name__)

DEFAULT_CONCAVITY = 2.0
DEFAULT_LENGTH_THRESHOLD = 0.0

LIBRARY_ENV_VAR = "CONCAVEMAN_LIBRARY"
LIBRARY_NAME = "concaveman"
REFINE_SYMBOL = "rust_concaveman_2d"
RELEASE_SYMBOL = "free_points"

_DOUBLE_P = ctypes.POINTER(ctypes.c_double)
_INT_P = ctypes.POINTER(ctypes.c_int)


class RefinementLibraryError(OSError):
    pass


class RefinementEngine(Protocol):
    def refine(
        self,
        points: np.ndarray,
        hull: np.ndarray,
        concavity: float,
        length_threshold: float,
    ) -> tuple[object, int]: ...

    def release(self, buffer) -> None: ...


class ConcavemanLibrary:
    """
    ctypes binding of the native concaveman library.

    `refine` hands out a buffer allocated by the library;
    it must be passed back to `release` exactly once.
    """
    def __init__(self, path: str | None = None):
        path = path or os.environ.get(LIBRARY_ENV_VAR) or ctypes.util.find_library(LIBRARY_NAME)
        if not path:
            raise RefinementLibraryError(
                f"Cannot locate the {LIBRARY_NAME} library, set {LIBRARY_ENV_VAR} to its path"
            )

        try:
            self._lib = ctypes.CDLL(path)
            self._refine = getattr(self._lib, REFINE_SYMBOL)
            self._release = getattr(self._lib, RELEASE_SYMBOL)
        except (OSError, AttributeError) as exc:
            raise RefinementLibraryError(f"Cannot load {LIBRARY_NAME} library from {path}: {exc}") from exc

        self._refine.argtypes = [
            _DOUBLE_P, ctypes.c_size_t,
            _INT_P, ctypes.c_size_t,
            ctypes.c_double, ctypes.c_double,
            ctypes.POINTER(_DOUBLE_P), ctypes.POINTER(ctypes.c_size_t),
        ]
        self._refine.restype = None
        self._release.argtypes = [ctypes.POINTER(_DOUBLE_P)]
        self._release.restype = None

        self.path = path
        logger.info("loaded %s library from %s", LIBRARY_NAME, path)

    def refine(
        self,
        points: np.ndarray,
        hull: np.ndarray,
        concavity: float,
        length_threshold: float,
    ) -> tuple[_DOUBLE_P, int]:
        result = _DOUBLE_P()
        count = ctypes.c_size_t(0)
        self._refine(
            points.ctypes.data_as(_DOUBLE_P), points.size // 2,
            hull.ctypes.data_as(_INT_P), hull.size,
            concavity, length_threshold,
            ctypes.byref(result), ctypes.byref(count),
        )
        return result, count.value

    def release(self, buffer: _DOUBLE_P) -> None:
        self._release(ctypes.byref(buffer))


@functools.lru_cache(maxsize=None)
def default_library() -> ConcavemanLibrary:
    return ConcavemanLibrary()


class RefinedBuffer:
    """
    Scoped ownership of a result buffer allocated by the refinement engine.

    The engine is called on enter and the buffer is released on exit,
    whatever happens in between. Coordinates are only readable inside
    the `with` block and must be copied out with `to_pairs`.
    """
    def __init__(
        self,
        engine: RefinementEngine,
        points: np.ndarray,
        hull: np.ndarray,
        concavity: float,
        length_threshold: float,
    ):
        self._engine = engine
        self._args = (points, hull, concavity, length_threshold)
        self._buffer = None
        self._count = 0
        self._owned = False

    def __enter__(self) -> "RefinedBuffer":
        if self._owned:
            raise RuntimeError("Refined buffer is already acquired")
        self._buffer, self._count = self._engine.refine(*self._args)
        self._owned = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._owned:
            return
        buffer = self._buffer
        self._buffer = None
        self._owned = False
        self._engine.release(buffer)

    def __len__(self) -> int:
        return self._count

    def to_pairs(self) -> list[tuple[float, float]]:
        if not self._owned:
            raise RuntimeError("Refined buffer is not acquired or already released")
        buffer = self._buffer
        return [(float(buffer[2 * i]), float(buffer[2 * i + 1])) for i in range(self._count)]


def flatten_points(points: Sequence[Location]) -> np.ndarray:
    """
    Interleaved x, y coordinates as a contiguous float64 buffer of length 2N.
    """
    return np.array([(p.x, p.y) for p in points], dtype=np.float64).reshape(-1)


def compute_concave_hull(
    points: Sequence[Location],
    concavity: float | None = None,
    length_threshold: float | None = None,
    library: RefinementEngine | None = None,
) -> list[tuple[float, float]]:
    """
    Concave hull of the point set.

    The fast convex hull seeds the refinement engine (the native concaveman
    library by default), which morphs it into a concave polygon.
    Higher `concavity` gives a smoother (more convex) result; negative values
    are clamped to zero. Edges shorter than `length_threshold` are not refined.
    """
    if concavity is None:
        concavity = DEFAULT_CONCAVITY
    if not concavity >= 0.0:
        concavity = 0.0
    if length_threshold is None:
        length_threshold = DEFAULT_LENGTH_THRESHOLD

    hull = np.asarray(fast_convex_hull(points), dtype=np.int32)
    flat = flatten_points(points)

    engine = library if library is not None else default_library()
    with RefinedBuffer(engine, flat, hull, float(concavity), float(length_threshold)) as refined:
        result = refined.to_pairs()

    logger.debug("refined %d hull vertices into %d points", hull.size, len(result))
    return result


def compute_convex_hull(points: Sequence[Location]) -> list[tuple[float, float]]:
    """
    Convex hull of the point set as coordinate pairs, counter-clockwise.
    """
    return [(float(points[i].x), float(points[i].y)) for i in fast_convex_hull(points)]
