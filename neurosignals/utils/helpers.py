# neurosignals/utils/helpers.py

"""
Small array helpers shared by the analytics: nearest-value search, per-row and
per-column sorting, coordinate conversion and vector splitting.
"""

import logging
from typing import Tuple, Union, List

import numpy as np
from numpy.typing import NDArray, ArrayLike

from neurosignals.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


def cart2pol(x: float, y: float) -> Tuple[float, float]:
    """Converts cartesian coordinates to polar (rho, theta), theta in radians."""
    return float(np.hypot(x, y)), float(np.arctan2(y, x))


def pol2cart(theta: float, rho: float) -> Tuple[float, float]:
    """Converts polar coordinates (theta in radians, rho) to cartesian (x, y)."""
    return float(rho * np.cos(theta)), float(rho * np.sin(theta))


def vsearch(
    x: ArrayLike,
    y: Union[float, ArrayLike],
    return_distance: bool = False
):
    """
    Finds the position of the element of `x` nearest to `y`.

    Args:
        x: Vector to search in.
        y: Scalar or vector of values to look up.
        return_distance: If True, also return the absolute distance between
                         each `y` and the matched element.

    Returns:
        Index (int) for a scalar `y`, or an integer array for a vector `y`;
        a `(index, distance)` pair when `return_distance` is True.

    Raises:
        ConfigurationError: If `y` is a vector longer than `x`.

    Example:
        >>> vsearch([0.0, 0.5, 1.0, 1.5], 1.1)
        2
    """
    x_arr = np.asarray(x, dtype=np.float64)
    if np.ndim(y) == 0:
        distances = np.abs(x_arr - float(y))
        idx = int(np.argmin(distances))
        if return_distance:
            return idx, float(distances[idx])
        return idx

    y_arr = np.asarray(y, dtype=np.float64)
    if y_arr.size > x_arr.size:
        raise ConfigurationError(f"Length of y ({y_arr.size}) cannot be larger than length of x ({x_arr.size}).")
    distances = np.abs(x_arr[np.newaxis, :] - y_arr[:, np.newaxis])
    idx = np.argmin(distances, axis=1)
    if return_distance:
        return idx, distances[np.arange(y_arr.size), idx]
    return idx


def matrix_sortperm(m: NDArray, rev: bool = False, axis: int = 0) -> NDArray[np.int64]:
    """
    Sorting permutation of each column (axis=0) or each row (axis=1) of `m`.

    The permutation is stable, so equal values keep their original order.
    """
    if m.ndim != 2:
        raise ValueError("Input m must be a 2D array.")
    if axis not in (0, 1):
        raise ValueError(f"axis must be 0 (columns) or 1 (rows), got {axis}.")
    keys = -m if rev else m
    return np.argsort(keys, axis=axis, kind="stable")


def matrix_sort(m: NDArray, m_idx: ArrayLike, axis: int = 0) -> NDArray:
    """
    Applies one permutation `m_idx` to every column (axis=0) or every row (axis=1) of `m`.
    """
    if m.ndim != 2:
        raise ValueError("Input m must be a 2D array.")
    idx = np.asarray(m_idx, dtype=np.int64)
    if idx.ndim != 1 or idx.size != m.shape[axis]:
        raise ConfigurationError(f"Permutation length {idx.size} does not match axis {axis} of size {m.shape[axis]}.")
    return np.take(m, idx, axis=axis)


def nextpow2(x: int) -> int:
    """Returns the next power of 2 that is >= x (1 for x == 0)."""
    if x < 0:
        raise ValueError("x must be non-negative.")
    if x == 0:
        return 1
    return 1 << (int(x) - 1).bit_length()


def vsplit(x: ArrayLike, n: int = 1) -> List[NDArray]:
    """Splits vector `x` into consecutive `n`-long pieces."""
    x_arr = np.asarray(x)
    if n < 1:
        raise ValueError("n must be >= 1.")
    if x_arr.size % n != 0:
        raise ConfigurationError(f"Length of x ({x_arr.size}) must be a multiple of n ({n}).")
    return list(x_arr.reshape(-1, n))
