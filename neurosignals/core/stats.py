# neurosignals/core/stats.py

"""
Elementary vector statistics used across the analytics: z-scores, RMS,
Jaccard similarity, the Hildebrand symmetry rule, histogram bin counts,
amplitude symmetry and the Teager-Kaiser energy operator.
"""

import logging
from typing import Tuple

import numpy as np
from numpy.typing import NDArray, ArrayLike

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def z_score(x: ArrayLike) -> NDArray[np.float64]:
    """Z-scores of `x` using the sample standard deviation (ddof=1)."""
    x_arr = np.asarray(x, dtype=np.float64)
    return (x_arr - np.mean(x_arr)) / np.std(x_arr, ddof=1)


def rms(x: ArrayLike) -> np.float64:
    """
    Root mean square, ||x|| / sqrt(N).

    Example:
        >>> rms([3.0, -3.0])
        3.0
    """
    x_arr = np.asarray(x, dtype=np.float64)
    if x_arr.size == 0:
        return np.float64(0.0)
    return np.float64(np.linalg.norm(x_arr) / np.sqrt(x_arr.size))


def jaccard_similarity(x: ArrayLike, y: ArrayLike) -> float:
    """
    Jaccard similarity |x ∩ y| / (|x| + |y| - |x ∩ y|) of two vectors.

    Vector lengths count every element, so repeated values weigh in the denominator.

    Raises:
        ConfigurationError: If the vectors are empty or differ in length.
    """
    x_arr = np.ravel(np.asarray(x))
    y_arr = np.ravel(np.asarray(y))
    if x_arr.size == 0 or y_arr.size == 0:
        raise ConfigurationError("Jaccard similarity requires two non-empty vectors.")
    if x_arr.size != y_arr.size:
        raise ConfigurationError(f"Vectors must have the same length, got {x_arr.size} and {y_arr.size}.")
    intersection = np.intersect1d(x_arr, y_arr).size
    union = x_arr.size + y_arr.size - intersection
    return intersection / union


def hildebrand_rule(x: ArrayLike) -> float:
    """
    Hildebrand rule H = (mean - median) / std. |H| < 0.2 indicates a symmetric distribution.
    """
    x_arr = np.asarray(x, dtype=np.float64)
    return float((np.mean(x_arr) - np.median(x_arr)) / np.std(x_arr, ddof=1))


def k_categories(n: int) -> Tuple[float, float]:
    """Suggested number of histogram categories for `n` samples: (sqrt(n), Sturges 1 + 3.222*log10(n))."""
    if n < 1:
        raise ValueError("n must be >= 1.")
    return float(np.sqrt(n)), float(1 + 3.222 * np.log10(n))


def histogram_bins(n: int, rule: str = "sqrt") -> int:
    """Number of histogram bins for `n` samples under the 'sqrt' or 'sturges' rule."""
    k_sqrt, k_sturges = k_categories(n)
    if rule == "sqrt":
        return max(1, int(np.ceil(k_sqrt)))
    if rule == "sturges":
        return max(1, int(np.ceil(k_sturges)))
    raise ConfigurationError(f"Unknown histogram bin rule '{rule}'. Choose 'sqrt' or 'sturges'.")


def symmetry(x: ArrayLike) -> float:
    """
    Ratio of non-negative to negative amplitudes. A symmetric signal gives 1.0;
    with no negative samples the count of non-negative samples is returned.
    """
    x_arr = np.asarray(x, dtype=np.float64)
    negatives = int(np.sum(x_arr < 0))
    non_negatives = int(np.sum(x_arr >= 0))
    if negatives == 0:
        return float(non_negatives)
    return non_negatives / negatives


def teager_kaiser(x: ArrayLike) -> NDArray[np.float64]:
    """Teager-Kaiser energy x[t]^2 - x[t-1] * x[t+1]; the first and last samples are copied."""
    x_arr = np.asarray(x, dtype=np.float64)
    tk = x_arr.copy()
    if x_arr.size > 2:
        tk[1:-1] = x_arr[1:-1] ** 2 - x_arr[:-2] * x_arr[2:]
    return tk
