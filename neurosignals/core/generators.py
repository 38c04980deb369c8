# neurosignals/core/generators.py

"""
Test-signal and wavelet generators: sine, sinc, Morlet wavelet and uniform time vectors.
"""

import logging
from typing import Union

import numpy as np
from numpy.typing import NDArray, ArrayLike

logger = logging.getLogger(__name__)


def generate_time(duration: float, fs: float) -> NDArray[np.float64]:
    """Time vector from 0 to `duration` seconds (inclusive when reachable) in 1/fs steps."""
    if fs <= 0:
        raise ValueError("Sampling rate must be positive.")
    if duration < 0:
        raise ValueError("duration must be non-negative.")
    n = int(np.floor(duration * fs + 1e-9)) + 1
    return np.arange(n, dtype=np.float64) / fs


def generate_sine(
    f: float,
    t: ArrayLike,
    a: float = 1.0,
    p: float = 0.0
) -> NDArray[np.float64]:
    """
    Sine wave a * sin(2*pi*f*t + p).

    Args:
        f: Frequency (Hz).
        t: Time vector (seconds).
        a: Amplitude.
        p: Phase (radians).
    """
    t_arr = np.asarray(t, dtype=np.float64)
    return a * np.sin(2 * np.pi * f * t_arr + p)


def generate_sinc(
    t: ArrayLike = None,
    f: float = 10.0,
    peak: float = 0.0
) -> NDArray[np.float64]:
    """
    Sinc function sin(2*pi*f*(t - peak)) / (t - peak).

    The value at t == peak (0/0) is replaced with the mean of its two neighbours.
    Defaults to t = -2..2 in 0.01 steps.
    """
    if t is None:
        t = np.linspace(-2.0, 2.0, 401)
    t_arr = np.asarray(t, dtype=np.float64)
    shifted = t_arr - peak
    with np.errstate(divide='ignore', invalid='ignore'):
        y = np.sin(2 * np.pi * f * shifted) / shifted
    for idx in np.flatnonzero(~np.isfinite(y)):
        neighbours = [y[i] for i in (idx - 1, idx + 1) if 0 <= i < y.size and np.isfinite(y[i])]
        y[idx] = np.mean(neighbours) if neighbours else 2 * np.pi * f
    return y


def generate_morlet(
    fs: float,
    wt: float,
    wf: float,
    ncyc: int = 5,
    complex: bool = False
) -> Union[NDArray[np.float64], NDArray[np.complex128]]:
    """
    Morlet wavelet: a cosine (or complex exponential) at `wf` Hz tapered by a gaussian.

    Args:
        fs: Sampling rate (Hz).
        wt: Half-length of the wavelet in seconds; the time axis is -wt..wt in 1/fs steps.
        wf: Wavelet frequency (Hz).
        ncyc: Number of cycles; trades time against frequency precision.
        complex: Return the complex wavelet instead of the real one.

    Returns:
        The wavelet, symmetric around t = 0.
    """
    if fs <= 0 or wf <= 0:
        raise ValueError("fs and wf must be positive.")
    if ncyc < 1:
        raise ValueError("ncyc must be >= 1.")
    half = int(np.floor(wt * fs + 1e-9))
    t = np.arange(-half, half + 1, dtype=np.float64) / fs
    if complex:
        carrier = np.exp(1j * 2 * np.pi * wf * t)
    else:
        carrier = np.cos(2 * np.pi * wf * t)
    width = 2 * (ncyc / (2 * np.pi * wf)) ** 2
    gaussian = np.exp(-t ** 2 / width)
    return carrier * gaussian
