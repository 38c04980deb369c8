# neurosignals/core/dsp.py

"""
Core Digital Signal Processing (DSP) primitives.
Includes windowing, frequency axes, zero-padded FFT/IFFT, periodogram PSD,
short-time spectra, cross spectra, magnitude-squared coherence and envelope
detection.
These functions operate on 1D vectors and know nothing about recordings.
Uses scipy.fft for FFT/IFFT and scipy.signal for the estimators.
"""

import logging
from typing import Tuple, Optional, Union, Literal

import numpy as np
from numpy.typing import NDArray, ArrayLike
from scipy.fft import fft, ifft
from scipy.signal import get_window, hilbert, periodogram, spectrogram, coherence, csd

logger = logging.getLogger(__name__)

# Define a small epsilon for safe log calculations
_EPSILON = np.finfo(np.float64).eps

# --- Window functions ---

def hann(n: int) -> NDArray[np.float64]:
    """
    Returns the symmetric `n`-point Hann window.

    Example:
        >>> hann(3)
        array([0., 1., 0.])
    """
    if n < 1:
        raise ValueError("Window length must be >= 1.")
    if n == 1:
        return np.ones(1, dtype=np.float64)
    return get_window("hann", n, fftbins=False).astype(np.float64, copy=False)

def apply_window(
    data: NDArray[np.float64],
    window_type: str = "hann"
) -> NDArray[np.float64]:
    """
    Applies a symmetric window function to the data using scipy.signal.get_window.

    Windowing is often applied before FFT to reduce spectral leakage.

    Args:
        data: Input signal (1D NumPy array of float64).
        window_type: Name of the window function (e.g., 'hann', 'hamming', 'blackman').

    Returns:
        Windowed data (float64).

    Raises:
        ValueError: If the input is not 1D or the window type is unknown.
    """
    if data.ndim != 1:
        raise ValueError("Input data must be a 1D array.")
    logger.debug(f"Applying '{window_type}' window.")
    window = get_window(window_type, data.shape[0], fftbins=False)
    return (data * window).astype(np.float64, copy=False)

# --- Frequency axes ---

def freqs(t: ArrayLike) -> Tuple[NDArray[np.float64], float]:
    """
    Frequency axis and Nyquist frequency for a uniformly sampled time vector.

    The step is 1 / (N * dt) and the axis runs from 0 up to and including the
    Nyquist frequency 1 / (2 * dt).

    Args:
        t: Time vector (seconds), at least two samples, uniform spacing.

    Returns:
        Tuple of (frequencies, nyquist_frequency).
    """
    t_arr = np.asarray(t, dtype=np.float64)
    if t_arr.ndim != 1 or t_arr.size < 2:
        raise ValueError("Time vector must be 1D with at least two samples.")
    dt = t_arr[1] - t_arr[0]
    if dt <= 0:
        raise ValueError("Time vector must be strictly increasing.")
    fs = 1.0 / dt
    df = 1.0 / (t_arr.size * dt)
    nyquist = fs / 2.0
    # Bin count computed from the ratio so floating error cannot drop the Nyquist bin
    n_bins = int(np.floor(nyquist / df + 1e-9)) + 1
    hz = np.arange(n_bins, dtype=np.float64) * df
    return hz, float(nyquist)

def freqs_from_rate(n_samples: int, fs: float) -> Tuple[NDArray[np.float64], float]:
    """
    Frequency axis for an `n_samples`-long signal sampled at `fs`:
    floor(n / 2) + 1 evenly spaced bins from 0 to Nyquist.
    """
    if n_samples < 1:
        raise ValueError("n_samples must be >= 1.")
    if fs <= 0:
        raise ValueError("Sampling rate must be positive.")
    nyquist = fs / 2.0
    hz = np.linspace(0.0, nyquist, n_samples // 2 + 1)
    return hz, float(nyquist)

# --- FFT-related functions ---

def fft0(x: ArrayLike, n: int = 0) -> NDArray[np.complex128]:
    """
    FFT of `x` after appending zeros.

    If `n` exceeds the length of `x` the vector is padded up to length `n`;
    otherwise `n` zeros are appended.

    Example:
        >>> fft0(np.ones(4), 8).shape
        (8,)
    """
    x_arr = np.asarray(x)
    if x_arr.ndim != 1:
        raise ValueError("Input data must be a 1D array.")
    if n < 0:
        raise ValueError("Padding n must be non-negative.")
    pad = n - x_arr.size if n > x_arr.size else n
    logger.debug(f"Computing FFT with {pad} zeros appended to {x_arr.size} samples.")
    return fft(np.concatenate([x_arr, np.zeros(pad, dtype=x_arr.dtype)])).astype(np.complex128, copy=False)

def ifft0(x: ArrayLike, n: int = 0) -> NDArray[np.complex128]:
    """
    Inverse FFT of `x` after appending zeros, with the same padding rule as `fft0`.
    The complex result is returned as-is.
    """
    x_arr = np.asarray(x, dtype=np.complex128)
    if x_arr.ndim != 1:
        raise ValueError("Input spectrum must be a 1D array.")
    if n < 0:
        raise ValueError("Padding n must be non-negative.")
    pad = n - x_arr.size if n > x_arr.size else n
    return ifft(np.concatenate([x_arr, np.zeros(pad, dtype=np.complex128)]))

# --- Power Spectral Density (PSD) ---

def compute_psd_periodogram(
    x: NDArray[np.float64],
    fs: float = 1.0,
    window: str = 'hann',
    nfft: Optional[int] = None,
    detrend: Union[str, bool] = 'constant',
    scaling: Literal['density', 'spectrum'] = 'density'
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Estimates Power Spectral Density using the Periodogram method (scipy.signal.periodogram).

    The periodogram is the squared magnitude of the windowed FFT, normalized.

    Args:
        x: Input time series (1D float64).
        fs: Sampling frequency (Hz).
        window: Window function name applied to `x` before FFT. Default: 'hann'.
        nfft: Length of the FFT used. If None, defaults to len(x).
        detrend: How to detrend `x` before FFT ('constant', 'linear', False).
        scaling: 'density' (V**2/Hz) or 'spectrum' (V**2).

    Returns:
        Tuple containing:
        - frequencies (NDArray[np.float64]): one-sided frequencies, 0 to Nyquist.
        - Pxx (NDArray[np.float64]): Power Spectral Density or Power Spectrum estimate.
    """
    if x.ndim != 1:
        raise ValueError("Input data must be a 1D array.")
    frequencies, Pxx = periodogram(
        x,
        fs=fs,
        window=window,
        nfft=nfft,
        detrend=detrend,
        return_onesided=True,
        scaling=scaling
    )
    return frequencies.astype(np.float64, copy=False), Pxx.astype(np.float64, copy=False)

def compute_spectrogram(
    x: NDArray[np.float64],
    fs: float,
    nperseg: int,
    noverlap: int,
    window: str = 'hann',
    detrend: Union[str, bool] = 'constant'
) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Short-time power spectral density (scipy.signal.spectrogram).

    Returns:
        Tuple of (frequencies, segment_times, Sxx) with Sxx shaped (n_freqs, n_segments).
    """
    if x.ndim != 1:
        raise ValueError("Input data must be a 1D array.")
    frequencies, times, Sxx = spectrogram(
        x,
        fs=fs,
        window=window,
        nperseg=nperseg,
        noverlap=noverlap,
        detrend=detrend,
        scaling='density',
        mode='psd'
    )
    return frequencies.astype(np.float64, copy=False), times.astype(np.float64, copy=False), Sxx.astype(np.float64, copy=False)

def power_to_db(power: NDArray[np.float64]) -> NDArray[np.float64]:
    """Converts power to decibels, 10 * log10(power), flooring at machine epsilon."""
    return 10.0 * np.log10(np.maximum(power, _EPSILON))

# --- Cross spectra & coherence ---

MIN_SEGMENT_LENGTH = 8

def welch_segment_length(n_samples: int, fs: float) -> int:
    """
    Default Welch segment length for an `n_samples`-long signal: one second of
    data, at most a quarter of the signal and at least MIN_SEGMENT_LENGTH samples.

    Raises:
        ValueError: If the signal cannot hold two segments.
    """
    nperseg = max(MIN_SEGMENT_LENGTH, min(n_samples // 4, int(fs)))
    if nperseg > n_samples // 2:
        raise ValueError(
            f"Signal of {n_samples} samples is too short for a segment-averaged estimate "
            f"(at least {2 * MIN_SEGMENT_LENGTH} samples required)."
        )
    return nperseg

def _check_pair(x: NDArray[np.float64], y: NDArray[np.float64], nperseg: Optional[int], fs: float) -> int:
    if x.ndim != 1 or y.ndim != 1:
        raise ValueError("Input sequences must be 1D arrays.")
    if x.shape != y.shape:
        raise ValueError(f"Input sequences must have the same length, got {x.size} and {y.size}.")
    if nperseg is None:
        return welch_segment_length(x.size, fs)
    # A single Welch segment makes the coherence identically 1
    if nperseg < 1 or nperseg > x.size // 2:
        raise ValueError(f"nperseg must be in [1, {x.size // 2}] to average at least two segments, got {nperseg}.")
    return nperseg

def compute_cross_spectrum(
    x: NDArray[np.float64],
    y: NDArray[np.float64],
    fs: float = 1.0,
    nperseg: Optional[int] = None,
    window: str = 'hann'
) -> Tuple[NDArray[np.float64], NDArray[np.complex128]]:
    """
    Cross power spectral density of two equally long vectors (Welch estimate,
    scipy.signal.csd), averaged over half-overlapping segments.

    Returns:
        Tuple of (frequencies, Pxy) with Pxy complex.
    """
    nperseg = _check_pair(x, y, nperseg, fs)
    logger.debug(f"Computing cross spectrum with nperseg={nperseg}.")
    frequencies, Pxy = csd(x, y, fs=fs, window=window, nperseg=nperseg)
    return frequencies.astype(np.float64, copy=False), Pxy.astype(np.complex128, copy=False)

def compute_coherence(
    x: NDArray[np.float64],
    y: NDArray[np.float64],
    fs: float = 1.0,
    nperseg: Optional[int] = None
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Magnitude-squared coherence of two equally long vectors (Welch estimate).

    The estimate averages at least two segments; the default segment length
    comes from `welch_segment_length`.

    Returns:
        Tuple of (frequencies, Cxy) with Cxy in [0, 1].
    """
    nperseg = _check_pair(x, y, nperseg, fs)
    frequencies, Cxy = coherence(x, y, fs=fs, nperseg=nperseg)
    return frequencies.astype(np.float64, copy=False), Cxy.astype(np.float64, copy=False)

# --- Envelope Detection ---

def amplitude_envelope(y: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Amplitude envelope as the magnitude of the analytic signal (Hilbert transform).

    Returns:
        Envelope (1D float64), same length as `y`.
    """
    if y.ndim != 1:
        raise ValueError("Input data must be a 1D array.")
    return np.abs(hilbert(y)).astype(np.float64, copy=False)
