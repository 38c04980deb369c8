# neurosignals/core/analysis/dependence.py

"""
Dependence and similarity analytics: covariance and correlation matrices,
auto- and cross-covariance over a lag sweep, magnitude-squared coherence,
histogram mutual information and entropy, and windowed stationarity indices.
"""

import logging
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from scipy.stats import entropy as shannon_entropy
from sklearn.metrics import mutual_info_score

from neurosignals.config import get_active_config
from neurosignals.core.dsp import amplitude_envelope, compute_coherence
from neurosignals.core.errors import ConfigurationError
from neurosignals.core.recording import Component, Recording
from neurosignals.core.stats import histogram_bins
from .guards import (
    check_index, require_physiological, require_same_layout, squeeze_epochs, store_components
)

logger = logging.getLogger(__name__)

STATIONARITY_METHODS = ("mean", "var", "euclid", "hilbert")


# --- Covariance & correlation ---

def _scatter(x: NDArray[np.float64]) -> NDArray[np.float64]:
    """Demeaned channel scatter matrix of x shaped (channels, samples)."""
    centered = x - x.mean(axis=1, keepdims=True)
    return centered @ centered.T


def covariance(rec: Recording, norm: bool = True) -> NDArray[np.float64]:
    """
    Channel x channel covariance per epoch, shaped (channels, channels[, epochs]).

    With `norm` the scatter matrix is divided by N - 1; otherwise the raw
    demeaned scatter matrix is returned.
    """
    require_physiological(rec)
    n_channels, n_samples, n_epochs = rec.signals.shape
    if norm and n_samples < 2:
        raise ValueError("Normalized covariance requires at least two samples.")
    cov = np.zeros((n_channels, n_channels, n_epochs), dtype=np.float64)
    for ep in range(n_epochs):
        scatter = _scatter(rec.signals[:, :, ep])
        cov[:, :, ep] = scatter / (n_samples - 1) if norm else scatter
    return squeeze_epochs(cov)


def store_covariance(rec: Recording, norm: bool = True) -> None:
    store_components(rec, "covariance", {"norm": norm}, {Component.COV_MAT: covariance(rec, norm=norm)})


def correlation(rec: Recording) -> NDArray[np.float64]:
    """Pearson correlation per epoch, shaped (channels, channels[, epochs]); the diagonal is exactly 1."""
    require_physiological(rec)
    n_channels, _, n_epochs = rec.signals.shape
    cor = np.zeros((n_channels, n_channels, n_epochs), dtype=np.float64)
    for ep in range(n_epochs):
        with np.errstate(divide='ignore', invalid='ignore'):
            matrix = np.atleast_2d(np.corrcoef(rec.signals[:, :, ep]))
        np.fill_diagonal(matrix, 1.0)
        cor[:, :, ep] = matrix
    return squeeze_epochs(cor)


def store_correlation(rec: Recording) -> None:
    store_components(rec, "correlation", {}, {Component.COR_MAT: correlation(rec)})


# --- Lagged covariance ---

def _resolve_lag(rec: Recording, lag: Optional[int]) -> int:
    if lag is None:
        lag = get_active_config().analysis.autocov_lag
    if lag < 0 or lag >= rec.sample_count:
        raise ValueError(f"lag must be in [0, {rec.sample_count - 1}], got {lag}.")
    return int(lag)


def _lagged_products(x: NDArray[np.float64], y: NDArray[np.float64], lag: int) -> NDArray[np.float64]:
    """sum_t x[t] * y[t + l] for l in -lag..lag."""
    n = x.size
    out = np.zeros(2 * lag + 1, dtype=np.float64)
    for i, l in enumerate(range(-lag, lag + 1)):
        if l >= 0:
            out[i] = np.dot(x[:n - l], y[l:])
        else:
            out[i] = np.dot(x[-l:], y[:n + l])
    return out


def _lag_axis(rec: Recording, lag: int) -> NDArray[np.float64]:
    return np.arange(-lag, lag + 1, dtype=np.float64) / rec.sampling_rate


def _prepare(x: NDArray[np.float64], demean: bool) -> NDArray[np.float64]:
    return x - x.mean() if demean else x


def autocovariance(
    rec: Recording,
    lag: Optional[int] = None,
    demean: bool = False,
    norm: bool = False
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Autocovariance of each channel for lags -lag..lag.

    Args:
        rec: The recording.
        lag: Maximum lag in samples, 0 <= lag < samples. Defaults to `analysis.autocov_lag`.
        demean: Remove the channel mean first.
        norm: Divide by the number of samples.

    Returns:
        Tuple of (acov shaped (channels, 2*lag+1[, epochs]), lags in seconds).
    """
    require_physiological(rec)
    lag = _resolve_lag(rec, lag)
    n_channels, n_samples, n_epochs = rec.signals.shape
    acov = np.zeros((n_channels, 2 * lag + 1, n_epochs), dtype=np.float64)
    for ep in range(n_epochs):
        for ch in range(n_channels):
            x = _prepare(rec.signals[ch, :, ep], demean)
            acov[ch, :, ep] = _lagged_products(x, x, lag)
    if norm:
        acov /= n_samples
    return squeeze_epochs(acov), _lag_axis(rec, lag)


def store_autocovariance(rec: Recording, lag: Optional[int] = None, demean: bool = False, norm: bool = False) -> None:
    lag = _resolve_lag(rec, lag)
    acov, lags = autocovariance(rec, lag=lag, demean=demean, norm=norm)
    store_components(rec, "autocovariance", {"lag": lag, "demean": demean, "norm": norm},
                     {Component.ACOV: acov, Component.ACOV_LAGS: lags})


def crosscovariance(
    rec: Recording,
    other: Optional[Recording] = None,
    lag: Optional[int] = None,
    demean: bool = False,
    norm: bool = False
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Cross-covariance for lags -lag..lag.

    Without `other`, every channel pair of `rec` is covered and the result is
    shaped (channels, channels, 2*lag+1[, epochs]). With `other`, channels are
    paired by position and the result is shaped (channels, 2*lag+1[, epochs]);
    both recordings must have the same shape.
    """
    require_physiological(rec)
    if other is not None:
        require_physiological(other)
        require_same_layout(rec, other)
    lag = _resolve_lag(rec, lag)
    n_channels, n_samples, n_epochs = rec.signals.shape

    if other is None:
        ccov = np.zeros((n_channels, n_channels, 2 * lag + 1, n_epochs), dtype=np.float64)
        for ep in range(n_epochs):
            for i in range(n_channels):
                x = _prepare(rec.signals[i, :, ep], demean)
                for j in range(n_channels):
                    ccov[i, j, :, ep] = _lagged_products(x, _prepare(rec.signals[j, :, ep], demean), lag)
    else:
        ccov = np.zeros((n_channels, 2 * lag + 1, n_epochs), dtype=np.float64)
        for ep in range(n_epochs):
            for ch in range(n_channels):
                ccov[ch, :, ep] = _lagged_products(
                    _prepare(rec.signals[ch, :, ep], demean), _prepare(other.signals[ch, :, ep], demean), lag
                )
    if norm:
        ccov /= n_samples
    return squeeze_epochs(ccov), _lag_axis(rec, lag)


def store_crosscovariance(rec: Recording, lag: Optional[int] = None, demean: bool = False, norm: bool = False) -> None:
    lag = _resolve_lag(rec, lag)
    ccov, lags = crosscovariance(rec, lag=lag, demean=demean, norm=norm)
    store_components(rec, "crosscovariance", {"lag": lag, "demean": demean, "norm": norm},
                     {Component.CCOV: ccov, Component.CCOV_LAGS: lags})


# --- Coherence ---

def coherence(rec: Recording, other: Optional[Recording] = None) -> NDArray[np.float64]:
    """
    Mean magnitude-squared coherence between every channel of `rec` and every
    channel of `other` (defaults to `rec`), shaped (channels, channels[, epochs]).
    """
    require_physiological(rec)
    if other is None:
        other = rec
    else:
        require_physiological(other)
        require_same_layout(rec, other)
    n_channels, _, n_epochs = rec.signals.shape
    msc = np.zeros((n_channels, n_channels, n_epochs), dtype=np.float64)
    for ep in range(n_epochs):
        for i in range(n_channels):
            for j in range(n_channels):
                _, cxy = compute_coherence(rec.signals[i, :, ep], other.signals[j, :, ep], fs=rec.sampling_rate)
                msc[i, j, ep] = np.mean(cxy)
    return squeeze_epochs(msc)


def store_coherence(rec: Recording, other: Optional[Recording] = None) -> None:
    params = {"other": other} if other is not None else {}
    store_components(rec, "coherence", params, {Component.COHERENCE: coherence(rec, other)})


def coherence_pair(
    rec: Recording,
    other: Optional[Recording] = None,
    *,
    channel1: int,
    channel2: int,
    epoch1: int,
    epoch2: int
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Magnitude-squared coherence between `rec[channel1, :, epoch1]` and
    `other[channel2, :, epoch2]`. Indices are 0-based.

    Returns:
        Tuple of (coherence, frequencies).

    Raises:
        IndexError: If an index is negative or out of range.
    """
    if other is None:
        other = rec
    require_physiological(rec, other)
    channel1 = check_index(channel1, rec.channel_count(), "channel1")
    channel2 = check_index(channel2, other.channel_count(), "channel2")
    epoch1 = check_index(epoch1, rec.epoch_count, "epoch1")
    epoch2 = check_index(epoch2, other.epoch_count, "epoch2")
    if rec.sample_count != other.sample_count:
        raise ValueError(f"Recordings must have the same number of samples, got {rec.sample_count} and {other.sample_count}.")
    f, cxy = compute_coherence(rec.signals[channel1, :, epoch1], other.signals[channel2, :, epoch2], fs=rec.sampling_rate)
    return cxy, f


# --- Information ---

def _bins(n_samples: int) -> int:
    return histogram_bins(n_samples, get_active_config().defaults.histogram_bins)


def _mutual_info(x: NDArray[np.float64], y: NDArray[np.float64], bins: int) -> float:
    contingency, _, _ = np.histogram2d(x, y, bins=bins)
    return float(mutual_info_score(None, None, contingency=contingency))


def mutual_information(rec: Recording, other: Optional[Recording] = None) -> NDArray[np.float64]:
    """
    Histogram-binned mutual information (nats) between every channel pair,
    shaped (channels, channels[, epochs]). With `other`, rows index channels
    of `rec` and columns channels of `other`.
    """
    require_physiological(rec)
    if other is None:
        other = rec
    else:
        require_physiological(other)
        require_same_layout(rec, other)
    n_channels, n_samples, n_epochs = rec.signals.shape
    bins = _bins(n_samples)
    mi = np.zeros((n_channels, n_channels, n_epochs), dtype=np.float64)
    for ep in range(n_epochs):
        for i in range(n_channels):
            for j in range(n_channels):
                mi[i, j, ep] = _mutual_info(rec.signals[i, :, ep], other.signals[j, :, ep], bins)
    return squeeze_epochs(mi)


def store_mutual_information(rec: Recording, other: Optional[Recording] = None) -> None:
    params = {"other": other} if other is not None else {}
    store_components(rec, "mutual_information", params, {Component.MI: mutual_information(rec, other)})


def entropy(rec: Recording) -> NDArray[np.float64]:
    """Shannon entropy (nats) of each channel's amplitude histogram, shaped (channels[, epochs])."""
    require_physiological(rec)
    n_channels, n_samples, n_epochs = rec.signals.shape
    bins = _bins(n_samples)
    ent = np.zeros((n_channels, n_epochs), dtype=np.float64)
    for ep in range(n_epochs):
        for ch in range(n_channels):
            counts, _ = np.histogram(rec.signals[ch, :, ep], bins=bins)
            ent[ch, ep] = shannon_entropy(counts)
    return squeeze_epochs(ent)


def store_entropy(rec: Recording) -> None:
    store_components(rec, "entropy", {}, {Component.ENTROPY: entropy(rec)})


# --- Stationarity ---

def _resolve_stationarity(window: Optional[int], method: Optional[str]) -> Tuple[int, str]:
    cfg = get_active_config().analysis
    window = cfg.stationarity_window if window is None else window
    method = cfg.stationarity_method if method is None else method
    if method not in STATIONARITY_METHODS:
        raise ConfigurationError(f"Unknown stationarity method '{method}'. Choose one of: {', '.join(STATIONARITY_METHODS)}.")
    return int(window), method


def stationarity(rec: Recording, window: Optional[int] = None, method: Optional[str] = None) -> NDArray[np.float64]:
    """
    Windowed stationarity index over consecutive `window`-sample segments.

    Methods:
        mean: segment mean per channel.
        var: segment variance per channel.
        hilbert: segment mean of the Hilbert amplitude envelope per channel.
        euclid: Frobenius distance between each segment's channel covariance and
                the covariance of the whole epoch.

    Returns:
        (channels, windows[, epochs]) for mean/var/hilbert, (windows[, epochs]) for euclid.
        The window axis follows the channel axis; `result[:, w]` holds the
        statistic of window `w` for every channel.
    """
    window, method = _resolve_stationarity(window, method)
    require_physiological(rec)
    n_channels, n_samples, n_epochs = rec.signals.shape
    if window < 1 or window > n_samples:
        raise ValueError(f"window must be in [1, {n_samples}], got {window}.")
    n_windows = n_samples // window
    used = n_windows * window
    logger.debug(f"Computing stationarity: method={method}, window={window}, windows={n_windows}.")

    if method == "euclid":
        result = np.zeros((n_windows, n_epochs), dtype=np.float64)
        for ep in range(n_epochs):
            epoch = rec.signals[:, :, ep]
            reference = _scatter(epoch) / n_samples
            for w in range(n_windows):
                segment = epoch[:, w * window:(w + 1) * window]
                result[w, ep] = np.linalg.norm(_scatter(segment) / window - reference)
        return squeeze_epochs(result)

    result = np.zeros((n_channels, n_windows, n_epochs), dtype=np.float64)
    for ep in range(n_epochs):
        for ch in range(n_channels):
            x = rec.signals[ch, :, ep]
            if method == "hilbert":
                x = amplitude_envelope(x)
            segments = x[:used].reshape(n_windows, window)
            result[ch, :, ep] = segments.var(axis=1) if method == "var" else segments.mean(axis=1)
    return squeeze_epochs(result)


def store_stationarity(rec: Recording, window: Optional[int] = None, method: Optional[str] = None) -> None:
    window, method = _resolve_stationarity(window, method)
    store_components(rec, "stationarity", {"window": window, "method": method},
                     {Component.STATIONARITY: stationarity(rec, window=window, method=method)})
