# neurosignals/core/analysis/statistics.py

"""
Descriptive statistics and signal quality: per-channel and per-epoch summary
statistics, SNR, channel-wise standardization, the bootstrap difference test
between two recordings, amplitude symmetry, Teager-Kaiser energy and the
stationary wavelet band split.
"""

import logging
from typing import NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd
import pywt
from numpy.typing import NDArray, ArrayLike
from scipy.integrate import simpson
from scipy.stats import kurtosis
from sklearn.preprocessing import StandardScaler

from neurosignals.config import get_active_config
from neurosignals.core.errors import ConfigurationError
from neurosignals.core.ml_utils.scaling import scale_channels
from neurosignals.core.recording import Component, Recording
from neurosignals.core.stats import symmetry as vector_symmetry, teager_kaiser
from .guards import check_index, require_physiological, require_same_layout, squeeze_epochs, store_components

logger = logging.getLogger(__name__)

DIFFERENCE_METHODS = ("absdiff", "diff2int")


class SummaryStatistics(NamedTuple):
    """Descriptive statistics, one array per statistic, all of the same shape."""
    mean: NDArray[np.float64]
    median: NDArray[np.float64]
    std: NDArray[np.float64]
    var: NDArray[np.float64]
    kurtosis: NDArray[np.float64]
    mean_diff: NDArray[np.float64]
    median_diff: NDArray[np.float64]
    max_diff: NDArray[np.float64]
    dev_mean: NDArray[np.float64]

    def to_frame(self, index_name: str = "channel") -> pd.DataFrame:
        """
        One column per statistic. 1D statistics are indexed by `index_name`;
        2D statistics by (`index_name`, "epoch").
        """
        shape = np.shape(self.mean)
        if len(shape) == 2:
            index = pd.MultiIndex.from_product([range(shape[0]), range(shape[1])], names=[index_name, "epoch"])
        else:
            index = pd.RangeIndex(int(np.size(self.mean)), name=index_name)
        data = {field: np.ravel(getattr(self, field)) for field in self._fields}
        return pd.DataFrame(data, index=index)


# --- Summary statistics ---

def channels_stats(rec: Recording) -> SummaryStatistics:
    """
    Statistics of each channel over its samples, each shaped (channels[, epochs]).

    `mean_diff`/`median_diff` summarize first differences, `max_diff` is the
    peak-to-peak range and `dev_mean` the absolute deviation of the channel mean
    from the mean of all channels in the epoch.
    """
    require_physiological(rec)
    x = rec.signals
    diffs = np.diff(x, axis=1)
    means = x.mean(axis=1)
    stats = SummaryStatistics(
        mean=means,
        median=np.median(x, axis=1),
        std=x.std(axis=1, ddof=1),
        var=x.var(axis=1, ddof=1),
        kurtosis=kurtosis(x, axis=1),
        mean_diff=diffs.mean(axis=1),
        median_diff=np.median(diffs, axis=1),
        max_diff=np.ptp(x, axis=1),
        dev_mean=np.abs(means - x.mean(axis=(0, 1))[np.newaxis, :]),
    )
    return SummaryStatistics(*(squeeze_epochs(s) for s in stats))


def epochs_stats(rec: Recording) -> SummaryStatistics:
    """
    Statistics of each epoch over all of its channels and samples, each shaped (epochs,).

    Differences are taken along the sample axis; `dev_mean` is the absolute
    deviation of the epoch mean from the mean of all epochs.
    """
    require_physiological(rec)
    n_epochs = rec.epoch_count
    flat = rec.signals.reshape(-1, n_epochs)
    diffs = np.diff(rec.signals, axis=1).reshape(-1, n_epochs)
    means = flat.mean(axis=0)
    return SummaryStatistics(
        mean=means,
        median=np.median(flat, axis=0),
        std=flat.std(axis=0, ddof=1),
        var=flat.var(axis=0, ddof=1),
        kurtosis=kurtosis(flat, axis=0),
        mean_diff=diffs.mean(axis=0),
        median_diff=np.median(diffs, axis=0),
        max_diff=np.ptp(flat, axis=0),
        dev_mean=np.abs(means - flat.mean()),
    )


_CHANNEL_COMPONENTS = (
    Component.CHANNELS_MEAN, Component.CHANNELS_MEDIAN, Component.CHANNELS_STD, Component.CHANNELS_VAR,
    Component.CHANNELS_KURT, Component.CHANNELS_MEAN_DIFF, Component.CHANNELS_MEDIAN_DIFF,
    Component.CHANNELS_MAX_DIF, Component.CHANNELS_DEV_MEAN,
)
_EPOCH_COMPONENTS = (
    Component.EPOCHS_MEAN, Component.EPOCHS_MEDIAN, Component.EPOCHS_STD, Component.EPOCHS_VAR,
    Component.EPOCHS_KURT, Component.EPOCHS_MEAN_DIFF, Component.EPOCHS_MEDIAN_DIFF,
    Component.EPOCHS_MAX_DIF, Component.EPOCHS_DEV_MEAN,
)


def store_channels_stats(rec: Recording) -> None:
    stats = channels_stats(rec)
    store_components(rec, "channels_stats", {}, dict(zip(_CHANNEL_COMPONENTS, stats)))


def store_epochs_stats(rec: Recording) -> None:
    stats = epochs_stats(rec)
    store_components(rec, "epochs_stats", {}, dict(zip(_EPOCH_COMPONENTS, stats)))


# --- Signal quality ---

def snr(rec: Recording) -> NDArray[np.float64]:
    """|mean| / std of each channel, shaped (channels[, epochs]). Mixed channel kinds are allowed."""
    x = rec.signals
    with np.errstate(divide='ignore', invalid='ignore'):
        ratio = np.abs(x.mean(axis=1)) / x.std(axis=1, ddof=1)
    return squeeze_epochs(ratio)


def store_snr(rec: Recording) -> None:
    store_components(rec, "snr", {}, {Component.SNR: snr(rec)})


def standardize(rec: Recording) -> Tuple[Recording, StandardScaler]:
    """
    Z-scores every channel over all of its samples and epochs.

    Returns:
        Tuple of (standardized copy of the recording, fitted StandardScaler).
        `unscale_channels(standardized.signals, scaler)` restores the original values.
    """
    scaled, scaler = scale_channels(rec.signals)
    standardized = rec.copy()
    standardized.signals = scaled
    return standardized, scaler


def store_standardize(rec: Recording) -> None:
    """Replaces the recording's signals with their z-scores and stores the scaler."""
    scaled, scaler = scale_channels(rec.signals)
    rec.signals = scaled
    store_components(rec, "standardize", {}, {Component.SCALER: scaler})


# --- Bootstrap difference test ---

def _difference_statistic(x: NDArray[np.float64], y: NDArray[np.float64], method: str) -> float:
    delta = x - y
    if method == "absdiff":
        return float(np.max(np.abs(delta)))
    if delta.size < 2:
        return 0.0
    return float(simpson(delta ** 2))


def bootstrap_p_value(statistics: ArrayLike, statistic: float) -> float:
    """Fraction of bootstrap statistics at least as large as the point estimate."""
    sts = np.asarray(statistics, dtype=np.float64)
    if sts.size == 0:
        raise ValueError("statistics must not be empty.")
    return float(np.mean(sts >= statistic))


def _resolve_difference(
    n: Optional[int],
    method: Optional[str],
    seed: Optional[int]
) -> Tuple[int, str, Optional[int]]:
    cfg = get_active_config().analysis
    n = cfg.bootstrap_n if n is None else n
    method = cfg.difference_method if method is None else method
    seed = cfg.random_seed if seed is None else seed
    if method not in DIFFERENCE_METHODS:
        raise ConfigurationError(f"Unknown difference method '{method}'. Choose one of: {', '.join(DIFFERENCE_METHODS)}.")
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}.")
    return int(n), method, seed


def difference(
    rec1: Recording,
    rec2: Recording,
    n: Optional[int] = None,
    method: Optional[str] = None,
    seed: Optional[int] = None
) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Bootstrap test of the difference between two recordings, per epoch.

    The point estimate compares the channel-averaged signals. Each bootstrap
    statistic compares the averages of two groups of channels drawn with
    replacement from the pooled channels of both recordings; `n * channels`
    statistics are drawn per epoch.

    Args:
        rec1, rec2: Recordings of the same shape.
        n: Bootstrap multiplier (>= 1). Defaults to `analysis.bootstrap_n`.
        method: 'absdiff' (maximum absolute difference) or 'diff2int' (integral
                of the squared difference). Defaults to `analysis.difference_method`.
        seed: Seed for the random generator. Defaults to `analysis.random_seed`.

    Returns:
        Tuple of (statistics shaped (epochs, channels * n), point estimates
        shaped (epochs,), p-values shaped (epochs,)).
    """
    n, method, seed = _resolve_difference(n, method, seed)
    require_physiological(rec1, rec2)
    require_same_layout(rec1, rec2)

    rng = np.random.default_rng(seed)
    n_channels, _, n_epochs = rec1.signals.shape
    n_draws = n_channels * n
    sts = np.zeros((n_epochs, n_draws), dtype=np.float64)
    st = np.zeros(n_epochs, dtype=np.float64)
    p = np.zeros(n_epochs, dtype=np.float64)
    logger.debug(f"Bootstrap difference test: method={method}, draws per epoch={n_draws}.")

    for ep in range(n_epochs):
        x1 = rec1.signals[:, :, ep]
        x2 = rec2.signals[:, :, ep]
        st[ep] = _difference_statistic(x1.mean(axis=0), x2.mean(axis=0), method)
        pooled = np.vstack([x1, x2])
        for b in range(n_draws):
            group1 = pooled[rng.integers(0, pooled.shape[0], size=n_channels)]
            group2 = pooled[rng.integers(0, pooled.shape[0], size=n_channels)]
            sts[ep, b] = _difference_statistic(group1.mean(axis=0), group2.mean(axis=0), method)
        p[ep] = bootstrap_p_value(sts[ep], st[ep])
    return sts, st, p


def store_difference(
    rec1: Recording,
    rec2: Recording,
    n: Optional[int] = None,
    method: Optional[str] = None,
    seed: Optional[int] = None
) -> None:
    """
    Runs the difference test and stores its artifacts in `rec1`. The history
    line records the bootstrap size, method and seed actually used.
    """
    n, method, seed = _resolve_difference(n, method, seed)
    sts, st, p = difference(rec1, rec2, n=n, method=method, seed=seed)
    store_components(rec1, "difference", {"other": rec2, "n": n, "method": method, "seed": seed}, {
        Component.DIFFERENCE_STS: sts,
        Component.DIFFERENCE_ST: st,
        Component.DIFFERENCE_P: p,
    })


# --- Shape features ---

def symmetry(rec: Recording) -> NDArray[np.float64]:
    """Ratio of non-negative to negative samples per channel, shaped (channels[, epochs])."""
    require_physiological(rec)
    n_channels, _, n_epochs = rec.signals.shape
    sym = np.zeros((n_channels, n_epochs), dtype=np.float64)
    for ep in range(n_epochs):
        for ch in range(n_channels):
            sym[ch, ep] = vector_symmetry(rec.signals[ch, :, ep])
    return squeeze_epochs(sym)


def store_symmetry(rec: Recording) -> None:
    store_components(rec, "symmetry", {}, {Component.SYMMETRY: symmetry(rec)})


def tkeo(rec: Recording) -> NDArray[np.float64]:
    """Teager-Kaiser energy of every channel, shaped like the signals."""
    require_physiological(rec)
    energy = np.apply_along_axis(teager_kaiser, 1, rec.signals)
    return squeeze_epochs(energy)


def store_tkeo(rec: Recording) -> None:
    store_components(rec, "tkeo", {}, {Component.TKEO: tkeo(rec)})


def dwt_bands(rec: Recording, channel: int, wavelet: str = "haar", level: Optional[int] = None) -> NDArray[np.float64]:
    """
    Splits one channel into frequency bands with the stationary wavelet transform.

    Args:
        rec: The recording.
        channel: 0-based channel index.
        wavelet: PyWavelets wavelet name.
        level: Decomposition level; defaults to the maximum level the sample count allows.

    Returns:
        Bands ordered from lowest to highest frequency, shaped (level + 1, samples[, epochs]).
    """
    require_physiological(rec)
    channel = check_index(channel, rec.channel_count(), "channel")
    if wavelet not in pywt.wavelist(kind='discrete'):
        raise ConfigurationError(f"Unknown discrete wavelet '{wavelet}'.")
    max_level = pywt.swt_max_level(rec.sample_count)
    if level is None:
        level = max_level
    if level < 1 or level > max_level:
        raise ValueError(f"level must be in [1, {max_level}] for {rec.sample_count} samples, got {level}.")
    logger.debug(f"SWT band split of channel {channel}: wavelet={wavelet}, level={level}.")

    bands = np.zeros((level + 1, rec.sample_count, rec.epoch_count), dtype=np.float64)
    for ep in range(rec.epoch_count):
        # [cA_level, cD_level, ..., cD_1] runs from low to high frequency
        coeffs = pywt.swt(rec.signals[channel, :, ep], wavelet, level=level, trim_approx=True)
        bands[:, :, ep] = np.asarray(coeffs)
    return squeeze_epochs(bands)


def store_dwt_bands(rec: Recording, channel: int, wavelet: str = "haar", level: Optional[int] = None) -> None:
    if level is None:
        level = pywt.swt_max_level(rec.sample_count)
    store_components(rec, "dwt_bands", {"channel": channel, "wavelet": wavelet, "level": level},
                     {Component.DWT_BANDS: dwt_bands(rec, channel, wavelet=wavelet, level=level)})
