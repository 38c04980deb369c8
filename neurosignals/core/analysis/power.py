# neurosignals/core/analysis/power.py

"""
Power and spectral analytics over (channel, sample, epoch) recordings:
periodogram PSD, total and band power, relative PSD, cross and phase spectra,
full FFT spectrum, spectrogram and the frequency axis.

Every analytic has a pure form returning the artifact and a `store_*` form
that writes the artifact into the recording's component store.
"""

import logging
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from scipy.integrate import simpson

from neurosignals.config import get_active_config
from neurosignals.core.dsp import (
    compute_cross_spectrum, compute_psd_periodogram, compute_spectrogram, fft0, freqs, freqs_from_rate,
    power_to_db, welch_segment_length
)
from neurosignals.core.errors import ConfigurationError
from neurosignals.core.recording import Component, Recording
from neurosignals.utils.helpers import vsearch
from .guards import require_physiological, require_same_layout, squeeze_epochs, store_components

logger = logging.getLogger(__name__)


class Band(str, Enum):
    """Named EEG frequency bands."""
    DELTA = "delta"
    THETA = "theta"
    ALPHA = "alpha"
    BETA = "beta"
    BETA_HIGH = "beta_high"
    GAMMA = "gamma"
    GAMMA_1 = "gamma_1"
    GAMMA_2 = "gamma_2"
    GAMMA_LOWER = "gamma_lower"
    GAMMA_HIGHER = "gamma_higher"
    TOTAL = "total"


# Upper bound None means Nyquist
BAND_TABLE = {
    Band.DELTA: (0.5, 4.0),
    Band.THETA: (4.0, 8.0),
    Band.ALPHA: (8.0, 13.0),
    Band.BETA: (14.0, 30.0),
    Band.BETA_HIGH: (25.0, 30.0),
    Band.GAMMA: (30.0, 150.0),
    Band.GAMMA_1: (31.0, 40.0),
    Band.GAMMA_2: (41.0, 50.0),
    Band.GAMMA_LOWER: (30.0, 80.0),
    Band.GAMMA_HIGHER: (80.0, 150.0),
    Band.TOTAL: (0.0, None),
}

BandSpec = Union[str, Band, Tuple[float, float]]


# --- Frequency axis ---

def frequencies(rec: Recording) -> Tuple[NDArray[np.float64], float]:
    """Frequency axis (0 to Nyquist inclusive) and Nyquist frequency of the recording."""
    if rec.sample_count < 2:
        return freqs_from_rate(rec.sample_count, rec.sampling_rate)
    return freqs(rec.time_base)


def store_frequencies(rec: Recording) -> None:
    hz, nyquist = frequencies(rec)
    store_components(rec, "frequencies", {}, {Component.HZ: hz, Component.NYQ: nyquist})


# --- Bands ---

def band_frequencies(rec: Recording, band: Union[str, Band]) -> Tuple[float, float]:
    """
    Frequency limits of a named band, with bounds above Nyquist clamped to Nyquist.

    Raises:
        ConfigurationError: If `band` is not a known band name.
    """
    try:
        band = Band(band)
    except ValueError:
        raise ConfigurationError(
            f"Unknown band '{band}'. Choose one of: {', '.join(b.value for b in Band)}."
        ) from None
    low, high = BAND_TABLE[band]
    nyquist = rec.nyquist
    if high is None:
        high = nyquist
    if high > nyquist:
        logger.warning(f"Band '{band.value}' upper bound {high} Hz exceeds Nyquist; clamping to {nyquist} Hz.")
        high = nyquist
    if low > nyquist:
        logger.warning(f"Band '{band.value}' lower bound {low} Hz exceeds Nyquist; clamping to {nyquist} Hz.")
        low = nyquist
    return float(low), float(high)


def _resolve_band(rec: Recording, band: BandSpec) -> Tuple[float, float]:
    if isinstance(band, (str, Band)):
        return band_frequencies(rec, band)
    try:
        low, high = (float(b) for b in band)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Band must be a band name or a (low, high) pair, got {band!r}.") from None
    low, high = min(low, high), max(low, high)
    clipped = (float(np.clip(low, 0.0, rec.nyquist)), float(np.clip(high, 0.0, rec.nyquist)))
    if clipped != (low, high):
        logger.warning(f"Band ({low}, {high}) Hz clipped to {clipped} for Nyquist {rec.nyquist} Hz.")
    return clipped


# --- PSD ---

def _psd_tensor(rec: Recording) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Linear periodogram powers shaped (channels, freqs, epochs) and the frequency axis."""
    window = get_active_config().defaults.default_psd_window
    n_channels, n_samples, n_epochs = rec.signals.shape
    f = None
    powers = None
    for ep in range(n_epochs):
        for ch in range(n_channels):
            f_ch, p_ch = compute_psd_periodogram(rec.signals[ch, :, ep], fs=rec.sampling_rate, window=window)
            if powers is None:
                f = f_ch
                powers = np.zeros((n_channels, f.size, n_epochs), dtype=np.float64)
            powers[ch, :, ep] = p_ch
    return powers, f


def psd(rec: Recording, norm: bool = False) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Hann-windowed one-sided periodogram per channel and epoch.

    Args:
        rec: The recording.
        norm: Convert powers to dB.

    Returns:
        Tuple of (powers, frequencies); powers shaped (channels, freqs[, epochs]).
    """
    require_physiological(rec)
    logger.debug(f"Computing PSD (norm={norm}).")
    powers, f = _psd_tensor(rec)
    if norm:
        powers = power_to_db(powers)
    return squeeze_epochs(powers), f


def store_psd(rec: Recording, norm: bool = False) -> None:
    powers, f = psd(rec, norm=norm)
    store_components(rec, "psd", {"norm": norm}, {Component.PSD_P: powers, Component.PSD_F: f})


# --- Power ---

def _integrate(powers: NDArray[np.float64], f: NDArray[np.float64], low: float, high: float) -> NDArray[np.float64]:
    """Simpson integral of powers (channels, freqs, epochs) between the bins nearest to low and high."""
    lo_idx = vsearch(f, low)
    hi_idx = vsearch(f, high)
    if hi_idx - lo_idx < 1:
        return np.zeros((powers.shape[0], powers.shape[2]), dtype=np.float64)
    return simpson(powers[:, lo_idx:hi_idx + 1, :], x=f[lo_idx:hi_idx + 1], axis=1)


def total_power(rec: Recording) -> NDArray[np.float64]:
    """Integral of the PSD over the whole band, shaped (channels[, epochs])."""
    require_physiological(rec)
    powers, f = _psd_tensor(rec)
    return squeeze_epochs(_integrate(powers, f, 0.0, rec.nyquist))


def store_total_power(rec: Recording) -> None:
    store_components(rec, "total_power", {}, {Component.TOTAL_POWER: total_power(rec)})


def band_power(rec: Recording, band: BandSpec) -> NDArray[np.float64]:
    """
    Integral of the PSD between the band limits, shaped (channels[, epochs]).

    `band` is a band name or a (low, high) pair in Hz. Bounds are ordered and
    clipped into [0, Nyquist]; a band collapsing to a single bin has power 0.
    """
    require_physiological(rec)
    low, high = _resolve_band(rec, band)
    logger.debug(f"Computing band power for {low}-{high} Hz.")
    powers, f = _psd_tensor(rec)
    return squeeze_epochs(_integrate(powers, f, low, high))


def store_band_power(rec: Recording, band: BandSpec) -> None:
    store_components(rec, "band_power", {"band": band}, {Component.BAND_POWER: band_power(rec, band)})


def relative_psd(rec: Recording, band: Optional[BandSpec] = None) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    PSD divided by the total power, or by the power within `band` when given.

    Returns:
        Tuple of (relative powers, frequencies); powers shaped (channels, freqs[, epochs]).

    Raises:
        ValueError: If the reference power is zero for any channel or epoch,
                    e.g. for a band that collapses to a single bin.
    """
    require_physiological(rec)
    powers, f = _psd_tensor(rec)
    if band is None:
        low, high = 0.0, rec.nyquist
    else:
        low, high = _resolve_band(rec, band)
    reference = _integrate(powers, f, low, high)
    if not np.all(reference > 0):
        raise ValueError(
            f"Reference power over {low}-{high} Hz is zero for at least one channel; "
            "cannot compute relative PSD."
        )
    relative = powers / reference[:, np.newaxis, :]
    return squeeze_epochs(relative), f


def store_relative_psd(rec: Recording, band: Optional[BandSpec] = None) -> None:
    relative, _ = relative_psd(rec, band=band)
    store_components(rec, "relative_psd", {"band": band}, {Component.PSD_REL: relative})


# --- Cross & phase spectra ---

def cpsd(
    rec: Recording,
    other: Optional[Recording] = None,
    norm: bool = False
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Magnitude of the Welch cross power spectral density.

    Without `other`, every channel pair of `rec` is covered and the powers are
    shaped (channels, channels, freqs[, epochs]); the diagonal holds each
    channel's Welch PSD. With `other`, channels are paired by position and the
    powers are shaped (channels, freqs[, epochs]).

    Args:
        rec: The recording.
        other: Optional second recording of the same shape and sampling rate.
        norm: Convert powers to dB.

    Returns:
        Tuple of (powers, frequencies).
    """
    require_physiological(rec)
    if other is not None:
        require_physiological(other)
        require_same_layout(rec, other)
        if other.sampling_rate != rec.sampling_rate:
            raise ValueError(f"Recordings must share a sampling rate, got {rec.sampling_rate} and {other.sampling_rate}.")
    window = get_active_config().defaults.default_psd_window
    n_channels, n_samples, n_epochs = rec.signals.shape
    nperseg = welch_segment_length(n_samples, rec.sampling_rate)
    logger.debug(f"Computing CPSD: nperseg={nperseg}, pairs={'positional' if other is not None else 'all'}.")

    def _pair(x, y):
        return compute_cross_spectrum(x, y, fs=rec.sampling_rate, nperseg=nperseg, window=window)

    f, _ = _pair(rec.signals[0, :, 0], rec.signals[0, :, 0])
    if other is None:
        pxy = np.zeros((n_channels, n_channels, f.size, n_epochs), dtype=np.float64)
        for ep in range(n_epochs):
            for i in range(n_channels):
                for j in range(n_channels):
                    pxy[i, j, :, ep] = np.abs(_pair(rec.signals[i, :, ep], rec.signals[j, :, ep])[1])
    else:
        pxy = np.zeros((n_channels, f.size, n_epochs), dtype=np.float64)
        for ep in range(n_epochs):
            for ch in range(n_channels):
                pxy[ch, :, ep] = np.abs(_pair(rec.signals[ch, :, ep], other.signals[ch, :, ep])[1])
    if norm:
        pxy = power_to_db(pxy)
    return squeeze_epochs(pxy), f


def store_cpsd(rec: Recording, other: Optional[Recording] = None, norm: bool = False) -> None:
    pxy, f = cpsd(rec, other, norm=norm)
    params = {"other": other, "norm": norm} if other is not None else {"norm": norm}
    store_components(rec, "cpsd", params, {Component.CPSD: pxy, Component.CPSD_F: f})


def phsd(rec: Recording) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Phase spectral density: the FFT phase (radians) of every channel at the
    one-sided frequencies 0..Nyquist.

    Returns:
        Tuple of (phases shaped (channels, freqs[, epochs]), frequencies).
    """
    require_physiological(rec)
    hz, _ = frequencies(rec)
    n_channels, _, n_epochs = rec.signals.shape
    phases = np.zeros((n_channels, hz.size, n_epochs), dtype=np.float64)
    for ep in range(n_epochs):
        for ch in range(n_channels):
            phases[ch, :, ep] = np.angle(fft0(rec.signals[ch, :, ep])[:hz.size])
    return squeeze_epochs(phases), hz


def store_phsd(rec: Recording) -> None:
    phases, hz = phsd(rec)
    store_components(rec, "phsd", {}, {Component.PHSD: phases, Component.PHSD_F: hz})


# --- Spectrum ---

def spectrum(
    rec: Recording,
    pad: int = 0
) -> Tuple[NDArray[np.complex128], NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Full FFT per channel and epoch along the sample axis.

    Args:
        rec: The recording.
        pad: Zeros appended before the FFT (see `fft0`).

    Returns:
        Tuple of (fft, amplitudes, powers, phases), each shaped (channels, n_fft[, epochs]);
        amplitudes are |fft|, powers amplitudes**2 and phases the angle in radians.
    """
    if pad < 0:
        raise ValueError(f"pad must be non-negative, got {pad}.")
    require_physiological(rec)
    n_channels, _, n_epochs = rec.signals.shape
    first = fft0(rec.signals[0, :, 0], pad)
    spectra = np.zeros((n_channels, first.size, n_epochs), dtype=np.complex128)
    for ep in range(n_epochs):
        for ch in range(n_channels):
            spectra[ch, :, ep] = fft0(rec.signals[ch, :, ep], pad)
    amplitudes = np.abs(spectra)
    powers = amplitudes ** 2
    phases = np.angle(spectra)
    return squeeze_epochs(spectra), squeeze_epochs(amplitudes), squeeze_epochs(powers), squeeze_epochs(phases)


def store_spectrum(rec: Recording, pad: int = 0) -> None:
    spectra, amplitudes, powers, phases = spectrum(rec, pad=pad)
    store_components(rec, "spectrum", {"pad": pad}, {
        Component.SPECTRUM_FFT: spectra,
        Component.SPECTRUM_AMP: amplitudes,
        Component.SPECTRUM_POW: powers,
        Component.SPECTRUM_PHASE: phases,
    })


# --- Spectrogram ---

def spectrogram(
    rec: Recording,
    norm: bool = True,
    demean: bool = True
) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Short-time PSD per channel and epoch.

    Segment length and overlap come from the `analysis` configuration section.

    Args:
        rec: The recording.
        norm: Convert powers to dB.
        demean: Remove each segment's mean before windowing.

    Returns:
        Tuple of (powers, frequencies, times); powers shaped (times, freqs, channels[, epochs]).
    """
    require_physiological(rec)
    cfg = get_active_config()
    nperseg = max(1, min(rec.sample_count, int(round(cfg.analysis.spectrogram_segment_sec * rec.sampling_rate))))
    noverlap = int(nperseg * cfg.analysis.spectrogram_overlap)
    window = cfg.defaults.default_psd_window
    detrend = 'constant' if demean else False
    logger.debug(f"Computing spectrogram: nperseg={nperseg}, noverlap={noverlap}, norm={norm}, demean={demean}.")

    n_channels, _, n_epochs = rec.signals.shape
    f = t = None
    powers = None
    for ep in range(n_epochs):
        for ch in range(n_channels):
            f_seg, t_seg, sxx = compute_spectrogram(
                rec.signals[ch, :, ep], fs=rec.sampling_rate, nperseg=nperseg,
                noverlap=noverlap, window=window, detrend=detrend
            )
            if powers is None:
                f, t = f_seg, t_seg
                powers = np.zeros((t.size, f.size, n_channels, n_epochs), dtype=np.float64)
            powers[:, :, ch, ep] = sxx.T
    if norm:
        powers = power_to_db(powers)
    return squeeze_epochs(powers), f, t


def store_spectrogram(rec: Recording, norm: bool = True, demean: bool = True) -> None:
    powers, f, t = spectrogram(rec, norm=norm, demean=demean)
    store_components(rec, "spectrogram", {"norm": norm, "demean": demean}, {
        Component.SPEC_POW: powers,
        Component.SPEC_FRQ: f,
        Component.SPEC_T: t,
    })
