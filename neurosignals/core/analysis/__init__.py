# neurosignals/core/analysis/__init__.py

"""
Analytics over recordings.

Each analytic comes as a pure function returning its artifact and a `store_*`
variant that upserts the artifact into `rec.components` and appends one line
to the recording's history.
"""

from .guards import require_physiological
from .power import (
    Band, BAND_TABLE,
    frequencies, store_frequencies,
    band_frequencies,
    psd, store_psd,
    total_power, store_total_power,
    band_power, store_band_power,
    relative_psd, store_relative_psd,
    cpsd, store_cpsd,
    phsd, store_phsd,
    spectrum, store_spectrum,
    spectrogram, store_spectrogram,
)
from .dependence import (
    covariance, store_covariance,
    correlation, store_correlation,
    autocovariance, store_autocovariance,
    crosscovariance, store_crosscovariance,
    coherence, store_coherence, coherence_pair,
    mutual_information, store_mutual_information,
    entropy, store_entropy,
    stationarity, store_stationarity,
)
from .statistics import (
    SummaryStatistics,
    channels_stats, store_channels_stats,
    epochs_stats, store_epochs_stats,
    snr, store_snr,
    standardize, store_standardize,
    difference, store_difference, bootstrap_p_value,
    symmetry, store_symmetry,
    tkeo, store_tkeo,
    dwt_bands, store_dwt_bands,
)
from .selection import Region, pick, t2s, s2t

__all__ = [
    "require_physiological",
    "Band", "BAND_TABLE",
    "frequencies", "store_frequencies", "band_frequencies",
    "psd", "store_psd",
    "total_power", "store_total_power",
    "band_power", "store_band_power",
    "relative_psd", "store_relative_psd",
    "cpsd", "store_cpsd",
    "phsd", "store_phsd",
    "spectrum", "store_spectrum",
    "spectrogram", "store_spectrogram",
    "covariance", "store_covariance",
    "correlation", "store_correlation",
    "autocovariance", "store_autocovariance",
    "crosscovariance", "store_crosscovariance",
    "coherence", "store_coherence", "coherence_pair",
    "mutual_information", "store_mutual_information",
    "entropy", "store_entropy",
    "stationarity", "store_stationarity",
    "SummaryStatistics",
    "channels_stats", "store_channels_stats",
    "epochs_stats", "store_epochs_stats",
    "snr", "store_snr",
    "standardize", "store_standardize",
    "difference", "store_difference", "bootstrap_p_value",
    "symmetry", "store_symmetry",
    "tkeo", "store_tkeo",
    "dwt_bands", "store_dwt_bands",
    "Region", "pick", "t2s", "s2t",
]
