# neurosignals/core/recording.py

"""
The recording model: an epoched (channel, sample, epoch) signal tensor with its
sampling rate, time base, channel labels and channel kinds, plus the component
store that caches derived artifacts against it.
"""

import copy
import logging
from collections import OrderedDict
from enum import Enum
from typing import Any, Iterator, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from numpy.typing import NDArray, ArrayLike

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class ChannelKind(str, Enum):
    """Kind of a channel; only EEG channels are physiological."""
    EEG = "eeg"
    ECG = "ecg"
    EOG = "eog"
    EMG = "emg"
    REF = "ref"
    OTHER = "other"

    @property
    def is_physiological(self) -> bool:
        return self is ChannelKind.EEG


class Component(str, Enum):
    """Closed vocabulary of component names a recording can cache."""
    TOTAL_POWER = "total_power"
    BAND_POWER = "band_power"
    COV_MAT = "cov_mat"
    COR_MAT = "cor_mat"
    ACOV = "acov"
    ACOV_LAGS = "acov_lags"
    CCOV = "ccov"
    CCOV_LAGS = "ccov_lags"
    PSD_P = "psd_p"
    PSD_F = "psd_f"
    PSD_REL = "psd_rel"
    CPSD = "cpsd"
    CPSD_F = "cpsd_f"
    PHSD = "phsd"
    PHSD_F = "phsd_f"
    STATIONARITY = "stationarity"
    MI = "mi"
    ENTROPY = "entropy"
    COHERENCE = "coherence"
    HZ = "hz"
    NYQ = "nyq"
    DIFFERENCE_ST = "difference_st"
    DIFFERENCE_STS = "difference_sts"
    DIFFERENCE_P = "difference_p"
    SPEC_POW = "spec_pow"
    SPEC_FRQ = "spec_frq"
    SPEC_T = "spec_t"
    SPECTRUM_FFT = "spectrum_fft"
    SPECTRUM_AMP = "spectrum_amp"
    SPECTRUM_POW = "spectrum_pow"
    SPECTRUM_PHASE = "spectrum_phase"
    CHANNELS_MEAN = "channels_mean"
    CHANNELS_MEDIAN = "channels_median"
    CHANNELS_STD = "channels_std"
    CHANNELS_VAR = "channels_var"
    CHANNELS_KURT = "channels_kurt"
    CHANNELS_MEAN_DIFF = "channels_mean_diff"
    CHANNELS_MEDIAN_DIFF = "channels_median_diff"
    CHANNELS_MAX_DIF = "channels_max_dif"
    CHANNELS_DEV_MEAN = "channels_dev_mean"
    EPOCHS_MEAN = "epochs_mean"
    EPOCHS_MEDIAN = "epochs_median"
    EPOCHS_STD = "epochs_std"
    EPOCHS_VAR = "epochs_var"
    EPOCHS_KURT = "epochs_kurt"
    EPOCHS_MEAN_DIFF = "epochs_mean_diff"
    EPOCHS_MEDIAN_DIFF = "epochs_median_diff"
    EPOCHS_MAX_DIF = "epochs_max_dif"
    EPOCHS_DEV_MEAN = "epochs_dev_mean"
    SNR = "snr"
    SCALER = "scaler"
    SYMMETRY = "symmetry"
    TKEO = "tkeo"
    DWT_BANDS = "dwt_bands"

    @classmethod
    def resolve(cls, name: Union[str, "Component"]) -> "Component":
        """Maps a name or member to a member, rejecting names outside the vocabulary."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise ConfigurationError(f"Unknown component '{name}'.") from None


class ComponentStore:
    """
    Ordered mapping from component name to artifact, with an append-only history.

    A name is held at most once: `upsert` evicts an existing value before
    inserting, so a replaced component moves to the end of the iteration order.
    The history is never deduplicated. Not safe for concurrent writers.
    """

    def __init__(self) -> None:
        self._components: "OrderedDict[Component, Any]" = OrderedDict()
        self._history: List[str] = []

    # --- Mutation ---

    def upsert(self, name: Union[str, Component], value: Any) -> None:
        key = Component.resolve(name)
        if key in self._components:
            logger.debug(f"Evicting existing component '{key.value}'.")
            del self._components[key]
        self._components[key] = value

    def record(self, entry: str) -> None:
        """Appends one human-readable invocation record to the history."""
        self._history.append(entry)

    def delete(self, name: Union[str, Component]) -> None:
        key = Component.resolve(name)
        if key not in self._components:
            raise ConfigurationError(f"Component '{key.value}' is not stored.")
        del self._components[key]

    def reset(self) -> None:
        """Drops every component; the history is kept."""
        self._components.clear()

    # --- Read access ---

    def get(self, name: Union[str, Component], default: Any = None) -> Any:
        return self._components.get(Component.resolve(name), default)

    def extract(self, name: Union[str, Component]) -> Any:
        """Returns a deep copy of a stored component."""
        key = Component.resolve(name)
        if key not in self._components:
            raise ConfigurationError(f"Component '{key.value}' is not stored.")
        return copy.deepcopy(self._components[key])

    def names(self) -> List[str]:
        return [key.value for key in self._components]

    @property
    def history(self) -> List[str]:
        """A copy of the history log, oldest first."""
        return list(self._history)

    def summary(self) -> pd.DataFrame:
        """One row per stored component: name, type, shape and dtype."""
        rows = []
        for key, value in self._components.items():
            rows.append({
                "name": key.value,
                "type": type(value).__name__,
                "shape": tuple(np.shape(value)) if isinstance(value, (np.ndarray, list, tuple, float, int)) else None,
                "dtype": str(value.dtype) if isinstance(value, np.ndarray) else None,
            })
        return pd.DataFrame(rows, columns=["name", "type", "shape", "dtype"])

    def __getitem__(self, name: Union[str, Component]) -> Any:
        key = Component.resolve(name)
        if key not in self._components:
            raise KeyError(key.value)
        return self._components[key]

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (str, Component)):
            return False
        try:
            return Component.resolve(name) in self._components
        except ConfigurationError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._components)

    def __repr__(self) -> str:
        return f"ComponentStore(components={self.names()}, history={len(self._history)})"


class Recording:
    """
    A multichannel epoched recording.

    Attributes:
        signals: float64 tensor shaped (channels, samples, epochs).
        sampling_rate: Sampling rate (Hz).
        time_base: Per-sample timestamps (seconds) of one epoch.
        channel_labels: One label per channel, or empty.
        channel_kinds: One ChannelKind per channel.
        components: The ComponentStore caching derived artifacts.
    """

    def __init__(
        self,
        signals: ArrayLike,
        sampling_rate: float,
        time_base: Optional[ArrayLike] = None,
        channel_labels: Optional[Sequence[str]] = None,
        channel_kinds: Optional[Sequence[Union[str, ChannelKind]]] = None,
    ) -> None:
        data = np.array(signals, dtype=np.float64)
        if data.ndim == 2:
            data = data[:, :, np.newaxis]
        if data.ndim != 3:
            raise ValueError(f"signals must be 2D or 3D (channels, samples[, epochs]), got shape {data.shape}.")
        if min(data.shape) < 1:
            raise ValueError(f"signals must have at least one channel, sample and epoch, got shape {data.shape}.")
        if not sampling_rate > 0:
            raise ValueError(f"sampling_rate must be positive, got {sampling_rate}.")

        n_channels, n_samples, _ = data.shape
        self.signals: NDArray[np.float64] = data
        self.sampling_rate = float(sampling_rate)
        self.time_base = self._validated_time_base(time_base, n_samples)

        labels = list(channel_labels) if channel_labels is not None else []
        if labels and len(labels) != n_channels:
            raise ValueError(f"Expected {n_channels} channel labels, got {len(labels)}.")
        self.channel_labels: List[str] = [str(label) for label in labels]

        if channel_kinds is None:
            kinds = [ChannelKind.EEG] * n_channels
        else:
            kinds = [ChannelKind(kind) for kind in channel_kinds]
            if len(kinds) != n_channels:
                raise ValueError(f"Expected {n_channels} channel kinds, got {len(kinds)}.")
        self.channel_kinds: List[ChannelKind] = kinds

        self.components = ComponentStore()
        logger.debug(f"Created recording: {n_channels} channels, {n_samples} samples, "
                     f"{data.shape[2]} epochs at {self.sampling_rate} Hz.")

    def _validated_time_base(self, time_base: Optional[ArrayLike], n_samples: int) -> NDArray[np.float64]:
        if time_base is None:
            return np.arange(n_samples, dtype=np.float64) / self.sampling_rate
        t = np.asarray(time_base, dtype=np.float64)
        if t.ndim != 1 or t.size != n_samples:
            raise ValueError(f"time_base must be 1D with {n_samples} samples, got shape {t.shape}.")
        if n_samples > 1:
            steps = np.diff(t)
            if np.any(steps <= 0):
                raise ValueError("time_base must be strictly increasing.")
            if not np.allclose(steps, 1.0 / self.sampling_rate, rtol=1e-6, atol=1e-9):
                raise ValueError("time_base spacing must equal 1 / sampling_rate.")
        return t

    # --- Shape helpers ---

    def channel_count(self, kind: Optional[Union[str, ChannelKind]] = None) -> int:
        """Number of channels, or of channels of one kind."""
        if kind is None:
            return self.signals.shape[0]
        kind = ChannelKind(kind)
        return sum(1 for k in self.channel_kinds if k is kind)

    @property
    def sample_count(self) -> int:
        return self.signals.shape[1]

    @property
    def epoch_count(self) -> int:
        return self.signals.shape[2]

    @property
    def nyquist(self) -> float:
        return self.sampling_rate / 2.0

    @property
    def history(self) -> List[str]:
        return self.components.history

    def copy(self) -> "Recording":
        """Deep copy, including the component store and history."""
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return (f"Recording(channels={self.channel_count()}, samples={self.sample_count}, "
                f"epochs={self.epoch_count}, sampling_rate={self.sampling_rate})")
