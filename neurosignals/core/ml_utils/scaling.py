# neurosignals/core/ml_utils/scaling.py

"""
Channel-wise standardization of recording tensors.

Wraps scikit-learn's StandardScaler so that each channel is treated as one
feature and every (sample, epoch) pair as one observation.
"""

import logging
from typing import Tuple

import numpy as np
from numpy.typing import NDArray
from sklearn.preprocessing import StandardScaler

logger = logging.getLogger(__name__)


def _to_observations(signals: NDArray[np.float64]) -> NDArray[np.float64]:
    """(channels, samples, epochs) -> (samples * epochs, channels)."""
    n_channels = signals.shape[0]
    return signals.reshape(n_channels, -1).T


def _from_observations(observations: NDArray[np.float64], shape: Tuple[int, ...]) -> NDArray[np.float64]:
    return observations.T.reshape(shape)


def _check_tensor(signals: NDArray[np.float64]) -> None:
    if signals.ndim != 3:
        raise ValueError(f"Input signals must be 3D (channels, samples, epochs), got shape {signals.shape}")


def scale_channels(signals: NDArray[np.float64]) -> Tuple[NDArray[np.float64], StandardScaler]:
    """
    Z-scores a (channels, samples, epochs) tensor channel by channel.

    Args:
        signals: Input tensor (float64), 3D.

    Returns:
        A tuple of (scaled tensor with the input shape, fitted StandardScaler).
        `unscale_channels` with the same scaler restores the input.

    Raises:
        ValueError: If the tensor is not 3D.
    """
    _check_tensor(signals)
    logger.debug(f"Fitting StandardScaler on {signals.shape[0]} channels.")
    scaler = StandardScaler()
    scaled = scaler.fit_transform(_to_observations(signals))
    return _from_observations(scaled, signals.shape).astype(np.float64, copy=False), scaler


def unscale_channels(signals: NDArray[np.float64], scaler: StandardScaler) -> NDArray[np.float64]:
    """Inverse of `scale_channels` for the scaler it returned."""
    _check_tensor(signals)
    if not hasattr(scaler, 'n_features_in_'):
        raise ValueError("Provided scaler does not appear to be fitted.")
    if scaler.n_features_in_ != signals.shape[0]:
        raise ValueError(f"Scaler was fitted on {scaler.n_features_in_} channels, got {signals.shape[0]}.")
    restored = scaler.inverse_transform(_to_observations(signals))
    return _from_observations(restored, signals.shape).astype(np.float64, copy=False)
