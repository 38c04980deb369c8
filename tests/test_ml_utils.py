# tests/test_ml_utils.py

"""
Tests for ML utility functions in neurosignals.core.ml_utils (channel-wise scaling).
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose
from sklearn.preprocessing import StandardScaler

from neurosignals.core.ml_utils import scale_channels, unscale_channels

# --- Test Fixtures ---

@pytest.fixture
def sample_tensor() -> np.ndarray:
    """(channels, samples, epochs) tensor with distinct channel offsets and scales."""
    rng = np.random.default_rng(123)
    tensor = rng.normal(size=(3, 50, 4))
    tensor[0] = tensor[0] * 2.0 + 10.0
    tensor[1] = tensor[1] * 0.1
    tensor[2] = tensor[2] * 5.0 - 3.0
    return tensor

# --- Tests ---

def test_standard_scaling_per_channel(sample_tensor):
    scaled, scaler = scale_channels(sample_tensor)
    assert isinstance(scaler, StandardScaler)
    assert scaled.shape == sample_tensor.shape
    flat = scaled.reshape(3, -1)
    assert_allclose(flat.mean(axis=1), 0.0, atol=1e-9)
    assert_allclose(flat.std(axis=1), 1.0, atol=1e-9)
    assert_allclose(scaler.mean_, sample_tensor.reshape(3, -1).mean(axis=1))
    assert_allclose(scaler.scale_, sample_tensor.reshape(3, -1).std(axis=1))

def test_inverse_recovers_tensor(sample_tensor):
    scaled, scaler = scale_channels(sample_tensor)
    assert_allclose(unscale_channels(scaled, scaler), sample_tensor, atol=1e-9)

def test_epochs_share_one_scaler(sample_tensor):
    scaled, _ = scale_channels(sample_tensor)
    # Statistics are pooled over epochs, so single epochs are not z-scored on their own
    assert not np.allclose(scaled[0, :, 0].mean(), 0.0, atol=1e-9)

def test_invalid_inputs(sample_tensor):
    with pytest.raises(ValueError):
        scale_channels(sample_tensor[:, :, 0])
    _, scaler = scale_channels(sample_tensor)
    with pytest.raises(ValueError):
        unscale_channels(sample_tensor[:, :, 0], scaler)
    with pytest.raises(ValueError):
        unscale_channels(sample_tensor, StandardScaler())
    with pytest.raises(ValueError):
        unscale_channels(sample_tensor[:2], scaler)
