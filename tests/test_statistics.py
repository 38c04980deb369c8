# tests/test_statistics.py

"""
Tests for summary statistics, SNR, standardization, the bootstrap difference
test and the shape features.
"""

import pytest
import numpy as np
import pandas as pd
from numpy.testing import assert_allclose, assert_array_equal
from sklearn.preprocessing import StandardScaler

from neurosignals import Recording, PreconditionError, ConfigurationError
from neurosignals.config import NeurosignalsConfig, set_active_config
from neurosignals.core.ml_utils import unscale_channels
from neurosignals.core.analysis import (
    SummaryStatistics, channels_stats, store_channels_stats, epochs_stats, store_epochs_stats,
    snr, store_snr, standardize, store_standardize,
    difference, store_difference, bootstrap_p_value,
    symmetry, store_symmetry, tkeo, store_tkeo, dwt_bands, store_dwt_bands
)

FS = 128.0

# --- Test Fixtures ---

@pytest.fixture(autouse=True)
def default_config():
    set_active_config(NeurosignalsConfig())
    yield
    set_active_config(None)

@pytest.fixture
def rec() -> Recording:
    rng = np.random.default_rng(21)
    data = rng.normal(loc=[[1.0], [5.0]], scale=[[1.0], [2.0]], size=(2, 256))
    return Recording(data, FS)

@pytest.fixture
def rec_epochs() -> Recording:
    rng = np.random.default_rng(22)
    return Recording(rng.normal(loc=3.0, size=(2, 256, 3)), FS)

# --- Summary statistics ---

def test_channels_stats_single_epoch(rec):
    stats = channels_stats(rec)
    assert isinstance(stats, SummaryStatistics)
    x = rec.signals[:, :, 0]
    assert stats.mean.shape == (2,)
    assert_allclose(stats.mean, x.mean(axis=1))
    assert_allclose(stats.median, np.median(x, axis=1))
    assert_allclose(stats.std, x.std(axis=1, ddof=1))
    assert_allclose(stats.var, x.var(axis=1, ddof=1))
    assert_allclose(stats.mean_diff, np.diff(x, axis=1).mean(axis=1))
    assert_allclose(stats.max_diff, x.max(axis=1) - x.min(axis=1))
    assert_allclose(stats.dev_mean, np.abs(x.mean(axis=1) - x.mean()))

def test_channels_stats_keep_epoch_axis(rec_epochs):
    stats = channels_stats(rec_epochs)
    for value in stats:
        assert value.shape == (2, 3)

def test_epochs_stats(rec_epochs):
    stats = epochs_stats(rec_epochs)
    for value in stats:
        assert value.shape == (3,)
    assert_allclose(stats.mean, rec_epochs.signals.mean(axis=(0, 1)))
    assert_allclose(stats.max_diff, np.ptp(rec_epochs.signals.reshape(-1, 3), axis=0))

def test_summary_to_frame(rec_epochs):
    frame = channels_stats(rec_epochs).to_frame()
    assert isinstance(frame, pd.DataFrame)
    assert list(frame.columns) == list(SummaryStatistics._fields)
    assert frame.index.names == ["channel", "epoch"]
    assert len(frame) == 6
    epoch_frame = epochs_stats(rec_epochs).to_frame(index_name="epoch")
    assert epoch_frame.index.name == "epoch"
    assert len(epoch_frame) == 3

def test_store_stats(rec_epochs):
    store_channels_stats(rec_epochs)
    store_epochs_stats(rec_epochs)
    names = rec_epochs.components.names()
    assert len(names) == 18
    assert names[0] == "channels_mean"
    assert "epochs_max_dif" in names
    assert rec_epochs.history == ["channels_stats!()", "epochs_stats!()"]

# --- SNR ---

def test_snr(rec):
    x = rec.signals[:, :, 0]
    assert_allclose(snr(rec), np.abs(x.mean(axis=1)) / x.std(axis=1, ddof=1))

def test_snr_allows_mixed_channels(rec):
    mixed = Recording(rec.signals.copy(), FS, channel_kinds=["eeg", "ecg"])
    store_snr(mixed)
    assert mixed.components["snr"].shape == (2,)
    assert mixed.history == ["snr!()"]

# --- Standardization ---

def test_standardize_returns_copy(rec_epochs):
    original = rec_epochs.signals.copy()
    standardized, scaler = standardize(rec_epochs)
    assert isinstance(scaler, StandardScaler)
    assert_array_equal(rec_epochs.signals, original)
    flat = standardized.signals.reshape(2, -1)
    assert_allclose(flat.mean(axis=1), 0.0, atol=1e-9)
    assert_allclose(flat.std(axis=1), 1.0, atol=1e-9)

def test_standardize_inverse_recovers_signals(rec_epochs):
    standardized, scaler = standardize(rec_epochs)
    restored = unscale_channels(standardized.signals, scaler)
    assert_allclose(restored, rec_epochs.signals, atol=1e-9)

def test_store_standardize_in_place(rec):
    store_standardize(rec)
    assert_allclose(rec.signals.reshape(2, -1).mean(axis=1), 0.0, atol=1e-9)
    assert rec.components.names() == ["scaler"]
    assert rec.history == ["standardize!()"]

def test_standardize_allows_mixed_channels(rec):
    mixed = Recording(rec.signals.copy(), FS, channel_kinds=["eeg", "emg"])
    standardized, _ = standardize(mixed)
    assert standardized.signals.shape == mixed.signals.shape

# --- Difference test ---

def test_difference_identical_recordings(rec_epochs):
    twin = Recording(rec_epochs.signals.copy(), FS)
    sts, st, p = difference(rec_epochs, twin, n=1, seed=0)
    assert sts.shape == (3, 2)
    assert_allclose(st, 0.0, atol=1e-12)
    assert_array_equal(p, np.ones(3))

def test_difference_p_value_is_recomputable(rec_epochs):
    shifted = Recording(rec_epochs.signals + 2.0, FS)
    sts, st, p = difference(rec_epochs, shifted, n=5, method="diff2int", seed=3)
    assert sts.shape == (3, 10)
    assert (st > 0).all()
    for ep in range(3):
        assert p[ep] == bootstrap_p_value(sts[ep], st[ep])

def test_difference_is_seeded(rec_epochs):
    other = Recording(rec_epochs.signals[::-1].copy(), FS)
    first = difference(rec_epochs, other, seed=99)
    second = difference(rec_epochs, other, seed=99)
    for a, b in zip(first, second):
        assert_array_equal(a, b)

def test_difference_default_n_from_config(rec_epochs):
    sts, _, _ = difference(rec_epochs, rec_epochs, seed=1)
    # bootstrap_n = 3 draws per channel
    assert sts.shape == (3, 6)

def test_difference_invalid_arguments(rec, rec_epochs):
    with pytest.raises(ConfigurationError):
        difference(rec_epochs, rec_epochs, method="maxdiff")
    with pytest.raises(ValueError):
        difference(rec_epochs, rec_epochs, n=0)
    with pytest.raises(ValueError):
        difference(rec, rec_epochs)

def test_store_difference(rec_epochs):
    twin = Recording(rec_epochs.signals.copy(), FS)
    store_difference(rec_epochs, twin, n=1, seed=0)
    assert rec_epochs.components.names() == ["difference_sts", "difference_st", "difference_p"]
    assert rec_epochs.history == ["difference!(other=<recording>, n=1, method='absdiff', seed=0)"]
    assert twin.history == []

def test_store_difference_records_configured_defaults(rec_epochs):
    set_active_config(NeurosignalsConfig(analysis={"bootstrap_n": 2, "difference_method": "diff2int", "random_seed": 8}))
    store_difference(rec_epochs, Recording(rec_epochs.signals + 1.0, FS))
    assert rec_epochs.components["difference_sts"].shape == (3, 4)
    assert rec_epochs.history == ["difference!(other=<recording>, n=2, method='diff2int', seed=8)"]

def test_bootstrap_p_value():
    assert bootstrap_p_value([1.0, 2.0, 3.0], 2.0) == pytest.approx(2 / 3)
    with pytest.raises(ValueError):
        bootstrap_p_value([], 1.0)

# --- Shape features ---

def test_symmetry():
    data = np.array([[1.0, -1.0, 2.0, -2.0], [1.0, 1.0, 1.0, -1.0]])
    rec = Recording(data, FS)
    assert_allclose(symmetry(rec), [1.0, 3.0])
    store_symmetry(rec)
    assert rec.history == ["symmetry!()"]

def test_tkeo(rec_epochs):
    energy = tkeo(rec_epochs)
    assert energy.shape == rec_epochs.signals.shape
    x = rec_epochs.signals[1, :, 2]
    assert energy[1, 5, 2] == pytest.approx(x[5] ** 2 - x[4] * x[6])
    store_tkeo(rec_epochs)
    assert "tkeo" in rec_epochs.components

def test_dwt_bands(rec):
    bands = dwt_bands(rec, channel=1, level=3)
    assert bands.shape == (4, rec.sample_count)
    # 256 samples allow eight haar levels
    assert dwt_bands(rec, channel=0).shape == (9, rec.sample_count)

def test_dwt_bands_invalid_arguments(rec):
    with pytest.raises(IndexError):
        dwt_bands(rec, channel=2)
    with pytest.raises(ValueError):
        dwt_bands(rec, channel=0, level=20)
    with pytest.raises(ConfigurationError):
        dwt_bands(rec, channel=0, wavelet="not-a-wavelet")

def test_store_dwt_bands(rec_epochs):
    store_dwt_bands(rec_epochs, channel=0, level=2)
    assert rec_epochs.components["dwt_bands"].shape == (3, 256, 3)
    assert rec_epochs.history == ["dwt_bands!(channel=0, wavelet='haar', level=2)"]

def test_store_dwt_bands_records_resolved_level(rec):
    store_dwt_bands(rec, channel=1)
    assert rec.components["dwt_bands"].shape == (9, 256)
    assert rec.history == ["dwt_bands!(channel=1, wavelet='haar', level=8)"]

# --- Precondition ---

def test_guard_on_statistics(rec):
    mixed = Recording(rec.signals.copy(), FS, channel_kinds=["eeg", "ref"])
    for analytic in (channels_stats, epochs_stats, symmetry, tkeo):
        with pytest.raises(PreconditionError):
            analytic(mixed)
    with pytest.raises(PreconditionError):
        difference(rec, mixed)
