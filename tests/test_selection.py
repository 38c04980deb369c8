# tests/test_selection.py

"""
Tests for electrode picking and time/sample conversion.
"""

import pytest
import numpy as np

from neurosignals import Recording, ConfigurationError
from neurosignals.core.analysis import Region, pick, t2s, s2t

LABELS = ["Fp1", "Fp2", "Fz", "F3", "F4", "T3", "T4"]

# --- Test Fixtures ---

@pytest.fixture
def rec() -> Recording:
    return Recording(np.zeros((len(LABELS), 200)), 100.0, channel_labels=LABELS)

# --- pick ---

def test_pick_left(rec):
    assert pick(rec, "left") == [0, 3, 5]

def test_pick_right(rec):
    assert pick(rec, Region.RIGHT) == [1, 4, 6]

@pytest.mark.parametrize("tag, expected", [
    ("central", [2]),
    ("c", [2]),
    ("frontal", [0, 1, 2, 3, 4]),
    ("t", [5, 6]),
    ("parietal", []),
    ("o", []),
])
def test_pick_single_region(rec, tag, expected):
    assert pick(rec, tag) == expected

def test_pick_left_and_right_is_unfiltered_union(rec):
    assert pick(rec, ["left", "right"]) == [0, 1, 3, 4, 5, 6]
    assert pick(rec, {Region.LEFT, Region.RIGHT, Region.CENTRAL}) == [0, 1, 2, 3, 4, 5, 6]

def test_pick_region_with_hemisphere(rec):
    assert pick(rec, ["frontal", "left"]) == [0, 3, 5]
    assert pick(rec, ["f", "r"]) == [1, 4, 6]

def test_pick_several_regions(rec):
    assert pick(rec, ["central", "temporal"]) == [2, 5, 6]

def test_pick_unknown_tag(rec):
    with pytest.raises(ConfigurationError):
        pick(rec, "ventral")
    with pytest.raises(ConfigurationError):
        pick(rec, ["left", "x"])

def test_pick_requires_labels():
    unlabeled = Recording(np.zeros((2, 10)), 100.0)
    with pytest.raises(ConfigurationError):
        pick(unlabeled, "left")

# --- Time conversion ---

def test_t2s(rec):
    assert t2s(rec, 0) == 1
    assert t2s(rec, 0.5) == 51
    assert t2s(rec, 1.0) == 101

def test_s2t(rec):
    assert s2t(rec, 1) == 0.01
    assert s2t(rec, 150) == 1.5

def test_time_conversion_rejects_negative(rec):
    with pytest.raises(ValueError):
        t2s(rec, -1.0)
    with pytest.raises(ValueError):
        s2t(rec, -1)
