# tests/test_kernel.py

"""
Tests for the numeric kernel helpers: array utilities, generators and vector statistics.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from neurosignals.core.errors import ConfigurationError
from neurosignals.core.generators import generate_time, generate_sine, generate_sinc, generate_morlet
from neurosignals.core.stats import (
    z_score, rms, jaccard_similarity, hildebrand_rule, k_categories,
    histogram_bins, symmetry, teager_kaiser
)
from neurosignals.utils.helpers import (
    cart2pol, pol2cart, vsearch, matrix_sortperm, matrix_sort, nextpow2, vsplit
)

# --- Coordinates ---

def test_cart2pol_and_back():
    rho, theta = cart2pol(1.0, 1.0)
    assert rho == pytest.approx(np.sqrt(2))
    assert theta == pytest.approx(np.pi / 4)
    x, y = pol2cart(theta, rho)
    assert x == pytest.approx(1.0)
    assert y == pytest.approx(1.0)

# --- Search & sort ---

def test_vsearch_scalar():
    assert vsearch([0.0, 0.5, 1.0, 1.5], 1.1) == 2

def test_vsearch_vector_with_distance():
    idx, dist = vsearch([0.0, 0.5, 1.0, 1.5], [0.1, 1.4], return_distance=True)
    assert_array_equal(idx, [0, 3])
    assert_allclose(dist, [0.1, 0.1])

def test_vsearch_rejects_longer_query():
    with pytest.raises(ConfigurationError):
        vsearch([0.0, 1.0], [0.0, 0.5, 1.0])

def test_matrix_sortperm_columns():
    m = np.array([[3, 1], [1, 2], [2, 3]])
    assert_array_equal(matrix_sortperm(m), [[1, 0], [2, 1], [0, 2]])
    assert_array_equal(matrix_sortperm(m, rev=True), [[0, 2], [2, 1], [1, 0]])

def test_matrix_sortperm_rows():
    m = np.array([[3, 1, 2]])
    assert_array_equal(matrix_sortperm(m, axis=1), [[1, 2, 0]])

def test_matrix_sort_applies_one_permutation():
    m = np.array([[3, 1], [1, 2], [2, 3]])
    assert_array_equal(matrix_sort(m, [2, 0, 1]), [[2, 3], [3, 1], [1, 2]])
    with pytest.raises(ConfigurationError):
        matrix_sort(m, [0, 1])

@pytest.mark.parametrize("x, expected", [(0, 1), (1, 1), (5, 8), (8, 8), (1000, 1024)])
def test_nextpow2(x, expected):
    assert nextpow2(x) == expected

def test_vsplit():
    pieces = vsplit(np.arange(6), 2)
    assert len(pieces) == 3
    assert_array_equal(pieces[1], [2, 3])
    with pytest.raises(ConfigurationError):
        vsplit(np.arange(5), 2)

# --- Generators ---

def test_generate_time_inclusive_end():
    t = generate_time(1.0, 10.0)
    assert t.size == 11
    assert t[-1] == pytest.approx(1.0)

def test_generate_sine():
    assert_allclose(generate_sine(1.0, [0.0, 0.25], a=2.0), [0.0, 2.0], atol=1e-12)

def test_generate_sinc_replaces_singular_point():
    y = generate_sinc()
    assert y.size == 401
    assert np.isfinite(y).all()
    assert y[200] == pytest.approx(y[199], rel=1e-6)

def test_generate_morlet_real_and_complex():
    w = generate_morlet(100.0, 1.0, 10.0)
    assert w.size == 201
    assert_allclose(w, w[::-1], atol=1e-12)
    assert w[100] == pytest.approx(1.0)
    wc = generate_morlet(100.0, 1.0, 10.0, complex=True)
    assert np.iscomplexobj(wc)
    assert np.abs(wc).max() == pytest.approx(1.0)

# --- Statistics ---

def test_z_score():
    z = z_score([1.0, 2.0, 3.0, 4.0, 10.0])
    assert np.mean(z) == pytest.approx(0.0, abs=1e-12)
    assert np.std(z, ddof=1) == pytest.approx(1.0)

def test_rms():
    assert rms([3.0, -3.0]) == pytest.approx(3.0)

def test_jaccard_similarity():
    assert jaccard_similarity([1, 2, 3], [2, 3, 4]) == pytest.approx(0.5)

def test_jaccard_similarity_rejects_bad_input():
    with pytest.raises(ConfigurationError):
        jaccard_similarity([1, 2, 3], [1, 2])
    with pytest.raises(ConfigurationError):
        jaccard_similarity([], [])

def test_hildebrand_rule_symmetric():
    assert hildebrand_rule([1.0, 2.0, 3.0, 4.0, 5.0]) == pytest.approx(0.0)

def test_k_categories_and_bins():
    k_sqrt, k_sturges = k_categories(100)
    assert k_sqrt == pytest.approx(10.0)
    assert k_sturges == pytest.approx(7.444)
    assert histogram_bins(100, "sqrt") == 10
    assert histogram_bins(100, "sturges") == 8
    with pytest.raises(ConfigurationError):
        histogram_bins(100, "scott")

def test_symmetry():
    assert symmetry([1.0, -1.0, 2.0, -2.0]) == pytest.approx(1.0)
    assert symmetry([1.0, 2.0]) == 2.0

def test_teager_kaiser():
    assert_allclose(teager_kaiser([1.0, 2.0, 3.0]), [1.0, 1.0, 3.0])
