"""Tests for per-design-type scoring rules."""

import numpy as np
import pandas as pd
import pytest
from scipy.stats import norm

from methyldetect.core.channels import Channel, DesignType
from methyldetect.detection.background import (
    NormalBackground,
    fit_ecdf_background,
)
from methyldetect.detection.scoring import (
    score_ecdf,
    score_normal_max,
    score_normal_sum,
    summed_background,
)


def mu_frame(m, u):
    return pd.DataFrame({'M': np.asarray(m, dtype=float), 'U': np.asarray(u, dtype=float)})


@pytest.fixture
def separated_ecdfs():
    """Green background in [1, 4], Red background in [10, 40]; no overlap."""
    return fit_ecdf_background([1.0, 2.0, 3.0, 4.0], [10.0, 20.0, 30.0, 40.0])


@pytest.fixture
def normal_model():
    return {
        Channel.GREEN: NormalBackground(loc=10.0, scale=2.0),
        Channel.RED: NormalBackground(loc=8.0, scale=1.0),
    }


class TestScoreEcdf:
    """1 - max(F_m(M), F_u(U))."""

    def test_ir_uses_red_for_both_alleles(self, separated_ecdfs):
        # F_R(2) = 0, F_R(10) = 0.25
        p = score_ecdf(separated_ecdfs, mu_frame([2.0], [10.0]), DesignType.IR)
        np.testing.assert_allclose(p, [0.75])

    def test_ig_uses_green_for_both_alleles(self, separated_ecdfs):
        # F_G(2) = 0.5, F_G(10) = 1
        p = score_ecdf(separated_ecdfs, mu_frame([2.0], [10.0]), DesignType.IG)
        np.testing.assert_allclose(p, [0.0])

    def test_ii_uses_green_for_m_and_red_for_u(self, separated_ecdfs):
        # F_G(2) = 0.5, F_R(10) = 0.25
        p = score_ecdf(separated_ecdfs, mu_frame([2.0], [10.0]), DesignType.II)
        np.testing.assert_allclose(p, [0.5])

    def test_brighter_allele_decides(self, separated_ecdfs):
        p_m = score_ecdf(separated_ecdfs, mu_frame([30.0], [0.0]), DesignType.IR)
        p_u = score_ecdf(separated_ecdfs, mu_frame([0.0], [30.0]), DesignType.IR)
        np.testing.assert_allclose(p_m, p_u)
        np.testing.assert_allclose(p_m, [0.25])

    def test_row_order_preserved(self, separated_ecdfs):
        values = mu_frame([40.0, 0.0, 20.0], [0.0, 0.0, 0.0])
        p = score_ecdf(separated_ecdfs, values, DesignType.IR)
        np.testing.assert_allclose(p, [0.0, 1.0, 0.5])

    def test_empty_matrix(self, separated_ecdfs):
        p = score_ecdf(separated_ecdfs, mu_frame([], []), DesignType.II)
        assert p.shape == (0,)

    def test_nan_allele_gives_nan(self, separated_ecdfs):
        p = score_ecdf(separated_ecdfs, mu_frame([np.nan, 3.0], [np.nan, 0.0]), DesignType.IG)
        assert np.isnan(p[0])
        assert p[1] == pytest.approx(0.25)


class TestScoreNormalMax:
    """Per-channel normal scoring."""

    def test_type_one_equals_sf_of_max(self, normal_model):
        values = mu_frame([9.0, 3.0, 12.0], [7.5, 11.0, 12.5])
        p = score_normal_max(normal_model, values, DesignType.IR)
        expected = norm.sf(np.maximum(values['M'], values['U']), loc=8.0, scale=1.0)
        np.testing.assert_allclose(p, expected)

        p_ig = score_normal_max(normal_model, values, DesignType.IG)
        expected_ig = norm.sf(np.maximum(values['M'], values['U']), loc=10.0, scale=2.0)
        np.testing.assert_allclose(p_ig, expected_ig)

    def test_type_two_takes_min_of_channel_pvalues(self, normal_model):
        values = mu_frame([12.0, 10.0], [8.0, 11.0])
        p = score_normal_max(normal_model, values, DesignType.II)
        p_m = norm.sf(values['M'], loc=10.0, scale=2.0)
        p_u = norm.sf(values['U'], loc=8.0, scale=1.0)
        np.testing.assert_allclose(p, np.minimum(p_m, p_u))

    def test_signal_at_location_is_half(self, normal_model):
        p = score_normal_max(normal_model, mu_frame([8.0], [0.0]), DesignType.IR)
        assert p[0] == pytest.approx(0.5)


class TestScoreNormalSum:
    """Channel-sum scoring (per-channel doubled, or pooled)."""

    def test_summed_background_per_design(self, normal_model):
        assert summed_background(normal_model, DesignType.IR) == NormalBackground(16.0, 2.0)
        assert summed_background(normal_model, DesignType.IG) == NormalBackground(20.0, 4.0)
        assert summed_background(normal_model, DesignType.II) == NormalBackground(18.0, 3.0)

    def test_pooled_model_used_unchanged(self):
        pooled = NormalBackground(9.4, 1.5)
        for design_type in DesignType:
            assert summed_background(pooled, design_type) is pooled

    def test_ir_sum_at_twice_red_location_is_half(self, normal_model):
        p = score_normal_sum(normal_model, mu_frame([10.0], [6.0]), DesignType.IR)
        assert p[0] == pytest.approx(0.5)

    def test_ii_sum(self, normal_model):
        values = mu_frame([15.0, 5.0], [6.0, 1.0])
        p = score_normal_sum(normal_model, values, DesignType.II)
        expected = norm.sf(values['M'] + values['U'], loc=18.0, scale=3.0)
        np.testing.assert_allclose(p, expected)

    def test_pooled_sum(self):
        pooled = NormalBackground(9.4, 1.5)
        values = mu_frame([4.7, 30.0], [4.7, 1.0])
        p = score_normal_sum(pooled, values, DesignType.IG)
        assert p[0] == pytest.approx(0.5)
        assert p[1] < 1e-10

    def test_values_in_unit_interval(self, normal_model):
        rng = np.random.default_rng(0)
        values = mu_frame(rng.uniform(0, 100, 500), rng.uniform(0, 100, 500))
        for design_type in DesignType:
            p = score_normal_sum(normal_model, values, design_type)
            assert np.all((p >= 0) & (p <= 1))
