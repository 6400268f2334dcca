"""Tests for merging per-design-type p-values."""

import numpy as np
import pandas as pd
import pytest

from methyldetect.core.channels import DesignType
from methyldetect.detection.merge import ProbeCollisionError, merge_pvalues


class TestMergePvalues:

    def test_sorted_by_probe_identifier(self):
        merged = merge_pvalues({
            DesignType.IR: (pd.Index(['cg03', 'cg01']), np.array([0.3, 0.1])),
            DesignType.IG: (pd.Index(['cg02']), np.array([0.2])),
            DesignType.II: (pd.Index(['cg00', 'cg04']), np.array([0.0, 0.4])),
        })
        assert list(merged.index) == ['cg00', 'cg01', 'cg02', 'cg03', 'cg04']
        np.testing.assert_allclose(merged.to_numpy(), [0.0, 0.1, 0.2, 0.3, 0.4])
        assert merged.name == 'pval'
        assert merged.index.name == 'probe_id'
        assert merged.dtype == np.float64

    def test_labels_follow_their_values(self):
        merged = merge_pvalues({
            DesignType.IR: (pd.Index(['b']), np.array([0.9])),
            DesignType.II: (pd.Index(['a']), np.array([0.1])),
        })
        assert merged['a'] == 0.1
        assert merged['b'] == 0.9

    def test_lexicographic_not_numeric_order(self):
        merged = merge_pvalues({
            DesignType.IR: (pd.Index(['10', '9', '100']), np.array([0.1, 0.2, 0.3])),
        })
        assert list(merged.index) == ['10', '100', '9']

    def test_collision_across_design_types_raises(self):
        with pytest.raises(ProbeCollisionError, match="cg01"):
            merge_pvalues({
                DesignType.IR: (pd.Index(['cg01']), np.array([0.1])),
                DesignType.II: (pd.Index(['cg01']), np.array([0.2])),
            })

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="IG"):
            merge_pvalues({DesignType.IG: (pd.Index(['a', 'b']), np.array([0.1]))})

    def test_empty_parts(self):
        merged = merge_pvalues({
            DesignType.IR: (pd.Index([]), np.array([])),
            DesignType.IG: (pd.Index(['x']), np.array([0.5])),
            DesignType.II: (pd.Index([]), np.array([])),
        })
        assert list(merged.index) == ['x']

    def test_nothing_to_merge(self):
        merged = merge_pvalues({})
        assert len(merged) == 0
        assert merged.dtype == np.float64
