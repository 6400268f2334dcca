"""
Merging per-design-type p-values into one probe-indexed vector.
"""

from __future__ import annotations

import logging
from typing import Mapping

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from methyldetect.core.channels import DesignType

logger = logging.getLogger(__name__)

__all__ = ['merge_pvalues', 'ProbeCollisionError']


class ProbeCollisionError(ValueError):
    """Raised when one probe identifier is assigned to more than one design type."""
    pass


def merge_pvalues(
    parts: Mapping[DesignType, tuple[pd.Index, NDArray[np.float64]]],
) -> pd.Series:
    """
    Concatenate labelled per-design p-values and sort them by probe identifier.

    Args:
        parts: DesignType -> (probe identifiers, p-values). Parts are
            concatenated in DesignType order (IR, IG, II) before sorting.

    Returns:
        float64 Series named 'pval', indexed by probe identifier, sorted
        ascending with a stable sort.

    Raises:
        ProbeCollisionError: If a probe identifier appears in more than one part
        ValueError: If a part's labels and values differ in length

    Examples:
        >>> merged = merge_pvalues({
        ...     DesignType.IR: (pd.Index(['cg2']), np.array([0.1])),
        ...     DesignType.II: (pd.Index(['cg1']), np.array([0.5])),
        ... })
        >>> list(merged.index)
        ['cg1', 'cg2']
    """
    pieces = []
    for design_type in DesignType:
        if design_type not in parts:
            continue
        labels, pvals = parts[design_type]
        pvals = np.asarray(pvals, dtype=np.float64)
        if len(labels) != len(pvals):
            raise ValueError(
                f"{design_type.value}: {len(labels)} probe identifiers "
                f"but {len(pvals)} p-values"
            )
        pieces.append(pd.Series(pvals, index=pd.Index(labels, dtype=object), dtype=np.float64))

    if not pieces:
        return pd.Series([], index=pd.Index([], dtype=object, name='probe_id'),
                         dtype=np.float64, name='pval')

    merged = pd.concat(pieces)
    if not merged.index.is_unique:
        dupes = merged.index[merged.index.duplicated()].unique().tolist()
        raise ProbeCollisionError(
            f"{len(dupes)} probe identifier(s) assigned to more than one design type: "
            f"{dupes[:10]}"
        )

    merged = merged.sort_index(kind='mergesort')
    merged.index.name = 'probe_id'
    merged.name = 'pval'
    logger.debug(f"Merged {len(merged)} detection p-values from {len(pieces)} design types")
    return merged
