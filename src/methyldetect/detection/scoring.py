"""
Per-design-type scoring rules.

Each rule takes a fitted background model and one design type's (M, U)
matrix and returns one p-value per row, in row order. The design type's
channel mapping (``DesignType.m_channel`` / ``u_channel``) decides which
channel's background each allele is judged against:

    =========  =========  =========
    Design     M channel  U channel
    =========  =========  =========
    IR         Red        Red
    IG         Green      Green
    II         Green      Red
    =========  =========  =========

Rules:
    score_ecdf:        1 - max(F_m(M), F_u(U))
    score_normal_max:  min(1 - Phi(M; m), 1 - Phi(U; u))
    score_normal_sum:  1 - Phi(M + U; background for the summed channels)

For Infinium I designs both alleles share a channel, so score_normal_max
reduces to 1 - Phi(max(M, U)). All rules are pure functions and return
values in [0, 1]; NaN intensities give NaN.
"""

from __future__ import annotations

from typing import Mapping, Union

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from methyldetect.core.channels import Channel, DesignType
from methyldetect.detection.background import Ecdf, NormalBackground

__all__ = [
    'score_ecdf',
    'score_normal_max',
    'score_normal_sum',
    'summed_background',
]


def _alleles(values: pd.DataFrame) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    return (
        values['M'].to_numpy(dtype=np.float64),
        values['U'].to_numpy(dtype=np.float64),
    )


def score_ecdf(
    model: Mapping[Channel, Ecdf],
    values: pd.DataFrame,
    design_type: DesignType,
) -> NDArray[np.float64]:
    """
    Empirical detection p-value: 1 - max(F_m(M), F_u(U)).

    The probe is as detectable as its brighter allele, each allele being
    ranked against the background of the channel it was read from.

    Args:
        model: Per-channel ECDFs
        values: (M, U) matrix of one design type
        design_type: Design type of ``values``

    Returns:
        p-values, one per row of ``values``
    """
    m, u = _alleles(values)
    f_m = model[design_type.m_channel](m)
    f_u = model[design_type.u_channel](u)
    return 1.0 - np.maximum(f_m, f_u)


def score_normal_max(
    model: Mapping[Channel, NormalBackground],
    values: pd.DataFrame,
    design_type: DesignType,
) -> NDArray[np.float64]:
    """
    Parametric detection p-value from per-channel normal fits.

    Each allele gets 1 - Phi against its own channel's background and the
    smaller (more significant) of the two is kept.
    """
    m, u = _alleles(values)
    p_m = model[design_type.m_channel].sf(m)
    p_u = model[design_type.u_channel].sf(u)
    return np.minimum(p_m, p_u)


def summed_background(
    model: Union[NormalBackground, Mapping[Channel, NormalBackground]],
    design_type: DesignType,
) -> NormalBackground:
    """
    Background model for the sum M + U of a design type.

    A single pooled model is used as-is for every design type. A per-channel
    mapping is combined as (mu_m + mu_u, sd_m + sd_u), which gives
    (2 mu_R, 2 sd_R) for IR, (2 mu_G, 2 sd_G) for IG and
    (mu_G + mu_R, sd_G + sd_R) for II.
    """
    if isinstance(model, NormalBackground):
        return model
    return model[design_type.m_channel] + model[design_type.u_channel]


def score_normal_sum(
    model: Union[NormalBackground, Mapping[Channel, NormalBackground]],
    values: pd.DataFrame,
    design_type: DesignType,
) -> NDArray[np.float64]:
    """
    Parametric detection p-value of the total signal: 1 - Phi(M + U).

    Args:
        model: Either one pooled NormalBackground (Genome Studio emulation)
            or per-channel fits to be summed (channel-sum estimator)
        values: (M, U) matrix of one design type
        design_type: Design type of ``values``
    """
    m, u = _alleles(values)
    return summed_background(model, design_type).sf(m + u)
