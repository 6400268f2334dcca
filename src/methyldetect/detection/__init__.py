"""
Detection p-value estimators for Infinium signal sets.

This package splits every estimator into three reusable pieces:

* :mod:`background` -- fit an ECDF or a normal model from background probes
* :mod:`scoring` -- per-design-type rules turning (M, U) into p-values
* :mod:`merge` -- combine IR/IG/II results into one probe-sorted vector

and assembles them into five strategies in :mod:`methods`.
"""

from __future__ import annotations

from .background import (
    Ecdf,
    NormalBackground,
    InsufficientBackgroundError,
    fit_ecdf_background,
    fit_normal_background,
    fit_pooled_normal_background,
)
from .merge import ProbeCollisionError, merge_pvalues
from .methods import (
    MethodName,
    DetectionMethod,
    NegControlEcdf,
    NegControlNormal,
    NegControlNormalGS,
    NegControlNormalTotal,
    OobEcdf,
    available_methods,
    get_method,
    detection_p_neg_ecdf,
    detection_p_neg_norm,
    detection_p_neg_norm_gs,
    detection_p_neg_norm_total,
    detection_p_oob_ecdf,
)

__all__ = [
    "Ecdf",
    "NormalBackground",
    "InsufficientBackgroundError",
    "fit_ecdf_background",
    "fit_normal_background",
    "fit_pooled_normal_background",
    "ProbeCollisionError",
    "merge_pvalues",
    "MethodName",
    "DetectionMethod",
    "NegControlEcdf",
    "NegControlNormal",
    "NegControlNormalGS",
    "NegControlNormalTotal",
    "OobEcdf",
    "available_methods",
    "get_method",
    "detection_p_neg_ecdf",
    "detection_p_neg_norm",
    "detection_p_neg_norm_gs",
    "detection_p_neg_norm_total",
    "detection_p_oob_ecdf",
]
