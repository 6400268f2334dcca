"""
MethylDetect - Detection p-values for Infinium DNA-methylation arrays

Scores every probe of a per-sample signal set against a background model
(negative-control probes or out-of-band signal) and returns a probe-indexed
vector of detection p-values. Five interchangeable estimators are provided.
"""

__version__ = "0.1.0"

from methyldetect.core.channels import Channel, DesignType
from methyldetect.core.sigset import SigSet
from methyldetect.detection.methods import (
    MethodName,
    get_method,
    detection_p_neg_ecdf,
    detection_p_neg_norm,
    detection_p_neg_norm_gs,
    detection_p_neg_norm_total,
    detection_p_oob_ecdf,
)

__all__ = [
    "Channel",
    "DesignType",
    "SigSet",
    "MethodName",
    "get_method",
    "detection_p_neg_ecdf",
    "detection_p_neg_norm",
    "detection_p_neg_norm_gs",
    "detection_p_neg_norm_total",
    "detection_p_oob_ecdf",
]
