"""
Detection p-value estimators.

Five interchangeable strategies score every probe of a SigSet against a
background model and return a new SigSet with its ``pval`` slot populated.
They share one shape, implemented once in ``DetectionMethod.apply``:

    1. reject anything that is not a SigSet
    2. fit the background model once from the SigSet's background probes
    3. score IR, IG and II against that same model
    4. merge the three labelled vectors and sort by probe identifier

and differ only in ``fit_background`` and ``score``:

    ===================  ====================  ===========================================
    Method               Background            Score
    ===================  ====================  ===========================================
    neg_ecdf             negctl ECDF per chan  1 - max(F_m(M), F_u(U))
    neg_norm             negctl N(median, sd)  min(1 - Phi(M), 1 - Phi(U))
    neg_norm_gs          negctl pooled N       1 - Phi(M + U), one model for everything
    neg_norm_total       negctl N(median, sd)  1 - Phi(M + U; mu_m + mu_u, sd_m + sd_u)
    oob_ecdf             out-of-band ECDF      1 - max(F_m(M), F_u(U))
    ===================  ====================  ===========================================

Choosing an estimator is left to the caller; none of them filter or
normalize probes.

Examples:
    >>> from methyldetect.detection.methods import get_method, detection_p_neg_ecdf
    >>>
    >>> scored = detection_p_neg_ecdf(sset)
    >>> scored.pval.head()
    >>>
    >>> method = get_method("neg_norm_total")
    >>> scored = method.apply(sset)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Union

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from methyldetect.core.channels import Channel, DesignType
from methyldetect.core.sigset import SigSet, InvalidSignalSetError
from methyldetect.detection.background import (
    fit_ecdf_background,
    fit_normal_background,
    fit_pooled_normal_background,
)
from methyldetect.detection.merge import merge_pvalues
from methyldetect.detection.scoring import (
    score_ecdf,
    score_normal_max,
    score_normal_sum,
)

logger = logging.getLogger(__name__)

__all__ = [
    'MethodName',
    'DetectionMethod',
    'NegControlEcdf',
    'NegControlNormal',
    'NegControlNormalGS',
    'NegControlNormalTotal',
    'OobEcdf',
    'get_method',
    'available_methods',
    'detection_p_neg_ecdf',
    'detection_p_neg_norm',
    'detection_p_neg_norm_gs',
    'detection_p_neg_norm_total',
    'detection_p_oob_ecdf',
]


class MethodName(Enum):
    """
    Registered detection p-value estimators.

    Attributes:
        NEG_ECDF: Negative-control ECDF per channel
        NEG_NORM: Negative-control normal fit per channel
        NEG_NORM_GS: Negative-control normal fit, channels pooled (Genome Studio)
        NEG_NORM_TOTAL: Negative-control normal fit, channel sum with doubled parameters
        OOB_ECDF: Out-of-band ECDF per channel
    """

    NEG_ECDF = "neg_ecdf"
    NEG_NORM = "neg_norm"
    NEG_NORM_GS = "neg_norm_gs"
    NEG_NORM_TOTAL = "neg_norm_total"
    OOB_ECDF = "oob_ecdf"


class DetectionMethod(ABC):
    """
    Abstract base class for detection p-value estimators.

    Subclasses provide the background model (``fit_background``) and the
    per-design-type rule (``score``). ``apply`` is shared: it fits the
    background exactly once per call and judges all three design types
    against that one model, so results never mix background estimates.

    Attributes:
        name: Registered estimator identifier
        description: One-line summary for listings and logs
        params: JSON-serializable parameters, for provenance
    """

    description: str = ""

    def __init__(self, name: MethodName, params: dict[str, Any] | None = None) -> None:
        self.name = name
        self.params = params or {}

    @abstractmethod
    def fit_background(self, sset: SigSet) -> Any:
        """
        Fit the background model from the SigSet's background probes.

        Raises:
            MissingBackgroundError: If the required reference is absent
            InsufficientBackgroundError: If the reference is too small
        """

    @abstractmethod
    def score(self, model: Any, values: pd.DataFrame, design_type: DesignType) -> NDArray[np.float64]:
        """Score one design type's (M, U) matrix against ``model``."""

    def validate(self, sset: SigSet) -> list[str]:
        """
        Check preconditions before applying the estimator.

        Returns:
            List of error messages (empty list = valid)
        """
        errors: list[str] = []
        if not isinstance(sset, SigSet):
            errors.append(f"Expected SigSet, got {type(sset).__name__}")
        elif sset.n_probes == 0:
            logger.warning("SigSet has no probes; detection p-values will be empty")
        return errors

    def apply(self, sset: SigSet) -> SigSet:
        """
        Compute detection p-values and return a new SigSet carrying them.

        The input SigSet is not modified. Any previously stored p-values are
        ignored and replaced.

        Args:
            sset: Signal set to score

        Returns:
            New SigSet whose ``pval`` is a float64 Series indexed by probe
            identifier, one entry per probe, sorted ascending

        Raises:
            InvalidSignalSetError: If ``sset`` is not a SigSet
            MissingBackgroundError: If the required background reference is absent
            InsufficientBackgroundError: If the background cannot be fitted
            ProbeCollisionError: If a probe appears in two design types
        """
        errors = self.validate(sset)
        if errors:
            raise InvalidSignalSetError("; ".join(errors))

        model = self.fit_background(sset)

        parts = {}
        for design_type in DesignType:
            values = sset.design_matrix(design_type)
            pvals = self.score(model, values, design_type)
            n_nan = int(np.isnan(pvals).sum())
            if n_nan:
                logger.warning(
                    f"{self.name.value}: {n_nan} {design_type.value} probe(s) have "
                    f"missing intensities and no detection p-value"
                )
            parts[design_type] = (values.index, pvals)

        pval = merge_pvalues(parts)
        logger.debug(f"{self}: scored {len(pval)} probes")
        return sset.with_pval(pval)

    def __call__(self, sset: SigSet) -> SigSet:
        return self.apply(sset)

    def __repr__(self) -> str:
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{type(self).__name__}({params_str})"


class NegControlEcdf(DetectionMethod):
    """
    Detection p-value from the negative controls' empirical distribution.

    A probe's p-value is one minus the ECDF of its brighter allele, each
    allele evaluated against the negative controls of its own channel.
    """

    description = "ECDF of negative-control probes, per channel"

    def __init__(self) -> None:
        super().__init__(MethodName.NEG_ECDF, {"background": "negctl", "model": "ecdf"})

    def fit_background(self, sset):
        negctl = sset.neg_controls()
        return fit_ecdf_background(negctl['G'], negctl['R'])

    def score(self, model, values, design_type):
        return score_ecdf(model, values, design_type)


class NegControlNormal(DetectionMethod):
    """
    Detection p-value from a normal fit of the negative controls.

    Each channel is summarised by N(median, sd). Infinium I probes are scored
    on their brighter allele; Infinium II probes keep the smaller of the two
    single-allele p-values.
    """

    description = "Normal fit (median, sd) of negative controls, per channel"

    def __init__(self) -> None:
        super().__init__(MethodName.NEG_NORM, {"background": "negctl", "model": "normal", "location": "median"})

    def fit_background(self, sset):
        negctl = sset.neg_controls()
        return fit_normal_background(negctl['G'], negctl['R'], location=self.params["location"])

    def score(self, model, values, design_type):
        return score_normal_max(model, values, design_type)


class NegControlNormalGS(DetectionMethod):
    """
    Detection p-value emulating Genome Studio.

    Green and Red negative controls are pooled into one N(mean, sd) and
    every probe's total signal M + U is compared against it. This is a
    best-effort emulation of an undocumented vendor method and is kept
    formula-for-formula.
    """

    description = "Pooled normal fit of negative controls on M+U (Genome Studio)"

    def __init__(self) -> None:
        super().__init__(MethodName.NEG_NORM_GS, {"background": "negctl", "model": "normal", "pooled": True})

    def fit_background(self, sset):
        negctl = sset.neg_controls()
        return fit_pooled_normal_background(negctl['G'], negctl['R'])

    def score(self, model, values, design_type):
        return score_normal_sum(model, values, design_type)


class NegControlNormalTotal(DetectionMethod):
    """
    Detection p-value of the summed channels, as minfi does it.

    Per-channel N(median, sd) fits are scaled to the sum of the two
    alleles: location and scale of the two channels involved are added,
    so Infinium I designs use twice their channel's parameters.
    """

    description = "Normal fit of negative controls on M+U, doubled parameters"

    def __init__(self) -> None:
        super().__init__(MethodName.NEG_NORM_TOTAL, {"background": "negctl", "model": "normal", "location": "median"})

    def fit_background(self, sset):
        negctl = sset.neg_controls()
        return fit_normal_background(negctl['G'], negctl['R'], location=self.params["location"])

    def score(self, model, values, design_type):
        return score_normal_sum(model, values, design_type)


class OobEcdf(DetectionMethod):
    """
    Detection p-value from the out-of-band signal's empirical distribution.

    Same scoring as NegControlEcdf, with oobG/oobR in place of the
    negative controls. Out-of-band references are typically far larger
    than the negative-control set, which gives a finer-grained ECDF.
    """

    description = "ECDF of out-of-band signal, per channel"

    def __init__(self) -> None:
        super().__init__(MethodName.OOB_ECDF, {"background": "oob", "model": "ecdf"})

    def fit_background(self, sset):
        oob = sset.oob()
        return fit_ecdf_background(oob[Channel.GREEN], oob[Channel.RED])

    def score(self, model, values, design_type):
        return score_ecdf(model, values, design_type)


_REGISTRY: dict[MethodName, type[DetectionMethod]] = {
    MethodName.NEG_ECDF: NegControlEcdf,
    MethodName.NEG_NORM: NegControlNormal,
    MethodName.NEG_NORM_GS: NegControlNormalGS,
    MethodName.NEG_NORM_TOTAL: NegControlNormalTotal,
    MethodName.OOB_ECDF: OobEcdf,
}


def get_method(name: Union[str, MethodName]) -> DetectionMethod:
    """
    Instantiate an estimator by name.

    Args:
        name: MethodName or its value; hyphens are accepted for underscores
            (``"neg-norm-gs"`` == ``"neg_norm_gs"``)

    Raises:
        ValueError: If the name is not registered
    """
    if not isinstance(name, MethodName):
        key = str(name).strip().lower().replace('-', '_')
        try:
            name = MethodName(key)
        except ValueError:
            valid = ", ".join(m.value for m in MethodName)
            raise ValueError(f"Unknown detection method {name!r}. Valid methods: {valid}") from None
    return _REGISTRY[name]()


def available_methods() -> dict[str, str]:
    """Registered estimator identifiers mapped to their descriptions."""
    return {name.value: cls.description for name, cls in _REGISTRY.items()}


def detection_p_neg_ecdf(sset: SigSet) -> SigSet:
    """Detection p-values from the negative controls' ECDF."""
    return NegControlEcdf().apply(sset)


def detection_p_neg_norm(sset: SigSet) -> SigSet:
    """Detection p-values from a per-channel normal fit of the negative controls."""
    return NegControlNormal().apply(sset)


def detection_p_neg_norm_gs(sset: SigSet) -> SigSet:
    """Detection p-values emulating Genome Studio (pooled normal fit on M+U)."""
    return NegControlNormalGS().apply(sset)


def detection_p_neg_norm_total(sset: SigSet) -> SigSet:
    """Detection p-values of M+U against doubled per-channel normal fits."""
    return NegControlNormalTotal().apply(sset)


def detection_p_oob_ecdf(sset: SigSet) -> SigSet:
    """Detection p-values from the out-of-band signal's ECDF."""
    return OobEcdf().apply(sset)
