"""
Core data structure for a single-sample Infinium signal set.

SigSet groups the per-probe fluorescence intensities of one array with the
background references the detection estimators are fitted on, plus the
probe-indexed detection p-value slot the estimators populate.

Biological Context:
    An Infinium methylation array measures every probe as a pair of
    intensities, methylated (M) and unmethylated (U). The probe chemistry
    decides which fluorescence channel carries each allele:

    - IR: Infinium I probes read in Red (M and U both Red)
    - IG: Infinium I probes read in Green (M and U both Green)
    - II: Infinium II probes (M in Green, U in Red)

    Background is estimated from probes that should carry no signal:
    - Negative controls: probes without a genomic target, read in both channels
    - Out-of-band (OOB): Infinium I probes read in the channel their design
      does not use (IR probes seen in Green give oobG, IG probes seen in Red
      give oobR)

Engineering Design:
    - Immutable: estimators return a new SigSet via with_pval()
    - Validated: constructor checks column layout, label uniqueness and
      intensity range before any statistics run
    - Pandas for labelled matrices, NumPy for background vectors

Examples:
    >>> import pandas as pd
    >>> from methyldetect.core.sigset import SigSet
    >>>
    >>> ir = pd.DataFrame({'M': [50.0], 'U': [5.0]}, index=['cg0001'])
    >>> empty = pd.DataFrame({'M': [], 'U': []})
    >>> negctl = pd.DataFrame({'G': [10, 12, 11, 9, 10], 'R': [8, 9, 7, 8, 10]})
    >>> sset = SigSet(IR=ir, IG=empty, II=empty, negctl=negctl)
    >>> sset.n_probes
    1
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from methyldetect.core.channels import Channel, DesignType

__all__ = ['SigSet', 'InvalidSignalSetError', 'MissingBackgroundError']


ALLELE_COLUMNS = ('M', 'U')
CHANNEL_COLUMNS = ('G', 'R')


class InvalidSignalSetError(TypeError):
    """Raised when an estimator receives something that is not a SigSet."""
    pass


class MissingBackgroundError(ValueError):
    """Raised when a SigSet lacks the background reference an estimator needs."""
    pass


def _validate_design_matrix(frame: pd.DataFrame, label: str) -> pd.DataFrame:
    """Check an (M, U) matrix and return a float64 copy with string labels."""
    if not isinstance(frame, pd.DataFrame):
        raise TypeError(f"{label} must be pd.DataFrame, got {type(frame)}")

    columns = set(frame.columns)
    if columns != set(ALLELE_COLUMNS):
        raise ValueError(
            f"{label} must have exactly the columns {list(ALLELE_COLUMNS)}, "
            f"got {list(frame.columns)}"
        )

    for col in ALLELE_COLUMNS:
        if len(frame) > 0 and not pd.api.types.is_numeric_dtype(frame[col]):
            raise TypeError(f"{label}['{col}'] must be numeric, got {frame[col].dtype}")

    result = frame.loc[:, list(ALLELE_COLUMNS)].astype(np.float64)
    result.index = pd.Index(result.index.astype(str), name='probe_id')

    if not result.index.is_unique:
        dupes = result.index[result.index.duplicated()].unique().tolist()
        raise ValueError(f"{label} has duplicated probe identifiers: {dupes[:10]}")

    if (result.to_numpy() < 0).any():
        raise ValueError(f"{label} contains negative intensities")

    return result


def _validate_background_vector(values, label: str) -> np.ndarray:
    """Coerce a background vector to 1D float64 and check its range."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"{label} must be 1D, got shape {arr.shape}")
    if (arr < 0).any():
        raise ValueError(f"{label} contains negative intensities")
    return arr


class SigSet:
    """
    Immutable container for one sample's probe intensities, background
    references and detection p-values.

    Attributes:
        IR: (M, U) matrix of Infinium I Red probes
        IG: (M, U) matrix of Infinium I Green probes
        II: (M, U) matrix of Infinium II probes
        negctl: Negative-control intensities (columns G, R), or None
        oobG: Out-of-band Green intensities, or None
        oobR: Out-of-band Red intensities, or None
        pval: Detection p-values indexed by probe identifier, or None
        name: Optional sample name (used in logs and reprs only)

    Invariants:
        - Each design matrix has exactly the float64 columns M and U
        - Probe identifiers are unique within each design matrix
        - Intensities are non-negative (NaN is allowed)
        - oobG and oobR are either both present or both absent

    Cross-design uniqueness of probe identifiers is not checked here; it is
    enforced when per-design p-values are merged.
    """

    def __init__(
        self,
        IR: pd.DataFrame,
        IG: pd.DataFrame,
        II: pd.DataFrame,
        negctl: Optional[pd.DataFrame] = None,
        oobG=None,
        oobR=None,
        pval: Optional[pd.Series] = None,
        name: Optional[str] = None,
    ):
        """
        Initialize SigSet with validation.

        Args:
            IR: Infinium I Red matrix, columns M and U, indexed by probe ID
            IG: Infinium I Green matrix, columns M and U, indexed by probe ID
            II: Infinium II matrix, columns M and U, indexed by probe ID
            negctl: Negative-control table with numeric columns G and R
            oobG: Out-of-band Green intensities (array-like)
            oobR: Out-of-band Red intensities (array-like)
            pval: Previously computed detection p-values
            name: Sample name

        Raises:
            TypeError: If a matrix is not a DataFrame or holds non-numeric data
            ValueError: If columns, labels or intensities are invalid
        """
        self._matrices = {
            DesignType.IR: _validate_design_matrix(IR, 'IR'),
            DesignType.IG: _validate_design_matrix(IG, 'IG'),
            DesignType.II: _validate_design_matrix(II, 'II'),
        }

        if negctl is not None:
            if not isinstance(negctl, pd.DataFrame):
                raise TypeError(f"negctl must be pd.DataFrame, got {type(negctl)}")
            missing = [c for c in CHANNEL_COLUMNS if c not in negctl.columns]
            if missing:
                raise ValueError(f"negctl is missing channel columns {missing}")
            negctl = negctl.loc[:, list(CHANNEL_COLUMNS)].astype(np.float64)
            if (negctl.to_numpy() < 0).any():
                raise ValueError("negctl contains negative intensities")
        self._negctl = negctl

        if (oobG is None) != (oobR is None):
            raise ValueError("oobG and oobR must be given together")
        self._oobG = None if oobG is None else _validate_background_vector(oobG, 'oobG')
        self._oobR = None if oobR is None else _validate_background_vector(oobR, 'oobR')

        if pval is not None and not isinstance(pval, pd.Series):
            raise TypeError(f"pval must be pd.Series, got {type(pval)}")
        self._pval = pval
        self._name = name

    @property
    def IR(self) -> pd.DataFrame:
        """Infinium I Red (M, U) matrix."""
        return self._matrices[DesignType.IR]

    @property
    def IG(self) -> pd.DataFrame:
        """Infinium I Green (M, U) matrix."""
        return self._matrices[DesignType.IG]

    @property
    def II(self) -> pd.DataFrame:
        """Infinium II (M, U) matrix."""
        return self._matrices[DesignType.II]

    @property
    def negctl(self) -> Optional[pd.DataFrame]:
        """Negative-control table (columns G, R), or None."""
        return self._negctl

    @property
    def oobG(self) -> Optional[np.ndarray]:
        return self._oobG

    @property
    def oobR(self) -> Optional[np.ndarray]:
        return self._oobR

    @property
    def pval(self) -> Optional[pd.Series]:
        """Detection p-values indexed by probe identifier, or None."""
        return self._pval

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def n_probes(self) -> int:
        """Total number of probes across the three design types."""
        return sum(len(m) for m in self._matrices.values())

    @property
    def probe_ids(self) -> pd.Index:
        """Probe identifiers of IR, IG and II concatenated in that order."""
        return self.IR.index.append([self.IG.index, self.II.index])

    @property
    def has_neg_controls(self) -> bool:
        return self._negctl is not None

    @property
    def has_oob(self) -> bool:
        return self._oobG is not None

    def design_matrix(self, design_type: DesignType) -> pd.DataFrame:
        """Return the (M, U) matrix for a design type."""
        return self._matrices[DesignType(design_type)]

    def neg_controls(self) -> pd.DataFrame:
        """
        Negative-control table with columns G and R.

        Raises:
            MissingBackgroundError: If the signal set carries no negative controls
        """
        if self._negctl is None:
            raise MissingBackgroundError(
                f"{self._label()} has no negative-control probes"
            )
        return self._negctl

    def oob(self) -> dict[Channel, np.ndarray]:
        """
        Out-of-band intensities keyed by channel.

        Raises:
            MissingBackgroundError: If the signal set carries no out-of-band signal
        """
        if self._oobG is None:
            raise MissingBackgroundError(
                f"{self._label()} has no out-of-band signal"
            )
        return {Channel.GREEN: self._oobG, Channel.RED: self._oobR}

    def with_pval(self, pval: pd.Series) -> SigSet:
        """
        Return a new SigSet carrying ``pval`` in its p-value slot.

        Matrices and background references are shared with this instance,
        which is safe because neither instance mutates them.
        """
        return SigSet(
            IR=self.IR,
            IG=self.IG,
            II=self.II,
            negctl=self._negctl,
            oobG=self._oobG,
            oobR=self._oobR,
            pval=pval,
            name=self._name,
        )

    def copy(self) -> SigSet:
        """Deep copy of every component."""
        return SigSet(
            IR=self.IR.copy(),
            IG=self.IG.copy(),
            II=self.II.copy(),
            negctl=None if self._negctl is None else self._negctl.copy(),
            oobG=None if self._oobG is None else self._oobG.copy(),
            oobR=None if self._oobR is None else self._oobR.copy(),
            pval=None if self._pval is None else self._pval.copy(),
            name=self._name,
        )

    def _label(self) -> str:
        return f"SigSet '{self._name}'" if self._name else "SigSet"

    def __repr__(self) -> str:
        """String representation for debugging."""
        background = []
        if self.has_neg_controls:
            background.append(f"negctl={len(self._negctl)}")
        if self.has_oob:
            background.append(f"oobG={len(self._oobG)}, oobR={len(self._oobR)}")
        return (
            f"{self._label()}({self.n_probes} probes)\n"
            f"  IR: {len(self.IR)}  IG: {len(self.IG)}  II: {len(self.II)}\n"
            f"  Background: {', '.join(background) or 'none'}\n"
            f"  pval: {'absent' if self._pval is None else len(self._pval)}"
        )

    def __str__(self) -> str:
        return self.__repr__()
