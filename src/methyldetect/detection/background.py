"""
Background model fitting for detection p-values.

A detection p-value asks how likely a probe's intensity is under the
background distribution of the channel it was read from. This module fits
that background distribution from reference intensities (negative-control
probes or out-of-band signal) in one of two families:

Empirical:
    ``Ecdf`` stores the sorted reference values and evaluates
    F(x) = #(reference <= x) / n by binary search (``np.searchsorted``),
    so scoring N probes against n references costs O(N log n).

Parametric:
    ``NormalBackground`` is a (location, scale) pair evaluated through
    ``scipy.stats.norm``. Per-channel fits use the median as location;
    the pooled Genome-Studio-style fit uses the mean of both channels
    combined. Scale is always the sample standard deviation (ddof=1).

Warning convention:
    logger.warning() -- non-finite reference values were dropped
    logger.debug() -- fitted parameters
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.stats import norm

from methyldetect.core.channels import Channel

logger = logging.getLogger(__name__)

__all__ = [
    'Ecdf',
    'NormalBackground',
    'InsufficientBackgroundError',
    'fit_ecdf_background',
    'fit_normal_background',
    'fit_pooled_normal_background',
]


class InsufficientBackgroundError(ValueError):
    """Raised when a background reference is too small to fit its model."""
    pass


def _finite_reference(values: ArrayLike, label: str) -> NDArray[np.float64]:
    """Return the finite values of a reference vector, warning on drops."""
    arr = np.asarray(values, dtype=np.float64).ravel()
    finite = np.isfinite(arr)
    n_dropped = int((~finite).sum())
    if n_dropped:
        logger.warning(
            f"Dropped {n_dropped} non-finite values from {label} background "
            f"({finite.sum()} remain)"
        )
        arr = arr[finite]
    return arr


class Ecdf:
    """
    Empirical cumulative distribution function of a reference sample.

    Right-continuous step function: F(x) is the fraction of reference values
    less than or equal to x. Queries below the smallest reference give 0,
    queries at or above the largest give 1. NaN queries give NaN.

    Examples:
        >>> F = Ecdf([8, 9, 7, 8, 10])
        >>> F([7, 8, 100])
        array([0.2, 0.6, 1. ])
    """

    def __init__(self, values: ArrayLike, label: str = "reference"):
        ref = _finite_reference(values, label)
        if ref.size == 0:
            raise InsufficientBackgroundError(
                f"Cannot fit ECDF: {label} background is empty"
            )
        self._sorted = np.sort(ref)
        self.label = label

    @property
    def n(self) -> int:
        """Number of reference values."""
        return int(self._sorted.size)

    @property
    def support(self) -> tuple[float, float]:
        """(min, max) of the reference sample."""
        return float(self._sorted[0]), float(self._sorted[-1])

    def __call__(self, x: ArrayLike) -> NDArray[np.float64]:
        q = np.asarray(x, dtype=np.float64)
        ranks = np.searchsorted(self._sorted, q, side='right')
        result = ranks / self._sorted.size
        # NaN sorts after every reference and would otherwise score F = 1
        return np.where(np.isnan(q), np.nan, result)

    def __repr__(self) -> str:
        lo, hi = self.support
        return f"Ecdf({self.label}, n={self.n}, range=[{lo:g}, {hi:g}])"


@dataclass(frozen=True)
class NormalBackground:
    """
    Normal background model N(loc, scale).

    Attributes:
        loc: Location of the background distribution
        scale: Standard deviation of the background distribution (> 0)

    Adding two models sums both location and scale. This is how a
    single-channel fit is scaled to the sum of two channels in the
    channel-sum estimator (``NormalBackground(mu, sd) + NormalBackground(mu, sd)``
    is ``NormalBackground(2 mu, 2 sd)``).
    """

    loc: float
    scale: float

    def sf(self, x: ArrayLike) -> NDArray[np.float64]:
        """Survival function 1 - Phi(x; loc, scale)."""
        return norm.sf(np.asarray(x, dtype=np.float64), loc=self.loc, scale=self.scale)

    def cdf(self, x: ArrayLike) -> NDArray[np.float64]:
        """Cumulative distribution Phi(x; loc, scale)."""
        return norm.cdf(np.asarray(x, dtype=np.float64), loc=self.loc, scale=self.scale)

    def __add__(self, other: NormalBackground) -> NormalBackground:
        if not isinstance(other, NormalBackground):
            return NotImplemented
        return NormalBackground(loc=self.loc + other.loc, scale=self.scale + other.scale)

    def to_dict(self) -> dict[str, float]:
        """Serialize to JSON-compatible dict."""
        return {'loc': self.loc, 'scale': self.scale}


def _normal_from_values(values: NDArray[np.float64], label: str, location: str) -> NormalBackground:
    """Fit N(loc, sd) from already-finite values."""
    if values.size < 2:
        raise InsufficientBackgroundError(
            f"Cannot fit normal background: {label} has {values.size} value(s), "
            f"at least 2 are needed to estimate a standard deviation"
        )

    if location == 'median':
        loc = float(np.median(values))
    elif location == 'mean':
        loc = float(np.mean(values))
    else:
        raise ValueError(f"location must be 'median' or 'mean', got {location!r}")

    scale = float(np.std(values, ddof=1))
    if not scale > 0:
        raise InsufficientBackgroundError(
            f"Cannot fit normal background: {label} values have zero spread"
        )

    model = NormalBackground(loc=loc, scale=scale)
    logger.debug(f"Fitted {label} background: loc={loc:.4g}, scale={scale:.4g} (n={values.size})")
    return model


def fit_ecdf_background(
    green: ArrayLike,
    red: ArrayLike,
) -> dict[Channel, Ecdf]:
    """
    Fit one ECDF per channel.

    Args:
        green: Green-channel background intensities
        red: Red-channel background intensities

    Returns:
        Mapping Channel -> Ecdf

    Raises:
        InsufficientBackgroundError: If either channel has no finite values
    """
    return {
        Channel.GREEN: Ecdf(green, label='Green'),
        Channel.RED: Ecdf(red, label='Red'),
    }


def fit_normal_background(
    green: ArrayLike,
    red: ArrayLike,
    location: str = 'median',
) -> dict[Channel, NormalBackground]:
    """
    Fit one normal background per channel.

    Location is the channel median by default (robust to the occasional
    bright negative control); scale is the channel's sample standard
    deviation.

    Args:
        green: Green-channel background intensities
        red: Red-channel background intensities
        location: 'median' or 'mean'

    Returns:
        Mapping Channel -> NormalBackground

    Raises:
        InsufficientBackgroundError: If a channel has fewer than 2 finite
            values or zero spread
    """
    return {
        Channel.GREEN: _normal_from_values(_finite_reference(green, 'Green'), 'Green', location),
        Channel.RED: _normal_from_values(_finite_reference(red, 'Red'), 'Red', location),
    }


def fit_pooled_normal_background(green: ArrayLike, red: ArrayLike) -> NormalBackground:
    """
    Fit a single normal background from both channels pooled together.

    Emulates the Genome Studio detection call: the Green and Red
    background intensities are concatenated and summarised by their mean
    and sample standard deviation. The same model is then used for every
    design type and both alleles.

    Raises:
        InsufficientBackgroundError: If either channel has fewer than 2
            finite values, or the pooled values have zero spread
    """
    channels = {
        'Green': _finite_reference(green, 'Green'),
        'Red': _finite_reference(red, 'Red'),
    }
    for label, values in channels.items():
        if values.size < 2:
            raise InsufficientBackgroundError(
                f"Cannot fit pooled normal background: {label} has {values.size} "
                f"value(s), at least 2 per channel are needed"
            )
    pooled = np.concatenate(list(channels.values()))
    return _normal_from_values(pooled, 'pooled Green+Red', location='mean')
