"""
Core data structures for Infinium signal sets.

This module provides the foundational types the detection estimators build upon:

1. SigSet: Immutable per-sample container of probe intensities and background references
2. Channel: The two fluorescence channels (Green, Red)
3. DesignType: The three probe chemistries and their channel-to-allele mapping

Design Philosophy:
    - Immutability: Estimators return new SigSet instances (functional style)
    - Validation: Constructors reject malformed matrices before any statistics run
    - Domain Expertise: Channel assignments live in one enum, not in every estimator

Examples:
    >>> from methyldetect.core import SigSet, DesignType
    >>>
    >>> sset = SigSet(IR=ir, IG=ig, II=ii, negctl=negctl)
    >>> DesignType.II.m_channel
    <Channel.GREEN: 'G'>
"""

from methyldetect.core.channels import Channel, DesignType
from methyldetect.core.sigset import (
    SigSet,
    InvalidSignalSetError,
    MissingBackgroundError,
)

__all__ = [
    'Channel',
    'DesignType',
    'SigSet',
    'InvalidSignalSetError',
    'MissingBackgroundError',
]
