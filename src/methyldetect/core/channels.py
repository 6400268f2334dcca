"""
Fluorescence channels and probe design types.

Infinium arrays read two fluorescence channels. Which channel carries the
methylated (M) and unmethylated (U) allele depends on the probe chemistry:

Biological Context:
    - Infinium I, Red (IR): two beads per probe, both read in Red.
    - Infinium I, Green (IG): two beads per probe, both read in Green.
    - Infinium II (II): one bead, single-base extension. The methylated
      allele is read in Green and the unmethylated allele in Red.

    Detection estimators compare each allele against the background of the
    channel it was read from, so this mapping is the one piece of chemistry
    every estimator depends on.

Examples:
    >>> from methyldetect.core.channels import DesignType, Channel
    >>> DesignType.IR.channels
    (<Channel.RED: 'R'>, <Channel.RED: 'R'>)
    >>> DesignType("II").u_channel is Channel.RED
    True
"""

from __future__ import annotations

from enum import Enum

__all__ = ['Channel', 'DesignType']


class Channel(Enum):
    """
    Fluorescence channel of an Infinium scan.

    Values match the column labels used for negative-control tables
    (``G`` and ``R``).
    """

    GREEN = "G"
    RED = "R"


class DesignType(Enum):
    """
    Probe design type with its channel-to-allele mapping.

    Attributes:
        IR: Infinium I, Red channel design (M and U both Red)
        IG: Infinium I, Green channel design (M and U both Green)
        II: Infinium II design (M read in Green, U read in Red)

    Iteration order (IR, IG, II) is the order in which estimators score
    design types before the merged result is re-sorted by probe identifier.
    """

    IR = "IR"
    IG = "IG"
    II = "II"

    @property
    def m_channel(self) -> Channel:
        """Channel the methylated allele is read from."""
        return _ALLELE_CHANNELS[self][0]

    @property
    def u_channel(self) -> Channel:
        """Channel the unmethylated allele is read from."""
        return _ALLELE_CHANNELS[self][1]

    @property
    def channels(self) -> tuple[Channel, Channel]:
        """(M channel, U channel) pair."""
        return _ALLELE_CHANNELS[self]

    @property
    def is_type_one(self) -> bool:
        """True for the two Infinium I designs (both alleles share a channel)."""
        return self.m_channel is self.u_channel


_ALLELE_CHANNELS: dict[DesignType, tuple[Channel, Channel]] = {
    DesignType.IR: (Channel.RED, Channel.RED),
    DesignType.IG: (Channel.GREEN, Channel.GREEN),
    DesignType.II: (Channel.GREEN, Channel.RED),
}
