"""
Pytest configuration and shared fixtures.

This module provides synthetic signal-set generators shared by all test suites.
"""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from methyldetect.core.sigset import SigSet


def design_frame(m, u, prefix: str) -> pd.DataFrame:
    """(M, U) DataFrame with probe ids ``{prefix}0000``, ``{prefix}0001``, ..."""
    m = np.asarray(m, dtype=float)
    u = np.asarray(u, dtype=float)
    index = [f"{prefix}{i:04d}" for i in range(len(m))]
    return pd.DataFrame({'M': m, 'U': u}, index=index)


def empty_frame() -> pd.DataFrame:
    return pd.DataFrame({'M': pd.Series([], dtype=float), 'U': pd.Series([], dtype=float)})


def generate_synthetic_sigset(
    n_per_type: int = 200,
    n_negctl: int = 400,
    n_oob: int = 2000,
    signal_fraction: float = 0.7,
    with_negctl: bool = True,
    with_oob: bool = True,
    seed: int = 42,
) -> SigSet:
    """
    Generate a synthetic signal set with realistic intensity ranges.

    Args:
        n_per_type: Probes per design type
        n_negctl: Number of negative-control probes
        n_oob: Out-of-band values per channel
        signal_fraction: Fraction of probes carrying real signal
        with_negctl: Include a negative-control table
        with_oob: Include out-of-band vectors
        seed: Random seed for reproducibility

    Design:
        - Background ~ lognormal around a few hundred intensity units
          (Red slightly brighter than Green, as on real scanners)
        - Detected probes have one allele in the thousands
        - Undetected probes are drawn from the background itself
    """
    rng = np.random.default_rng(seed)

    def background(channel: str, size: int) -> np.ndarray:
        mu = 5.5 if channel == 'G' else 5.8
        return rng.lognormal(mean=mu, sigma=0.4, size=size)

    def probes(m_channel: str, u_channel: str, prefix: str) -> pd.DataFrame:
        n_signal = int(n_per_type * signal_fraction)
        m = background(m_channel, n_per_type)
        u = background(u_channel, n_per_type)
        # Bright allele: methylated for half of the detected probes, unmethylated otherwise
        bright = rng.lognormal(mean=8.5, sigma=0.5, size=n_signal)
        meth = rng.random(n_signal) < 0.5
        m[:n_signal] = np.where(meth, bright, m[:n_signal])
        u[:n_signal] = np.where(meth, u[:n_signal], bright)
        return design_frame(m, u, prefix)

    negctl = None
    if with_negctl:
        negctl = pd.DataFrame({
            'G': background('G', n_negctl),
            'R': background('R', n_negctl),
        }, index=[f"neg_{i:04d}" for i in range(n_negctl)])

    oobG = oobR = None
    if with_oob:
        oobG = background('G', n_oob)
        oobR = background('R', n_oob)

    return SigSet(
        IR=probes('R', 'R', 'cgIR'),
        IG=probes('G', 'G', 'cgIG'),
        II=probes('G', 'R', 'cgII'),
        negctl=negctl,
        oobG=oobG,
        oobR=oobR,
        name="synthetic",
    )


@pytest.fixture
def sigset():
    """Synthetic signal set with both negative controls and out-of-band signal."""
    return generate_synthetic_sigset()


@pytest.fixture
def small_negctl():
    """Five-probe negative-control table used in worked examples."""
    return pd.DataFrame({
        'G': [10.0, 12.0, 11.0, 9.0, 10.0],
        'R': [8.0, 9.0, 7.0, 8.0, 10.0],
    })


@pytest.fixture
def bright_ir_sigset(small_negctl):
    """One IR probe (M=50, U=5) far above the small negative-control range."""
    return SigSet(
        IR=pd.DataFrame({'M': [50.0], 'U': [5.0]}, index=['cg_bright']),
        IG=empty_frame(),
        II=empty_frame(),
        negctl=small_negctl,
    )


def write_sigset_dir(directory: Path, sset: SigSet) -> Path:
    """Write a SigSet in the CSV directory layout read by load_sigset."""
    directory.mkdir(parents=True, exist_ok=True)
    for label, frame in (('IR', sset.IR), ('IG', sset.IG), ('II', sset.II)):
        frame.rename_axis('probe_id').to_csv(directory / f"{label}.csv")
    if sset.negctl is not None:
        sset.negctl.to_csv(directory / "negctl.csv", index=False)
    if sset.oobG is not None:
        oob = pd.DataFrame({
            'channel': ['G'] * len(sset.oobG) + ['R'] * len(sset.oobR),
            'value': np.concatenate([sset.oobG, sset.oobR]),
        })
        oob.to_csv(directory / "oob.csv", index=False)
    return directory


@pytest.fixture
def sigset_dir(tmp_path, sigset):
    """Synthetic signal set written to a temporary CSV directory."""
    return write_sigset_dir(tmp_path / "GSM0001", sigset)
