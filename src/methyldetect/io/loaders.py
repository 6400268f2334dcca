"""
CSV loader for signal sets.

Reads a SigSet stored as a directory of CSV files. Parsing raw IDAT files and
classifying probes into design types happen upstream; this loader only
reassembles their already-separated output.

Directory Layout:
    IR.csv      probe_id,M,U    (required)
    IG.csv      probe_id,M,U    (required)
    II.csv      probe_id,M,U    (required)
    negctl.csv  [probe_id,]G,R  (optional)
    oob.csv     channel,value   (optional; channel is G or R)

    A design file may contain only its header row when the array has no
    probes of that type.

Examples:
    >>> from pathlib import Path
    >>> from methyldetect.io.loaders import load_sigset
    >>>
    >>> sset = load_sigset(Path("samples/GSM1234"))
    >>> print(sset)
    SigSet 'GSM1234'(865918 probes)
      IR: 89203  IG: 46298  II: 730417
      Background: negctl=411, oobG=178406, oobR=92596
      pval: absent
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from methyldetect.core.channels import Channel, DesignType
from methyldetect.core.sigset import SigSet

logger = logging.getLogger(__name__)

__all__ = ['load_sigset', 'load_design_csv']

NEGCTL_FILE = "negctl.csv"
OOB_FILE = "oob.csv"


def _read_csv(path: Path, **kwargs) -> pd.DataFrame:
    try:
        return pd.read_csv(path, **kwargs)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"CSV file is empty: {path}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ValueError(f"Failed to read CSV file {path}: {e}") from e


def _to_numeric(df: pd.DataFrame, columns: list[str], path: Path) -> pd.DataFrame:
    for col in columns:
        try:
            df[col] = pd.to_numeric(df[col])
        except (ValueError, TypeError) as e:
            raise ValueError(f"{path}: column '{col}' contains non-numeric values ({e})") from e
    return df


def load_design_csv(path: Path) -> pd.DataFrame:
    """
    Load one design type's (M, U) matrix.

    The first column holds probe identifiers and is read as text, so
    identifiers with leading zeros survive.

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the M or U column is missing or non-numeric
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Design matrix not found: {path}")

    df = _read_csv(path, dtype=str)
    if df.shape[1] < 3:
        raise ValueError(f"{path}: expected a probe_id column followed by M and U, got {list(df.columns)}")

    missing = [c for c in ('M', 'U') if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing column(s) {missing}")

    df = df.set_index(df.columns[0])
    df = _to_numeric(df.loc[:, ['M', 'U']].copy(), ['M', 'U'], path)
    return df


def _load_negctl(path: Path) -> Optional[pd.DataFrame]:
    if not path.is_file():
        return None
    df = _read_csv(path)
    missing = [c for c in ('G', 'R') if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing channel column(s) {missing}")
    return _to_numeric(df.loc[:, ['G', 'R']].copy(), ['G', 'R'], path)


def _load_oob(path: Path) -> tuple[Optional[np.ndarray], Optional[np.ndarray]]:
    if not path.is_file():
        return None, None
    df = _read_csv(path, dtype={'channel': str})
    missing = [c for c in ('channel', 'value') if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing column(s) {missing}")

    df = _to_numeric(df, ['value'], path)
    channel = df['channel'].str.strip().str.upper()
    valid = {c.value for c in Channel}
    unknown = sorted(set(channel) - valid)
    if unknown:
        raise ValueError(f"{path}: unknown channel label(s) {unknown}; expected G or R")

    oobG = df.loc[channel == Channel.GREEN.value, 'value'].to_numpy(dtype=np.float64)
    oobR = df.loc[channel == Channel.RED.value, 'value'].to_numpy(dtype=np.float64)
    return oobG, oobR


def load_sigset(directory: Path, name: Optional[str] = None) -> SigSet:
    """
    Load a SigSet from a directory of CSV files.

    Args:
        directory: Directory following the layout in the module docstring
        name: Sample name; defaults to the directory name

    Returns:
        SigSet with negctl and/or out-of-band references when their files exist

    Raises:
        FileNotFoundError: If the directory or a design file is missing
        ValueError: If a file is malformed
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Signal-set directory not found: {directory}")

    matrices = {
        design_type.value: load_design_csv(directory / f"{design_type.value}.csv")
        for design_type in DesignType
    }
    negctl = _load_negctl(directory / NEGCTL_FILE)
    oobG, oobR = _load_oob(directory / OOB_FILE)

    if negctl is None and oobG is None:
        logger.warning(
            f"{directory} has neither {NEGCTL_FILE} nor {OOB_FILE}; "
            "no detection estimator can be applied"
        )

    sset = SigSet(
        **matrices,
        negctl=negctl,
        oobG=oobG,
        oobR=oobR,
        name=name or directory.name,
    )
    logger.info(
        f"Loaded {sset.n_probes:,} probes from {directory} "
        f"(IR={len(sset.IR):,}, IG={len(sset.IG):,}, II={len(sset.II):,})"
    )
    return sset
