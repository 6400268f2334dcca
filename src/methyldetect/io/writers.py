"""
CSV writer for detection p-values.

Examples:
    >>> from pathlib import Path
    >>> from methyldetect.io.writers import write_pvalues
    >>>
    >>> write_pvalues(scored, Path("results/GSM1234.pval.csv"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from methyldetect.core.sigset import SigSet

logger = logging.getLogger(__name__)

__all__ = ['write_pvalues']


def write_pvalues(sset: SigSet, path: Path, float_format: Optional[str] = None) -> Path:
    """
    Write a SigSet's detection p-values to CSV.

    Output:
        Two columns, ``probe_id`` and ``pval``, in the SigSet's p-value
        order (ascending probe identifier for estimator output). Missing
        p-values are written as empty fields.

    Args:
        sset: SigSet with a populated pval slot
        path: Output CSV path; parent directories are created
        float_format: Optional format string passed to ``DataFrame.to_csv``
            (e.g. ``"%.6g"``)

    Returns:
        The path written

    Raises:
        TypeError: If sset is not a SigSet
        ValueError: If the p-value slot is empty
        OSError: If path is not writable
    """
    if not isinstance(sset, SigSet):
        raise TypeError(f"sset must be SigSet, got {type(sset)}")

    if sset.pval is None:
        raise ValueError("SigSet has no detection p-values; run an estimator first")

    path = Path(path)
    if path.parent != Path('.') and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    frame = sset.pval.rename('pval').rename_axis('probe_id').reset_index()
    try:
        frame.to_csv(path, index=False, float_format=float_format)
    except OSError as e:
        raise OSError(f"Failed to write p-value file {path}: {e}") from e

    logger.info(f"Wrote {len(frame):,} detection p-values to {path}")
    return path
