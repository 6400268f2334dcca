"""
I/O module for loading signal sets and writing detection p-values.

The detection estimators never touch the filesystem; this module is what the
command-line interface uses around them.

Key Functions:
    - load_sigset: Load a SigSet from a directory of CSV files
    - write_pvalues: Write a scored SigSet's p-values to CSV

Examples:
    >>> from methyldetect.io import load_sigset, write_pvalues
    >>> from methyldetect.detection import detection_p_oob_ecdf
    >>>
    >>> sset = load_sigset(Path("samples/GSM1234"))
    >>> write_pvalues(detection_p_oob_ecdf(sset), Path("GSM1234.pval.csv"))
"""

from methyldetect.io.loaders import load_sigset, load_design_csv
from methyldetect.io.writers import write_pvalues

__all__ = [
    'load_sigset',
    'load_design_csv',
    'write_pvalues',
]
