"""
MethylDetect detect command - detection p-values for one signal set.

Usage:
    methyldetect detect --input samples/GSM1234 --output GSM1234.pval.csv
    methyldetect detect --input samples/GSM1234 --output out.csv --method oob_ecdf
    methyldetect detect --config detect.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from methyldetect.cli.config import load_config, merge_config_with_args
from methyldetect.core.sigset import InvalidSignalSetError, MissingBackgroundError
from methyldetect.detection.background import InsufficientBackgroundError
from methyldetect.detection.merge import ProbeCollisionError
from methyldetect.detection.methods import MethodName, available_methods, get_method
from methyldetect.io.loaders import load_sigset
from methyldetect.io.writers import write_pvalues

logger = logging.getLogger(__name__)

DETECTION_ERRORS = (
    InvalidSignalSetError,
    MissingBackgroundError,
    InsufficientBackgroundError,
    ProbeCollisionError,
)

SUMMARY_ALPHA = 0.05


def _method_name(value: str) -> str:
    """argparse type accepting estimator names with hyphens or underscores."""
    key = value.strip().lower().replace('-', '_')
    valid = [m.value for m in MethodName]
    if key not in valid:
        raise argparse.ArgumentTypeError(
            f"{value} is not a detection method (choose from {', '.join(valid)})"
        )
    return key


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the detect and methods subcommands."""
    parser = subparsers.add_parser(
        "detect",
        help="Compute detection p-values for a signal set",
        description=(
            "Score every probe of a signal set against a background model and\n"
            "write one detection p-value per probe, sorted by probe identifier."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Input directory layout:
  IR.csv, IG.csv, II.csv   probe_id,M,U
  negctl.csv               G,R            (negative-control methods)
  oob.csv                  channel,value  (oob_ecdf)

Examples:
  methyldetect detect --input samples/GSM1234 --output GSM1234.pval.csv
  methyldetect detect -i samples/GSM1234 -o out.csv --method neg-norm-total
  methyldetect detect --config detect.yaml --verbose
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=Path,
        help="Signal-set directory"
    )

    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output CSV for detection p-values"
    )

    parser.add_argument(
        "--method", "-m",
        type=_method_name,
        default=MethodName.NEG_ECDF.value,
        help=f"Detection estimator (default: {MethodName.NEG_ECDF.value})"
    )

    parser.add_argument(
        "--float-format",
        dest="float_format",
        default=None,
        help="printf-style format for p-values, e.g. %%.6g"
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="YAML or JSON config file (CLI arguments override it)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log at DEBUG level"
    )

    parser.set_defaults(func=run_detect, log_level="INFO")

    methods_parser = subparsers.add_parser(
        "methods",
        help="List available detection estimators",
    )
    methods_parser.set_defaults(func=run_methods)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger().setLevel(level)


def run_detect(args: argparse.Namespace, cli_args: Optional[List[str]] = None) -> int:
    """Execute the detect command."""
    if args.config is not None:
        try:
            config = load_config(args.config)
            args = merge_config_with_args(config, args, cli_args)
        except (FileNotFoundError, ValueError) as e:
            _configure_logging("INFO")
            logger.error(str(e))
            return 1

    _configure_logging("DEBUG" if args.verbose else args.log_level)

    if args.input is None or args.output is None:
        logger.error("Both --input and --output are required (on the command line or in --config)")
        return 1

    try:
        method = get_method(args.method)
    except ValueError as e:
        logger.error(str(e))
        return 1

    try:
        sset = load_sigset(args.input)
    except (FileNotFoundError, ValueError, TypeError) as e:
        logger.error(f"Could not load signal set: {e}")
        return 1

    logger.info(f"Method: {method.name.value} ({method.description})")
    try:
        scored = method.apply(sset)
    except DETECTION_ERRORS as e:
        logger.error(f"Detection failed: {e}")
        return 1

    write_pvalues(scored, args.output, float_format=args.float_format)

    pvals = scored.pval.to_numpy()
    n_scored = int(np.isfinite(pvals).sum())
    n_detected = int((pvals < SUMMARY_ALPHA).sum())
    frac = n_detected / n_scored if n_scored else 0.0
    logger.info(
        f"{n_detected:,} of {len(pvals):,} probes have p < {SUMMARY_ALPHA} ({frac:.1%})"
    )
    return 0


def run_methods(args: argparse.Namespace, cli_args: Optional[List[str]] = None) -> int:
    """Print the registered estimators."""
    width = max(len(name) for name in available_methods())
    for name, description in available_methods().items():
        sys.stdout.write(f"{name:<{width}}  {description}\n")
    return 0
