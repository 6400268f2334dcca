"""
MethylDetect CLI - Command-line interface for detection p-values.

Commands:
    methyldetect detect   - Compute detection p-values for a signal set
    methyldetect methods  - List available detection estimators
"""

import argparse
import sys
from typing import Optional, List


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for methyldetect."""
    parser = argparse.ArgumentParser(
        prog="methyldetect",
        description="Detection p-values for Infinium DNA-methylation arrays",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  detect    Compute detection p-values for a signal set
  methods   List available detection estimators

Examples:
  methyldetect detect --input samples/GSM1234 --output GSM1234.pval.csv
  methyldetect detect --input samples/GSM1234 --output out.csv --method oob_ecdf
  methyldetect methods
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    from methyldetect.cli import detect
    detect.register_parser(subparsers)

    if args is None:
        args = sys.argv[1:]
    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    # Dispatch to subcommand
    return parsed_args.func(parsed_args, args)


if __name__ == "__main__":
    sys.exit(main())
