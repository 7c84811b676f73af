"""
Command line front end.

Usage:
    h5zbench test --input reads.h5 --filters GZIP,ZSTD,LZ4
    h5zbench test --input reads.h5 --filters BLOSC --levels 1,5,9 --format csv
    h5zbench help
"""

import argparse
import os
import sys
from typing import List, Optional

from .filters import list_filters
from .library import LIBRARY, hdf5_session, hdf5_version, plugin_version
from .report import FORMATS, print_summary, write_report
from .sweep import DEFAULT_OUTPUT_DIR, TestConfig, run_sweep
from .utils import ensure_dir, list_files, split_csv

DEFAULT_INPUT = "test_data.h5"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="h5zbench",
        description="HDF5 Compression Benchmark Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  test            Run compression tests
  help            Show this help message

Examples:
  # Sweep the registered levels of two filters
  h5zbench test --input reads.h5 --filters GZIP,ZSTD

  # Only levels 1, 6 and 9, with a shuffle variant of every trial
  h5zbench test --input reads.h5 --filters BLOSC,LZ4 --default-levels --shuffle

  # Machine readable report
  h5zbench test --input reads.h5 --filters SZIP --format json --output szip.json
        """,
    )
    parser.add_argument("command", nargs="?", default="help", help="test or help")
    parser.add_argument("--input", type=str, default=None, help="Input HDF5 file (default: first *.h5 in the working directory)")
    parser.add_argument("--dir", type=str, default=None, help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("--output", type=str, default=None, help="Report file (default: <dir>/test_report.<ext>)")
    parser.add_argument("--filters", type=str, default="", help="Comma-separated list of filters to test")
    parser.add_argument("--levels", type=str, default=None, help="Comma-separated list of compression levels for every filter")
    parser.add_argument("--default-levels", action="store_true", help="Use levels 1,6,9 instead of each filter's registered levels")
    parser.add_argument("--shuffle", action="store_true", help="Also test every filter with the shuffle pre-filter")
    parser.add_argument("--format", type=str, default="markdown", choices=sorted(FORMATS), help="Report format")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    return parser


def print_filters() -> None:
    print(f"\nKnown filters (HDF5 {hdf5_version()}, hdf5plugin {plugin_version()}):")
    with hdf5_session():
        for spec in list_filters():
            available = "yes" if LIBRARY.available_filters.get(spec.name) else "no"
            levels = ",".join(str(level) for level in spec.supported_levels) or "-"
            print(f"  {spec.name:<12} {spec.filter_id:>6}  available: {available:<4} levels: {levels:<14} {spec.description}")


def config_from_args(args) -> TestConfig:
    input_file = args.input
    if not input_file:
        candidates = list_files(".", "*.h5")
        if candidates:
            input_file = candidates[0]
            print(f"Using input file: {input_file}")
        else:
            input_file = DEFAULT_INPUT
            print(f"No HDF5 file found, using {input_file}")

    levels = None
    if args.levels:
        levels = [int(level) for level in split_csv(args.levels)]

    output_dir = args.dir or os.environ.get("H5ZBENCH_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
    report_file = args.output or os.path.join(output_dir, "test_report" + FORMATS[args.format])

    return TestConfig(
        input_file=input_file,
        output_dir=output_dir,
        filters_to_test=split_csv(args.filters),
        test_all_levels=not args.default_levels,
        include_shuffle=args.shuffle,
        levels=levels,
        verbose=args.verbose,
        report_format=args.format,
        report_file=report_file,
    )


def run_tests(args) -> int:
    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"Error: Invalid --levels value: {e}", file=sys.stderr)
        return 1

    if not config.filters_to_test:
        print("Warning: No filters given (--filters); only the baseline will be reported", file=sys.stderr)

    print("Running compression tests...")
    print(f"Testing {len(config.filters_to_test)} filters")

    with hdf5_session():
        results = run_sweep(config)

    print_summary(results)

    ensure_dir(os.path.dirname(config.report_file))
    if write_report(results, config.report_file, config.report_format):
        print(f"Test report generated: {config.report_file}")
        return 0
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "help":
        parser.print_help()
        print_filters()
        return 0
    if args.command == "test":
        return run_tests(args)

    print(f"Unknown command: {args.command}")
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
