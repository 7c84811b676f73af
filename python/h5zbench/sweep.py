"""
Drive a full benchmark: an uncompressed baseline followed by every
(filter, level) trial the configuration asks for.
"""

import os
import sys
import time
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence

from .filters import lookup
from .library import hdf5_session
from .runner import CompressionResult, run_one
from .utils import elapsed_ms, file_exists, file_size, format_duration, format_ratio, format_size

DEFAULT_LEVELS = (1, 6, 9)
DEFAULT_OUTPUT_DIR = "results"
BASELINE_NAME = "None"


@dataclass(frozen=True)
class TestConfig:
    __test__ = False

    input_file: str
    output_dir: str = field(default_factory=lambda: os.environ.get("H5ZBENCH_OUTPUT_DIR", DEFAULT_OUTPUT_DIR))
    filters_to_test: Sequence[str] = ()
    test_all_levels: bool = True
    include_shuffle: bool = False
    levels: Optional[Sequence[int]] = None
    verbose: bool = False
    report_format: str = "markdown"
    report_file: Optional[str] = None


class Trial(NamedTuple):
    filter_name: str
    level: int
    shuffle: bool = False


def levels_for(filter_name: str, config: TestConfig) -> List[int]:
    """Levels to sweep for one filter: explicit override, registered levels, or 1/6/9."""
    if config.levels:
        return list(config.levels)
    spec = lookup(filter_name)
    if config.test_all_levels and spec.supported_levels:
        return list(spec.supported_levels)
    return list(DEFAULT_LEVELS)


def build_matrix(config: TestConfig) -> List[Trial]:
    """Every non-baseline trial of the sweep, in execution order."""
    trials = []
    for filter_name in config.filters_to_test:
        for level in levels_for(filter_name, config):
            trials.append(Trial(filter_name, level))
            if config.include_shuffle:
                trials.append(Trial(filter_name, level, shuffle=True))
    return trials


def baseline_result(input_file: str) -> CompressionResult:
    size = file_size(input_file)
    return CompressionResult(
        filter_name=BASELINE_NAME,
        parameters="",
        compression_level=0,
        compression_ratio=1.0,
        compressed_size_bytes=size,
        original_size_bytes=size,
    )


def is_baseline(result: CompressionResult) -> bool:
    return result.filter_name == BASELINE_NAME


def run_sweep(config: TestConfig) -> List[CompressionResult]:
    """
    Run the baseline and every trial of ``config`` in order.

    A failing trial yields a zero result and the sweep moves on; the returned
    list always starts with the baseline.
    """
    print("Starting compression test suite...")
    t0 = time.perf_counter()
    print(f"Input file: {config.input_file}")
    print(f"Output directory: {config.output_dir}")
    print(f"Filters to test: {len(config.filters_to_test)}")

    if not file_exists(config.input_file):
        print(f"Warning: Input file does not exist: {config.input_file}", file=sys.stderr)

    baseline = baseline_result(config.input_file)
    print(f"Original file size: {format_size(baseline.original_size_bytes)}")
    results = [baseline]

    trials = build_matrix(config)
    with hdf5_session():
        current = None
        for trial in trials:
            if trial.filter_name != current:
                current = trial.filter_name
                spec = lookup(current)
                print(f"\nTesting filter: {current}")
                print(f"Description: {spec.description}")
            print(f"  Testing level {trial.level}...")
            result = run_one(
                config.input_file,
                trial.filter_name,
                level=trial.level,
                output_dir=config.output_dir,
                shuffle=trial.shuffle,
                verbose=config.verbose,
            )
            results.append(result)
            print(f"  Ratio: {format_ratio(result.compression_ratio)}, Time: {result.compression_time_ms:.1f} ms")

    print(f"\nTest suite completed. Total results: {len(results)} in {format_duration(elapsed_ms(t0))}")
    return results
