"""
One benchmarking trial: mirror an input container under a single
(filter, level) setting and measure what came out.
"""

import os
import sys
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import h5py

from .codecs import derive_params
from .filters import describe_params, is_known, lookup
from .library import hdf5_session
from .mirror import Diagnostic, TraversalState, mirror
from .utils import base_name, elapsed_ms, ensure_dir, file_exists, format_ratio


@dataclass(frozen=True)
class CompressionResult:
    filter_name: str
    parameters: str = ""
    compression_level: int = 0
    compression_ratio: float = 1.0
    compression_time_ms: float = 0.0
    decompression_time_ms: float = 0.0
    compressed_size_bytes: int = 0
    original_size_bytes: int = 0
    output_path: str = ""
    validated: bool = False
    diagnostics: List[Diagnostic] = field(default_factory=list, compare=False, repr=False)

    def as_record(self) -> dict:
        """The fields that go into reports, in report column order."""
        return {
            "filter_name": self.filter_name,
            "parameters": self.parameters,
            "compression_level": self.compression_level,
            "compression_ratio": self.compression_ratio,
            "compression_time_ms": self.compression_time_ms,
            "decompression_time_ms": self.decompression_time_ms,
            "compressed_size_bytes": self.compressed_size_bytes,
            "original_size_bytes": self.original_size_bytes,
        }


def compute_ratio(original_bytes: int, compressed_bytes: int) -> float:
    if original_bytes > 0 and compressed_bytes > 0:
        return original_bytes / compressed_bytes
    return 1.0


def trial_name(filter_name: str, shuffle: bool = False) -> str:
    return f"SHUFFLE+{filter_name}" if shuffle else filter_name


def output_path_for(input_path: str, filter_name: str, level: int, output_dir: str = "") -> str:
    """Deterministic destination file for one trial: ``<stem>_<FILTER>_L<level>.h5``."""
    return os.path.join(output_dir, f"{base_name(input_path)}_{filter_name}_L{level}.h5")


def run_one(
    input_path: str,
    filter_name: str,
    params: Optional[Sequence[int]] = None,
    level: int = -1,
    output_dir: str = "",
    shuffle: bool = False,
    verbose: bool = False,
) -> CompressionResult:
    """
    Run a single compression trial.

    Args:
        input_path: Source HDF5 file, opened read-only.
        filter_name: Registered filter name (see ``h5zbench.filters``).
        params: Explicit cd_values; derived from ``level`` when None.
        level: Abstract compression level passed to the parameter deriver.
        output_dir: Directory for the recompressed copy (created if missing).
        shuffle: Put the byte-shuffle filter ahead of the codec.
        verbose: Print every visited object.

    Returns:
        CompressionResult: Sizes and timings of the trial. Setup failures
        (missing input, unknown filter, unopenable files) give a result with
        zero sizes and a ratio of 1.0 instead of raising.
    """
    name = trial_name(filter_name, shuffle)
    zero = CompressionResult(filter_name=name, parameters="shuffle=1" if shuffle else "", compression_level=level)

    print(f"Testing compression: {name} (level {level})")

    if not file_exists(input_path):
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return zero

    spec = lookup(filter_name)
    if not is_known(spec):
        print(f"Error: Unknown filter: {filter_name}", file=sys.stderr)
        return zero

    name = trial_name(spec.name, shuffle)
    params = list(params) if params is not None else derive_params(spec.filter_id, level)
    description = describe_params(spec.filter_id, params)
    if shuffle:
        description = f"shuffle=1, {description}"

    if not ensure_dir(output_dir):
        print(f"Error: Failed to create output directory: {output_dir}", file=sys.stderr)
        return zero
    output_path = output_path_for(input_path, name, level, output_dir)
    print(f"  Output file: {output_path}")

    with hdf5_session():
        try:
            src = h5py.File(input_path, "r")
        except Exception as e:
            print(f"Error: Failed to open input file: {input_path} ({e})", file=sys.stderr)
            return zero

        with src:
            try:
                dst = h5py.File(output_path, "w")
            except Exception as e:
                print(f"Error: Failed to create output file: {output_path} ({e})", file=sys.stderr)
                return zero

            with dst:
                state = TraversalState(src, dst, spec, params, shuffle=shuffle, verbose=verbose)
                t0 = time.perf_counter()
                try:
                    mirror(state)
                except Exception as e:
                    print(f"Error: Failed to traverse HDF5 file structure: {e}", file=sys.stderr)
                compression_time_ms = elapsed_ms(t0)

        if verbose:
            print(f"  Total groups created: {len(state.materialized)}")

        # Reopening is the whole validation; content is not compared
        t0 = time.perf_counter()
        try:
            with h5py.File(output_path, "r"):
                validated = True
        except Exception as e:
            validated = False
            print(f"Warning: Output file could not be reopened: {output_path} ({e})", file=sys.stderr)
        decompression_time_ms = elapsed_ms(t0)

    result = CompressionResult(
        filter_name=name,
        parameters=description,
        compression_level=level,
        compression_ratio=compute_ratio(state.original_bytes, state.compressed_bytes),
        compression_time_ms=compression_time_ms,
        decompression_time_ms=decompression_time_ms,
        compressed_size_bytes=state.compressed_bytes,
        original_size_bytes=state.original_bytes,
        output_path=output_path,
        validated=validated,
        diagnostics=list(state.diagnostics),
    )

    print(
        f"  Compression ratio: {format_ratio(result.compression_ratio)}, "
        f"Time: {result.compression_time_ms:.1f} ms, Output: {output_path}"
    )
    return result
