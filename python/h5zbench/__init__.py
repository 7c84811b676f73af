"""
h5zbench - HDF5 compression filter benchmark

Mirrors an HDF5 container into a new file, recompresses its /Raw/Signal
datasets under a chosen filter and level, and compares size and speed across
many such trials.
"""

from .filters import FilterSpec, list_filters, lookup, describe_params
from .codecs import derive_params
from .mirror import TraversalState, mirror
from .runner import CompressionResult, run_one
from .sweep import TestConfig, build_matrix, run_sweep
from .report import analyze, write_report

__version__ = "0.1.0"

# Convenience aliases
benchmark = run_sweep
trial = run_one

__all__ = [
    "FilterSpec",
    "list_filters",
    "lookup",
    "describe_params",
    "derive_params",
    "TraversalState",
    "mirror",
    "CompressionResult",
    "run_one",
    "TestConfig",
    "build_matrix",
    "run_sweep",
    "analyze",
    "write_report",
    "benchmark",
    "trial",
]
