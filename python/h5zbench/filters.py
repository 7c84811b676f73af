"""
Catalog of the HDF5 filters h5zbench knows how to benchmark.

Each entry is a FilterSpec: the registered HDF5 filter id, the name used on
the command line and in reports, the compression levels worth sweeping, and
how many cd_values the filter accepts. Lookups never raise; an unknown name
or id resolves to a sentinel spec whose ``filter_id`` callers must check.
"""

from typing import NamedTuple, Tuple, List, Union, Sequence

import h5py
import hdf5plugin

# Built into HDF5
FILTER_DEFLATE = h5py.h5z.FILTER_DEFLATE
FILTER_SHUFFLE = h5py.h5z.FILTER_SHUFFLE
FILTER_FLETCHER32 = h5py.h5z.FILTER_FLETCHER32
FILTER_SZIP = h5py.h5z.FILTER_SZIP
FILTER_NBIT = h5py.h5z.FILTER_NBIT
FILTER_SCALEOFFSET = h5py.h5z.FILTER_SCALEOFFSET

# Shipped with h5py
FILTER_LZF = h5py.h5z.FILTER_LZF

# Registered by hdf5plugin
FILTER_BZIP2 = hdf5plugin.BZIP2_ID
FILTER_BLOSC = hdf5plugin.BLOSC_ID
FILTER_LZ4 = hdf5plugin.LZ4_ID
FILTER_BSHUF = hdf5plugin.BSHUF_ID
FILTER_ZFP = hdf5plugin.ZFP_ID
FILTER_ZSTD = hdf5plugin.ZSTD_ID
FILTER_BLOSC2 = hdf5plugin.BLOSC2_ID

# Nanopore VBZ, registered id; the plugin ships with ont-vbz-hdf-plugin
FILTER_VBZ = 32020

UNKNOWN_FILTER_ID = -1


class FilterSpec(NamedTuple):
    filter_id: int
    name: str
    description: str
    supported_levels: Tuple[int, ...]
    min_params: int
    max_params: int
    requires_chunking: bool


FILTERS: Tuple[FilterSpec, ...] = (
    FilterSpec(FILTER_DEFLATE, "GZIP", "DEFLATE compression algorithm (gzip)", tuple(range(1, 10)), 1, 1, True),
    FilterSpec(FILTER_SHUFFLE, "SHUFFLE", "Byte shuffling filter", (), 0, 0, True),
    FilterSpec(FILTER_FLETCHER32, "FLETCHER32", "Fletcher32 checksum", (), 0, 0, False),
    FilterSpec(FILTER_SZIP, "SZIP", "NASA's lossless compression", (4, 8, 32), 2, 2, True),
    FilterSpec(FILTER_NBIT, "NBIT", "N-bit compression", (), 0, 0, False),
    FilterSpec(FILTER_SCALEOFFSET, "SCALEOFFSET", "Scale-offset compression", (), 0, 0, False),
    FilterSpec(FILTER_BLOSC, "BLOSC", "Blosc meta-compressor", tuple(range(0, 10)), 4, 4, True),
    FilterSpec(FILTER_BLOSC2, "BLOSC2", "Blosc2 meta-compressor", tuple(range(0, 10)), 4, 4, True),
    FilterSpec(FILTER_BSHUF, "BSHUF", "Bitshuffle filter", (0, 1, 2), 1, 1, True),
    FilterSpec(FILTER_BZIP2, "BZIP2", "Bzip2 compression", tuple(range(1, 10)), 1, 1, True),
    FilterSpec(FILTER_LZ4, "LZ4", "LZ4 fast compression", tuple(range(1, 10)), 1, 1, True),
    FilterSpec(FILTER_LZF, "LZF", "LZF compression (no level)", (1,), 0, 0, True),
    FilterSpec(FILTER_ZFP, "ZFP", "ZFP floating-point compression", (1, 2, 3, 4), 4, 4, True),
    FilterSpec(FILTER_ZSTD, "ZSTD", "Zstandard compression", tuple(range(1, 20)), 1, 1, True),
    FilterSpec(FILTER_VBZ, "VBZ", "Nanopore VBZ compression for signal data", (1,), 4, 4, True),
)

_ALIASES = {"DEFLATE": "GZIP"}

_BY_NAME = {spec.name: spec for spec in FILTERS}
_BY_ID = {spec.filter_id: spec for spec in FILTERS}


def list_filters() -> List[FilterSpec]:
    """Return every known filter in catalog order."""
    return list(FILTERS)


def lookup(key: Union[str, int]) -> FilterSpec:
    """
    Resolve a filter by name or numeric id.

    Names are matched case-insensitively and ``DEFLATE`` is accepted for
    ``GZIP``. Nothing is raised for an unknown key: an unknown name comes back
    as a spec with ``filter_id == UNKNOWN_FILTER_ID`` that keeps the requested
    name, an unknown id as a spec named ``UNKNOWN`` that keeps the id.
    """
    if isinstance(key, int):
        spec = _BY_ID.get(key)
        if spec is None:
            return FilterSpec(key, "UNKNOWN", "Unknown filter", (), 0, 0, False)
        return spec

    name = str(key).strip().upper()
    name = _ALIASES.get(name, name)
    spec = _BY_NAME.get(name)
    if spec is None:
        return FilterSpec(UNKNOWN_FILTER_ID, str(key), "Unknown filter", (), 0, 0, False)
    return spec


def is_known(spec: FilterSpec) -> bool:
    return spec.filter_id in _BY_ID


def filter_available(key: Union[str, int]) -> bool:
    """Whether the HDF5 runtime currently has an implementation for the filter."""
    spec = lookup(key)
    if not is_known(spec):
        return False
    return bool(h5py.h5z.filter_avail(spec.filter_id))


def describe_params(filter_id: int, params: Sequence[int]) -> str:
    """Human readable description of a cd_values vector, as shown in reports."""
    params = list(params)
    description = ""

    if filter_id in (FILTER_DEFLATE, FILTER_BZIP2, FILTER_ZSTD):
        if params:
            description = f"Compression level: {params[0]}"
    elif filter_id == FILTER_LZ4:
        if params:
            description = f"Block size: {params[0]} bytes"
    elif filter_id in (FILTER_BLOSC, FILTER_BLOSC2):
        # cd_values[0:4] are reserved for the filter itself
        if len(params) >= 7:
            description = f"Level: {params[4]}, Shuffle: {params[5]}, Compressor: {params[6]}"
    elif filter_id == FILTER_SZIP:
        if len(params) >= 2:
            description = f"Encoding: {params[0]}, Pixels per block: {params[1]}"
    elif filter_id == FILTER_ZFP:
        if len(params) >= 4:
            description = (
                f"Mode: {params[0]}, Precision: {params[1]}, "
                f"Accuracy: {params[2]}, Rate: {params[3]}"
            )
    elif filter_id == FILTER_VBZ:
        if len(params) >= 4:
            description = (
                f"Version: {params[0]}, Integer size: {params[1]}, "
                f"Delta zig-zag: {params[2]}, Zstd level: {params[3]}"
            )
    elif params:
        description = "Parameters: " + ", ".join(str(p) for p in params)

    return description or "Default parameters"
