"""
Per-codec strategies: how a compression level becomes cd_values, and how
those cd_values are attached to a dataset creation property list.

The mappings follow the parameter layouts of the registered HDF5 filter
plugins (https://github.com/HDFGroup/hdf5_plugins/blob/master/docs/RegisteredFilterPlugins.md).
Some of them are odd on purpose (LZ4's inverse block size, BZIP2 falling back
to 2 at level 9); benchmark results depend on them, so they stay as they are.
"""

from typing import Callable, Dict, List, NamedTuple, Sequence

import h5py

from .filters import (
    FILTER_BLOSC,
    FILTER_BLOSC2,
    FILTER_BZIP2,
    FILTER_DEFLATE,
    FILTER_FLETCHER32,
    FILTER_LZ4,
    FILTER_LZF,
    FILTER_SHUFFLE,
    FILTER_SZIP,
    FILTER_VBZ,
    FILTER_ZSTD,
)

MAX_UINT = 0xFFFFFFFF

LZ4_DEFAULT_BLOCK_SIZE = 65535
ZSTD_DEFAULT_LEVEL = 3
ZSTD_MAX_LEVEL = 20
BZIP2_DEFAULT_LEVEL = 2
BLOSC_MAX_LEVEL = 9
SZIP_EC_OPTION_MASK = 4
SZIP_DEFAULT_PIXELS_PER_BLOCK = 32
SZIP_PIXELS_PER_BLOCK = (4, 8, 32)
VBZ_DEFAULT_ZSTD_LEVEL = 3


class CodecStrategy(NamedTuple):
    derive: Callable[[int], List[int]]
    apply: Callable[[h5py.h5p.PropDCID, int, Sequence[int]], None]


# ---------------------------------------------------------------------------
# Parameter derivation
# ---------------------------------------------------------------------------

def _level_only(level: int) -> List[int]:
    return [level] if level > 0 else []


def _no_params(level: int) -> List[int]:
    return []


def _deflate_params(level: int) -> List[int]:
    return [max(level, 0)]


def _bzip2_params(level: int) -> List[int]:
    return [level if 0 < level < 9 else BZIP2_DEFAULT_LEVEL]


def _lz4_params(level: int) -> List[int]:
    # Block size in bytes; higher levels give smaller blocks
    if level <= 0:
        return [LZ4_DEFAULT_BLOCK_SIZE]
    return [MAX_UINT // level]


def _zstd_params(level: int) -> List[int]:
    # Spread the 1-9 scale over zstd's wider range
    if level <= 0:
        return [ZSTD_DEFAULT_LEVEL]
    return [min(level * ZSTD_MAX_LEVEL // 9, ZSTD_MAX_LEVEL)]


def _clamp_blosc_level(level: int) -> int:
    return min(max(level, 0), BLOSC_MAX_LEVEL)


def _blosc_params(level: int) -> List[int]:
    # reserved x4, clevel, shuffle, compressor (LZ4HC)
    return [0, 0, 0, 0, _clamp_blosc_level(level), 1, 2]


def _blosc2_params(level: int) -> List[int]:
    return [0, 0, 0, 0, _clamp_blosc_level(level), 1, 2, 2, 4, 8]


def _szip_params(level: int) -> List[int]:
    pixels_per_block = level if level in SZIP_PIXELS_PER_BLOCK else SZIP_DEFAULT_PIXELS_PER_BLOCK
    return [SZIP_EC_OPTION_MASK, pixels_per_block]


def _vbz_params(level: int) -> List[int]:
    # version, integer size (int16), delta zig-zag, zstd level
    return [1, 2, 1, level if level > 0 else VBZ_DEFAULT_ZSTD_LEVEL]


# ---------------------------------------------------------------------------
# Filter application
# ---------------------------------------------------------------------------

def _require_available(filter_id: int) -> None:
    if not h5py.h5z.filter_avail(filter_id):
        raise RuntimeError(f"filter {filter_id} is not available in this HDF5 runtime")


def _apply_optional(dcpl, filter_id: int, params: Sequence[int]) -> None:
    # HDF5 accepts an optional filter it cannot run and then stores raw chunks
    _require_available(filter_id)
    dcpl.set_filter(filter_id, h5py.h5z.FLAG_OPTIONAL, tuple(params))


def _apply_mandatory(dcpl, filter_id: int, params: Sequence[int]) -> None:
    _require_available(filter_id)
    dcpl.set_filter(filter_id, h5py.h5z.FLAG_MANDATORY, tuple(params))


def _apply_deflate(dcpl, filter_id: int, params: Sequence[int]) -> None:
    level = params[0] if params else 6
    dcpl.set_deflate(level)


def _apply_shuffle(dcpl, filter_id: int, params: Sequence[int]) -> None:
    dcpl.set_shuffle()


def _apply_fletcher32(dcpl, filter_id: int, params: Sequence[int]) -> None:
    dcpl.set_fletcher32()


def _apply_szip(dcpl, filter_id: int, params: Sequence[int]) -> None:
    options_mask = SZIP_EC_OPTION_MASK
    pixels_per_block = SZIP_DEFAULT_PIXELS_PER_BLOCK
    if len(params) >= 2:
        options_mask, pixels_per_block = params[0], params[1]
    dcpl.set_szip(options_mask, pixels_per_block)


_DEFAULT_STRATEGY = CodecStrategy(_level_only, _apply_optional)

STRATEGIES: Dict[int, CodecStrategy] = {
    FILTER_DEFLATE: CodecStrategy(_deflate_params, _apply_deflate),
    FILTER_SHUFFLE: CodecStrategy(_level_only, _apply_shuffle),
    FILTER_FLETCHER32: CodecStrategy(_level_only, _apply_fletcher32),
    FILTER_SZIP: CodecStrategy(_szip_params, _apply_szip),
    FILTER_BZIP2: CodecStrategy(_bzip2_params, _apply_optional),
    FILTER_LZ4: CodecStrategy(_lz4_params, _apply_mandatory),
    FILTER_LZF: CodecStrategy(_no_params, _apply_optional),
    FILTER_ZSTD: CodecStrategy(_zstd_params, _apply_optional),
    FILTER_BLOSC: CodecStrategy(_blosc_params, _apply_optional),
    FILTER_BLOSC2: CodecStrategy(_blosc2_params, _apply_optional),
    FILTER_VBZ: CodecStrategy(_vbz_params, _apply_optional),
}


def strategy_for(filter_id: int) -> CodecStrategy:
    return STRATEGIES.get(filter_id, _DEFAULT_STRATEGY)


def derive_params(filter_id: int, level: int) -> List[int]:
    """
    Map an abstract compression level onto the cd_values of one filter.

    Args:
        filter_id: Registered HDF5 filter id. Unknown ids are accepted.
        level: Requested compression level; ``<= 0`` selects the codec default
            where the codec has one.

    Returns:
        list of int: The parameter vector, possibly empty. Never raises.
    """
    return strategy_for(filter_id).derive(level)


def apply_filter(dcpl, filter_id: int, params: Sequence[int]) -> None:
    """Add one filter to a dataset creation property list (raises on failure)."""
    strategy_for(filter_id).apply(dcpl, filter_id, params)
