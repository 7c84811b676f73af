"""
Level-to-parameter mapping for every codec family.
"""

import h5py
import pytest

from h5zbench.codecs import MAX_UINT, apply_filter, derive_params
from h5zbench.filters import list_filters, lookup


def fid(name):
    return lookup(name).filter_id


def test_deflate_uses_level():
    assert derive_params(fid("GZIP"), 6) == [6]
    assert derive_params(fid("GZIP"), 1) == [1]


def test_bzip2_falls_back_outside_open_range():
    assert derive_params(fid("BZIP2"), 5) == [5]
    assert derive_params(fid("BZIP2"), 9) == [2]
    assert derive_params(fid("BZIP2"), 0) == [2]


def test_lz4_inverse_block_size():
    assert derive_params(fid("LZ4"), 0) == [65535]
    assert derive_params(fid("LZ4"), -3) == [65535]
    assert derive_params(fid("LZ4"), 1) == [MAX_UINT]
    assert derive_params(fid("LZ4"), 9) == [MAX_UINT // 9]


def test_zstd_scales_and_clamps():
    assert derive_params(fid("ZSTD"), 0) == [3]
    assert derive_params(fid("ZSTD"), 1) == [2]
    assert derive_params(fid("ZSTD"), 6) == [13]
    # 9 * 20 // 9 == 20, the top of the range, and nothing above it
    assert derive_params(fid("ZSTD"), 9) == [20]
    assert derive_params(fid("ZSTD"), 19) == [20]


def test_blosc_vectors():
    assert derive_params(fid("BLOSC"), 5) == [0, 0, 0, 0, 5, 1, 2]
    assert derive_params(fid("BLOSC"), 12) == [0, 0, 0, 0, 9, 1, 2]
    assert derive_params(fid("BLOSC2"), 3) == [0, 0, 0, 0, 3, 1, 2, 2, 4, 8]
    assert derive_params(fid("BLOSC2"), 99)[4] == 9


def test_szip_pixels_per_block():
    assert derive_params(fid("SZIP"), 8) == [4, 8]
    assert derive_params(fid("SZIP"), 4) == [4, 4]
    assert derive_params(fid("SZIP"), 6) == [4, 32]


def test_vbz_fixed_layout():
    assert derive_params(fid("VBZ"), 1) == [1, 2, 1, 1]
    assert derive_params(fid("VBZ"), 0) == [1, 2, 1, 3]


def test_other_and_unknown_codecs():
    assert derive_params(fid("LZF"), 2) == []
    assert derive_params(fid("BSHUF"), 2) == [2]
    assert derive_params(fid("BSHUF"), 0) == []
    assert derive_params(-1, 5) == [5]
    assert derive_params(123456, 0) == []


@pytest.mark.parametrize("name", [spec.name for spec in list_filters()])
def test_derivation_is_deterministic(name):
    for level in (-1, 0, 1, 6, 9, 32):
        assert derive_params(fid(name), level) == derive_params(fid(name), level)


def test_apply_deflate_and_shuffle():
    dcpl = h5py.h5p.create(h5py.h5p.DATASET_CREATE)
    dcpl.set_chunk((100,))
    apply_filter(dcpl, fid("SHUFFLE"), [])
    apply_filter(dcpl, fid("GZIP"), [4])
    assert dcpl.get_nfilters() == 2
    assert dcpl.get_filter(0)[0] == h5py.h5z.FILTER_SHUFFLE
    code, flags, values, _ = dcpl.get_filter(1)
    assert code == h5py.h5z.FILTER_DEFLATE
    assert tuple(values) == (4,)


def filter_flags(name, level=6):
    dcpl = h5py.h5p.create(h5py.h5p.DATASET_CREATE)
    dcpl.set_chunk((100,))
    spec = lookup(name)
    apply_filter(dcpl, spec.filter_id, derive_params(spec.filter_id, level))
    code, flags, values, _ = dcpl.get_filter(0)
    assert code == spec.filter_id
    return flags


def test_generic_codecs_are_optional():
    for name in ("ZSTD", "BLOSC", "BZIP2", "LZF"):
        assert filter_flags(name) & h5py.h5z.FLAG_OPTIONAL, name


def test_lz4_is_mandatory():
    assert filter_flags("LZ4") == h5py.h5z.FLAG_MANDATORY


def test_unavailable_filter_is_refused(monkeypatch):
    monkeypatch.setattr(h5py.h5z, "filter_avail", lambda filter_id: False)
    for name in ("LZ4", "ZSTD"):
        dcpl = h5py.h5p.create(h5py.h5p.DATASET_CREATE)
        dcpl.set_chunk((100,))
        with pytest.raises(RuntimeError):
            apply_filter(dcpl, fid(name), derive_params(fid(name), 3))
        assert dcpl.get_nfilters() == 0
