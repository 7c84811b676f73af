"""
Container walk: shallow group copies, signal recompression and the
per-object diagnostics.
"""

import h5py
import numpy as np

from h5zbench.codecs import derive_params
from h5zbench.filters import lookup
from h5zbench.mirror import (
    COPIED,
    ERROR,
    RECOMPRESSED,
    SKIPPED,
    TraversalState,
    copy_group,
    is_signal_dataset,
    mirror,
)

from conftest import SIGNAL_LENGTH, group_paths, make_signal


def open_pair(src_path, dst_path, name="GZIP", level=6, shuffle=False):
    spec = lookup(name)
    src = h5py.File(src_path, "r")
    dst = h5py.File(dst_path, "w")
    state = TraversalState(src, dst, spec, derive_params(spec.filter_id, level), shuffle=shuffle)
    return src, dst, state


def test_signal_predicate():
    assert is_signal_dataset("/read_0001/Raw/Signal")
    assert is_signal_dataset("/a/Raw/Signals")
    assert not is_signal_dataset("/read_0001/tracking")
    assert not is_signal_dataset("Raw/Signal")


def test_groups_only_round_trip(groups_only_file, tmp_path):
    src, dst, state = open_pair(groups_only_file, tmp_path / "out.h5")
    with src, dst:
        mirror(state)
        assert group_paths(dst) == group_paths(src)
        assert state.materialized == group_paths(src)
    assert state.original_bytes == 0
    assert state.compressed_bytes == 0
    assert not state.errors()


def test_signal_is_recompressed(signal_file, tmp_path):
    src, dst, state = open_pair(signal_file, tmp_path / "out.h5")
    with src, dst:
        mirror(state)
        out = dst["/read_0001/Raw/Signal"]
        assert out.compression == "gzip"
        assert out.chunks == (SIGNAL_LENGTH,)
        np.testing.assert_array_equal(out[:], make_signal())
        # the shallow group copy carries the non-signal dataset across untouched
        np.testing.assert_array_equal(dst["/read_0001/tracking"][:], np.arange(50))
        assert dst["/read_0001"].attrs["read_id"] == "0001"

    assert state.original_bytes == SIGNAL_LENGTH * 2
    assert 0 < state.compressed_bytes < state.original_bytes
    kinds = {d.path: d.kind for d in state.diagnostics}
    assert kinds["/read_0001"] == COPIED
    assert kinds["/read_0001/Raw/Signal"] == RECOMPRESSED
    assert kinds["/read_0001/tracking"] == SKIPPED
    # Raw was created by its parent's shallow copy and never copied again
    assert "/read_0001/Raw" not in kinds


def test_original_bytes_accumulate_over_reads(multi_read_file, tmp_path):
    src, dst, state = open_pair(multi_read_file, tmp_path / "out.h5")
    with src, dst:
        mirror(state)
        for i in range(3):
            assert dst[f"/read_{i:04d}/Raw/Signal"].compression == "gzip"
    assert state.original_bytes == (200 + 500 + 800) * 2
    recompressed = [d for d in state.diagnostics if d.kind == RECOMPRESSED]
    assert len(recompressed) == 3


def test_copy_group_is_idempotent(groups_only_file, tmp_path):
    src, dst, state = open_pair(groups_only_file, tmp_path / "out.h5")
    with src, dst:
        first = copy_group(state, "/g")
        assert first.kind == COPIED
        assert copy_group(state, "/g") is None
    assert len(state.diagnostics) == 1


def test_shuffle_goes_ahead_of_codec(signal_file, tmp_path):
    src, dst, state = open_pair(signal_file, tmp_path / "out.h5", shuffle=True)
    with src, dst:
        mirror(state)
        out = dst["/read_0001/Raw/Signal"]
        assert out.shuffle
        assert out.compression == "gzip"
        np.testing.assert_array_equal(out[:], make_signal())


def test_soft_links_are_skipped(tmp_path):
    path = tmp_path / "links.h5"
    with h5py.File(path, "w") as f:
        f.create_group("read/Raw").create_dataset("Signal", data=make_signal(100))
        f["alias"] = h5py.SoftLink("/read")
    src, dst, state = open_pair(path, tmp_path / "out.h5")
    with src, dst:
        mirror(state)
    kinds = {d.path: d.kind for d in state.diagnostics}
    assert kinds["/alias"] == SKIPPED
    assert kinds["/read/Raw/Signal"] == RECOMPRESSED


def test_rank2_transfers_first_column_only(tmp_path):
    path = tmp_path / "rank2.h5"
    data = np.arange(40, dtype=np.int16).reshape(10, 4) + 1
    with h5py.File(path, "w") as f:
        f.create_group("r/Raw").create_dataset("Signal", data=data)
    src, dst, state = open_pair(path, tmp_path / "out.h5")
    with src, dst:
        mirror(state)
        out = dst["/r/Raw/Signal"][:]
    assert out.shape == (10, 4)
    np.testing.assert_array_equal(out[:, 0], data[:, 0])
    assert not out[:, 1:].any()
    assert state.original_bytes == data.nbytes


def test_failed_filter_is_a_per_object_error(signal_file, tmp_path):
    # deflate only accepts levels 0-9
    src = h5py.File(signal_file, "r")
    dst = h5py.File(tmp_path / "out.h5", "w")
    state = TraversalState(src, dst, lookup("GZIP"), [42])
    with src, dst:
        mirror(state)
        # the walk went on after the failure
        assert "/read_0001" in dst
    errors = state.errors()
    print(errors)
    assert [d.path for d in errors] == ["/read_0001/Raw/Signal"]
    assert errors[0].kind == ERROR
