"""
Shared HDF5 fixtures: small Fast5-like containers written with h5py.
"""

import h5py
import numpy as np
import pytest


SIGNAL_LENGTH = 1000


def make_signal(n=SIGNAL_LENGTH, seed=42):
    """Compressible int16 signal, similar in spirit to raw nanopore current."""
    rng = np.random.default_rng(seed)
    base = (np.arange(n) % 64).astype(np.int16)
    return base + rng.integers(0, 4, size=n, dtype=np.int16)


def group_paths(h5file):
    """Absolute paths of every group below the root."""
    paths = set()

    def collect(name, obj):
        if isinstance(obj, h5py.Group):
            paths.add("/" + name)

    h5file.visititems(collect)
    return paths


@pytest.fixture
def signal_file(tmp_path):
    """One read with a /Raw/Signal dataset plus one dataset that is not a signal."""
    path = tmp_path / "reads.h5"
    with h5py.File(path, "w") as f:
        read = f.create_group("read_0001")
        read.attrs["read_id"] = "0001"
        raw = read.create_group("Raw")
        raw.create_dataset("Signal", data=make_signal())
        read.create_dataset("tracking", data=np.arange(50, dtype=np.int32))
    return str(path)


@pytest.fixture
def multi_read_file(tmp_path):
    """Three reads, each with its own signal of a different length."""
    path = tmp_path / "multi.h5"
    with h5py.File(path, "w") as f:
        for i, n in enumerate((200, 500, 800)):
            raw = f.create_group(f"read_{i:04d}/Raw")
            raw.create_dataset("Signal", data=make_signal(n, seed=i))
    return str(path)


@pytest.fixture
def groups_only_file(tmp_path):
    """Nested groups and no datasets at all."""
    path = tmp_path / "groups.h5"
    with h5py.File(path, "w") as f:
        f.create_group("a/b/c")
        f.create_group("a/d")
        f.create_group("e/f")
        f.create_group("g")
    return str(path)
