"""
Process-wide HDF5 session.

The HDF5 library must be set up once before the first trial and torn down at
most once. Setup imports ``hdf5plugin``, which registers the third-party
filters (Blosc, Blosc2, Bitshuffle, BZip2, LZ4, Zstd, ZFP, ...) with the
library h5py is linked against. Sessions are reference counted, so nested
``hdf5_session()`` blocks share one setup and only the outermost exit runs
teardown.
"""

import sys
from contextlib import contextmanager
from typing import Dict

import h5py
import hdf5plugin

from .filters import list_filters


class HDF5Library:
    """Reference-counted lifecycle for the HDF5 library and its filter plugins."""

    def __init__(self):
        self._refcount = 0
        self._teardowns = 0
        self.available_filters: Dict[str, bool] = {}

    @property
    def active(self) -> bool:
        return self._refcount > 0

    @property
    def refcount(self) -> int:
        return self._refcount

    @property
    def teardown_count(self) -> int:
        return self._teardowns

    def acquire(self) -> "HDF5Library":
        if self._refcount == 0:
            self._setup()
        self._refcount += 1
        return self

    def release(self) -> None:
        if self._refcount == 0:
            return
        self._refcount -= 1
        if self._refcount == 0:
            self._teardown()

    def _setup(self) -> None:
        self.available_filters = {
            spec.name: bool(h5py.h5z.filter_avail(spec.filter_id))
            for spec in list_filters()
        }

    def _teardown(self) -> None:
        self._teardowns += 1
        leaked = h5py.h5f.get_obj_count(h5py.h5f.OBJ_ALL, h5py.h5f.OBJ_FILE)
        if leaked:
            print(f"Warning: {leaked} HDF5 file handle(s) still open at teardown", file=sys.stderr)


LIBRARY = HDF5Library()


@contextmanager
def hdf5_session():
    """Hold the process-wide HDF5 session for the duration of the block."""
    LIBRARY.acquire()
    try:
        yield LIBRARY
    finally:
        LIBRARY.release()


def plugin_version() -> str:
    return getattr(hdf5plugin, "version", "unknown")


def hdf5_version() -> str:
    return h5py.version.hdf5_version
