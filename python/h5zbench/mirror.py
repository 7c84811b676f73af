"""
Mirror one HDF5 container into another, recompressing the signal datasets.

The walk visits every link below ``/`` in native link order. Groups are
copied shallowly (the group and its immediate members) the first time their
path is seen; datasets whose path contains ``/Raw/Signal`` are recreated in
the destination as a single chunk with the requested filter pipeline and their
content is copied across. Everything else is left to the group copies.

Failures on a single object never stop the walk. Each visited object leaves a
Diagnostic in the TraversalState, and failures are also printed to stderr.
"""

import sys
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence, Set

import h5py
import numpy as np

from .codecs import apply_filter
from .filters import FILTER_SHUFFLE, FilterSpec

SIGNAL_SEGMENT = "/Raw/Signal"

# Diagnostic kinds
COPIED = "copied"
RECOMPRESSED = "recompressed"
SKIPPED = "skipped"
ERROR = "error"


class Diagnostic(NamedTuple):
    path: str
    kind: str
    message: str = ""


@dataclass
class TraversalState:
    """Everything one trial's walk reads and updates."""

    src: h5py.File
    dst: h5py.File
    spec: FilterSpec
    params: List[int]
    shuffle: bool = False
    verbose: bool = False
    compressed_bytes: int = 0
    original_bytes: int = 0
    materialized: Set[str] = field(default_factory=set)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def materialize(self, path: str) -> bool:
        """Record ``path`` as present in the destination. False if it already was."""
        if path in self.materialized:
            return False
        self.materialized.add(path)
        return True

    def record(self, path: str, kind: str, message: str = "") -> Diagnostic:
        diag = Diagnostic(path, kind, message)
        self.diagnostics.append(diag)
        if kind == ERROR:
            print(f"Error: {path}: {message}", file=sys.stderr)
        elif self.verbose:
            print(f"    {kind}: {path}" + (f" ({message})" if message else ""))
        return diag

    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == ERROR]


def is_signal_dataset(path: str) -> bool:
    return SIGNAL_SEGMENT in path


def mirror(state: TraversalState) -> TraversalState:
    """
    Walk ``state.src`` from the root and mirror it into ``state.dst``.

    Two links to the same object are processed twice; only group paths are
    deduplicated, through ``state.materialized``.
    """

    def visitor(name, info):
        path = "/" + name.decode("utf-8", "surrogateescape")
        visit_link(state, path, info.type)
        return None

    state.src.id.links.visit(
        visitor,
        idx_type=h5py.h5.INDEX_NAME,
        order=h5py.h5.ITER_NATIVE,
        info=True,
    )
    return state


def visit_link(state: TraversalState, path: str, link_type: int = h5py.h5l.TYPE_HARD) -> Optional[Diagnostic]:
    """Process the object behind one link. Never raises."""
    if state.verbose:
        print(f"  Processing object: {path}")

    if link_type != h5py.h5l.TYPE_HARD:
        return state.record(path, SKIPPED, "soft or external link")

    try:
        kind = state.src.get(path, getclass=True)
    except Exception as e:
        return state.record(path, ERROR, f"failed to get object info: {e}")

    if kind is h5py.Group:
        return copy_group(state, path)
    if kind is h5py.Dataset:
        if is_signal_dataset(path):
            return recompress_dataset(state, path)
        return state.record(path, SKIPPED, "not a signal dataset")
    return state.record(path, SKIPPED, "not a dataset or group")


def copy_group(state: TraversalState, path: str) -> Optional[Diagnostic]:
    """Shallow-copy one group, then register its child groups as materialized."""
    if path in state.materialized:
        return None

    try:
        state.src.copy(path, state.dst, name=path, shallow=True)
    except Exception as e:
        return state.record(path, ERROR, f"failed to copy group: {e}")

    if not state.materialize(path):
        return None

    # The shallow copy already created the immediate child groups
    try:
        dst_group = state.dst[path]
        for child in dst_group:
            if dst_group.get(child, getclass=True) is h5py.Group:
                state.materialize(f"{path}/{child}")
    except Exception as e:
        return state.record(path, ERROR, f"failed to list copied group: {e}")

    return state.record(path, COPIED)


def _leading_selection(rank: int) -> tuple:
    # Only the first dimension's extent is transferred
    return (slice(None),) + (0,) * (rank - 1)


def _build_dcpl(dims: Sequence[int], spec: FilterSpec, params: Sequence[int], shuffle: bool):
    dcpl = h5py.h5p.create(h5py.h5p.DATASET_CREATE)
    dcpl.set_layout(h5py.h5d.CHUNKED)
    dcpl.set_chunk(tuple(dims))
    if shuffle:
        apply_filter(dcpl, FILTER_SHUFFLE, [])
    apply_filter(dcpl, spec.filter_id, params)
    return dcpl


def recompress_dataset(state: TraversalState, path: str) -> Diagnostic:
    """Recreate one signal dataset under the trial's filter pipeline and copy its data."""
    name = path.encode("utf-8", "surrogateescape")

    try:
        src_ds = state.src[path]
        dims = src_ds.shape
        rank = len(dims)
    except Exception as e:
        return state.record(path, ERROR, f"failed to open source dataset: {e}")

    if state.verbose:
        print(f"    rank: {rank}, dims: {dims}, dtype: {src_ds.dtype}")

    try:
        dcpl = _build_dcpl(dims, state.spec, state.params, state.shuffle)
    except Exception as e:
        return state.record(path, ERROR, f"failed to set up filter pipeline: {e}")

    try:
        dsid = h5py.h5d.create(state.dst.id, name, src_ds.id.get_type(), src_ds.id.get_space(), dcpl=dcpl)
    except Exception as e:
        return state.record(path, ERROR, f"failed to create destination dataset: {e}")

    dst_ds = h5py.Dataset(dsid)
    state.original_bytes += int(src_ds.size) * src_ds.dtype.itemsize

    failure = None
    try:
        selection = _leading_selection(rank)
        buffer = np.asarray(src_ds[selection])
        dst_ds[selection] = buffer
    except Exception as e:
        failure = f"failed to transfer data: {e}"

    storage_size = dst_ds.id.get_storage_size()
    if storage_size > 0:
        state.compressed_bytes += storage_size

    if failure:
        return state.record(path, ERROR, failure)
    return state.record(path, RECOMPRESSED, f"{storage_size} bytes on disk")
