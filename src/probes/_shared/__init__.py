"""
Shared utilities for probes.

This package provides common functionality used across multiple probes:
- sqlite_helpers: Read-only structured-store access and error classification
- path_utils: File/directory sizing and profile enumeration

Design Principle:
    Probes are self-contained discovery modules. These utilities keep the
    store and filesystem handling identical across them.
"""

from .sqlite_helpers import (
    COMPANION_SUFFIXES,
    StoreHandle,
    open_store,
    copy_sqlite_for_reading,
    companion_paths,
    count_or_zero,
)

from .labels import count_label, scoped_label

from .path_utils import (
    file_size,
    directory_size,
    path_size,
    enumerate_chromium_profiles,
    enumerate_subdirectories,
    under_home,
    under_root,
)

__all__ = [
    "COMPANION_SUFFIXES",
    "count_label",
    "scoped_label",
    "StoreHandle",
    "open_store",
    "copy_sqlite_for_reading",
    "companion_paths",
    "count_or_zero",
    "file_size",
    "directory_size",
    "path_size",
    "enumerate_chromium_profiles",
    "enumerate_subdirectories",
    "under_home",
    "under_root",
]
