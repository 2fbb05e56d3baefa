"""
Source probes for the privacy scan.

Each probe knows where one application family stores personal data and
turns those locations into typed artifacts.

Folder Structure:
- browser/         Browser family probes (chromium/, safari/, firefox/)
- system/          Permission grants, recent items, known networks
- chat/            Messages and Telegram
- _shared/         Shared utilities (sqlite_helpers, path_utils, labels)
"""

from .base import BaseProbe, ProbeContext, ProbeMetadata
from .callbacks import NullCallbacks, ProbeCallbacks
from .probe_registry import ProbeRegistry, default_probes

__all__ = [
    "BaseProbe",
    "ProbeContext",
    "ProbeMetadata",
    "NullCallbacks",
    "ProbeCallbacks",
    "ProbeRegistry",
    "default_probes",
]
