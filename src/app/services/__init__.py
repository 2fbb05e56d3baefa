"""Background services used by the presentation layer.

This package contains:
- workers.py: QThread workers that drive scans and remediation off the GUI thread
"""
