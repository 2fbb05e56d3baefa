"""Presentation seam: command-line runner and Qt background workers."""
