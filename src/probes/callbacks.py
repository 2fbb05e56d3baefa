"""
Callback interface for probe progress reporting.
"""

from typing import Protocol


class ProbeCallbacks(Protocol):
    """
    Callback interface for probe progress reporting.

    Probes call these methods to report the path they are examining and to
    poll for cancellation. Implementations can be plain objects (for testing)
    or bound to a ScanSession by the orchestrator.
    """

    def on_path(self, path: str) -> None:
        """
        Report the location currently being examined.

        Updates the "currently examining" cursor only; it never counts
        toward the coarse progress fraction.

        Example:
            callbacks.on_path("~/Library/Safari/History.db")
        """
        ...

    def on_log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Log message
            level: "debug" | "info" | "warning" | "error"
        """
        ...

    def is_cancelled(self) -> bool:
        """
        Check if the scan was cancelled.

        Returns:
            True if the probe should stop starting new work

        Example:
            if callbacks.is_cancelled():
                return artifacts
        """
        ...


class NullCallbacks:
    """Callbacks that ignore progress and are never cancelled."""

    def on_path(self, path: str) -> None:
        pass

    def on_log(self, message: str, level: str = "info") -> None:
        pass

    def is_cancelled(self) -> bool:
        return False
