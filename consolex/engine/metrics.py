"""
Metrics collection for the transformation engine.
Provides lazy counters and safe work with metadata.
"""

from __future__ import annotations

from typing import Any, Dict, Union

_REMOVED_PREFIX = "calls.removed."


class MetricsCollector:
    """
    Lazy metrics collector with automatic counter initialization.
    """

    def __init__(self):
        self._metrics: Dict[str, Any] = {}

    def increment(self, key: str, value: Union[int, float] = 1) -> None:
        """
        Lazy increment: creates the key if missing.

        Args:
            key: Metric key (e.g. "calls.removed.log")
            value: Value to add (1 by default)
        """
        current = self._metrics.get(key, 0)
        if isinstance(current, (int, float)) and isinstance(value, (int, float)):
            self._metrics[key] = current + value
        else:
            self._metrics[key] = value

    def get(self, key: str, default: Any = 0) -> Any:
        return self._metrics.get(key, default)

    def mark_call_removed(self, member: str, role: str) -> None:
        """
        Record one removed or neutralized call site.

        Args:
            member: Receiver member name ("log", "warn", ...)
            role: Syntactic role the call was removed from ("statement", "sequence", "other")
        """
        self.increment("calls.removed")
        self.increment(_REMOVED_PREFIX + member)
        self.increment(f"calls.role.{role}")

    @property
    def removed_count(self) -> int:
        return int(self.get("calls.removed"))

    def removed_by_member(self) -> Dict[str, int]:
        return {
            key[len(_REMOVED_PREFIX):]: value
            for key, value in sorted(self._metrics.items())
            if key.startswith(_REMOVED_PREFIX)
        }

    def to_dict(self) -> Dict[str, Any]:
        """Export all metrics to a dictionary."""
        return dict(self._metrics)

    def __repr__(self) -> str:
        return f"MetricsCollector({self._metrics})"
