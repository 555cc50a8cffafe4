"""Data models for covgate."""

from covgate.models.coverage import CoverageResult, GateDecision, GateStatus

__all__ = [
    "CoverageResult",
    "GateDecision",
    "GateStatus",
]
