"""
errors/ - Error Taxonomy

Structured issue classification, the exceptions raised by rejected commands,
and aggregation into itemized reports.
"""

from .taxonomy import (
    ErrorSeverity,
    ErrorCategory,
    ErrorCode,
    EngineIssue,
    FloorweaveError,
    StructuralInvalidError,
    LayoutInfeasibleError,
    SpaceNotFoundError,
    HistoryError,
    create_structural_error,
    create_layout_error,
    create_sync_warning,
    create_state_error,
)

from .aggregator import (
    ErrorReport,
    ErrorAggregator,
)

__all__ = [
    # Taxonomy
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorCode",
    "EngineIssue",
    "create_structural_error",
    "create_layout_error",
    "create_sync_warning",
    "create_state_error",
    # Exceptions
    "FloorweaveError",
    "StructuralInvalidError",
    "LayoutInfeasibleError",
    "SpaceNotFoundError",
    "HistoryError",
    # Aggregator
    "ErrorReport",
    "ErrorAggregator",
]
