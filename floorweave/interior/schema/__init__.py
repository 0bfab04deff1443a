"""
interior/schema - Location schema package.

Provides data models for spaces, doors, and wall defaults, plus the
validation checks run over them.
"""

from floorweave.interior.schema.space import (
    Wall,
    SpaceShape,
    SpaceSize,
    Position,
    WallSettings,
    Door,
    Space,
    SpaceIndex,
    PENDING,
    is_sentinel,
    normalize_door_fields,
)
from floorweave.interior.schema.validation import (
    ValidationSeverity,
    IssueType,
    DoorViolation,
    DoorValidationResult,
    DoorValidationEntry,
    ValidationIssue,
    validate_door,
    validate_all_doors,
    to_validation_issues,
    validate_connectivity,
    validate_incoming_space,
    collect_validation_issues,
)

__all__ = [
    # Spaces and doors
    'Wall',
    'SpaceShape',
    'SpaceSize',
    'Position',
    'WallSettings',
    'Door',
    'Space',
    'SpaceIndex',
    'PENDING',
    'is_sentinel',
    'normalize_door_fields',
    # Validation
    'ValidationSeverity',
    'IssueType',
    'DoorViolation',
    'DoorValidationResult',
    'DoorValidationEntry',
    'ValidationIssue',
    'validate_door',
    'validate_all_doors',
    'to_validation_issues',
    'validate_connectivity',
    'validate_incoming_space',
    'collect_validation_issues',
]
