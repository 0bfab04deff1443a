"""
interior - Location layout package.

Provides:
- Space, door, and wall-default models
- Door validation and connectivity checks
- Reciprocal door synchronization
- Auto-layout from door connectivity
- Command orchestration with undo/redo

The REST router lives in ``floorweave.interior.api_endpoints`` and is not
imported here.
"""

# Schema
from floorweave.interior.schema.space import (
    Wall,
    SpaceShape,
    SpaceSize,
    Position,
    WallSettings,
    Door,
    Space,
    SpaceIndex,
)
from floorweave.interior.schema.validation import (
    ValidationIssue,
    validate_door,
    validate_all_doors,
    validate_connectivity,
    validate_incoming_space,
    collect_validation_issues,
)

# Graph
from floorweave.interior.graph.connectivity import (
    build_door_graph,
    connected_groups,
)

# Doors
from floorweave.interior.doors.synchronization import (
    SyncResult,
    synchronize_reciprocal_doors,
    ensure_reciprocal,
    remove_counterpart,
)

# Generator
from floorweave.interior.generator.layout_generator import (
    LayoutConfig,
    LayoutResult,
    LayoutGenerator,
    compute_auto_layout,
)

# Integration
from floorweave.interior.integration.editor import (
    EditorState,
    CommandResult,
    LocationEditor,
)
from floorweave.interior.integration.commands import command_from_dict

# Migration
from floorweave.interior.migration import (
    identify_parent_doors,
    rebuild_reciprocals,
)

__all__ = [
    # Schema
    'Wall',
    'SpaceShape',
    'SpaceSize',
    'Position',
    'WallSettings',
    'Door',
    'Space',
    'SpaceIndex',
    'ValidationIssue',
    'validate_door',
    'validate_all_doors',
    'validate_connectivity',
    'validate_incoming_space',
    'collect_validation_issues',
    # Graph
    'build_door_graph',
    'connected_groups',
    # Doors
    'SyncResult',
    'synchronize_reciprocal_doors',
    'ensure_reciprocal',
    'remove_counterpart',
    # Generator
    'LayoutConfig',
    'LayoutResult',
    'LayoutGenerator',
    'compute_auto_layout',
    # Integration
    'EditorState',
    'CommandResult',
    'LocationEditor',
    'command_from_dict',
    # Migration
    'identify_parent_doors',
    'rebuild_reciprocals',
]
