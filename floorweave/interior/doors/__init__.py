"""
interior/doors - Reciprocal door maintenance.
"""

from floorweave.interior.doors.synchronization import (
    DEFAULT_POSITION_TOLERANCE_FT,
    DEFAULT_SEARCH_STEP_FT,
    SyncResult,
    opposite_wall,
    reciprocal_position,
    doors_conflict,
    find_non_conflicting_position,
    make_reciprocal_door,
    door_pair_key,
    leads_back,
    synchronize_reciprocal_doors,
    ensure_reciprocal,
    remove_counterpart,
)

__all__ = [
    'DEFAULT_POSITION_TOLERANCE_FT',
    'DEFAULT_SEARCH_STEP_FT',
    'SyncResult',
    'opposite_wall',
    'reciprocal_position',
    'doors_conflict',
    'find_non_conflicting_position',
    'make_reciprocal_door',
    'door_pair_key',
    'leads_back',
    'synchronize_reciprocal_doors',
    'ensure_reciprocal',
    'remove_counterpart',
]
