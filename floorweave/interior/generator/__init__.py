"""
interior/generator - Auto-layout package.

Places spaces in feet from their door connectivity.
"""

from floorweave.interior.generator.layout_generator import (
    LayoutConfig,
    LayoutResult,
    LayoutGenerator,
    compute_auto_layout,
    check_layout_preconditions,
    snap_to_grid,
)

__all__ = [
    'LayoutConfig',
    'LayoutResult',
    'LayoutGenerator',
    'compute_auto_layout',
    'check_layout_preconditions',
    'snap_to_grid',
]
