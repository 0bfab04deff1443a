"""
Door graph analysis for interior layouts.
"""

from floorweave.interior.graph.connectivity import (
    build_door_graph,
    connection_counts,
    reachable_from,
    connected_groups,
    is_fully_connected,
)

__all__ = [
    'build_door_graph',
    'connection_counts',
    'reachable_from',
    'connected_groups',
    'is_fully_connected',
]
