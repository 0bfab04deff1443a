"""
connectivity.py - Door graph utilities

Builds a networkx multigraph of spaces joined by doors and answers the
questions layout and validation need: how many live connections a space has,
what it can reach, and how the layout splits into disconnected groups.
"""

from typing import Dict, List, Set
import logging

import networkx as nx

from floorweave.interior.schema.space import Space, SpaceIndex

__all__ = [
    'build_door_graph',
    'connection_counts',
    'reachable_from',
    'connected_groups',
    'is_fully_connected',
]

logger = logging.getLogger(__name__)


def build_door_graph(spaces: List[Space]) -> 'nx.MultiDiGraph':
    """
    Build a directed multigraph with one edge per resolvable door.

    Nodes are space ids carrying an ``order`` attribute (list position).
    Edges run from the door's space to its target and carry the door index,
    wall, and position. Sentinel targets, unknown targets, and self-references
    produce no edge.

    Args:
        spaces: Space list

    Returns:
        MultiDiGraph of the layout
    """
    graph = nx.MultiDiGraph()
    index = SpaceIndex(spaces)

    for order, space in enumerate(spaces):
        graph.add_node(space.space_id, order=order, locked=space.position_locked)

    for space in spaces:
        for door_idx, door in enumerate(space.doors):
            target_idx = index.resolve_target(space, door)
            if target_idx is None:
                continue
            graph.add_edge(
                space.space_id,
                spaces[target_idx].space_id,
                key=door_idx,
                wall=door.wall.value,
                position=door.position_on_wall_ft,
                reciprocal=door.is_reciprocal,
            )

    return graph


def connection_counts(graph: 'nx.MultiDiGraph') -> Dict[str, int]:
    """Number of resolvable doors leaving each space."""
    return {node: graph.out_degree(node) for node in graph.nodes}


def reachable_from(graph: 'nx.MultiDiGraph', source: str) -> Set[str]:
    """Spaces reachable from ``source`` ignoring door direction."""
    if source not in graph:
        return set()
    return set(nx.node_connected_component(graph.to_undirected(as_view=True), source))


def connected_groups(graph: 'nx.MultiDiGraph') -> List[List[str]]:
    """
    Weakly connected components, each ordered by list position, groups
    ordered by their first member.
    """
    if graph.number_of_nodes() == 0:
        return []

    order = nx.get_node_attributes(graph, "order")
    groups = [
        sorted(component, key=lambda node: order[node])
        for component in nx.weakly_connected_components(graph)
    ]
    groups.sort(key=lambda group: order[group[0]])
    return groups


def is_fully_connected(graph: 'nx.MultiDiGraph') -> bool:
    """True if every space can reach every other through doors."""
    if graph.number_of_nodes() == 0:
        return True
    return nx.is_weakly_connected(graph)
