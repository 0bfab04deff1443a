"""
test_connectivity.py - Tests for the door graph
"""

import networkx as nx

from floorweave.interior.graph.connectivity import (
    build_door_graph,
    connected_groups,
    connection_counts,
    is_fully_connected,
    reachable_from,
)


class TestDoorGraph:
    """Tests for build_door_graph."""

    def test_nodes_and_edges(self, three_room_chain):
        graph = build_door_graph(three_room_chain)
        assert isinstance(graph, nx.MultiDiGraph)
        assert list(graph.nodes) == ["Kitchen", "Hall", "Cellar"]
        assert graph.nodes["Hall"]["order"] == 1
        assert graph.number_of_edges() == 2

        edge = graph.get_edge_data("Hall", "Kitchen", key=0)
        assert edge["wall"] == "east"
        assert edge["position"] == 10.0
        assert edge["reciprocal"] is False

    def test_unresolvable_doors_produce_no_edges(self, make_space, make_door):
        spaces = [make_space("A", doors=[
            make_door("east", 10, "Pending"),
            make_door("west", 10, "Ghost"),
            make_door("north", 10, "A"),
        ])]
        graph = build_door_graph(spaces)
        assert graph.number_of_edges() == 0

    def test_code_identity(self, make_space, make_door):
        spaces = [
            make_space("Hall", code="H", doors=[make_door("east", 10, "Kitchen")]),
            make_space("Kitchen", code="K"),
        ]
        graph = build_door_graph(spaces)
        assert graph.has_edge("H", "K")


class TestGraphQueries:
    """Tests for counts, reachability, and components."""

    def test_connection_counts(self, three_room_chain):
        counts = connection_counts(build_door_graph(three_room_chain))
        assert counts == {"Kitchen": 0, "Hall": 2, "Cellar": 0}

    def test_reachability_ignores_direction(self, three_room_chain):
        graph = build_door_graph(three_room_chain)
        assert reachable_from(graph, "Kitchen") == {"Kitchen", "Hall", "Cellar"}
        assert reachable_from(graph, "Attic") == set()

    def test_groups_in_list_order(self, make_space, make_door):
        spaces = [
            make_space("D"),
            make_space("A", doors=[make_door("east", 10, "B")]),
            make_space("B"),
        ]
        graph = build_door_graph(spaces)
        assert connected_groups(graph) == [["D"], ["A", "B"]]
        assert not is_fully_connected(graph)

    def test_empty_layout(self):
        graph = build_door_graph([])
        assert connected_groups(graph) == []
        assert is_fully_connected(graph)

    def test_fully_connected(self, three_room_chain):
        assert is_fully_connected(build_door_graph(three_room_chain))
