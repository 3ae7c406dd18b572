from leaderboard.graph import Graph


def test_graph():
    g = Graph()
    g.add_edge(1, 2)
    g.add_edge(1, 3)
    g.add_edge(2, 4)

    assert g.get_edges(1) == [2, 3]

    g.remove_edge(1, 2)
    assert g.get_edges(1) == [3]


def test_edges_of_unknown_node_are_empty():
    assert Graph().get_edges(42) == []


def test_remove_missing_edge_is_noop():
    g = Graph()
    g.add_edge(1, 2)
    g.remove_edge(1, 5)
    g.remove_edge(9, 2)
    assert g.get_edges(1) == [2]


def test_remove_only_first_parallel_edge():
    g = Graph()
    g.add_edge(1, 2)
    g.add_edge(1, 3)
    g.add_edge(1, 2)
    g.remove_edge(1, 2)
    assert g.get_edges(1) == [3, 2]


def test_returned_edges_do_not_alias_graph():
    g = Graph()
    g.add_edge(1, 2)
    edges = g.get_edges(1)
    edges.append(99)
    assert g.get_edges(1) == [2]


def test_edges_are_directed():
    g = Graph()
    g.add_edge(1, 2)
    assert g.get_edges(2) == []