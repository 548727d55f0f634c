"""Unit tests for the graph representation."""

import unittest

from mcmatching import (
    Vertex, Graph, GraphError, CapacityExceeded, UnknownVertex)


class TestVertex(unittest.TestCase):
    """Test Vertex class."""

    def test_identity_by_id(self):
        """payload does not take part in equality"""
        self.assertEqual(Vertex(1, "a"), Vertex(1, "b"))
        self.assertNotEqual(Vertex(1, "a"), Vertex(2, "a"))
        self.assertEqual(len({Vertex(1, "a"), Vertex(1, [1, 2])}), 1)

    def test_payload(self):
        v = Vertex(7, {"name": "seven"})
        self.assertEqual(v.id, 7)
        self.assertEqual(v.payload, {"name": "seven"})

    def test_not_equal_to_int(self):
        self.assertNotEqual(Vertex(1), 1)

    def test_fail_bad_id(self):
        with self.assertRaises(TypeError):
            Vertex("1")
        with self.assertRaises(TypeError):
            Vertex(1.0)
        with self.assertRaises(TypeError):
            Vertex(True)


class TestGraph(unittest.TestCase):
    """Test Graph class."""

    def test_empty(self):
        graph = Graph(0)
        self.assertEqual(graph.num_vertex, 0)
        self.assertEqual(graph.num_edge, 0)
        self.assertEqual(graph.vertices(), [])
        self.assertEqual(graph.adjacency_matrix(), [])

    def test_insertion_order(self):
        graph = Graph(4)
        for x in (30, 10, 40, 20):
            graph.add_vertex(Vertex(x))
        self.assertEqual([v.id for v in graph.vertices()], [30, 10, 40, 20])
        self.assertEqual(len(graph), 4)
        self.assertIn(Vertex(40), graph)
        self.assertIn(40, graph)
        self.assertNotIn(50, graph)

    def test_edges_of(self):
        """neighbours follow insertion order, not edge order"""
        graph = Graph(4)
        v = [Vertex(x) for x in (3, 1, 4, 2)]
        for x in v:
            graph.add_vertex(x)
        graph.add_edge(v[0], v[3])
        graph.add_edge(v[0], v[1])
        graph.add_edge(v[2], v[0])
        self.assertEqual([x.id for x in graph.edges_of(v[0])], [1, 4, 2])
        self.assertEqual([x.id for x in graph.edges_of(v[1])], [3])
        self.assertEqual(graph.num_edge, 3)

    def test_symmetric(self):
        graph = Graph(3)
        v = [Vertex(x) for x in range(3)]
        for x in v:
            graph.add_vertex(x)
        graph.add_edge(v[2], v[0])
        self.assertTrue(graph.has_edge(v[0], v[2]))
        self.assertTrue(graph.has_edge(v[2], v[0]))
        self.assertFalse(graph.has_edge(v[0], v[1]))
        self.assertEqual(
            graph.adjacency_matrix(),
            [[False, False, True],
             [False, False, False],
             [True, False, False]])

    def test_duplicate_edge(self):
        """adding the same edge twice has no effect"""
        graph = Graph(2)
        v = [Vertex(0), Vertex(1)]
        for x in v:
            graph.add_vertex(x)
        graph.add_edge(v[0], v[1])
        graph.add_edge(v[1], v[0])
        self.assertEqual(graph.num_edge, 1)
        self.assertEqual(graph.edges_of(v[0]), [v[1]])

    def test_adjacency_matrix_copy(self):
        graph = Graph(2)
        graph.add_vertex(Vertex(0))
        graph.add_vertex(Vertex(1))
        matrix = graph.adjacency_matrix()
        matrix[0][1] = True
        self.assertFalse(graph.has_edge(Vertex(0), Vertex(1)))

    def test_vertex_lookup(self):
        graph = Graph(2)
        graph.add_vertex(Vertex(5, "five"))
        self.assertEqual(graph.vertex(5).payload, "five")
        with self.assertRaises(UnknownVertex):
            graph.vertex(6)

    def test_fail_capacity(self):
        """vertex beyond declared capacity"""
        graph = Graph(2)
        graph.add_vertex(Vertex(1))
        graph.add_vertex(Vertex(2))
        with self.assertRaises(CapacityExceeded) as cm:
            graph.add_vertex(Vertex(3))
        self.assertEqual(cm.exception.capacity, 2)
        self.assertEqual(graph.num_vertex, 2)

    def test_fail_unknown_vertex(self):
        """edge to a vertex that was never added"""
        graph = Graph(3)
        graph.add_vertex(Vertex(1))
        graph.add_vertex(Vertex(2))
        with self.assertRaises(UnknownVertex) as cm:
            graph.add_edge(Vertex(1), Vertex(3))
        self.assertEqual(cm.exception.vertex_id, 3)
        with self.assertRaises(UnknownVertex):
            graph.add_edge(Vertex(4), Vertex(2))
        with self.assertRaises(UnknownVertex):
            graph.edges_of(Vertex(4))
        self.assertEqual(graph.num_edge, 0)

    def test_caller_errors_are_value_errors(self):
        self.assertTrue(issubclass(CapacityExceeded, GraphError))
        self.assertTrue(issubclass(UnknownVertex, GraphError))
        self.assertTrue(issubclass(GraphError, ValueError))

    def test_fail_bad_graph(self):
        """bad input graph structure"""
        graph = Graph(3)
        graph.add_vertex(Vertex(1))
        with self.assertRaises(ValueError):
            graph.add_vertex(Vertex(1, "again"))
        with self.assertRaises(ValueError):
            graph.add_edge(Vertex(1), Vertex(1))
        with self.assertRaises(TypeError):
            graph.add_vertex(2)

    def test_fail_bad_capacity(self):
        with self.assertRaises(TypeError):
            Graph(2.5)
        with self.assertRaises(ValueError):
            Graph(-1)


if __name__ == "__main__":
    unittest.main()
