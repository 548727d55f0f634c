"""
Undirected graph representation used by the matching algorithm.
"""

from __future__ import annotations

from typing import Any, NewType


# Vertices are identified by an integer key.
# The key is unique within a graph and stable for the lifetime of the graph.
VertexId = NewType("VertexId", int)


class GraphError(ValueError):
    """Raised when the caller builds or queries a graph incorrectly."""


class CapacityExceeded(GraphError):
    """Raised when a vertex is added to a graph that is already full."""

    def __init__(self, capacity: int) -> None:
        super().__init__(f"Graph capacity of {capacity} vertices exceeded")
        self.capacity = capacity


class UnknownVertex(GraphError):
    """Raised when a vertex is used that was never added to the graph."""

    def __init__(self, vertex_id: int) -> None:
        super().__init__(f"Unknown vertex {vertex_id}")
        self.vertex_id = vertex_id


class Vertex:
    """A vertex of an undirected graph.

    A vertex carries an opaque payload on behalf of the caller.
    Vertices are compared and hashed on their "id" only;
    the payload never takes part in vertex identity.
    """

    __slots__ = ("_id", "_payload")

    def __init__(self, id: int, payload: Any = None) -> None:
        # Note: "bool" is a subclass of "int" but makes no sense as an id.
        if (not isinstance(id, int)) or isinstance(id, bool):
            raise TypeError("Vertex id must be an integer")
        self._id = VertexId(id)
        self._payload = payload

    @property
    def id(self) -> VertexId:
        return self._id

    @property
    def payload(self) -> Any:
        return self._payload

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vertex):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Vertex({self._id!r}, {self._payload!r})"


class Graph:
    """Undirected graph with a fixed vertex capacity.

    The graph is stored as a symmetric adjacency matrix.
    Vertices are assigned consecutive matrix indices in the order
    in which they are added. This order is observable: it determines
    the order of neighbours returned by "edges_of()" and therefore
    the order in which the matching algorithm explores the graph.

    Vertices and edges can be added but never removed.
    """

    def __init__(self, capacity: int) -> None:
        """Initialize an empty graph that can hold up to "capacity" vertices.

        This function takes time O(capacity**2).
        """

        if (not isinstance(capacity, int)) or isinstance(capacity, bool):
            raise TypeError("Graph capacity must be an integer")
        if capacity < 0:
            raise ValueError("Graph capacity must be non-negative")

        self.capacity = capacity

        # "adjacency[i][j]" is True if the vertices with matrix indices
        # "i" and "j" are connected by an edge.
        # The matrix is always symmetric.
        self._adjacency: list[list[bool]] = [
            capacity * [False] for _i in range(capacity)]

        # "index[x]" is the matrix index of the vertex with id "x".
        self._index: dict[int, int] = {}

        # "inserted[i]" is the vertex with matrix index "i".
        self._inserted: list[Vertex] = []

        self._num_edge = 0

    @property
    def num_vertex(self) -> int:
        """Number of vertices added so far."""
        return len(self._inserted)

    @property
    def num_edge(self) -> int:
        """Number of distinct edges added so far."""
        return self._num_edge

    def __len__(self) -> int:
        return len(self._inserted)

    def __contains__(self, v: object) -> bool:
        if isinstance(v, Vertex):
            return v.id in self._index
        return v in self._index

    def add_vertex(self, v: Vertex) -> None:
        """Add a vertex to the graph.

        Raises:
            CapacityExceeded: If the graph already holds "capacity" vertices.
            ValueError: If a vertex with the same id was already added.
            TypeError: If "v" is not a Vertex.
        """

        if not isinstance(v, Vertex):
            raise TypeError("Expecting a Vertex instance")

        if v.id in self._index:
            raise ValueError(f"Duplicate vertex {v.id}")

        if len(self._inserted) == self.capacity:
            raise CapacityExceeded(self.capacity)

        self._index[v.id] = len(self._inserted)
        self._inserted.append(v)

    def add_edge(self, v1: Vertex, v2: Vertex) -> None:
        """Add an undirected edge between two vertices of the graph.

        Adding an edge that already exists has no effect.

        Raises:
            UnknownVertex: If either endpoint was not added to the graph.
            ValueError: If both endpoints are the same vertex.
        """

        i = self._lookup(v1.id)
        j = self._lookup(v2.id)

        if i == j:
            raise ValueError("Self-edges are not supported")

        self._connect(i, j)

    def has_edge(self, v1: Vertex, v2: Vertex) -> bool:
        """Return True if the two vertices are connected by an edge."""
        return self._adjacency[self._lookup(v1.id)][self._lookup(v2.id)]

    def edges_of(self, v: Vertex) -> list[Vertex]:
        """Return the neighbours of vertex "v" in insertion order.

        This function takes time O(n).

        Raises:
            UnknownVertex: If "v" was not added to the graph.
        """
        row = self._adjacency[self._lookup(v.id)]
        return [self._inserted[i]
                for i in range(len(self._inserted)) if row[i]]

    def vertices(self) -> list[Vertex]:
        """Return all vertices in insertion order."""
        return list(self._inserted)

    def vertex(self, vertex_id: int) -> Vertex:
        """Return the vertex with the specified id.

        Raises:
            UnknownVertex: If there is no such vertex in the graph.
        """
        return self._inserted[self._lookup(vertex_id)]

    def adjacency_matrix(self) -> list[list[bool]]:
        """Return a copy of the adjacency matrix.

        Rows and columns are ordered by insertion order of the vertices.
        The matrix has "capacity" rows; rows beyond the number of
        inserted vertices are all False.
        """
        return [row.copy() for row in self._adjacency]

    #
    # Helper functions for the matching algorithm.
    # These work directly with vertex ids.
    #

    def _lookup(self, vertex_id: int) -> int:
        """Return the matrix index of the vertex with the specified id."""
        i = self._index.get(vertex_id)
        if i is None:
            raise UnknownVertex(vertex_id)
        return i

    def _connect(self, i: int, j: int) -> None:
        """Add an edge between matrix indices "i" and "j"."""
        if not self._adjacency[i][j]:
            self._num_edge += 1
        self._adjacency[i][j] = True
        self._adjacency[j][i] = True

    def _connect_ids(self, x: int, y: int) -> None:
        """Add an edge between the vertices with ids "x" and "y"."""
        self._connect(self._lookup(x), self._lookup(y))

    def _has_edge_ids(self, x: int, y: int) -> bool:
        return self._adjacency[self._lookup(x)][self._lookup(y)]

    def _neighbour_ids(self, x: int) -> list[int]:
        """Return the ids of the neighbours of vertex "x" in insertion order.

        This function takes time O(n).
        """
        row = self._adjacency[self._lookup(x)]
        inserted = self._inserted
        return [inserted[i].id for i in range(len(inserted)) if row[i]]

    def _vertex_ids(self) -> list[int]:
        """Return the ids of all vertices in insertion order."""
        return [v.id for v in self._inserted]

