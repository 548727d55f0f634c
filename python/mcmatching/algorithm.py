"""
Algorithm for finding a maximum cardinality matching in general graphs.
"""

from __future__ import annotations

import collections
import logging
from typing import NamedTuple, Optional

from .graph import Graph, VertexId


_logger = logging.getLogger(__name__)


class MatchingError(Exception):
    """Raised when the matching algorithm detects an internal inconsistency.

    This indicates a bug in the algorithm, not a problem with the input.
    """


class Matching(NamedTuple):
    """Represents a matched edge between the vertices with ids "a" and "b".

    Unmatched vertices are never represented by a Matching; they are
    simply absent from the list of matched pairs.
    """
    a: VertexId
    b: VertexId

    def contains(self, x: int) -> bool:
        """Return True if vertex "x" is an endpoint of this pair."""
        return x == self.a or x == self.b

    def mate_of(self, x: int) -> VertexId:
        """Return the vertex that is matched to vertex "x".

        Raises:
            ValueError: If "x" is not an endpoint of this pair.
        """
        if x == self.a:
            return self.b
        if x == self.b:
            return self.a
        raise ValueError(f"Vertex {x} is not part of {tuple(self)}")

    def key(self) -> tuple[int, int]:
        """Return the endpoints as an ordered tuple "(min, max)"."""
        return (self.a, self.b) if self.a <= self.b else (self.b, self.a)


def compute_maximum_matching(
        graph: Graph,
        verify: bool = True
        ) -> list[Matching]:
    """Compute a maximum-cardinality matching in the general undirected
    graph "graph".

    The graph may be non-bipartite and may contain multiple components.
    Isolated vertices are allowed; they simply remain unmatched.

    This function takes time O(n**4), where "n" is the number of vertices.

    Parameters:
        graph: The graph to match.
        verify: When True, double-check that the result is a valid matching
            in the graph before returning it.

    Returns:
        List of matched pairs.
        Each vertex id occurs in at most one pair.
        Unmatched vertices do not occur in the list.

    Raises:
        MatchingError: If the algorithm detects an internal inconsistency.
    """
    return BlossomEngine(graph, verify=verify).compute_matchings()


class BlossomEngine:
    """Edmonds' blossom algorithm for maximum cardinality matching.

    The engine holds only the input graph and options; all state of
    a computation is local to a call of "compute_matchings()".
    A single engine may therefore be used repeatedly.
    """

    def __init__(self, graph: Graph, verify: bool = True) -> None:
        self.graph = graph
        self.verify = verify

    def compute_matchings(self) -> list[Matching]:
        """Compute a maximum matching of the graph.

        Each pass through the main loop finds an augmenting path and
        grows the matching by 1 edge. The loop ends when no augmenting
        path exists; by Berge's theorem the matching is then maximum.

        This loop runs through at most (n/2 + 1) iterations.
        """

        matching: list[Matching] = []

        while True:
            path = _find_augmenting_path(self.graph, matching)
            if not path:
                break
            matching = _apply_augmenting_path(path, matching)
            _logger.debug("augmented matching to %d pairs", len(matching))

        pairs = _strip_duplicates(matching)

        # Verification is a redundant step; if the matching algorithm is
        # correct, verification will always pass.
        if self.verify:
            _verify_matching(self.graph, pairs)

        return pairs


class _AlternatingForest:
    """Alternating trees grown from the exposed vertices.

    A forest is built from scratch for each search and discarded
    when the search ends.
    """

    def __init__(self) -> None:
        # "parent[x]" is the vertex through which "x" was attached to
        # its tree. A root is its own parent.
        self.parent: dict[int, int] = {}

        # "root[x]" is the root of the tree that contains vertex "x".
        self.root: dict[int, int] = {}

        # "depth[x]" is the number of tree edges between "x" and its root.
        #
        # Vertices at even depth are outer vertices. They are scanned for
        # edges that extend the forest, close a blossom or complete an
        # augmenting path.
        #
        # Vertices at odd depth are inner vertices. Each inner vertex has
        # exactly one child: its matched partner.
        self.depth: dict[int, int] = {}

    def __contains__(self, x: int) -> bool:
        return x in self.depth

    def add_root(self, x: int) -> None:
        self.parent[x] = x
        self.root[x] = x
        self.depth[x] = 0

    def add_child(self, x: int, parent: int) -> None:
        """Attach vertex "x" as a child of "parent"."""
        self.parent[x] = parent
        self.root[x] = self.root[parent]
        self.depth[x] = self.depth[parent] + 1

    def is_even(self, x: int) -> bool:
        return self.depth[x] % 2 == 0

    def path_to_root(self, x: int) -> list[int]:
        """Return the tree path "[x, parent(x), ..., root(x)]"."""
        path = [x]
        while self.parent[x] != x:
            x = self.parent[x]
            path.append(x)
        return path

    def augmenting_path(self, x: int, y: int) -> list[int]:
        """Return the path "root(x) ... x, y ... root(y)" through the
        edge between outer vertices "x" and "y" of different trees."""
        return self.path_to_root(x)[::-1] + self.path_to_root(y)


class _ForestEvent(NamedTuple):
    """Represents an edge between two outer vertices, discovered while
    growing an alternating forest."""
    forest: _AlternatingForest
    x: int
    y: int

    def is_blossom(self) -> bool:
        """Return True if the edge closes a blossom, or False if
        it completes an augmenting path."""
        return self.forest.root[self.x] == self.forest.root[self.y]


class _ContractionContext(NamedTuple):
    """Records one blossom contraction, to be undone when lifting
    an augmenting path out of the contracted graph."""

    # Matching in "graph" before the contraction.
    matching: list[Matching]

    # Base vertex of the blossom.
    # The super-vertex in the contracted graph reuses this id.
    blossom_root: int

    # Vertices of the blossom in cycle order, starting at the base.
    # "blossom[0]" is the base; consecutive vertices are adjacent and
    # the last vertex is adjacent to the base.
    # "blossom[2*i+1]" is matched to "blossom[2*i+2]".
    blossom: list[int]

    # The graph in which the blossom was found.
    graph: Graph


def _mate_map(matching: list[Matching]) -> dict[int, int]:
    """Return a mapping from each matched vertex to its partner.

    Raises:
        MatchingError: If a vertex occurs in more than one pair.
    """
    mate: dict[int, int] = {}
    for (a, b) in matching:
        if (a in mate) or (b in mate) or (a == b):
            raise MatchingError(f"Inconsistent matched pair {(a, b)}")
        mate[a] = b
        mate[b] = a
    return mate


def _exposed_vertices(graph: Graph, mate: dict[int, int]) -> list[int]:
    """Return the ids of all unmatched vertices in insertion order."""
    return [x for x in graph._vertex_ids() if x not in mate]


def _grow_forest(
        graph: Graph,
        matching: list[Matching]
        ) -> Optional[_ForestEvent]:
    """Grow alternating trees from all exposed vertices until an edge
    between two outer vertices is found.

    Trees are grown breadth-first. Roots are taken in insertion order,
    and neighbours are scanned in insertion order, which makes the
    search deterministic for a given graph.

    This function takes time O(n**2).

    Returns:
        The edge that closes a blossom or completes an augmenting path,
        or None if the forest can not be extended further.
    """

    mate = _mate_map(matching)
    exposed = _exposed_vertices(graph, mate)

    # Nothing to search if there are fewer than 2 exposed vertices.
    if len(exposed) < 2:
        return None

    forest = _AlternatingForest()
    for x in exposed:
        forest.add_root(x)

    # "queue" holds outer vertices that must be scanned.
    queue: collections.deque[int] = collections.deque(exposed)

    # Each edge is scanned at most once.
    # Edges are keyed as "(x, y)" with "x < y".
    visited: set[tuple[int, int]] = set()

    while queue:
        x = queue.popleft()
        assert forest.is_even(x)

        for y in graph._neighbour_ids(x):

            edge = (x, y) if x < y else (y, x)
            if edge in visited:
                continue
            visited.add(edge)

            if y not in forest:
                # All exposed vertices are roots, so "y" must be matched.
                # Extend the tree with "y" (inner) and its partner (outer).
                z = mate.get(y)
                if z is None:
                    raise MatchingError(
                        f"Unmatched vertex {y} is not in the forest")
                if z in forest:
                    raise MatchingError(
                        f"Partner {z} of vertex {y} is already in the forest")
                forest.add_child(y, x)
                forest.add_child(z, y)
                queue.append(z)

            elif forest.is_even(y):
                # Edge between two outer vertices.
                return _ForestEvent(forest, x, y)

            # Edges to inner vertices are ignored.

    return None


def _find_augmenting_path(
        graph: Graph,
        matching: list[Matching]
        ) -> list[Matching]:
    """Search for an augmenting path with respect to "matching".

    When a blossom is found, it is contracted and the search restarts
    in the contracted graph. Contractions may nest. When an augmenting
    path is finally found, the blossoms are lifted in reverse order
    to turn it into an augmenting path in the original graph.

    Returns:
        The pairs that become matched when the path is applied,
        or an empty list if there is no augmenting path.
    """

    # Contractions performed during this search, innermost last.
    stack: list[_ContractionContext] = []

    current_graph = graph
    current_matching = matching

    while True:
        event = _grow_forest(current_graph, current_matching)

        if event is None:
            # No augmenting path in the contracted graph implies
            # no augmenting path in the original graph.
            return []

        if not event.is_blossom():
            path = event.forest.augmenting_path(event.x, event.y)
            break

        (context, current_graph, current_matching) = _contract_blossom(
            current_graph, current_matching, event.forest, event.x, event.y)
        stack.append(context)

        _logger.debug("contracted blossom %s with base %d at depth %d",
                      context.blossom, context.blossom_root, len(stack))

    while stack:
        path = _lift_blossom(stack.pop(), path)

    return _path_to_pairs(path)


def _path_to_pairs(path: list[int]) -> list[Matching]:
    """Return the edges that become matched when augmenting along "path".

    The path alternates between unmatched and matched edges,
    starting and ending with an unmatched edge. The first edge and
    every second edge after it become matched.
    """
    if len(path) < 2 or len(path) % 2 != 0:
        raise MatchingError(f"Invalid augmenting path {path}")
    return [Matching(VertexId(path[i]), VertexId(path[i+1]))
            for i in range(0, len(path), 2)]


def _blossom_cycle(
        forest: _AlternatingForest,
        x: int,
        y: int
        ) -> list[int]:
    """Trace the blossom closed by the edge between outer vertices
    "x" and "y" of the same alternating tree.

    Returns:
        Blossom vertices in cycle order, starting with the base.
    """

    xpath = forest.path_to_root(x)[::-1]
    ypath = forest.path_to_root(y)[::-1]

    # Strip the common part of both paths.
    # The last common vertex is the base of the blossom.
    k = 0
    while k < len(xpath) and k < len(ypath) and xpath[k] == ypath[k]:
        k += 1

    if k == 0:
        raise MatchingError(f"Vertices {x} and {y} are in different trees")

    cycle = xpath[k-1:] + ypath[k:][::-1]

    # Any blossom must have odd length.
    if len(cycle) < 3 or len(cycle) % 2 != 1:
        raise MatchingError(f"Invalid blossom {cycle}")

    return cycle


def _contract_blossom(
        graph: Graph,
        matching: list[Matching],
        forest: _AlternatingForest,
        x: int,
        y: int
        ) -> tuple[_ContractionContext, Graph, list[Matching]]:
    """Contract the blossom closed by the edge "(x, y)" into a single
    super-vertex.

    The super-vertex takes the id of the blossom base.
    Edges between a blossom vertex and an outside vertex are redirected
    to the super-vertex. Edges inside the blossom are dropped.

    This function takes time O(n**2).

    Returns:
        Tuple (context, contracted_graph, contracted_matching).
    """

    cycle = _blossom_cycle(forest, x, y)
    base = cycle[0]
    members = set(cycle)

    contracted = Graph(graph.num_vertex - len(cycle) + 1)

    # Copy the vertices outside the blossom, then add the super-vertex.
    for v in graph.vertices():
        if v.id not in members:
            contracted.add_vertex(v)
    contracted.add_vertex(graph.vertex(base))

    # Copy edges, redirecting edges into the blossom to the super-vertex.
    for v in graph.vertices():
        if v.id in members:
            continue
        for w in graph._neighbour_ids(v.id):
            contracted._connect_ids(v.id, base if w in members else w)

    # Drop matched edges inside the blossom.
    # Only the base can be matched to a vertex outside the blossom;
    # that pair remains valid because the super-vertex has the same id.
    contracted_matching: list[Matching] = []
    for pair in matching:
        (a, b) = pair
        if (a in members) and (b in members):
            continue
        if ((a in members) and (a != base)) or ((b in members) and (b != base)):
            raise MatchingError(
                f"Blossom vertex other than base {base} matched in {pair}")
        contracted_matching.append(pair)

    context = _ContractionContext(
        matching=matching,
        blossom_root=base,
        blossom=cycle,
        graph=graph)

    return (context, contracted, contracted_matching)


def _route_to_base(graph: Graph, blossom: list[int], entry: int) -> list[int]:
    """Find an alternating route through a blossom, entering the blossom
    from the outside vertex "entry" and ending at the base.

    The route has even length and starts with a matched edge
    (unless it consists of just the base).

    Returns:
        List of blossom vertices, starting next to "entry" and ending
        at the base.
    """

    for (p, u) in enumerate(blossom):
        if graph._has_edge_ids(entry, u):
            break
    else:
        raise MatchingError(
            f"Vertex {entry} is not adjacent to blossom {blossom}")

    if p % 2 == 0:
        # Walk towards the start of the cycle:
        #
        #   (base) --- 1 === 2 --- ... --- (p-1) === (p)
        #     ^^^                                    ^^^
        #        <----------------------------------
        #
        return blossom[p::-1]
    else:
        # Walk towards the end of the cycle, then close it at the base:
        #
        #   (p) === (p+1) --- ... === (last) --- (base)
        #   ^^^                                   ^^^
        #      --------------------------------->
        #
        return blossom[p:] + [blossom[0]]


def _lift_blossom(context: _ContractionContext, path: list[int]) -> list[int]:
    """Expand the super-vertex of a contracted blossom in an augmenting path.

    Returns:
        An augmenting path in the graph that contains the blossom.
    """

    base = context.blossom_root

    # Nothing to do if the path does not touch the blossom.
    if base not in path:
        return path

    mate = _mate_map(context.matching)
    stem = mate.get(base)

    # Orient the path such that the super-vertex is entered through
    # an unmatched edge, and left through its matched edge (if any).
    p = path.index(base)
    if stem is None:
        # An unmatched blossom can only be at the end of the path.
        if p == 0:
            path = path[::-1]
            p = len(path) - 1
        if p != len(path) - 1:
            raise MatchingError(
                f"Unmatched blossom {base} inside augmenting path {path}")
    else:
        if p > 0 and path[p-1] == stem:
            path = path[::-1]
            p = len(path) - 1 - p
        if p + 1 >= len(path) or path[p+1] != stem:
            raise MatchingError(
                f"Matched edge of blossom {base} not on augmenting path")

    if p == 0:
        raise MatchingError(f"Blossom {base} has no entry in path {path}")

    route = _route_to_base(context.graph, context.blossom, path[p-1])

    _logger.debug("lifted blossom with base %d through %s", base, route)

    return path[:p] + route + path[p+1:]


def _apply_augmenting_path(
        path: list[Matching],
        matching: list[Matching]
        ) -> list[Matching]:
    """Augment the matching along the specified augmenting path.

    The new pairs are placed first. Existing pairs that share a vertex
    with any of the new pairs are dropped; these are exactly the matched
    edges along the augmenting path.

    Returns:
        The new matching, which has exactly one more pair.
    """

    touched: set[int] = set()
    for (a, b) in path:
        touched.add(a)
        touched.add(b)

    augmented = list(path)
    for pair in matching:
        if (pair.a in touched) or (pair.b in touched):
            continue
        augmented.append(pair)

    if len(augmented) != len(matching) + 1:
        raise MatchingError(
            f"Augmenting path {path} changed matching size"
            f" from {len(matching)} to {len(augmented)}")

    return augmented


def _strip_duplicates(matching: list[Matching]) -> list[Matching]:
    """Remove pairs that duplicate an earlier pair, in either orientation."""
    seen: set[tuple[int, int]] = set()
    pairs: list[Matching] = []
    for pair in matching:
        key = pair.key()
        if key in seen:
            continue
        seen.add(key)
        pairs.append(pair)
    return pairs


def _verify_matching(graph: Graph, pairs: list[Matching]) -> None:
    """Verify that "pairs" is a valid matching in the graph.

    This function takes time O(n).

    Raises:
        MatchingError: If the matching is not valid.
    """

    # Check that each vertex is matched at most once.
    mate = _mate_map(pairs)

    # Check that each matched edge actually exists in the graph.
    for (a, b) in pairs:
        if (a not in graph) or (b not in graph) or (not graph._has_edge_ids(a, b)):
            raise MatchingError(f"Matched pair {(a, b)} is not an edge")

    # Double-check the bound on the number of pairs.
    if len(mate) != 2 * len(pairs) or len(pairs) > graph.num_vertex // 2:
        raise MatchingError("Matching has more pairs than possible")
