"""
Algorithm for finding a maximum cardinality matching in general graphs.
"""

__all__ = ["VertexId",
           "Vertex",
           "Graph",
           "GraphError",
           "CapacityExceeded",
           "UnknownVertex",
           "Matching",
           "BlossomEngine",
           "compute_maximum_matching",
           "MatchingError"]

from .graph import (VertexId,
                    Vertex,
                    Graph,
                    GraphError,
                    CapacityExceeded,
                    UnknownVertex)
from .algorithm import (Matching,
                        BlossomEngine,
                        compute_maximum_matching,
                        MatchingError)
