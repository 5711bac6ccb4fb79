"""Core graph store and search algorithms.

This module contains the fundamental components:
- Weighted directed graph store
- Transition matrix extraction and structural queries
- Token-passing Viterbi decoding
- A* shortest-path search
"""

from .errors import (
    GraphError,
    InvalidKeyError,
    DuplicateKeyError,
    CapabilityError,
    TopologyError,
    NullCycleError
)
from .graph import Graph, Node
from .transitions import (
    transition_matrix,
    predecessors,
    start_nodes,
    end_nodes,
    validate_stochastic_rows,
    null_topological_order
)
from .viterbi import Decoder, Token, ScoredValue, NodeCapabilities
from .astar import shortest_path, ShortestPath, Item, PriorityQueue, zero_heuristic

__all__ = [
    # Errors
    'GraphError',
    'InvalidKeyError',
    'DuplicateKeyError',
    'CapabilityError',
    'TopologyError',
    'NullCycleError',

    # Graph store
    'Graph',
    'Node',

    # Search utilities
    'transition_matrix',
    'predecessors',
    'start_nodes',
    'end_nodes',
    'validate_stochastic_rows',
    'null_topological_order',

    # Viterbi decoding
    'Decoder',
    'Token',
    'ScoredValue',
    'NodeCapabilities',

    # A* search
    'shortest_path',
    'ShortestPath',
    'Item',
    'PriorityQueue',
    'zero_heuristic'
]
