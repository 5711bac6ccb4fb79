"""
Weighted Graph - weighted directed graphs with Viterbi decoding and A* search.

This package provides an in-memory graph store together with exact search
algorithms that run over it.
"""

import logging

__version__ = "0.1.0"

from .core import (
    Graph,
    Node,
    Decoder,
    Token,
    ScoredValue,
    NodeCapabilities,
    ShortestPath,
    shortest_path,
    GraphError,
    InvalidKeyError,
    DuplicateKeyError,
    CapabilityError,
    TopologyError,
    NullCycleError
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'Graph',
    'Node',
    'Decoder',
    'Token',
    'ScoredValue',
    'NodeCapabilities',
    'ShortestPath',
    'shortest_path',
    'GraphError',
    'InvalidKeyError',
    'DuplicateKeyError',
    'CapabilityError',
    'TopologyError',
    'NullCycleError'
]
