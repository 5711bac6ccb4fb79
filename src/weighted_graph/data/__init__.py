"""Graph construction and exchange utilities.

Key Components
--------------
- Exchange: enumeration and reconstruction contract for serializers
- Builders: decoding graphs, left-to-right HMM chains and random graphs

Examples
--------
>>> from weighted_graph.data import left_to_right_hmm, export_graph
>>> graph = left_to_right_hmm([[-1.0, -2.0], [-0.5, -0.1]], self_loop=0.4)
>>> sorted(export_graph(graph).nodes)
['s0', 's1', 's2', 's3']
"""

from .exchange import (
    NodeRecord,
    GraphRecord,
    iter_node_records,
    export_graph,
    build_graph,
    import_graph
)

from .builders import (
    frame_score,
    categorical_score,
    decoding_graph,
    left_to_right_hmm,
    random_graph,
    adjacency_matrix,
    weights_by_key
)

__all__ = [
    # Exchange
    'NodeRecord',
    'GraphRecord',
    'iter_node_records',
    'export_graph',
    'build_graph',
    'import_graph',

    # Builders
    'frame_score',
    'categorical_score',
    'decoding_graph',
    'left_to_right_hmm',
    'random_graph',
    'adjacency_matrix',
    'weights_by_key'
]
