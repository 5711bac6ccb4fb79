"""Search utilities shared by the decoders, A* and external serializers.

Provides dense transition-matrix extraction, predecessor/start/end node
derivation and validation helpers. All derivations are full scans without
caching: the graph can change between calls and correctness wins over speed.
"""

from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np
from scipy.special import logsumexp

from .errors import NullCycleError

if TYPE_CHECKING:
    from .graph import Graph, Node


def predecessors(graph: 'Graph', node: 'Node') -> List['Node']:
    """Return the nodes that have an arc into ``node``, ordered by key."""
    return [n for n in graph.nodes() if node in n.successors]


def start_nodes(graph: 'Graph') -> List['Node']:
    """Return the nodes without predecessors, ordered by key.

    Each candidate is checked with :func:`predecessors`, so the cost is
    quadratic in the number of nodes.
    """
    return [node for node in graph.nodes() if not predecessors(graph, node)]


def end_nodes(graph: 'Graph') -> List['Node']:
    """Return the nodes without successors, ordered by key."""
    return [node for node in graph.nodes() if not node.successors]


def transition_matrix(graph: 'Graph',
                      is_log: bool = False) -> Tuple[List[str], List[Optional[np.ndarray]]]:
    """Extract the keys and the dense transition matrix of a graph.

    Parameters
    ----------
    graph : Graph
        Graph to read.
    is_log : bool, default=False
        Whether the arc weights are log probabilities. Selects the fill value
        for missing arcs: ``-inf`` in the log domain, ``0`` otherwise.

    Returns
    -------
    keys : List[str]
        Node keys sorted in ascending order. Row and column ``i`` of the
        matrix correspond to ``keys[i]``.
    rows : List[Optional[np.ndarray]]
        ``rows[i][j]`` is the weight of the arc from ``keys[i]`` to
        ``keys[j]``. A node without outbound arcs has ``rows[i] is None``;
        callers must skip such rows rather than read weights from them.

    Examples
    --------
    >>> keys, rows = transition_matrix(g)           # doctest: +SKIP
    >>> for i, row in enumerate(rows):               # doctest: +SKIP
    ...     if row is None:
    ...         continue  # no arcs leave keys[i]
    """
    nodes = graph.nodes()
    n = len(nodes)
    keys = [node.key for node in nodes]
    index: Dict['Node', int] = {node: i for i, node in enumerate(nodes)}
    fill = -np.inf if is_log else 0.0

    rows: List[Optional[np.ndarray]] = [None] * n
    for i, node in enumerate(nodes):
        if not node.successors:
            continue
        row = np.full(n, fill, dtype=np.float64)
        for successor, weight in node.successors.items():
            row[index[successor]] = weight
        rows[i] = row
    return keys, rows


def validate_stochastic_rows(keys: Sequence[str],
                             rows: Sequence[Optional[np.ndarray]],
                             is_log: bool = False,
                             atol: Optional[float] = None) -> bool:
    """Check that every present row of a transition matrix sums to one.

    Log-domain rows are reduced with ``logsumexp`` and compared against zero.

    Parameters
    ----------
    keys, rows
        Output of :func:`transition_matrix`.
    is_log : bool, default=False
        Whether the rows hold log probabilities.
    atol : Optional[float]
        Absolute tolerance. Defaults to ``Settings.normalize_atol``.

    Returns
    -------
    bool
        True if all rows are valid distributions.

    Raises
    ------
    AssertionError
        If a row does not sum to one within tolerance.
    """
    if atol is None:
        from ..config import get_config
        atol = get_config().normalize_atol

    for key, row in zip(keys, rows):
        if row is None:
            continue
        if is_log:
            total = float(logsumexp(row))
            expected = 0.0
        else:
            total = float(np.sum(row))
            expected = 1.0
        if not np.isclose(total, expected, rtol=0.0, atol=atol):
            domain = "log " if is_log else ""
            raise AssertionError(
                f"Outbound {domain}weights of node '{key}' sum to {total:.12g}, "
                f"expected {expected} ± {atol}"
            )
    return True


def null_topological_order(nodes: Iterable['Node'],
                           is_null: Callable[['Node'], bool]) -> List['Node']:
    """Order the null nodes so that every null-to-null arc points forward.

    Parameters
    ----------
    nodes : Iterable[Node]
        All nodes of the graph. Ties are resolved by key so the result is
        reproducible.
    is_null : Callable[[Node], bool]
        Predicate marking non-emitting nodes.

    Returns
    -------
    List[Node]
        Null nodes in topological order of the null-only subgraph.

    Raises
    ------
    NullCycleError
        If the null nodes contain a cycle (self-loops included).
    """
    null_nodes = sorted((n for n in nodes if is_null(n)), key=lambda n: n.key)

    null_graph = nx.DiGraph()
    null_graph.add_nodes_from(null_nodes)
    for node in null_nodes:
        null_graph.add_edges_from(
            (node, successor) for successor, _ in node.sorted_successors()
            if successor in null_graph
        )

    try:
        return list(nx.lexicographical_topological_sort(null_graph, key=lambda n: n.key))
    except nx.NetworkXUnfeasible:
        edges = nx.find_cycle(null_graph)
        raise NullCycleError([u.key for u, _ in edges] + [edges[-1][1].key]) from None
