"""Enumeration and reconstruction of graphs for external collaborators.

Serializers and visualizers work against the records defined here instead of
the graph's internal successor tables: :func:`export_graph` enumerates every
node's key, value and ``{successor_key: weight}`` mapping, and
:func:`build_graph` rebuilds a graph from ``(key, value)`` pairs and
``(from_key, to_key, weight)`` triples.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Mapping, Tuple, Union

from ..core.errors import InvalidKeyError
from ..core.graph import Graph

logger = logging.getLogger(__name__)

Arc = Tuple[str, str, float]


@dataclass
class NodeRecord:
    """One node as seen by a serializer."""
    key: str
    value: Any
    successors: Dict[str, float] = field(default_factory=dict)


@dataclass
class GraphRecord:
    """Whole graph as plain mappings.

    Attributes
    ----------
    nodes : Dict[str, Any]
        Node values indexed by key.
    arcs : Dict[str, Dict[str, float]]
        Arc weights indexed by start node key and end node key. Every node
        has an entry, empty if it has no successors.
    """
    nodes: Dict[str, Any] = field(default_factory=dict)
    arcs: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def arc_list(self) -> Iterator[Arc]:
        """Arcs as ``(from_key, to_key, weight)`` triples ordered by keys."""
        for from_key in sorted(self.arcs):
            for to_key in sorted(self.arcs[from_key]):
                yield from_key, to_key, self.arcs[from_key][to_key]


def iter_node_records(graph: Graph) -> Iterator[NodeRecord]:
    """Yield a :class:`NodeRecord` for every node, ordered by key."""
    for node in graph.nodes():
        successors = {s.key: w for s, w in node.sorted_successors()}
        yield NodeRecord(node.key, node.value, successors)


def export_graph(graph: Graph) -> GraphRecord:
    """Enumerate a graph into a :class:`GraphRecord`."""
    record = GraphRecord()
    for node in iter_node_records(graph):
        record.nodes[node.key] = node.value
        record.arcs[node.key] = node.successors
    return record


def build_graph(values: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]],
                arcs: Iterable[Arc]) -> Graph:
    """Build a graph from node values and arc triples.

    Parameters
    ----------
    values : Mapping[str, Any] or Iterable[Tuple[str, Any]]
        Node values by key.
    arcs : Iterable[Tuple[str, str, float]]
        ``(from_key, to_key, weight)`` triples.

    Returns
    -------
    Graph
        Newly built graph.

    Raises
    ------
    InvalidKeyError
        If an arc references a key that has no value entry.
    """
    if isinstance(values, Mapping):
        values = values.items()

    graph = Graph()
    for key, value in values:
        graph.set(key, value)

    for from_key, to_key, weight in arcs:
        if not graph.connect(from_key, to_key, weight):
            bad_key = from_key if from_key not in graph else to_key
            raise InvalidKeyError(
                bad_key,
                f"invalid arc endpoints: {from_key!r} -> {to_key!r} (unknown key {bad_key!r})",
            )

    logger.debug("built graph with %d nodes", len(graph))
    return graph


def import_graph(record: GraphRecord) -> Graph:
    """Rebuild a graph from a :class:`GraphRecord`.

    Raises
    ------
    InvalidKeyError
        If an arc references a key missing from ``record.nodes``.
    """
    return build_graph(record.nodes, record.arc_list())
