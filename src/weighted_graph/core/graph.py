"""Weighted, directed graph store.

Nodes are identified by a unique string key and hold an opaque value plus a
mapping from successor *node* to arc weight. Arcs are keyed by node identity,
so a node can have at most one arc to a given successor and setting it again
overwrites the weight.

Weights are either linear (non-negative, not necessarily normalized) or log
probabilities. The graph does not record which domain it is in; callers pass
``is_log`` to the operations where it matters.

The graph performs no locking. Concurrent readers are fine as long as no
writer is active; writers must be serialized by the caller.
"""

import logging
import warnings
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import numpy as np

from .errors import DuplicateKeyError, InvalidKeyError
from . import transitions
from . import astar

logger = logging.getLogger(__name__)


class Node:
    """A graph vertex: immutable key, mutable value, weighted successor arcs.

    Parameters
    ----------
    key : str
        Unique key of the node within its graph.
    value : Any
        Application payload. Algorithms that need more than an opaque payload
        (e.g. the Viterbi decoder) check the value's capabilities themselves.
    """

    def __init__(self, key: str, value: Any = None):
        self._key = key
        self.value = value
        self._successors: Dict['Node', float] = {}

    @property
    def key(self) -> str:
        return self._key

    @property
    def successors(self) -> Dict['Node', float]:
        """Mapping from successor node to arc weight (live view)."""
        return self._successors

    def connect(self, to_node: Optional['Node'], weight: float) -> bool:
        """Create or overwrite the arc to ``to_node``.

        Returns False if ``to_node`` is None.
        """
        if to_node is None:
            return False
        self._successors[to_node] = float(weight)
        return True

    def disconnect(self, to_node: Optional['Node']) -> bool:
        """Remove the arc to ``to_node``. Returns False if ``to_node`` is None."""
        if to_node is None:
            return False
        self._successors.pop(to_node, None)
        return True

    def is_connected(self, to_node: Optional['Node']) -> Tuple[bool, float]:
        """Return ``(True, weight)`` if an arc to ``to_node`` exists, else ``(False, 0.0)``."""
        if to_node is None or to_node not in self._successors:
            return False, 0.0
        return True, self._successors[to_node]

    def sorted_successors(self) -> List[Tuple['Node', float]]:
        """Successor arcs ordered by successor key."""
        return sorted(self._successors.items(), key=lambda item: item[0].key)

    # ------------------------------------------------------------------
    # Weight domain
    # ------------------------------------------------------------------

    def _weights(self) -> Tuple[List['Node'], np.ndarray]:
        targets = list(self._successors)
        weights = np.fromiter(self._successors.values(), dtype=np.float64, count=len(targets))
        return targets, weights

    def _assign(self, targets: List['Node'], weights: np.ndarray) -> None:
        self._successors.update(zip(targets, weights.tolist()))

    def normalize(self, is_log: bool = False) -> None:
        """Rescale outbound weights so they form a probability distribution.

        In the linear domain each weight is divided by the sum of the node's
        outbound weights. In the log domain the weights are exponentiated,
        normalized linearly and converted back to log probabilities.

        A node without successors is left untouched. A node whose outbound
        weights sum to zero cannot be normalized; a ``RuntimeWarning`` is
        issued and the weights are left unchanged.
        """
        if not self._successors:
            return

        if is_log:
            self.convert_to_linear_probs()
            try:
                self.normalize(is_log=False)
            finally:
                self.convert_to_log_probs()
            return

        targets, weights = self._weights()
        total = weights.sum()
        if total == 0 or not np.isfinite(total):
            warnings.warn(
                f"Cannot normalize node '{self._key}': outbound weights sum to {total}",
                RuntimeWarning,
            )
            return
        self._assign(targets, weights / total)

    def convert_to_log_probs(self) -> None:
        """Replace every outbound weight ``w`` by ``ln(w)``; zero maps to ``-inf``, negatives to NaN."""
        if not self._successors:
            return
        targets, weights = self._weights()
        with np.errstate(divide='ignore', invalid='ignore'):
            self._assign(targets, np.log(weights))

    def convert_to_linear_probs(self) -> None:
        """Replace every outbound weight ``w`` by ``exp(w)``."""
        if not self._successors:
            return
        targets, weights = self._weights()
        self._assign(targets, np.exp(weights))

    def __repr__(self) -> str:
        arcs = ", ".join(f"{n.key}:{w:g}" for n, w in self.sorted_successors())
        return f"<Node {self._key!r} value={self.value!r} arcs={{{arcs}}}>"


class Graph:
    """In-memory weighted directed graph indexed by string keys.

    Structural operations that reference unknown keys return ``False``
    instead of raising, so a graph can be assembled from untrusted arc lists
    one call at a time. A failed operation never modifies the graph.

    Examples
    --------
    >>> g = Graph()
    >>> _ = g.set("a", None); _ = g.set("b", None)
    >>> g.connect("a", "b", 5.0)
    True
    >>> g.is_connected("a", "b")
    (True, 5.0)
    >>> g.connect("a", "missing", 1.0)
    False
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes())

    def keys(self) -> List[str]:
        """All node keys in ascending order."""
        return sorted(self._nodes)

    def nodes(self) -> List[Node]:
        """All nodes ordered by key."""
        return [self._nodes[k] for k in sorted(self._nodes)]

    def edges(self) -> Iterator[Tuple[str, str, float]]:
        """Iterate over arcs as ``(from_key, to_key, weight)``, ordered by keys."""
        for node in self.nodes():
            for successor, weight in node.sorted_successors():
                yield node.key, successor.key, weight

    # ------------------------------------------------------------------
    # Node operations
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any = None) -> Node:
        """Insert a node or update its value.

        A new node starts without arcs. Updating an existing node changes its
        value only; its arcs are unchanged.
        """
        node = self._nodes.get(key)
        if node is None:
            node = Node(key, value)
            self._nodes[key] = node
            return node
        node.value = value
        return node

    def get(self, key: str) -> Node:
        """Return the node for ``key``.

        Raises
        ------
        InvalidKeyError
            If there is no node for ``key``.
        """
        node = self._nodes.get(key)
        if node is None:
            raise InvalidKeyError(key)
        return node

    def find(self, key: str) -> Optional[Node]:
        """Return the node for ``key`` or None."""
        return self._nodes.get(key)

    def delete(self, key: str) -> bool:
        """Remove a node and every arc pointing at it.

        Returns False if the key is invalid.
        """
        node = self._nodes.pop(key, None)
        if node is None:
            logger.debug("delete: unknown key %r", key)
            return False
        for other in self._nodes.values():
            other.successors.pop(node, None)
        return True

    # ------------------------------------------------------------------
    # Arc operations
    # ------------------------------------------------------------------

    def connect(self, from_key: str, to_key: str, weight: float) -> bool:
        """Create an arc, overwriting the weight of an existing one.

        Returns False if one or both keys are invalid.
        """
        source = self._nodes.get(from_key)
        target = self._nodes.get(to_key)
        if source is None or target is None:
            logger.debug("connect: invalid endpoints %r -> %r", from_key, to_key)
            return False
        return source.connect(target, weight)

    def disconnect(self, from_key: str, to_key: str) -> bool:
        """Remove the arc between two nodes.

        Returns False if one or both keys are invalid. Removing an arc that
        does not exist succeeds.
        """
        source = self._nodes.get(from_key)
        target = self._nodes.get(to_key)
        if source is None or target is None:
            logger.debug("disconnect: invalid endpoints %r -> %r", from_key, to_key)
            return False
        return source.disconnect(target)

    def is_connected(self, from_key: str, to_key: str) -> Tuple[bool, float]:
        """Return ``(True, weight)`` if the arc exists.

        Unknown keys and missing arcs both give ``(False, 0.0)``.
        """
        source = self._nodes.get(from_key)
        target = self._nodes.get(to_key)
        if source is None or target is None:
            return False, 0.0
        return source.is_connected(target)

    # ------------------------------------------------------------------
    # Derived structure
    # ------------------------------------------------------------------

    def predecessors(self, node: Node) -> List[Node]:
        """Nodes with an arc into ``node``, ordered by key."""
        return transitions.predecessors(self, node)

    def start_nodes(self) -> List[Node]:
        """Nodes without predecessors, ordered by key."""
        return transitions.start_nodes(self)

    def end_nodes(self) -> List[Node]:
        """Nodes without successors, ordered by key."""
        return transitions.end_nodes(self)

    def transition_matrix(self, is_log: bool = False) -> Tuple[List[str], List[Optional[np.ndarray]]]:
        """Sorted keys and the corresponding rows of arc weights.

        See :func:`weighted_graph.core.transitions.transition_matrix`.
        """
        return transitions.transition_matrix(self, is_log=is_log)

    # ------------------------------------------------------------------
    # Weight domain
    # ------------------------------------------------------------------

    def normalize(self, is_log: bool = False) -> None:
        """Normalize the outbound weights of every node."""
        for node in self._nodes.values():
            node.normalize(is_log)

    def convert_to_log_probs(self) -> None:
        """Convert every arc weight to its natural log."""
        for node in self._nodes.values():
            node.convert_to_log_probs()

    def convert_to_linear_probs(self) -> None:
        """Exponentiate every arc weight."""
        for node in self._nodes.values():
            node.convert_to_linear_probs()

    # ------------------------------------------------------------------
    # Copying and combining
    # ------------------------------------------------------------------

    def clone(self) -> 'Graph':
        """Deep structural copy: new nodes and arcs, values shared by reference.

        Raises
        ------
        InvalidKeyError
            If an arc points at a node that is not part of this graph, which
            can happen after :meth:`add` shared the node with another graph.
        """
        copy = Graph()
        for key, node in self._nodes.items():
            copy._nodes[key] = Node(key, node.value)
        for key, node in self._nodes.items():
            target = copy._nodes[key]
            for successor, weight in node.successors.items():
                if self._nodes.get(successor.key) is not successor:
                    raise InvalidKeyError(
                        successor.key,
                        f"graph: node '{key}' has an arc to '{successor.key}', "
                        f"which belongs to another graph",
                    )
                target.successors[copy._nodes[successor.key]] = weight
        return copy

    def _check_disjoint(self, graphs: Tuple['Graph', ...]) -> None:
        seen = set(self._nodes)
        for other in graphs:
            for key in other._nodes:
                if key in seen:
                    raise DuplicateKeyError(key)
                seen.add(key)

    def merge(self, *graphs: 'Graph') -> None:
        """Copy the nodes and arcs of ``graphs`` into this graph.

        The inputs remain independent of the receiver afterwards.

        Raises
        ------
        DuplicateKeyError
            If any key appears more than once across the receiver and the
            inputs. Nothing is merged in that case.
        InvalidKeyError
            If an input cannot be cloned, see :meth:`clone`.
        """
        self._check_disjoint(graphs)
        copies = [other.clone() for other in graphs]
        for copy in copies:
            self._nodes.update(copy._nodes)
        logger.debug("merged %d graph(s), %d nodes total", len(graphs), len(self._nodes))

    def add(self, *graphs: 'Graph') -> None:
        """Move the nodes of ``graphs`` into this graph without copying.

        The inputs and the receiver share the same node objects afterwards.
        Treat the inputs as consumed: arcs later connected in the receiver
        may lead out of an input, and :meth:`clone` or :meth:`merge` of such
        an input then raises :class:`InvalidKeyError`.

        Raises
        ------
        DuplicateKeyError
            Under the same conditions as :meth:`merge`.
        """
        self._check_disjoint(graphs)
        for other in graphs:
            self._nodes.update(other._nodes)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def shortest_path(self,
                      start_key: str,
                      end_key: str,
                      heuristic: Optional[Callable[[str, str], float]] = None) -> astar.ShortestPath:
        """A* shortest path; see :func:`weighted_graph.core.astar.shortest_path`."""
        return astar.shortest_path(self, start_key, end_key, heuristic)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def summary(self) -> str:
        """Human-readable listing of nodes and arcs."""
        n_arcs = sum(len(node.successors) for node in self._nodes.values())
        lines = [f"Graph: {len(self._nodes)} nodes, {n_arcs} arcs"]
        for node in self.nodes():
            arcs = ", ".join(f"{s.key} ({w:.4g})" for s, w in node.sorted_successors())
            lines.append(f"  {node.key} -> [{arcs}]")
        return "\n".join(lines)

    def __repr__(self) -> str:
        n_arcs = sum(len(node.successors) for node in self._nodes.values())
        return f"<Graph: {len(self._nodes)} nodes, {n_arcs} arcs>"
