"""Token-passing Viterbi decoder over a weighted directed graph.

Finds the sequence of nodes that maximizes the accumulated score of a
sequence of observations (see http://en.wikipedia.org/wiki/Viterbi_algorithm).
The score of a hypothesis is the sum of the arc weights along its path plus,
for every emitting node it visits, that node's score for the observation
consumed there. With log-probability arc weights and log-likelihood node
scores this is the usual HMM Viterbi search.

Null (non-emitting) nodes add only their arc weight. They are traversed
within a time step without consuming an observation, which is how epsilon
transitions are absorbed. Null nodes must not form a cycle; such graphs are
rejected when the decoder is built.

The decoder needs two capabilities from every node value, ``score`` and
``is_null``. They are supplied through a :class:`NodeCapabilities` adapter;
the default adapter reads them from the values themselves, e.g. from
:class:`ScoredValue`.

Tie-breaking is deterministic: active tokens are expanded in ascending node
key order, successors in ascending key order, and a candidate replaces the
current best for a node only if its score is strictly higher.
"""

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

from .errors import CapabilityError, TopologyError
from .transitions import null_topological_order

if TYPE_CHECKING:
    from ..config import Settings
    from .graph import Graph, Node

logger = logging.getLogger(__name__)

ScoreFunc = Callable[[Any], float]


@dataclass
class ScoredValue:
    """Node value carrying the capabilities the decoder needs.

    Attributes
    ----------
    score_fn : Optional[Callable[[Any], float]]
        Scores an observation at this node. An emitting node without a
        scoring function scores every observation as 0.
    null : bool
        Marks a non-emitting node.
    payload : Any
        Application data attached to the node.
    """
    score_fn: Optional[ScoreFunc] = None
    null: bool = False
    payload: Any = None

    def score(self, observation: Any) -> float:
        if self.score_fn is None:
            return 0.0
        return self.score_fn(observation)

    def is_null(self) -> bool:
        return self.null


class NodeCapabilities:
    """Adapter giving the decoder access to node scores and null flags.

    Parameters
    ----------
    score : Optional[Callable[[Any, Any], float]]
        ``score(value, observation)``. If None, ``value.score(observation)``
        is used.
    is_null : Optional[Callable[[Any], bool]]
        ``is_null(value)``. If None, ``value.is_null()`` is used.

    Examples
    --------
    >>> caps = NodeCapabilities(score=lambda table, o: table[o],
    ...                         is_null=lambda table: table is None)
    """

    def __init__(self,
                 score: Optional[Callable[[Any, Any], float]] = None,
                 is_null: Optional[Callable[[Any], bool]] = None):
        self._score = score
        self._is_null = is_null

    def check(self, node: 'Node') -> None:
        """Raise :class:`CapabilityError` if ``node`` cannot be decoded."""
        missing = []
        if self._score is None and not callable(getattr(node.value, 'score', None)):
            missing.append('score')
        if self._is_null is None and not callable(getattr(node.value, 'is_null', None)):
            missing.append('is_null')
        if missing:
            raise CapabilityError(
                f"Value in node [{node.key}] must provide {' and '.join(missing)} "
                f"(got {type(node.value).__name__})"
            )

    def score(self, node: 'Node', observation: Any) -> float:
        if self._score is not None:
            return float(self._score(node.value, observation))
        return float(node.value.score(observation))

    def is_null(self, node: 'Node') -> bool:
        if self._is_null is not None:
            return bool(self._is_null(node.value))
        return bool(node.value.is_null())


@dataclass(eq=False)
class Token:
    """A Viterbi hypothesis.

    Attributes
    ----------
    score : float
        Accumulated score of the hypothesis.
    node : Node
        Node the token is anchored at.
    previous : Optional[Token]
        Back-pointer to the preceding token; None for the initial token.
    index : int
        Observation index at which the token was created, -1 before the
        first observation.
    null : bool
        Whether ``node`` is a null node.
    """
    score: float
    node: 'Node'
    previous: Optional['Token'] = None
    index: int = -1
    null: bool = False

    def backtrace(self) -> List['Token']:
        """Tokens of this hypothesis in temporal order, initial token first."""
        tokens = []
        token: Optional[Token] = self
        while token is not None:
            tokens.append(token)
            token = token.previous
        tokens.reverse()
        return tokens

    def labels(self, exclude_null: bool = False) -> List[str]:
        """Node keys of the hypothesis in temporal order."""
        return [t.node.key for t in self.backtrace() if not (exclude_null and t.null)]

    def backtrace_string(self) -> str:
        """Backtrace as ``{index,key,score},`` entries in temporal order."""
        return "".join(f"{{{t.index},{t.node.key},{t.score:.2f}}}," for t in self.backtrace())

    def __str__(self) -> str:
        return (f"n: {self.index:2d}, node: {self.node.key:>4s}, sc: {self.score:4.2f}, "
                f"bt: {{{self.backtrace_string()}}} ")


class Decoder:
    """Viterbi decoder for graphs with exactly one start and one end node.

    Parameters
    ----------
    graph : Graph
        Graph to decode. Must have exactly one node without predecessors
        (start) and exactly one node without successors (end). The decoder
        takes a snapshot of the arcs; rebuild it after mutating the graph.
    capabilities : Optional[NodeCapabilities]
        Access to node scores and null flags. Defaults to reading them from
        the node values.
    settings : Optional[Settings]
        Configuration; ``trace_tokens`` enables logging of the active set
        after every step. Defaults to the global configuration.

    Raises
    ------
    TopologyError
        If the graph does not have exactly one start and one end node.
    CapabilityError
        If a node value does not provide the required capabilities.
    NullCycleError
        If null nodes form a cycle.

    Examples
    --------
    >>> decoder = Decoder(graph)                         # doctest: +SKIP
    >>> best = decoder.decode(observations)              # doctest: +SKIP
    >>> best.labels(exclude_null=True)                   # doctest: +SKIP
    """

    def __init__(self,
                 graph: 'Graph',
                 capabilities: Optional[NodeCapabilities] = None,
                 settings: Optional['Settings'] = None):
        starts = graph.start_nodes()
        if len(starts) != 1:
            raise TopologyError(f"graph must have exactly one start node. Found: {len(starts)}")
        ends = graph.end_nodes()
        if len(ends) != 1:
            raise TopologyError(f"graph must have exactly one end node. Found: {len(ends)}")

        if settings is None:
            from ..config import get_config
            settings = get_config()

        self.graph = graph
        self.start = starts[0]
        self.end = ends[0]
        self.capabilities = capabilities or NodeCapabilities()
        self.trace_tokens = settings.trace_tokens

        nodes = graph.nodes()
        for node in nodes:
            self.capabilities.check(node)

        self._null: Dict['Node', bool] = {node: self.capabilities.is_null(node) for node in nodes}
        self._successors = {node: node.sorted_successors() for node in nodes}
        self._null_order = null_topological_order(nodes, self._null.__getitem__)

        self._active: Dict['Node', Token] = {}
        self._last_index = -1
        self.reset()

    @property
    def active(self) -> List[Token]:
        """Current active tokens ordered by node key."""
        return list(self._active.values())

    def reset(self) -> None:
        """Restore the initial hypothesis: a zero-score token at the start node."""
        token = Token(0.0, self.start, None, -1, self._null[self.start])
        self._active = {self.start: token}
        self._last_index = -1

    def decode(self, observations: Sequence[Any], complete: bool = True) -> Optional[Token]:
        """Return the best hypothesis for a sequence of observations.

        Parameters
        ----------
        observations : Sequence[Any]
            Observations passed, one per step, to the node scores.
        complete : bool, default=True
            If True return the best token anchored at the end node, i.e. a
            hypothesis that consumed every observation and then reached the
            end node. If False return the best token of the final active set
            wherever it is anchored, which is plain token-passing Viterbi
            without an end constraint.

        Returns
        -------
        Optional[Token]
            Best token, or None if no hypothesis qualifies. With the default
            ``complete=True`` this is None whenever the observations run out
            before any path can reach the end node; pass ``complete=False``
            to get the best partial hypothesis instead.
        """
        self.reset()
        for index, observation in enumerate(observations):
            logger.debug("propagate obs with index: %4d, value: %r", index, observation)
            self.propagate(index, observation)

        final = self._close()
        if complete:
            return final.get(self.end)
        return self._best(final.values())

    def propagate(self, index: int, observation: Any) -> None:
        """Advance the active set by one observation.

        Every active token is passed to its successors. Null successors are
        traversed within this step; emitting successors add their score for
        ``observation``. Only the best token per emitting node is kept.
        """
        emitting: Dict['Node', Token] = {}
        null_best: Dict['Node', Token] = {}

        for token in self._active.values():
            self._pass(token, index, observation, emitting, null_best)
        for node in self._null_order:
            token = null_best.get(node)
            if token is not None:
                self._pass(token, index, observation, emitting, null_best)

        self._active = {node: emitting[node] for node in sorted(emitting, key=lambda n: n.key)}
        self._last_index = index

        if self.trace_tokens and logger.isEnabledFor(logging.DEBUG):
            for k, token in enumerate(self._active.values()):
                logger.debug("active:%4d bt:%s", k, token)

    def _pass(self,
              token: Token,
              index: int,
              observation: Any,
              emitting: Optional[Dict['Node', Token]],
              null_best: Dict['Node', Token]) -> None:
        for successor, weight in self._successors[token.node]:
            if self._null[successor]:
                candidate = Token(token.score + weight, successor, token, index, True)
                self._keep_best(null_best, candidate)
            elif emitting is not None:
                score = token.score + weight + self.capabilities.score(successor, observation)
                candidate = Token(score, successor, token, index, False)
                self._keep_best(emitting, candidate)

    @staticmethod
    def _keep_best(best: Dict['Node', Token], candidate: Token) -> None:
        # Impossible hypotheses (score -inf or nan) are dropped.
        if not candidate.score > -math.inf:
            return
        incumbent = best.get(candidate.node)
        if incumbent is None or candidate.score > incumbent.score:
            best[candidate.node] = candidate

    def _close(self) -> Dict['Node', Token]:
        """Active set extended by the null nodes reachable without emitting."""
        null_best: Dict['Node', Token] = {}
        for token in self._active.values():
            self._pass(token, self._last_index, None, None, null_best)
        for node in self._null_order:
            token = null_best.get(node)
            if token is not None:
                self._pass(token, self._last_index, None, None, null_best)

        final = dict(self._active)
        end_token = null_best.get(self.end)
        if end_token is not None:
            final[self.end] = end_token
        return final

    @staticmethod
    def _best(tokens) -> Optional[Token]:
        best = None
        for token in sorted(tokens, key=lambda t: t.node.key):
            if best is None or token.score > best.score:
                best = token
        return best
