"""Graph builders for decoding and search experiments.

Provides left-to-right HMM graphs ready for Viterbi decoding, graphs built
from arc lists with per-node scoring functions, and seeded random graphs for
exercising shortest-path search.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..core.graph import Graph
from ..core.viterbi import ScoredValue
from ..config.random_state import make_rng
from ..config.settings import get_config

logger = logging.getLogger(__name__)

ScoreFunc = Callable[[Any], float]


def frame_score(scores: Sequence[float]) -> ScoreFunc:
    """Scoring function that looks up a precomputed score per observation index.

    Parameters
    ----------
    scores : Sequence[float]
        ``scores[n]`` is the score of observation ``n`` at the node, typically
        a log-likelihood produced by an external acoustic or emission model.

    Returns
    -------
    Callable[[int], float]
        Function mapping an observation index to its score.

    Examples
    --------
    >>> f = frame_score(np.log([0.1, 0.4]))
    >>> round(f(1), 4)
    -0.9163
    """
    table = np.asarray(scores, dtype=np.float64)

    def score(observation: int) -> float:
        return float(table[int(observation)])

    return score


def categorical_score(probabilities: Mapping[Any, float], is_log: bool = False) -> ScoreFunc:
    """Scoring function for symbolic observations.

    Parameters
    ----------
    probabilities : Mapping[Any, float]
        Emission probability of each symbol.
    is_log : bool, default=False
        Whether ``probabilities`` already holds log probabilities. If not,
        they are converted; unseen symbols score ``-inf`` either way.

    Returns
    -------
    Callable[[Any], float]
        Function mapping a symbol to its log probability.
    """
    if is_log:
        table = {symbol: float(p) for symbol, p in probabilities.items()}
    else:
        with np.errstate(divide='ignore'):
            table = {symbol: float(np.log(p)) for symbol, p in probabilities.items()}

    def score(observation: Any) -> float:
        return table.get(observation, -np.inf)

    return score


def decoding_graph(arcs: Iterable[Tuple[str, str, float]],
                   scores: Mapping[str, ScoreFunc],
                   null_keys: Iterable[str] = (),
                   to_log: Optional[bool] = None) -> Graph:
    """Build a graph whose node values are :class:`ScoredValue` objects.

    Parameters
    ----------
    arcs : Iterable[Tuple[str, str, float]]
        ``(from_key, to_key, weight)`` triples in the linear domain.
    scores : Mapping[str, ScoreFunc]
        Scoring function of every emitting node.
    null_keys : Iterable[str]
        Keys of non-emitting nodes.
    to_log : Optional[bool]
        Convert arc weights to log probabilities after building. Defaults to
        ``Settings.log_domain``.

    Returns
    -------
    Graph
        Graph ready for :class:`~weighted_graph.core.viterbi.Decoder`.

    Raises
    ------
    ValueError
        If a key is both null and scored, or an arc references a key that is
        neither.
    """
    null_keys = set(null_keys)
    overlap = null_keys.intersection(scores)
    if overlap:
        raise ValueError(f"Keys cannot be both null and emitting: {sorted(overlap)}")

    graph = Graph()
    for key in sorted(null_keys):
        graph.set(key, ScoredValue(null=True))
    for key in sorted(scores):
        graph.set(key, ScoredValue(score_fn=scores[key]))

    for from_key, to_key, weight in arcs:
        if not graph.connect(from_key, to_key, weight):
            raise ValueError(f"Arc {from_key!r} -> {to_key!r} references an undefined node")

    if to_log is None:
        to_log = get_config().log_domain
    if to_log:
        graph.convert_to_log_probs()
    return graph


def left_to_right_hmm(emission_scores: Sequence[Sequence[float]],
                      self_loop: float = 0.5,
                      state_prefix: str = "s",
                      to_log: Optional[bool] = None) -> Graph:
    """Build a left-to-right HMM chain with null entry and exit nodes.

    The graph is ``s0 -> s1 -> ... -> sK -> s{K+1}`` where ``s0`` and
    ``s{K+1}`` are null nodes and each emitting state ``s1..sK`` loops on
    itself with probability ``self_loop`` and advances with the rest.

    Parameters
    ----------
    emission_scores : Sequence[Sequence[float]]
        Row ``k`` holds the per-observation-index scores of state ``s{k+1}``
        (see :func:`frame_score`).
    self_loop : float, default=0.5
        Self-loop probability of every emitting state, in ``[0, 1)``.
    state_prefix : str, default="s"
        Prefix of the generated node keys.
    to_log : Optional[bool]
        Convert arc weights to log probabilities. Defaults to
        ``Settings.log_domain``.

    Returns
    -------
    Graph
        The chain graph.
    """
    if not 0.0 <= self_loop < 1.0:
        raise ValueError(f"self_loop must be in [0, 1), got {self_loop}")
    n_states = len(emission_scores)
    if n_states < 1:
        raise ValueError("At least one emitting state is required")

    keys = [f"{state_prefix}{i}" for i in range(n_states + 2)]
    arcs: List[Tuple[str, str, float]] = [(keys[0], keys[1], 1.0)]
    for i in range(1, n_states + 1):
        if self_loop > 0:
            arcs.append((keys[i], keys[i], self_loop))
        arcs.append((keys[i], keys[i + 1], 1.0 - self_loop))

    scores = {keys[i + 1]: frame_score(row) for i, row in enumerate(emission_scores)}
    return decoding_graph(arcs, scores, null_keys=(keys[0], keys[-1]), to_log=to_log)


def random_graph(n_nodes: int,
                 edge_probability: float = 0.3,
                 weight_range: Tuple[float, float] = (1.0, 10.0),
                 seed: Optional[int] = None,
                 allow_self_loops: bool = False,
                 key_format: str = "n{:02d}") -> Graph:
    """Generate a random directed graph with uniform arc weights.

    Parameters
    ----------
    n_nodes : int
        Number of nodes.
    edge_probability : float, default=0.3
        Probability of each ordered pair being connected.
    weight_range : Tuple[float, float], default=(1.0, 10.0)
        Half-open range ``[low, high)`` of arc weights.
    seed : Optional[int]
        Seed of the generator; defaults to the global seed.
    allow_self_loops : bool, default=False
        Whether arcs from a node to itself may be generated.
    key_format : str
        Format of node keys, given the node index.

    Returns
    -------
    Graph
        Graph whose node values are the node indices.
    """
    if n_nodes < 0:
        raise ValueError(f"n_nodes must be non-negative, got {n_nodes}")
    if not 0.0 <= edge_probability <= 1.0:
        raise ValueError(f"edge_probability must be in [0, 1], got {edge_probability}")
    low, high = weight_range
    if low > high:
        raise ValueError(f"Invalid weight_range {weight_range}")

    rng = make_rng(seed)
    mask = rng.random((n_nodes, n_nodes)) < edge_probability
    if not allow_self_loops:
        np.fill_diagonal(mask, False)
    weights = rng.uniform(low, high, size=(n_nodes, n_nodes))

    graph = Graph()
    keys = [key_format.format(i) for i in range(n_nodes)]
    for i, key in enumerate(keys):
        graph.set(key, i)
    for i, j in zip(*np.nonzero(mask)):
        graph.connect(keys[i], keys[j], float(weights[i, j]))

    logger.debug("random graph: %d nodes, %d arcs", n_nodes, int(mask.sum()))
    return graph


def adjacency_matrix(graph: Graph) -> Tuple[List[str], np.ndarray]:
    """Dense linear-domain matrix with ``0`` for missing arcs, rows for every node.

    Convenient input for matrix-based reference algorithms.
    """
    keys, rows = graph.transition_matrix(is_log=False)
    matrix = np.zeros((len(keys), len(keys)), dtype=np.float64)
    for i, row in enumerate(rows):
        if row is not None:
            matrix[i] = row
    return keys, matrix


def weights_by_key(graph: Graph) -> Dict[Tuple[str, str], float]:
    """Arc weights indexed by ``(from_key, to_key)``."""
    return {(a, b): w for a, b, w in graph.edges()}
