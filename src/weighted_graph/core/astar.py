"""A* shortest-path search over a weighted directed graph.

The search keeps an open set (discovered, not finalized), a closed set
(finalized) and a min-priority queue ordered by ``g + h``, where ``g`` is the
best known distance from the start and ``h`` the caller's heuristic estimate
of the remaining distance. With ``h = 0`` the search is Dijkstra's algorithm.

The heuristic must be admissible (never overestimate the true remaining cost)
for the returned path to be optimal; this is not verified. Arc weights are
assumed non-negative.
"""

import heapq
import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, NamedTuple, Optional

if TYPE_CHECKING:
    from .graph import Graph, Node

logger = logging.getLogger(__name__)

Heuristic = Callable[[str, str], float]


def zero_heuristic(key: str, end_key: str) -> float:
    """Heuristic that turns A* into Dijkstra's algorithm."""
    return 0.0


class ShortestPath(NamedTuple):
    """Result of a shortest-path query.

    ``path`` lists node keys from start to end and ``cost`` is the summed arc
    weight. When no path exists ``exists`` is False, ``path`` is empty and
    ``cost`` is ``inf``.
    """
    path: List[str]
    cost: float
    exists: bool


@dataclass(eq=False)
class Item:
    """Open-set entry: a node, its best known predecessor and distances."""
    node: 'Node'
    previous: Optional['Node']
    distance_from_start: float
    estimate: float
    index: int = 0
    removed: bool = field(default=False, repr=False)

    def __lt__(self, other: 'Item') -> bool:
        return (self.estimate, self.index) < (other.estimate, other.index)


class PriorityQueue:
    """Binary heap of :class:`Item` with removal by entry invalidation.

    ``remove`` marks an entry as stale instead of restructuring the heap;
    stale entries are discarded when they reach the top. Together with
    ``push`` this gives decrease-key. Entries with equal priority pop in
    insertion order.
    """

    def __init__(self) -> None:
        self._heap: List[Item] = []
        self._counter = 0
        self._live = 0

    def __len__(self) -> int:
        return self._live

    def push(self, item: Item) -> None:
        item.index = self._counter
        self._counter += 1
        heapq.heappush(self._heap, item)
        self._live += 1

    def remove(self, item: Item) -> None:
        if not item.removed:
            item.removed = True
            self._live -= 1

    def pop(self) -> Item:
        while self._heap:
            item = heapq.heappop(self._heap)
            if not item.removed:
                self._live -= 1
                return item
        raise IndexError("pop from an empty priority queue")


def shortest_path(graph: 'Graph',
                  start_key: str,
                  end_key: str,
                  heuristic: Optional[Heuristic] = None) -> ShortestPath:
    """Find the cheapest path from ``start_key`` to ``end_key`` with A*.

    Parameters
    ----------
    graph : Graph
        Graph to search. It is not modified.
    start_key, end_key : str
        Keys of the start and end nodes.
    heuristic : Optional[Callable[[str, str], float]]
        Estimated remaining cost, called as ``heuristic(key, end_key)``.
        Defaults to :func:`zero_heuristic`.

    Returns
    -------
    ShortestPath
        ``(path, cost, exists)``. An unreachable end node, or an unknown
        start or end key, is reported with ``exists=False``; it is not an
        error.

    Examples
    --------
    >>> path, cost, exists = shortest_path(g, "a", "d")   # doctest: +SKIP
    """
    if heuristic is None:
        heuristic = zero_heuristic

    start = graph.find(start_key)
    end = graph.find(end_key)
    if start is None or end is None:
        logger.debug("shortest_path: unknown endpoint %r -> %r", start_key, end_key)
        return ShortestPath([], math.inf, False)

    queue = PriorityQueue()
    open_items: Dict['Node', Item] = {}
    closed_items: Dict['Node', Item] = {}

    item = Item(start, None, 0.0, heuristic(start.key, end_key))
    open_items[start] = item
    queue.push(item)

    while len(queue) > 0:
        current_item = queue.pop()
        current = current_item.node
        del open_items[current]
        closed_items[current] = current_item
        logger.debug("expand %s g=%.6g f=%.6g", current.key,
                     current_item.distance_from_start, current_item.estimate)

        if current is end:
            path = []
            node: Optional['Node'] = current
            while node is not None:
                path.append(node.key)
                node = closed_items[node].previous
            path.reverse()
            return ShortestPath(path, current_item.distance_from_start, True)

        distance = current_item.distance_from_start
        for successor, weight in current.sorted_successors():
            if successor in closed_items:
                continue

            distance_to_successor = distance + weight

            known = open_items.get(successor)
            if known is not None:
                if known.distance_from_start <= distance_to_successor:
                    continue
                queue.remove(known)

            item = Item(
                successor,
                current,
                distance_to_successor,
                distance_to_successor + heuristic(successor.key, end_key),
            )
            open_items[successor] = item
            queue.push(item)

    logger.debug("shortest_path: no path from %r to %r", start_key, end_key)
    return ShortestPath([], math.inf, False)
