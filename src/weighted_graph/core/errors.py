"""Exception hierarchy for graph construction and search.

Key-based structural operations on :class:`~weighted_graph.core.graph.Graph`
report failure with ``False``; the exceptions below are raised where a
boolean cannot carry the failure (lookups, reconstruction, merging) or where
a precondition must stop a computation before it starts (decoder setup).
"""


class GraphError(Exception):
    """Base class for all errors raised by weighted_graph."""


class InvalidKeyError(GraphError, KeyError):
    """A lookup or arc referenced a key that is not in the graph."""

    def __init__(self, key: str, message: str = None):
        self.key = key
        super().__init__(message or f"graph: invalid key '{key}'")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0])


class DuplicateKeyError(GraphError, ValueError):
    """Merging would introduce a key that already exists."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"cannot merge node because key '{key}' already exists")


class CapabilityError(GraphError, TypeError):
    """A node value does not provide the capabilities an algorithm needs."""


class TopologyError(GraphError, ValueError):
    """The graph shape does not satisfy an algorithm's preconditions."""


class NullCycleError(TopologyError):
    """Null (non-emitting) nodes form a cycle.

    Propagation through a null cycle never consumes an observation and would
    not terminate, so decoders refuse such graphs.
    """

    def __init__(self, cycle):
        self.cycle = list(cycle)
        super().__init__(
            "null nodes must be acyclic, found cycle: " + " -> ".join(self.cycle)
        )
