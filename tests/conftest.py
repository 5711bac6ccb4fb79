"""
Pytest configuration and shared fixtures for the weighted_graph test suite.
"""

import itertools
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path for testing
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from weighted_graph.config import Settings, set_config, set_global_seed
from weighted_graph.core.graph import Graph
from weighted_graph.data.builders import decoding_graph, frame_score


@pytest.fixture(autouse=True)
def default_settings():
    """Reset the global configuration to defaults for every test."""
    settings = Settings()
    set_config(settings)
    return settings


@pytest.fixture(scope="session")
def global_test_seed():
    """Set global random seed for all tests to ensure reproducibility."""
    seed = 42
    set_global_seed(seed)
    return seed


@pytest.fixture
def sample_graph():
    """Four nodes with mixed values and four arcs.

    1 -> 2 (5), 1 -> 3 (1), 2 -> 3 (9), 4 -> 2 (3)
    """
    g = Graph()
    g.set("1", 123)
    g.set("2", 678)
    g.set("3", "abc")
    g.set("4", "xyz")
    assert g.connect("1", "2", 5)
    assert g.connect("1", "3", 1)
    assert g.connect("2", "3", 9)
    assert g.connect("4", "2", 3)
    return g


@pytest.fixture
def emission_table():
    """Per-frame log emission scores; rows are states s1..s3, columns frames."""
    probs = np.array([
        [0.1, 0.1, 0.2, 0.4],
        [0.4, 0.1, 0.3, 0.5],
        [0.2, 0.2, 0.4, 0.5],
    ])
    return np.log(probs)


@pytest.fixture
def chain_arcs():
    """Linear transition probabilities of the five-node decoding chain."""
    return [
        ("s0", "s1", 1.0),
        ("s1", "s1", 0.4),
        ("s1", "s2", 0.5),
        ("s1", "s3", 0.1),
        ("s2", "s2", 0.3),
        ("s2", "s3", 0.7),
        ("s3", "s3", 0.4),
        ("s3", "s4", 0.6),
    ]


@pytest.fixture
def chain_graph(chain_arcs, emission_table):
    """s0(null) -> s1 -> s2 -> s3 -> s4(null) with self loops, log domain."""
    scores = {f"s{i + 1}": frame_score(row) for i, row in enumerate(emission_table)}
    return decoding_graph(chain_arcs, scores, null_keys=("s0", "s4"))


class ViterbiOracle:
    """Brute-force reference for decoding scores."""

    @staticmethod
    def best_path(graph, start, end, observations, is_null):
        """Enumerate every emitting state sequence and return the best path and score.

        Only graphs whose null nodes are ``start`` and ``end`` are supported.
        """
        emitting = [n for n in graph.nodes() if not is_null(n)]
        best_score = -np.inf
        best_keys = None
        for states in itertools.product(emitting, repeat=len(observations)):
            path = [start, *states, end]
            score = 0.0
            for a, b in zip(path, path[1:]):
                ok, w = a.is_connected(b)
                if not ok:
                    score = -np.inf
                    break
                score += w
            if score == -np.inf:
                continue
            for node, obs in zip(states, observations):
                score += node.value.score(obs)
            if score > best_score:
                best_score = score
                best_keys = [n.key for n in path]
        return best_keys, best_score


@pytest.fixture
def viterbi_oracle():
    """Brute-force Viterbi reference fixture."""
    return ViterbiOracle


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark slow and integration tests."""
    for item in items:
        if "large" in item.nodeid:
            item.add_marker(pytest.mark.slow)
        if "integration" in item.nodeid or "end_to_end" in item.nodeid:
            item.add_marker(pytest.mark.integration)
