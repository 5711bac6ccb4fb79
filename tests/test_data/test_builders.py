"""Tests for decoding-graph, HMM-chain and random-graph builders."""

import math

import numpy as np
import pytest

from weighted_graph.config import Settings, set_config, set_global_seed
from weighted_graph.core.transitions import transition_matrix, validate_stochastic_rows
from weighted_graph.core.viterbi import Decoder, ScoredValue
from weighted_graph.data.builders import (
    adjacency_matrix,
    categorical_score,
    decoding_graph,
    frame_score,
    left_to_right_hmm,
    random_graph,
    weights_by_key,
)


class TestScoreFunctions:
    """Test suite for node scoring helpers."""

    def test_frame_score(self):
        f = frame_score([-1.0, -2.5, -0.5])
        assert f(0) == -1.0
        assert f(2) == -0.5
        assert isinstance(f(1), float)

    def test_frame_score_out_of_range(self):
        with pytest.raises(IndexError):
            frame_score([0.0])(3)

    def test_categorical_score_linear(self):
        f = categorical_score({"a": 0.25, "b": 0.75})
        assert f("a") == pytest.approx(math.log(0.25))
        assert f("b") == pytest.approx(math.log(0.75))
        assert f("c") == -math.inf

    def test_categorical_score_log(self):
        f = categorical_score({"a": -0.1}, is_log=True)
        assert f("a") == -0.1

    def test_categorical_score_zero_probability(self):
        assert categorical_score({"a": 0.0})("a") == -math.inf


class TestDecodingGraph:
    """Test suite for decoding_graph."""

    def test_values(self):
        g = decoding_graph([("s", "a", 1.0), ("a", "e", 1.0)],
                           {"a": lambda o: -1.0}, null_keys=("s", "e"))
        assert isinstance(g.get("a").value, ScoredValue)
        assert g.get("s").value.is_null()
        assert not g.get("a").value.is_null()
        assert g.get("a").value.score("anything") == -1.0

    def test_weights_converted_to_log(self, chain_graph, chain_arcs):
        weights = weights_by_key(chain_graph)
        for a, b, w in chain_arcs:
            assert weights[(a, b)] == pytest.approx(math.log(w))

    def test_linear_weights_kept(self, chain_arcs):
        g = decoding_graph(chain_arcs, {}, null_keys=[f"s{i}" for i in range(5)], to_log=False)
        assert weights_by_key(g) == {(a, b): w for a, b, w in chain_arcs}

    def test_log_domain_setting_is_default(self, chain_arcs):
        set_config(Settings(log_domain=False))
        g = decoding_graph(chain_arcs, {}, null_keys=[f"s{i}" for i in range(5)])
        assert g.is_connected("s1", "s2") == (True, 0.5)

    def test_overlapping_keys(self):
        with pytest.raises(ValueError, match="both null and emitting"):
            decoding_graph([], {"a": lambda o: 0.0}, null_keys=("a",))

    def test_undefined_arc_endpoint(self):
        with pytest.raises(ValueError, match="undefined node"):
            decoding_graph([("s", "x", 1.0)], {}, null_keys=("s",))


class TestLeftToRightHmm:
    """Test suite for left_to_right_hmm."""

    def test_structure(self):
        g = left_to_right_hmm([[0.0], [0.0], [0.0]], self_loop=0.25, to_log=False)
        assert g.keys() == ["s0", "s1", "s2", "s3", "s4"]
        assert weights_by_key(g) == {
            ("s0", "s1"): 1.0,
            ("s1", "s1"): 0.25, ("s1", "s2"): 0.75,
            ("s2", "s2"): 0.25, ("s2", "s3"): 0.75,
            ("s3", "s3"): 0.25, ("s3", "s4"): 0.75,
        }
        assert [n.key for n in g.start_nodes()] == ["s0"]
        assert [n.key for n in g.end_nodes()] == ["s4"]

    def test_rows_are_stochastic(self):
        g = left_to_right_hmm([[0.0], [0.0]], self_loop=0.3)
        keys, rows = transition_matrix(g, is_log=True)
        assert validate_stochastic_rows(keys, rows, is_log=True)

    def test_without_self_loops(self):
        g = left_to_right_hmm([[0.0], [0.0]], self_loop=0.0, to_log=False)
        assert g.is_connected("s1", "s1") == (False, 0.0)
        assert g.is_connected("s1", "s2") == (True, 1.0)

    def test_prefix(self):
        g = left_to_right_hmm([[0.0]], state_prefix="q")
        assert g.keys() == ["q0", "q1", "q2"]

    @pytest.mark.parametrize("self_loop", [-0.1, 1.0, 1.5])
    def test_invalid_self_loop(self, self_loop):
        with pytest.raises(ValueError, match="self_loop"):
            left_to_right_hmm([[0.0]], self_loop=self_loop)

    def test_no_states(self):
        with pytest.raises(ValueError, match="At least one emitting state"):
            left_to_right_hmm([])

    def test_decodes_against_brute_force(self, viterbi_oracle):
        rng = np.random.default_rng(3)
        emissions = np.log(rng.uniform(0.05, 1.0, size=(3, 5)))
        g = left_to_right_hmm(emissions, self_loop=0.6)
        observations = list(range(5))

        best = Decoder(g).decode(observations)
        keys, score = viterbi_oracle.best_path(
            g, g.get("s0"), g.get("s4"), observations, lambda n: n.value.is_null()
        )
        assert best.labels() == keys
        assert best.score == pytest.approx(score, abs=1e-12)


class TestRandomGraph:
    """Test suite for random_graph."""

    def test_same_seed_same_graph(self):
        a = random_graph(12, seed=5)
        b = random_graph(12, seed=5)
        assert weights_by_key(a) == weights_by_key(b)

    def test_different_seeds_differ(self):
        assert weights_by_key(random_graph(12, seed=5)) != weights_by_key(random_graph(12, seed=6))

    def test_global_seed_default(self):
        set_global_seed(42)
        a = random_graph(8)
        b = random_graph(8, seed=42)
        assert weights_by_key(a) == weights_by_key(b)

    def test_keys_and_values(self):
        g = random_graph(3, seed=0)
        assert g.keys() == ["n00", "n01", "n02"]
        assert [n.value for n in g.nodes()] == [0, 1, 2]

    def test_weight_range(self):
        g = random_graph(20, edge_probability=0.5, weight_range=(2.0, 3.0), seed=1)
        weights = list(weights_by_key(g).values())
        assert weights
        assert all(2.0 <= w < 3.0 for w in weights)

    def test_no_self_loops_by_default(self):
        g = random_graph(10, edge_probability=1.0, seed=0)
        for node in g.nodes():
            assert node not in node.successors
            assert len(node.successors) == 9

    def test_self_loops_allowed(self):
        g = random_graph(4, edge_probability=1.0, seed=0, allow_self_loops=True)
        assert all(node in node.successors for node in g.nodes())

    def test_no_arcs(self):
        assert list(random_graph(5, edge_probability=0.0, seed=0).edges()) == []

    @pytest.mark.parametrize("kwargs", [
        {"n_nodes": -1},
        {"n_nodes": 3, "edge_probability": 1.5},
        {"n_nodes": 3, "weight_range": (5.0, 1.0)},
    ])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            random_graph(**kwargs)


class TestMatrices:
    """Test suite for dense matrix helpers."""

    def test_adjacency_matrix(self, sample_graph):
        keys, matrix = adjacency_matrix(sample_graph)
        assert keys == ["1", "2", "3", "4"]
        np.testing.assert_array_equal(matrix, [
            [0.0, 5.0, 1.0, 0.0],
            [0.0, 0.0, 9.0, 0.0],
            [0.0, 0.0, 0.0, 0.0],
            [0.0, 3.0, 0.0, 0.0],
        ])

    def test_weights_by_key(self, sample_graph):
        assert weights_by_key(sample_graph) == {
            ("1", "2"): 5.0, ("1", "3"): 1.0, ("2", "3"): 9.0, ("4", "2"): 3.0
        }
