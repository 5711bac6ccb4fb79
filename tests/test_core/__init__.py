"""
Core algorithm tests for weighted_graph.

Tests for:
- Graph store operations
- Transition matrices and structural queries
- Viterbi decoding with null nodes
- A* shortest-path search
""" 
