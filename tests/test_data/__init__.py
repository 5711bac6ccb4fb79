"""
Graph construction tests for weighted_graph.

Tests for:
- Export and reconstruction of graphs
- Decoding graph and HMM chain builders
- Random graph generation
""" 
