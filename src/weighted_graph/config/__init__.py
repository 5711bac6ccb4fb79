"""Configuration management for weighted_graph.

Provides global configuration, logging setup and random seed management for
reproducible graph generation.
"""

from .settings import get_config, set_config, Settings
from .random_state import set_global_seed, get_random_state, make_rng
from .defaults import DEFAULT_CONFIG, DEBUG_CONFIG, STRICT_CONFIG, PRESETS, DefaultConfig
from .logging_setup import setup_logging

__all__ = [
    'get_config',
    'set_config',
    'set_global_seed',
    'get_random_state',
    'make_rng',
    'setup_logging',
    'Settings',
    'DEFAULT_CONFIG',
    'DEBUG_CONFIG',
    'STRICT_CONFIG',
    'PRESETS',
    'DefaultConfig'
]
