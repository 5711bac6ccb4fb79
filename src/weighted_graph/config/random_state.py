"""Seed management for reproducible graph generation.

Builders such as :func:`weighted_graph.data.builders.random_graph` draw from
their own :class:`numpy.random.Generator`, created by :func:`make_rng`. The
global seed kept here is the default seed of those generators. Python's
``random`` module and NumPy's legacy global generator are seeded too, so that
caller code that mixes them stays reproducible.
"""

import hashlib
import os
import random
from typing import Any, Dict, Optional

import numpy as np

ENV_SEED_VARIABLE = 'WEIGHTED_GRAPH_SEED'
DEFAULT_SEED = 42

_GLOBAL_SEED: Optional[int] = None
_RNG_STATE: Optional[Dict[str, Any]] = None


def set_global_seed(seed: int) -> None:
    """Seed ``random`` and ``np.random`` and make ``seed`` the default of :func:`make_rng`.

    The generator states right after seeding are kept so that
    :func:`reset_random_state` can rewind to them.

    Parameters
    ----------
    seed : int
        Seed value.

    Examples
    --------
    >>> set_global_seed(42)
    >>> a = random_graph(10)          # doctest: +SKIP
    >>> set_global_seed(42)
    >>> b = random_graph(10)          # doctest: +SKIP
    """
    global _GLOBAL_SEED, _RNG_STATE

    random.seed(seed)
    np.random.seed(seed)

    _GLOBAL_SEED = seed
    _RNG_STATE = {
        'seed': seed,
        'python_state': random.getstate(),
        'numpy_state': np.random.get_state(),
    }


def get_global_seed() -> Optional[int]:
    """Seed passed to the last :func:`set_global_seed`, or None."""
    return _GLOBAL_SEED


def get_random_state() -> Optional[Dict[str, Any]]:
    """Generator states saved by the last :func:`set_global_seed`.

    Returns
    -------
    Optional[Dict[str, Any]]
        ``{'seed', 'python_state', 'numpy_state'}``, or None before any seed
        was set.
    """
    return _RNG_STATE


def reset_random_state() -> None:
    """Rewind ``random`` and ``np.random`` to the states saved at the last seeding.

    Raises
    ------
    RuntimeError
        If :func:`set_global_seed` has not been called.
    """
    if _RNG_STATE is None:
        raise RuntimeError("Random state not initialized. Call set_global_seed() first.")

    random.setstate(_RNG_STATE['python_state'])
    np.random.set_state(_RNG_STATE['numpy_state'])


def create_deterministic_seed(base_string: str) -> int:
    """Derive a seed in ``[0, 2**31 - 1)`` from a string.

    The first 32 bits of the SHA-256 digest are used, so the same name
    always yields the same seed on every platform.

    Examples
    --------
    >>> seed = create_deterministic_seed("random-graph-50")
    >>> set_global_seed(seed)
    """
    digest = hashlib.sha256(base_string.encode()).hexdigest()
    return int(digest[:8], 16) % (2**31 - 1)


def get_environment_seed() -> int:
    """Seed taken from ``WEIGHTED_GRAPH_SEED``.

    An integer value is used as is; any other string is hashed with
    :func:`create_deterministic_seed`. Without the variable the result is
    ``DEFAULT_SEED``.
    """
    env_seed = os.environ.get(ENV_SEED_VARIABLE)
    if env_seed is None:
        return DEFAULT_SEED

    try:
        return int(env_seed)
    except ValueError:
        return create_deterministic_seed(env_seed)


def ensure_reproducibility() -> int:
    """Return the global seed, seeding from the environment first if none is set."""
    if _GLOBAL_SEED is None:
        seed = get_environment_seed()
        set_global_seed(seed)
        return seed
    return _GLOBAL_SEED


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create an independent NumPy generator.

    Parameters
    ----------
    seed : Optional[int]
        Explicit seed. If None, the global seed is used (initialized from
        the environment if necessary).

    Returns
    -------
    np.random.Generator
        Generator that does not share state with ``np.random``.
    """
    if seed is None:
        seed = ensure_reproducibility()
    return np.random.default_rng(seed)
