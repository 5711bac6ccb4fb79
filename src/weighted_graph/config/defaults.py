"""Default configuration presets for graph construction and search."""

from dataclasses import dataclass
from typing import List, Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DefaultConfig:
    """Base configuration structure for graph search."""

    # Search parameters
    log_domain: bool
    normalize_atol: float
    trace_tokens: bool

    # Logging parameters
    log_level: str
    log_file: Optional[str] = None


# General use: log-domain weights, quiet logging
DEFAULT_CONFIG = DefaultConfig(
    log_domain=True,
    normalize_atol=1e-9,
    trace_tokens=False,
    log_level="WARNING",
)

# Debugging: every propagation step and active token is logged
DEBUG_CONFIG = DefaultConfig(
    log_domain=True,
    normalize_atol=1e-9,
    trace_tokens=True,
    log_level="DEBUG",
)

# Strict validation of normalized graphs
STRICT_CONFIG = DefaultConfig(
    log_domain=True,
    normalize_atol=1e-12,
    trace_tokens=False,
    log_level="INFO",
)

PRESETS = {
    'default': DEFAULT_CONFIG,
    'debug': DEBUG_CONFIG,
    'strict': STRICT_CONFIG,
}


def validate_config(config: DefaultConfig) -> List[str]:
    """Validate configuration parameters.

    Parameters
    ----------
    config : DefaultConfig
        Configuration to validate

    Returns
    -------
    List[str]
        Warnings about unusual but usable values

    Raises
    ------
    ValueError
        If a parameter is invalid
    """
    warnings = []

    if config.normalize_atol <= 0:
        raise ValueError(f"normalize_atol must be positive, got {config.normalize_atol}")
    if config.normalize_atol > 1e-3:
        warnings.append(
            f"normalize_atol={config.normalize_atol} is loose; rows far from stochastic will pass"
        )
    if config.normalize_atol < 1e-15:
        warnings.append(
            f"normalize_atol={config.normalize_atol} is below float64 resolution for sums near 1"
        )

    if config.log_level.upper() not in LOG_LEVELS:
        raise ValueError(f"Unknown log_level '{config.log_level}'. Available: {list(LOG_LEVELS)}")

    if config.trace_tokens and config.log_level.upper() != "DEBUG":
        warnings.append("trace_tokens has no visible effect unless log_level is DEBUG")

    return warnings
