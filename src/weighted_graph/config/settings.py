"""Configuration settings with TOML loading support.

Settings are read from ``weighted_graph.toml`` in the working directory or
``~/.weighted_graph.toml`` in the home directory, falling back to the
``default`` preset. A file may group keys under ``[search]``, ``[logging]``
and ``[advanced]`` tables or list them at the top level::

    [search]
    normalize_atol = 1e-9
    trace_tokens = false

    [logging]
    log_level = "INFO"
"""

import logging
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional, Union
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Backport for older Python

import tomli_w

from .defaults import PRESETS, DefaultConfig, validate_config

logger = logging.getLogger(__name__)

# Field name -> TOML table it is written to.
_SECTION_OF = {
    'log_domain': 'search',
    'normalize_atol': 'search',
    'trace_tokens': 'search',
    'log_level': 'logging',
    'log_file': 'logging',
    'random_seed': 'advanced',
    'verbose': 'advanced',
}

DEFAULT_CONFIG_PATHS = (
    Path('weighted_graph.toml'),
    Path.home() / '.weighted_graph.toml',
)


@dataclass
class Settings:
    """Runtime configuration of weighted_graph.

    Attributes
    ----------
    log_domain : bool
        Whether builders produce log-probability arc weights by default.
    normalize_atol : float
        Tolerance of :func:`~weighted_graph.core.transitions.validate_stochastic_rows`.
    trace_tokens : bool
        Log every active token after each decoder step (needs DEBUG logging).
    log_level : str
        Console level applied by :func:`~weighted_graph.config.setup_logging`.
    log_file : Optional[str]
        File that :func:`~weighted_graph.config.setup_logging` also writes to.
    random_seed : Optional[int]
        Global seed applied when the settings become the global configuration.
    verbose : bool
        Print configuration warnings.
    """

    # Search parameters
    log_domain: bool = True
    normalize_atol: float = 1e-9
    trace_tokens: bool = False

    # Logging parameters
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    # Reproducibility
    random_seed: Optional[int] = None

    # Advanced settings
    verbose: bool = False

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        warnings = validate_config(DefaultConfig(
            log_domain=self.log_domain,
            normalize_atol=self.normalize_atol,
            trace_tokens=self.trace_tokens,
            log_level=self.log_level,
            log_file=self.log_file,
        ))
        if self.verbose:
            for warning in warnings:
                print(f"Configuration warning: {warning}")

    @classmethod
    def from_preset(cls, preset: str) -> 'Settings':
        """Create settings from a named preset ('default', 'debug', 'strict')."""
        if preset not in PRESETS:
            raise ValueError(f"Unknown preset '{preset}'. Available: {list(PRESETS.keys())}")
        return cls(**asdict(PRESETS[preset]))

    @classmethod
    def from_toml(cls, toml_path: Union[str, Path]) -> 'Settings':
        """Load settings from a TOML file.

        Keys missing from the file keep their defaults.

        Parameters
        ----------
        toml_path : Union[str, Path]
            Path to TOML configuration file

        Returns
        -------
        Settings
            Settings object with values from TOML file

        Raises
        ------
        FileNotFoundError
            If TOML file doesn't exist
        TypeError
            If the file contains keys that are not settings
        """
        toml_path = Path(toml_path)
        if not toml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {toml_path}")

        with open(toml_path, 'rb') as f:
            config_data = tomllib.load(f)

        values: Dict[str, Any] = {}
        for key, value in config_data.items():
            if isinstance(value, dict):
                values.update(value)
            else:
                values[key] = value

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise TypeError(f"Unknown configuration key(s) in {toml_path}: {unknown}")
        return cls(**values)

    def to_toml(self, toml_path: Union[str, Path]) -> None:
        """Save settings to a TOML file, one table per section.

        ``None`` values are omitted since TOML has no null.
        """
        config_data: Dict[str, Dict[str, Any]] = {'search': {}, 'logging': {}, 'advanced': {}}
        for name, value in asdict(self).items():
            if value is not None:
                config_data[_SECTION_OF[name]][name] = value

        with open(Path(toml_path), 'wb') as f:
            tomli_w.dump(config_data, f)

    def update(self, **kwargs) -> 'Settings':
        """Return a validated copy with ``kwargs`` replacing current values."""
        current_dict = asdict(self)
        current_dict.update(kwargs)
        return Settings(**current_dict)


_GLOBAL_CONFIG: Optional[Settings] = None


def _apply(settings: Settings) -> Settings:
    global _GLOBAL_CONFIG
    _GLOBAL_CONFIG = settings
    if settings.random_seed is not None:
        from .random_state import set_global_seed
        set_global_seed(settings.random_seed)
    return settings


def _load_default_file() -> Optional[Settings]:
    for path in DEFAULT_CONFIG_PATHS:
        if not path.exists():
            continue
        try:
            return Settings.from_toml(path)
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Could not load config from %s: %s", path, e)
    return None


def get_config(config_path: Optional[Union[str, Path]] = None,
               preset: Optional[str] = None,
               reload: bool = False) -> Settings:
    """Get the global configuration, loading it on first use.

    Parameters
    ----------
    config_path : Optional[Union[str, Path]]
        TOML file to load. If None, the default locations are tried.
    preset : Optional[str]
        Preset used when no configuration file is found.
    reload : bool
        Load again even if a configuration is already cached.

    Returns
    -------
    Settings
        Global configuration settings
    """
    if _GLOBAL_CONFIG is not None and not reload and config_path is None:
        return _GLOBAL_CONFIG

    if config_path is not None:
        return _apply(Settings.from_toml(config_path))

    settings = _load_default_file()
    if settings is None:
        settings = Settings.from_preset(preset or 'default')
    return _apply(settings)


def set_config(settings: Settings) -> None:
    """Replace the global configuration."""
    _apply(settings)
