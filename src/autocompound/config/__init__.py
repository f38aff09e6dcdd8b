"""Configuration schema and YAML loading."""

from .loader import config_from_dict, load_config
from .schema import AccountDefaults, Config, EngineSettings, FeeSettings, Simulation

__all__ = [
    "AccountDefaults",
    "Config",
    "EngineSettings",
    "FeeSettings",
    "Simulation",
    "config_from_dict",
    "load_config",
]
