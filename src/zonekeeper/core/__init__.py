"""Core."""

from .config import ZonekeeperConfig, clear_config, get_config, load_config_from_file

__all__ = [
    "ZonekeeperConfig",
    "clear_config",
    "get_config",
    "load_config_from_file",
]
