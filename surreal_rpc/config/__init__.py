"""Configuration module for surreal_rpc."""

from surreal_rpc.config.loader import get_config_path, load_config, save_config
from surreal_rpc.config.schema import ClientConfig

__all__ = ["ClientConfig", "get_config_path", "load_config", "save_config"]
