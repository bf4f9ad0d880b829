"""Configuration module for kbaserpc."""

from kbaserpc.config.loader import load_config, get_config_path, save_config
from kbaserpc.config.schema import Config
from kbaserpc.config.access import get_config, clear_config_cache

__all__ = ["Config", "load_config", "save_config", "get_config_path", "get_config", "clear_config_cache"]
