"""Common configuration and models for dodobot."""
from .config import BotConfig, ConfigError, configure_logger, get_config

__all__ = ['BotConfig', 'ConfigError', 'get_config', 'configure_logger']
