"""Shared utilities"""
from voice_shopper.utils.config import ConfigManager, get_config_manager, load_global_config
from voice_shopper.utils.logger import get_logger, log_list_activity, setup_logging

__all__ = [
    'ConfigManager',
    'get_config_manager',
    'load_global_config',
    'get_logger',
    'log_list_activity',
    'setup_logging'
]
