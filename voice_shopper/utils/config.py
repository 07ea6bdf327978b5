"""
Configuration Management

Centralized YAML config loading. Every section has built-in defaults so
the app runs without any config directory present.
"""

import copy
import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

CONFIG_DIR_ENV = "VOICE_SHOPPER_CONFIG_DIR"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Manages the settings file"""
    
    def __init__(self, config_root: Optional[str] = None):
        if config_root is None:
            config_root = os.environ.get(CONFIG_DIR_ENV, "config")
        self.config_root = Path(config_root)
        self.global_config: Dict[str, Any] = self._default_global_config()
    
    def load_global_config(self) -> dict:
        """Load global settings, layered over the defaults"""
        settings_path = self.config_root / "settings.yaml"
        
        if settings_path.exists():
            with open(settings_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            self.global_config = _merge(self._default_global_config(), loaded)
        else:
            self.global_config = self._default_global_config()
        
        return self.global_config
    
    def get(self, path: str, default: Any = None) -> Any:
        """
        Get config value using dot notation.
        
        Examples:
            config.get('app.name')
            config.get('recognition.inactivity_timeout_ms')
        """
        keys = path.split('.')
        value = self.global_config
        
        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default
    
    def section(self, name: str) -> Dict[str, Any]:
        """Get a whole top-level section (empty dict if missing)"""
        value = self.global_config.get(name)
        return dict(value) if isinstance(value, dict) else {}
    
    def _default_global_config(self) -> dict:
        """Default global configuration"""
        return {
            'app': {
                'name': 'Voice Shopper',
                'version': '1.0.0',
                'debug': False
            },
            'logging': {
                'level': 'INFO',
                'dir': 'logs'
            },
            'recognition': {
                'continuous': True,
                'interim_results': True,
                'language': 'en-US',
                'inactivity_timeout_ms': 3000,
                'auto_stop_ms': 8000,
                'restart_delay_ms': 100,
                'stop_schedule_ms': [0, 25, 50, 75, 100, 150, 200, 300],
                'energy_threshold': 300,
                'pause_threshold': 0.8,
                'phrase_time_limit': 10.0,
                'ambient_noise_duration': 1.0
            },
            'accumulator': {
                'debounce_ms': 500
            },
            'parsing': {},
            'catalog': {
                'path': None,
                'require_match': False,
                'score_cutoff': 85
            }
        }


# Global instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_root: Optional[str] = None) -> ConfigManager:
    """Get global config manager (loads settings on first use)"""
    global _config_manager
    if _config_manager is None or (
        config_root is not None and Path(config_root) != _config_manager.config_root
    ):
        _config_manager = ConfigManager(config_root)
        _config_manager.load_global_config()
    return _config_manager


def load_global_config(config_root: Optional[str] = None) -> dict:
    """Convenience function to load global config"""
    return get_config_manager(config_root).load_global_config()
