"""
Test configuration and logging setup
"""

import logging
from pathlib import Path

import pytest

from voice_shopper.utils import config as config_module
from voice_shopper.utils.config import CONFIG_DIR_ENV, ConfigManager, get_config_manager
from voice_shopper.utils.logger import LoggerManager, get_logger


class TestConfigManager:
    """Test YAML settings loading"""

    def test_defaults_without_file(self, tmp_path):
        manager = ConfigManager(str(tmp_path))
        config = manager.load_global_config()

        assert config['recognition']['inactivity_timeout_ms'] == 3000
        assert manager.get('catalog.score_cutoff') == 85
        assert manager.get('accumulator.debounce_ms') == 500

    def test_file_overrides_defaults(self, tmp_path):
        (tmp_path / "settings.yaml").write_text(
            "recognition:\n  inactivity_timeout_ms: 1500\ncatalog:\n  require_match: true\n",
            encoding='utf-8'
        )
        manager = ConfigManager(str(tmp_path))
        manager.load_global_config()

        assert manager.get('recognition.inactivity_timeout_ms') == 1500
        assert manager.get('recognition.auto_stop_ms') == 8000
        assert manager.get('catalog.require_match') is True

    def test_empty_file(self, tmp_path):
        (tmp_path / "settings.yaml").write_text("", encoding='utf-8')
        manager = ConfigManager(str(tmp_path))

        assert manager.load_global_config()['app']['name'] == 'Voice Shopper'

    def test_get_missing(self, tmp_path):
        manager = ConfigManager(str(tmp_path))

        assert manager.get('recognition.nothing') is None
        assert manager.get('nope.nope', 'fallback') == 'fallback'

    def test_section(self, tmp_path):
        manager = ConfigManager(str(tmp_path))

        assert manager.section('accumulator') == {'debounce_ms': 500}
        assert manager.section('missing') == {}

    def test_env_selects_directory(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))
        assert ConfigManager().config_root == tmp_path

    def test_global_manager_reloads_for_new_root(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_module, '_config_manager', None)
        (tmp_path / "settings.yaml").write_text("app:\n  debug: true\n", encoding='utf-8')

        manager = get_config_manager(str(tmp_path))

        assert manager.get('app.debug') is True
        assert get_config_manager() is manager

    def test_shipped_settings_match_defaults(self):
        manager = ConfigManager(str(Path(__file__).resolve().parent.parent / "config"))
        loaded = manager.load_global_config()

        assert loaded['recognition'] == manager._default_global_config()['recognition']


class TestLogging:
    """Test logger naming"""

    def test_child_logger_name(self):
        logger = get_logger('stt.session')

        assert logger.name == 'voice_shopper.stt.session'
        assert logger.propagate is True

    def test_root_logger(self):
        root = get_logger()

        assert root.name == LoggerManager.ROOT_NAME
        assert any(
            isinstance(h, logging.StreamHandler) and h.level == logging.WARNING
            for h in root.handlers
        )
