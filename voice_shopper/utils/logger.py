"""
Logging System

Key points:
1. UTF-8 encoding for file handlers
2. Console output only for warnings and above
3. Sanitizes problematic characters before logging
4. Dedicated list-activity log (what was heard, what was added)
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from datetime import datetime
from typing import Iterable, Optional


class SafeFormatter(logging.Formatter):
    """Formatter that handles unicode errors gracefully"""
    
    def format(self, record):
        try:
            return super().format(record)
        except UnicodeEncodeError:
            # Fallback: ASCII-safe version
            record.msg = str(record.msg).encode('ascii', 'replace').decode('ascii')
            return super().format(record)


class LoggerManager:
    """Manages all loggers with Unicode support"""
    
    _instance = None
    _loggers = {}
    _initialized = False
    
    ROOT_NAME = 'voice_shopper'
    ACTIVITY_NAME = 'list_activity'
    
    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super(LoggerManager, cls).__new__(cls)
        return cls._instance
    
    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        if not self._initialized:
            self.log_dir = Path(log_dir)
            self.level = level
            self._setup_logging()
            self._initialized = True
    
    def _setup_logging(self):
        """Setup logging system"""
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            log_file = str(self.log_dir / "voice_shopper.log")
        except OSError as e:
            print(f"Warning: Log directory unavailable ({e}), console logging only")
            log_file = None
        
        self._setup_logger(
            self.ROOT_NAME,
            log_file,
            self.level,
            10 * 1024 * 1024,  # 10MB
            5  # 5 backups
        )
        
        activity_log = None
        if log_file:
            activity_log = str(self.log_dir / f"list_activity_{datetime.now().strftime('%Y%m%d')}.log")
        self._setup_activity_logger(activity_log)
    
    def _setup_logger(
        self,
        name: str,
        log_file: Optional[str],
        level: str,
        max_size: int,
        backup_count: int
    ):
        """Setup individual logger with UTF-8 support"""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []  # Clear existing
        logger.propagate = False
        
        formatter = SafeFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(logging.WARNING)
        logger.addHandler(console_handler)
        
        if log_file:
            try:
                file_handler = RotatingFileHandler(
                    log_file,
                    maxBytes=max_size,
                    backupCount=backup_count,
                    encoding='utf-8'
                )
                file_handler.setFormatter(formatter)
                logger.addHandler(file_handler)
            except OSError as e:
                print(f"Warning: File logging failed ({e})")
        
        self._loggers[name] = logger
    
    def _setup_activity_logger(self, log_file: Optional[str]):
        """Setup dedicated list-activity logger (file only)"""
        logger = logging.getLogger(self.ACTIVITY_NAME)
        logger.setLevel(logging.INFO)
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
        logger.propagate = False
        
        if log_file:
            try:
                file_handler = RotatingFileHandler(
                    log_file,
                    maxBytes=10 * 1024 * 1024,  # 10MB
                    backupCount=30,
                    encoding='utf-8'
                )
                file_handler.setFormatter(SafeFormatter(
                    '%(asctime)s - %(message)s',
                    datefmt='%Y-%m-%d %H:%M:%S'
                ))
                logger.addHandler(file_handler)
            except OSError as e:
                print(f"Warning: Activity logging failed ({e})")
        
        if not logger.handlers:
            logger.addHandler(logging.NullHandler())
        
        self._loggers[self.ACTIVITY_NAME] = logger
    
    def reconfigure(self, log_dir: Optional[str] = None, level: Optional[str] = None):
        """Rebuild handlers for a new directory and/or level"""
        if log_dir is not None:
            self.log_dir = Path(log_dir)
        if level is not None:
            self.level = level
        self._setup_logging()
    
    def get_logger(self, name: str = ROOT_NAME) -> logging.Logger:
        """Get logger instance"""
        full_name = f'{self.ROOT_NAME}.{name}' if name != self.ROOT_NAME else name
        
        if full_name not in self._loggers:
            # Children propagate to the root logger's handlers
            logger = logging.getLogger(full_name)
            logger.setLevel(logging.NOTSET)
            logger.propagate = True
            self._loggers[full_name] = logger
        
        return self._loggers[full_name]
    
    def log_list_activity(self, utterance: str, added: Iterable[str]):
        """
        Log one processed utterance to the list-activity log.
        
        Args:
            utterance: What was heard or typed
            added: Display strings of the items that were added
        """
        activity_logger = logging.getLogger(self.ACTIVITY_NAME)
        added = list(added)
        
        activity_logger.info(f"HEARD: {self._sanitize_text(utterance)}")
        if added:
            activity_logger.info(f"ADDED: {', '.join(self._sanitize_text(a) for a in added)}")
        else:
            activity_logger.info("ADDED: (nothing)")
    
    def _sanitize_text(self, text: str) -> str:
        """Replace problematic unicode characters"""
        replacements = {
            '‒': '-',  # Figure dash
            '–': '-',  # En dash
            '—': '--', # Em dash
            '‘': "'",  # Left single quote
            '’': "'",  # Right single quote
            '“': '"',  # Left double quote
            '”': '"',  # Right double quote
        }
        
        for old, new in replacements.items():
            text = text.replace(old, new)
        
        return text


# Global instance
_logger_manager: Optional[LoggerManager] = None


def setup_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> LoggerManager:
    """
    Initialize logging, or re-point it at new settings.
    
    Without arguments the existing manager is returned (created with
    defaults on first use).
    """
    global _logger_manager
    if _logger_manager is None:
        _logger_manager = LoggerManager(log_dir=log_dir or "logs", level=level or "INFO")
    elif log_dir is not None or level is not None:
        _logger_manager.reconfigure(log_dir, level)
    return _logger_manager


def get_logger(name: str = LoggerManager.ROOT_NAME) -> logging.Logger:
    """
    Get logger for a module.
    
    Args:
        name: Module name (e.g., 'stt.session', 'parsing.segmenter')
        
    Returns:
        Logger instance
    """
    return setup_logging().get_logger(name)


def log_list_activity(utterance: str, added: Iterable[str]):
    """Log an utterance and what it added - convenience function."""
    setup_logging().log_list_activity(utterance, added)
