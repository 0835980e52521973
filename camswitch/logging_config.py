"""
Centralized logging configuration for camswitch.

This module provides logging setup and configuration utilities to ensure
consistent logging across all camswitch components with appropriate log levels
and formatting.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional


class CamSwitchLogger:
    """
    Centralized logger configuration for camswitch.

    Provides consistent logging setup with file and console handlers,
    appropriate formatting, and configurable log levels.
    """

    _configured = False
    _log_file_path: Optional[Path] = None

    @classmethod
    def configure(
        cls,
        log_level: str = "INFO",
        log_file: Optional[Path] = None,
        console_output: bool = True,
        max_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5
    ) -> None:
        """
        Configure logging for camswitch.

        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional path to log file. Defaults to ~/.camswitch/camswitch.log
            console_output: Whether to output logs to stderr
            max_file_size: Maximum size of log file before rotation
            backup_count: Number of backup log files to keep
        """
        if cls._configured:
            return

        level = getattr(logging, log_level.upper(), logging.INFO)

        if log_file is None:
            log_dir = Path.home() / ".camswitch"
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / "camswitch.log"

        cls._log_file_path = Path(log_file)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)  # File gets all messages
            root_logger.addHandler(file_handler)
        except OSError as e:
            # If file logging fails, continue with console only
            print(f"Warning: Could not set up file logging: {e}", file=sys.stderr)

        # Console output goes to stderr
        if console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            console_handler.setLevel(level)
            root_logger.addHandler(console_handler)

        cls._configure_camswitch_loggers(level)

        cls._configured = True

        logger = logging.getLogger(__name__)
        logger.info(f"Logging configured - Level: {log_level}, File: {log_file}")

    @classmethod
    def _configure_camswitch_loggers(cls, level: int) -> None:
        """Configure specific loggers for camswitch modules."""
        module_levels = {
            'camswitch.manager': level,
            'camswitch.catalog': level,
            'camswitch.selector': level,
            'camswitch.names': level,
            'camswitch.events': max(level, logging.INFO),
            'camswitch.backends': level,
            'camswitch.backends.linux': level,
            'camswitch.cli': level,
            'camswitch.tui': level,
        }

        for module_name, module_level in module_levels.items():
            logging.getLogger(module_name).setLevel(module_level)

    @classmethod
    def get_log_file_path(cls) -> Optional[Path]:
        """Get the current log file path."""
        return cls._log_file_path

    @classmethod
    def set_level(cls, level: str) -> None:
        """
        Change the logging level for all camswitch loggers.

        Args:
            level: New logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        log_level = getattr(logging, level.upper(), logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        for handler in root_logger.handlers:
            if isinstance(handler, logging.StreamHandler) and getattr(handler, 'stream', None) is sys.stderr:
                handler.setLevel(log_level)

        cls._configure_camswitch_loggers(log_level)

        logger = logging.getLogger(__name__)
        logger.info(f"Logging level changed to {level.upper()}")

    @classmethod
    def reset(cls) -> None:
        """Forget the current configuration so configure() applies again."""
        cls._configured = False
        cls._log_file_path = None


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True
) -> None:
    """
    Convenience function to set up camswitch logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        console_output: Whether to output logs to stderr
    """
    CamSwitchLogger.configure(
        log_level=log_level,
        log_file=log_file,
        console_output=console_output
    )
