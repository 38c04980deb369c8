# neurosignals/utils/logging_config.py

"""
Configures the logging system for neurosignals based on loaded settings.
Uses Rich for enhanced console logging.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from neurosignals.config import NeurosignalsConfig
from neurosignals.version import __version__

# --- Constants ---
# Map verbosity levels to logging levels
VERBOSITY_MAP = {
    0: logging.WARNING,  # Default (normal)
    1: logging.INFO,     # verbose
    2: logging.DEBUG,    # debug
    -1: logging.CRITICAL + 10 # quiet, above critical
}

PACKAGE_LOGGER = "neurosignals"

# --- Setup Function ---

def setup_logging(config: NeurosignalsConfig, verbosity: int = 0) -> Optional[Path]:
    """
    Configures the package logger based on the provided configuration and verbosity level.

    Args:
        config: The loaded NeurosignalsConfig object.
        verbosity: Console verbosity level (0 normal, 1 verbose, 2 debug, -1 quiet).

    Returns:
        Path of the log file when file logging is enabled, otherwise None.
    """
    log_cfg = config.logging
    console_level = VERBOSITY_MAP.get(verbosity, logging.INFO)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG) # Handlers filter on their own levels
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    # --- Console Handler (Rich) ---
    if console_level <= logging.CRITICAL:
        console_handler = RichHandler(
            level=console_level,
            show_time=False,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False, # History lines contain brackets
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(console_handler)

    # --- File Handler ---
    log_filepath: Optional[Path] = None
    if log_cfg.log_file_enabled:
        try:
            log_dir = config.paths.log_directory
            log_dir.mkdir(parents=True, exist_ok=True)
            log_filepath = log_dir / log_cfg.log_filename_template.format(timestamp=datetime.now())

            file_handler = logging.FileHandler(log_filepath, encoding='utf-8')
            file_handler.setLevel(log_cfg.log_level_file)
            file_handler.setFormatter(logging.Formatter(log_cfg.log_format))
            package_logger.addHandler(file_handler)
        except OSError as e:
            package_logger.error(f"Failed to configure file logging: {e}", exc_info=True)
            log_filepath = None

    init_logger = logging.getLogger(f"{PACKAGE_LOGGER}.init")
    init_logger.info(f"neurosignals v{__version__} initialized.")
    if log_filepath is not None:
        init_logger.info(f"Logging to file: {log_filepath}")
        init_logger.debug(f"Full configuration loaded: {config.model_dump()}")
    return log_filepath
