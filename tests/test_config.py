# tests/test_config.py

"""
Tests for configuration loading (neurosignals.config) and logging setup.
"""

import logging
import os

import pytest
from rich.logging import RichHandler

from neurosignals.config import NeurosignalsConfig, load_configuration, get_active_config, set_active_config
from neurosignals.config import loaders
from neurosignals.utils.logging_config import setup_logging, PACKAGE_LOGGER

# --- Test Fixtures ---

@pytest.fixture
def isolated(monkeypatch, tmp_path):
    """No project/user config files and no NEUROSIGNALS_* variables leak into the tests."""
    monkeypatch.setattr(loaders, "PROJECT_CONFIG_FILE", tmp_path / "missing_project.toml")
    monkeypatch.setattr(loaders, "USER_CONFIG_FILE", tmp_path / "missing_user.toml")
    for name in list(os.environ):
        if name.startswith(loaders.ENV_PREFIX):
            monkeypatch.delenv(name)
    yield tmp_path
    set_active_config(None)

@pytest.fixture
def clean_logger():
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

# --- Loading ---

def test_defaults(isolated):
    config = load_configuration()
    assert config.analysis.stationarity_window == 10
    assert config.analysis.stationarity_method == "hilbert"
    assert config.analysis.bootstrap_n == 3
    assert config.defaults.histogram_bins == "sqrt"

def test_toml_file(isolated):
    cfg_file = isolated / "custom.toml"
    cfg_file.write_text("[analysis]\nautocov_lag = 4\nbootstrap_n = 7\n")
    config = load_configuration(config_files=[cfg_file])
    assert config.analysis.autocov_lag == 4
    assert config.analysis.bootstrap_n == 7

def test_first_explicit_file_wins(isolated):
    first = isolated / "first.toml"
    first.write_text("[analysis]\nautocov_lag = 2\n")
    second = isolated / "second.toml"
    second.write_text("[analysis]\nautocov_lag = 3\nbootstrap_n = 5\n")
    config = load_configuration(config_files=[first, second])
    assert config.analysis.autocov_lag == 2
    assert config.analysis.bootstrap_n == 5

def test_project_file_overrides_explicit_file(isolated, monkeypatch):
    explicit = isolated / "explicit.toml"
    explicit.write_text("[analysis]\nautocov_lag = 4\n")
    project = isolated / "neurosignals.toml"
    project.write_text("[analysis]\nautocov_lag = 6\n")
    monkeypatch.setattr(loaders, "PROJECT_CONFIG_FILE", project)
    assert load_configuration(config_files=[explicit]).analysis.autocov_lag == 6
    assert load_configuration(config_files=[explicit], disable_project_config=True).analysis.autocov_lag == 4

def test_environment_overrides(isolated, monkeypatch):
    monkeypatch.setenv("NEUROSIGNALS_ANALYSIS_STATIONARITY_WINDOW", "25")
    monkeypatch.setenv("NEUROSIGNALS_DEFAULTS_HISTOGRAM_BINS", "sturges")
    monkeypatch.setenv("NEUROSIGNALS_LOGGING_LOG_FILE_ENABLED", "true")
    config = load_configuration()
    assert config.analysis.stationarity_window == 25
    assert config.defaults.histogram_bins == "sturges"
    assert config.logging.log_file_enabled is True

def test_invalid_values_fall_back_to_defaults(isolated, monkeypatch):
    monkeypatch.setenv("NEUROSIGNALS_ANALYSIS_STATIONARITY_METHOD", "median")
    config = load_configuration()
    assert config.analysis.stationarity_method == "hilbert"

def test_malformed_toml_is_skipped(isolated):
    broken = isolated / "broken.toml"
    broken.write_text("[analysis\nautocov_lag = ")
    assert load_configuration(config_files=[broken]).analysis.autocov_lag == 1

def test_log_level_validation():
    with pytest.raises(ValueError):
        NeurosignalsConfig(logging={"log_level_console": "LOUD"})
    assert NeurosignalsConfig(logging={"log_level_file": "info"}).logging.log_level_file == "INFO"

def test_active_config(isolated):
    set_active_config(None)
    first = get_active_config()
    assert get_active_config() is first
    custom = NeurosignalsConfig(analysis={"autocov_lag": 9})
    set_active_config(custom)
    assert get_active_config().analysis.autocov_lag == 9

# --- Logging ---

def test_setup_logging_console_only(clean_logger):
    assert setup_logging(NeurosignalsConfig(), verbosity=1) is None
    handlers = logging.getLogger(PACKAGE_LOGGER).handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)
    assert handlers[0].level == logging.INFO

def test_setup_logging_quiet(clean_logger):
    setup_logging(NeurosignalsConfig(), verbosity=-1)
    assert logging.getLogger(PACKAGE_LOGGER).handlers == []

def test_setup_logging_file(clean_logger, tmp_path):
    config = NeurosignalsConfig(
        paths={"log_directory": tmp_path / "logs"},
        logging={"log_file_enabled": True},
    )
    log_path = setup_logging(config, verbosity=0)
    assert log_path is not None
    assert log_path.parent == (tmp_path / "logs").resolve()
    logging.getLogger(f"{PACKAGE_LOGGER}.test").info("store write")
    for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
        handler.flush()
    assert "store write" in log_path.read_text()
