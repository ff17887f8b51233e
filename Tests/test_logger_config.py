from unittest.mock import patch
import logging

import pytest

from leak_monitor.core.logger_config import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@patch("leak_monitor.core.logger_config.os.path.exists", return_value=False)
def test_setup_logging_basic_config(mock_path_exists):
    """
    Test that logging levels are set correctly using the basic
    fallback configuration (when logging.yaml is not found).
    """
    setup_logging()

    mock_path_exists.assert_called_with("logging.yaml")
    assert logging.getLogger().getEffectiveLevel() == logging.INFO
    assert logging.getLogger("leak_monitor").getEffectiveLevel() == logging.INFO
    assert isinstance(logging.getLogger().handlers[0], logging.StreamHandler)


@patch("leak_monitor.core.logger_config.os.path.exists", return_value=False)
def test_setup_logging_verbose_lowers_level(mock_path_exists):
    setup_logging(verbose=True)

    assert logging.getLogger().getEffectiveLevel() == logging.DEBUG


def test_setup_logging_from_yaml(tmp_path, monkeypatch):
    config_file = tmp_path / "logging.yaml"
    config_file.write_text(
        "version: 1\n"
        "disable_existing_loggers: false\n"
        "handlers:\n"
        "  console:\n"
        "    class: logging.StreamHandler\n"
        "root:\n"
        "  level: WARNING\n"
        "  handlers: [console]\n"
    )
    monkeypatch.setenv("LOG_CFG", str(config_file))

    setup_logging()

    assert logging.getLogger().getEffectiveLevel() == logging.WARNING
