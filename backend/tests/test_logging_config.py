import logging

from app.logging_config import build_logging_config, setup_logging


def test_console_only_without_log_dir():
    config = build_logging_config(None)

    assert "file" not in config["handlers"]
    assert config["loggers"]["app"]["handlers"] == ["console"]


def test_file_handler_with_log_dir(tmp_path):
    config = build_logging_config(str(tmp_path), "DEBUG")

    assert config["handlers"]["file"]["filename"] == str(tmp_path / "app.log")
    assert config["loggers"]["app"]["level"] == "DEBUG"


def test_setup_logging_creates_directory(tmp_path):
    log_dir = tmp_path / "logs"

    setup_logging(log_dir=str(log_dir), log_level="warning")

    assert log_dir.is_dir()
    assert logging.getLogger("app").level == logging.WARNING
