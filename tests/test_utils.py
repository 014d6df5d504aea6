"""Tests for logging setup."""

from pathlib import Path

from loguru import logger

from fsdb.utils import setup_logging


def test_setup_logging_test_env_writes_no_file(tmp_path: Path):
    log_file = tmp_path / "logs" / "fsdb.log"

    setup_logging(env="test", log_file=log_file, console=False)
    logger.info("hello")

    assert not log_file.exists()


def test_setup_logging_console_sink(capsys):
    setup_logging(env="test", log_level="WARNING")
    logger.info("quiet")
    logger.warning("loud")

    err = capsys.readouterr().err
    assert "loud" in err
    assert "quiet" not in err

    setup_logging(env="test", console=False)
