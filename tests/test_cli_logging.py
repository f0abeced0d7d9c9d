import sys

import pytest
from loguru import logger

from surreal_rpc.cli import logging_utils


@pytest.fixture(autouse=True)
def restore_logger(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_utils, "get_log_dir", lambda: tmp_path)
    yield
    logger.remove()
    logging_utils._SINK_IDS.clear()
    logger.add(sys.stderr)
    logger.enable("surreal_rpc")


def test_verbose_does_not_create_log_file(tmp_path):
    logging_utils.configure_cli_logging(verbose=True, logs=False)
    assert not (tmp_path / "cli.log").exists()
    assert "cli" not in logging_utils._SINK_IDS


def test_logs_only_writes_to_file_not_stderr(tmp_path, capfd):
    logging_utils.configure_cli_logging(verbose=False, logs=True, level="INFO")
    logger.info("written to file only")
    logger.complete()
    logger.remove()

    assert "written to file only" not in capfd.readouterr().err
    assert "written to file only" in (tmp_path / "cli.log").read_text(encoding="utf-8")


def test_neither_flag_leaves_file_sink_unset(tmp_path):
    logging_utils.configure_cli_logging(verbose=False, logs=False)
    assert not (tmp_path / "cli.log").exists()
