from __future__ import annotations

import logging

from logger import set_verbose_mode, setup_logger


def test_setup_logger_console_only_without_run_name():
    logger = setup_logger()
    assert [type(handler) for handler in logger.handlers] == [logging.StreamHandler]
    assert logging.getLogger("httpx").level == logging.WARNING


def test_named_run_writes_log_file_and_verbose_leaves_it_alone(tmp_path):
    logger = setup_logger("batch", tmp_path / "logs")
    set_verbose_mode(logger, False)
    logger.info("chapter done")

    file_handler = next(h for h in logger.handlers if isinstance(h, logging.FileHandler))
    console = next(h for h in logger.handlers if not isinstance(h, logging.FileHandler))
    assert file_handler.level == logging.INFO
    assert console.level == logging.WARNING
    assert "chapter done" in (tmp_path / "logs" / "translation_log_batch.txt").read_text(encoding="utf-8")

    setup_logger()
