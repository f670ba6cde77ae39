"""
Logger configuration for Web Novel Chapter Translator

One named logger shared by every module; batch runs also keep a log file
next to their translated chapters
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from config import LOGGING_CONFIG

LOGGER_NAME = 'novel_translator'

def _file_handler(run_name: str, log_dir: Path, formatter: logging.Formatter) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{LOGGING_CONFIG['log_file_suffix']}_{run_name}.txt"
    handler = logging.FileHandler(log_path, encoding='utf-8')
    handler.setFormatter(formatter)
    handler.setLevel(logging.INFO)
    return handler

def setup_logger(run_name: Optional[str] = None, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Returns the shared logger with a stdout handler, replacing handlers from earlier calls
    A file handler is attached only when run_name is given
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(LOGGING_CONFIG['level'])
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOGGING_CONFIG['format'], LOGGING_CONFIG['datefmt'])
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if run_name:
        logger.addHandler(_file_handler(run_name, Path(log_dir or '.'), formatter))

    for name in LOGGING_CONFIG['quiet_loggers']:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger

def set_verbose_mode(logger: logging.Logger, verbose: bool) -> None:
    """Console shows INFO when verbose, otherwise only warnings; the log file is untouched"""
    level = logging.INFO if verbose else logging.WARNING
    for handler in logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)
