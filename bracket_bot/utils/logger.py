import logging
import sys
from datetime import datetime
from pathlib import Path

from bracket_bot.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Library loggers that drown out bracket activity at DEBUG
NOISY_LOGGERS = ('discord.gateway', 'discord.http', 'sqlalchemy.engine', 'aiosqlite')


def _log_file() -> Path:
    log_dir = Path(Config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f'bracket_bot_{datetime.now():%Y%m%d}.log'


def setup_logger(name: str) -> logging.Logger:
    """Logger writing to stdout and the daily bracket log file"""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    # The file keeps everything, including engine rejections logged at DEBUG
    file_handler = logging.FileHandler(_log_file(), encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger
