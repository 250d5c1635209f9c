import sys
from typing import Optional
from loguru import logger

from config.settings import settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} - {message}"

_configured = False


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Настраивает приемники loguru: консоль на уровне из настроек
    и ротируемый файл со всеми сообщениями уровня DEBUG.
    Повторный вызов заменяет приемники.
    """
    global _configured

    logger.remove()
    logger.configure(extra={"name": "kanban"})
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=level or settings.log_level,
        colorize=True
    )
    target = log_file if log_file is not None else settings.log_file
    if target:
        logger.add(
            target,
            rotation="10 MB",
            retention="10 days",
            format=LOG_FORMAT,
            level="DEBUG",
            encoding="utf-8"
        )
    _configured = True


def get_logger(name: str):
    """
    Возвращает логгер модуля; приемники настраиваются при первом вызове.
    """
    if not _configured:
        configure_logging()
    return logger.bind(name=name)
