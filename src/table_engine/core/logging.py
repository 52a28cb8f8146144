import logging
import sys
from pathlib import Path
from typing import Callable

from loguru import logger

from table_engine.core.config import (
    LOG_DIR,
    settings,
)
from table_engine.core.constants import (
    ENGINE_LOGGER_PREFIX,
    FILE_LOG_FORMAT,
    INTERCEPTED_LOGGERS,
    LOG_COMPRESSION,
    LOG_DEPTH,
    LOG_ENCODING,
    LOG_FILE_NAME,
    LOG_FORMAT,
    get_logger_header,
)

_STD_INTERCEPT_CONFIGURED = False


class InterceptHandler(logging.Handler):
    """Перехват stdlib логов (uvicorn и sqlalchemy) в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Передаёт запись стандартного логгера в Loguru."""
        try:
            lvl = logger.level(record.levelname).name
        except ValueError:
            lvl = record.levelno
        logger.opt(
            depth=LOG_DEPTH,
            exception=record.exc_info,
        ).log(lvl, record.getMessage())


def setup_stdlib_intercept() -> None:
    """Перенаправляет стандартные логи (uvicorn, sqlalchemy) в Loguru."""
    global _STD_INTERCEPT_CONFIGURED
    if _STD_INTERCEPT_CONFIGURED:
        return
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        log = logging.getLogger(name)
        log.handlers = [InterceptHandler()]
        log.propagate = False
    _STD_INTERCEPT_CONFIGURED = True


def _ensure_defaults(record: dict) -> dict:
    """Добавляет значения по умолчанию в extra-поля лог-записи."""
    record['extra'].setdefault('request_id', '-')
    return record


def _level_filter(base_level: str, engine_level: str) -> Callable:
    """Строит фильтр с отдельным уровнем для решений движка.

    Сервисы движка пишут причины отказов на DEBUG; их можно включить
    через ENGINE_LOG_LEVEL, не поднимая уровень всего приложения.
    """
    base_no = logger.level(base_level).no
    engine_no = logger.level(engine_level).no

    def _filter(record: dict) -> bool:
        name = record['name'] or ''
        if name.startswith(ENGINE_LOGGER_PREFIX):
            return record['level'].no >= engine_no
        return record['level'].no >= base_no

    return _filter


def _write_log_header(path: Path) -> None:
    """Записывает заголовок с датой в начало лог-файла при его создании."""
    header = get_logger_header()
    try:
        with open(path, 'a', encoding=LOG_ENCODING) as f:
            f.write(header)
    except IOError as e:
        print(f'Не удалось записать заголовок в файл {path}: {e}')


def configure_logging(log_dir: Path = LOG_DIR) -> Path:
    """Настраивает Loguru, создаёт sinks и подключает перехват логов stdlib.

    Returns:
        Path: Путь к файлу лога движка

    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    if not log_file.exists() or log_file.stat().st_size == 0:
        _write_log_header(log_file)

    logger.remove()
    logger.configure(patcher=_ensure_defaults)
    level_filter = _level_filter(settings.LOG_LEVEL, settings.ENGINE_LOG_LEVEL)

    logger.add(
        sys.stdout,
        level=0,
        filter=level_filter,
        format=LOG_FORMAT,
        colorize=True,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )

    logger.add(
        log_file,
        level=0,
        filter=level_filter,
        rotation=settings.LOG_ROTATION,
        retention=settings.LOG_RETENTION,
        compression=LOG_COMPRESSION,
        format=FILE_LOG_FORMAT,
        encoding=LOG_ENCODING,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )

    setup_stdlib_intercept()
    return log_file
