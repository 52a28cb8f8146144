from datetime import datetime

from table_engine.utils.enums import ReservationStatus

# Статусы, при которых бронь удерживает стол
OCCUPYING_STATUSES = frozenset(
    {
        ReservationStatus.CONFIRMED,
        ReservationStatus.ARRIVED,
        ReservationStatus.SEATED,
        ReservationStatus.ORDERED,
        ReservationStatus.APPETIZERS,
        ReservationStatus.MAIN_COURSE,
        ReservationStatus.DESSERT,
        ReservationStatus.PAYMENT,
    },
)
OCCUPYING_STATUSES_WITH_PENDING = OCCUPYING_STATUSES | {
    ReservationStatus.PENDING,
}

# Код подтверждения брони
CONFIRMATION_CODE_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'

# Ограничения на размер компании
MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 100

# Шаг сетки слотов по умолчанию, в минутах
DEFAULT_SLOT_MINUTES = 30

# Настройки логгера
MS_IN_SECOND = 1000
LOG_DEPTH = 7
LOG_ENCODING = 'utf-8'
LOG_COMPRESSION = 'zip'
LOG_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | '
    '<level>{level: <8}</level> | '
    '{extra[request_id]} | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | '
    '<level>{message}</level>'
)
FILE_LOG_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | '
    '{extra[request_id]} | '
    '{name}:{function}:{line} | {message}'
)
ENGINE_LOGGER_PREFIX = 'table_engine.services'
LOG_FILE_NAME = 'table_engine.log'
INTERCEPTED_LOGGERS = (
    'uvicorn',
    'uvicorn.error',
    'sqlalchemy',
)
NOISE_PATHS = {'/docs', '/openapi.json'}
HTTP_LOG_TEMPLATE = (
    '{method} {path} -> {status} ({ms:.1f} ms)\n    ip={ip}\n    ua={ua}\n'
)


def get_logger_header() -> str:
    """Формирует заголовок для нового лог-файла."""
    return (
        '\n'
        '================= LOGGER - TABLE_ENGINE =======================\n'
        f'Date: {datetime.now():%Y-%m-%d %H:%M:%S}\n'
        '================================================================\n\n'
    )
