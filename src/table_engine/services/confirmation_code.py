import secrets
from typing import Awaitable, Callable, Optional

from loguru import logger

from table_engine.core.config import settings
from table_engine.core.constants import CONFIRMATION_CODE_ALPHABET
from table_engine.core.exceptions import ConfirmationCodeExhaustedError

CodeExists = Callable[[str], Awaitable[bool]]


def make_code(length: Optional[int] = None) -> str:
    """Генерирует случайный код подтверждения брони."""
    size = length or settings.CONFIRMATION_CODE_LENGTH
    return ''.join(
        secrets.choice(CONFIRMATION_CODE_ALPHABET) for _ in range(size)
    )


async def generate_confirmation_code(
    code_exists: CodeExists,
    attempts: Optional[int] = None,
    length: Optional[int] = None,
) -> str:
    """Подбирает уникальный код подтверждения за ограниченное число попыток.

    Args:
        code_exists: Проверка, занят ли код в хранилище
        attempts: Максимальное число попыток
        length: Длина кода

    Returns:
        str: Свободный код подтверждения

    Raises:
        ConfirmationCodeExhaustedError: Если все попытки дали занятые коды

    """
    max_attempts = attempts or settings.CONFIRMATION_CODE_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        code = make_code(length)
        if not await code_exists(code):
            return code
        logger.warning(
            f'Код подтверждения {code} уже занят '
            f'(попытка {attempt} из {max_attempts})',
        )
    raise ConfirmationCodeExhaustedError(
        f'Не удалось подобрать уникальный код подтверждения '
        f'за {max_attempts} попыток',
    )
