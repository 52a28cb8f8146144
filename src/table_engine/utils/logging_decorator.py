import json
from functools import wraps
from typing import Any, Callable

from fastapi import HTTPException
from loguru import logger


def _serialize(obj: Any, only_set: bool = True) -> dict | None:
    """Сериализует схему запроса в словарь для логирования."""
    if hasattr(obj, 'model_dump'):
        return obj.model_dump(
            mode='json',
            exclude_none=True,
            exclude_unset=only_set,
        )
    return None


def event_logger(
    event_type: str,
    entity: str,
    only_set: bool = True,
) -> Callable:
    """Декоратор для логирования выполнения эндпоинта.

    Логирует параметры запроса после успешного выполнения асинхронной
    функции (эндпоинта). Отказ с HTTP-ошибкой пишется предупреждением,
    остальные ошибки пишутся с уровнем ERROR и пробрасываются дальше.

    Args:
        event_type: Тип события ('Создание', 'Проверка', 'Подбор').
        entity: Сущность, над которой выполняется операция.
        only_set: Сериализовать ли только явно переданные поля.
            По умолчанию True.

    Returns:
        Callable: Декоратор, оборачивающий асинхронную функцию и
            добавляющий логирование.

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            parameters = next(
                (
                    data
                    for data in (
                        _serialize(v, only_set) for v in kwargs.values()
                    )
                    if data is not None
                ),
                None,
            )
            try:
                result = await func(*args, **kwargs)
            except HTTPException as e:
                logger.warning(
                    f'{event_type} ({entity}) отклонено '
                    f'со статусом {e.status_code}',
                )
                raise
            except Exception:
                logger.error(
                    f'Произошла ошибка при выполнении операции "{event_type}" '
                    f'({entity})',
                )
                raise
            if parameters is not None:
                formatted_params = json.dumps(
                    parameters,
                    ensure_ascii=False,
                    indent=4,
                )
                logger.info(
                    f'{event_type} ({entity}), '
                    f'с параметрами:\n{formatted_params}',
                )
            return result

        return wrapper

    return decorator
