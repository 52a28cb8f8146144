from typing import Dict

from fastapi import APIRouter
from loguru import logger
from sqlalchemy import text

from table_engine.core.db import DbSession

router = APIRouter(prefix='/healthcheck', tags=['Healthcheck'])


@router.get('/db')
async def db_health(session: DbSession) -> Dict[str, str]:
    """Проверка состояния БД."""
    try:
        result = await session.execute(text('SELECT 1'))
        _ = result.scalar()
        logger.debug('Проверка БД: успешно')
        return {'status': 'ok'}
    except Exception as e:
        logger.error(f'Ошибка проверки БД: {str(e)}')
        return {'status': 'error', 'details': str(e)}
