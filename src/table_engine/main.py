from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from table_engine.api.endpoints import routers
from table_engine.core.db import engine
from table_engine.core.exception_handler import (
    availability_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from table_engine.core.exceptions import AvailabilityError
from table_engine.core.logging import configure_logging
from table_engine.middleware.http_logging import logging_middleware


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator:
    """Запускает логгер при старте и закрывает пул соединений при выходе."""
    configure_logging()
    yield
    await engine.dispose()


app = FastAPI(
    title='Движок доступности столов',
    description='API для проверки доступности и подбора столов ресторана',
    version='0.1.0',
    lifespan=lifespan,
    root_path='/api',
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(AvailabilityError, availability_exception_handler)

app.middleware('http')(logging_middleware)


for router in routers:
    app.include_router(router)
