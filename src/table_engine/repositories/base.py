from typing import Any, Generic, Iterable, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Load

from table_engine.core.db import Base

ModelT = TypeVar('ModelT', bound=Base)
CreateSchemaT = TypeVar('CreateSchemaT', bound=BaseModel)


class CRUDBase(Generic[ModelT, CreateSchemaT]):
    """Базовый класс для операций с хранилищем."""

    def __init__(self, model: Type[ModelT]) -> None:
        """Инициализация класса."""
        self.model = model

    async def get(
        self,
        session: AsyncSession,
        *predicates: Any,
        many: bool = False,
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        options: Iterable[Load] = (),
        for_update: bool = False,
        **filters: Any,
    ) -> list[ModelT] | ModelT:
        """Универсальная выборка по равенствам полям модели.

        get(..., field=value, ...).

        Параметры:
            session: AsyncSession.
            *predicates: произвольные SQLAlchemy-условия
            (например, Model.flag.is_(False)).
            many: True, чтобы вернуть список, иначе первый объект или None.
            order_by, limit, offset: необязательные параметры выдачи.
            options: ORM-опции загрузки (selectinload и т.п.).
            for_update: заблокировать выбранные строки до конца транзакции.
            **filters: равенства по полям модели (field=value).

        Исключения:
            ValueError: если передан фильтр по несуществующему полю модели.
        """
        self._validate_filters(filters)
        conditions = [getattr(self.model, k) == v for k, v in filters.items()]
        if predicates:
            conditions.extend(predicates)

        stmt = select(self.model).where(*conditions)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        if options:
            stmt = stmt.options(*options)
        if for_update:
            stmt = stmt.with_for_update()

        res = await session.execute(stmt)
        return list(res.scalars().all()) if many else res.scalars().first()

    async def create(
        self,
        obj_in: CreateSchemaT,
        session: AsyncSession,
    ) -> ModelT:
        """Создание записи в БД."""
        db_obj = self.model(**self._prepare_create_data(obj_in))
        session.add(db_obj)
        await session.commit()
        await session.refresh(db_obj)
        return db_obj

    def _prepare_create_data(self, obj_in: CreateSchemaT) -> dict[str, Any]:
        """Готовит данные схемы для создания модели."""
        return obj_in.model_dump(exclude_unset=True)

    def _validate_filters(self, filters: dict[str, Any]) -> None:
        """Валидация фильтров, примененных к get()."""
        unknown = [k for k in filters if not hasattr(self.model, k)]
        if unknown:
            raise ValueError(
                'Некорректные поля фильтра для '
                f'{self.model.__name__}: {unknown}',
            )
