from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from table_engine.models import Table
from table_engine.repositories.base import CRUDBase
from table_engine.schemas.table import TableCreate, TableData


class TableRepository(CRUDBase[Table, TableCreate]):
    """Репозиторий для операций со столами."""

    def __init__(self) -> None:
        """Инициализация репозитория столов."""
        super().__init__(Table)

    async def fetch_tables(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        active_only: bool = False,
    ) -> list[TableData]:
        """Возвращает снимок столов ресторана.

        Выключенные столы по умолчанию тоже попадают в снимок: движок сам
        отличает их от неизвестных столов.
        """
        predicates = [Table.is_active.is_(True)] if active_only else []
        tables = await self.get(
            session,
            *predicates,
            many=True,
            order_by=[Table.number],
            restaurant_id=restaurant_id,
        )
        return [TableData.model_validate(table) for table in tables]

    async def get_table_data(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        table_id: UUID,
    ) -> Optional[TableData]:
        """Возвращает стол ресторана по идентификатору или None."""
        table = await self.get(
            session,
            id=table_id,
            restaurant_id=restaurant_id,
        )
        return TableData.model_validate(table) if table else None

    async def lock_tables(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        table_ids: Sequence[UUID],
    ) -> list[TableData]:
        """Блокирует строки выбранных столов до конца транзакции.

        Конкурирующие записи броней на те же столы выстраиваются в очередь
        на блокировке, поэтому проверка доступности и запись брони
        выполняются атомарно.
        """
        tables = await self.get(
            session,
            Table.id.in_(table_ids),
            many=True,
            order_by=[Table.id],
            for_update=True,
            restaurant_id=restaurant_id,
        )
        return [TableData.model_validate(table) for table in tables]

    def _prepare_create_data(self, obj_in: TableCreate) -> dict[str, Any]:
        """Приводит наборы признаков и совместимых столов к спискам."""
        data = obj_in.model_dump()
        data['features'] = sorted(obj_in.features)
        data['combinable_with'] = sorted(
            str(table_id) for table_id in obj_in.combinable_with
        )
        return data


table_repository = TableRepository()
