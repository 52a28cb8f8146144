from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from table_engine.utils.enums import TableType

PositiveSeatNumber = Field(ge=1)


class TableBase(BaseModel):
    """Базовая схема для стола с общими полями."""

    number: str
    capacity: Annotated[int, PositiveSeatNumber]
    min_capacity: Annotated[int, PositiveSeatNumber] = 1
    table_type: TableType = TableType.STANDARD
    is_active: bool = True
    features: frozenset[str] = frozenset()
    max_party_size_per_booking: Optional[
        Annotated[int, PositiveSeatNumber]
    ] = None
    is_combinable: bool = True
    combinable_with: frozenset[UUID] = frozenset()
    priority_score: int = 0

    @field_validator('number', mode='before')
    @classmethod
    def normalize_number(cls, value: object) -> str:
        """Приводит номер стола к строке без лишних пробелов."""
        if value is None:
            raise ValueError('Номер стола обязателен')
        cleaned = str(value).strip()
        if not cleaned:
            raise ValueError('Номер стола не может быть пустым')
        return cleaned

    @field_validator('features', mode='before')
    @classmethod
    def normalize_features(cls, value: object) -> object:
        """Приводит пустое значение признаков к пустому набору."""
        if value is None:
            return frozenset()
        return value

    @field_validator('combinable_with', mode='before')
    @classmethod
    def normalize_combinable_with(cls, value: object) -> object:
        """Приводит пустое значение списка совместимых столов к набору."""
        if value is None:
            return frozenset()
        return value

    @model_validator(mode='after')
    def check_capacity_range(self) -> 'TableBase':
        """Проверяет, что минимальная вместимость не больше максимальной."""
        if self.min_capacity > self.capacity:
            raise ValueError(
                'Минимальная вместимость стола не может превышать '
                'максимальную',
            )
        return self


class TableCreate(TableBase):
    """Схема для создания нового стола."""

    restaurant_id: UUID


class TableData(TableBase):
    """Снимок стола, с которым работает движок доступности."""

    id: UUID

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def is_shared(self) -> bool:
        """Является ли стол общим (места продаются поштучно)."""
        return self.table_type == TableType.SHARED

    def allows_combination_with(self, other: 'TableData') -> bool:
        """Разрешает ли этот стол объединение с другим столом."""
        if not self.is_combinable:
            return False
        return not self.combinable_with or other.id in self.combinable_with
