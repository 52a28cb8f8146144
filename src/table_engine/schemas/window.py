from datetime import datetime, timedelta, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, model_validator

from table_engine.core.exceptions import InvalidWindowError


def as_utc(value: datetime) -> datetime:
    """Приводит время к UTC с явным часовым поясом.

    Время без часового пояса считается временем UTC. Так брони из базы
    (SQLite возвращает время без пояса, asyncpg с поясом) и время из
    запроса сравниваются в одной шкале.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class TimeWindow(BaseModel):
    """Полуоткрытый интервал [start, end) занятости стола."""

    start: UtcDatetime
    end: UtcDatetime

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def check_interval(self) -> 'TimeWindow':
        """Проверяет, что время начала меньше времени окончания."""
        if self.end <= self.start:
            raise InvalidWindowError(
                'Время начала должно быть меньше времени окончания',
            )
        return self

    @classmethod
    def from_duration(
        cls,
        start: datetime,
        duration_minutes: int,
    ) -> 'TimeWindow':
        """Строит интервал по времени начала и длительности посадки."""
        if duration_minutes <= 0:
            raise InvalidWindowError(
                'Длительность брони должна быть положительной, '
                f'получено {duration_minutes} мин.',
            )
        end = start + timedelta(minutes=duration_minutes)
        return cls(start=start, end=end)

    @property
    def duration_minutes(self) -> int:
        """Длительность интервала в минутах."""
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: 'TimeWindow') -> bool:
        """Проверяет пересечение интервалов.

        Интервалы полуоткрытые, поэтому брони «встык» (одна заканчивается
        ровно тогда, когда начинается другая) не пересекаются.
        """
        return self.start < other.end and other.start < self.end

    def contains(self, other: 'TimeWindow') -> bool:
        """Проверяет, что интервал other целиком лежит внутри этого."""
        return self.start <= other.start and other.end <= self.end
