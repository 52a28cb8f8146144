from itertools import combinations
from typing import AbstractSet, Iterable, Optional, Sequence

from loguru import logger

from table_engine.core.config import MAX_COMBINATION_SIZE_CEILING, settings
from table_engine.schemas.availability import CandidateSet, TableCombination
from table_engine.schemas.reservation import ReservationData
from table_engine.schemas.table import TableData
from table_engine.schemas.window import TimeWindow
from table_engine.services.capacity_validator import check_party_size
from table_engine.services.conflict_detector import ConflictDetector

MIN_COMBINATION_SIZE = 2


def _feature_matches(
    tables: Iterable[TableData],
    preferred_features: AbstractSet[str],
) -> int:
    if not preferred_features:
        return 0
    found: set[str] = set()
    for table in tables:
        found |= table.features & preferred_features
    return len(found)


def _mutually_combinable(tables: Sequence[TableData]) -> bool:
    return all(
        first.allows_combination_with(second)
        and second.allows_combination_with(first)
        for first, second in combinations(tables, 2)
    )


def _has_redundant_table(
    tables: Sequence[TableData],
    total_capacity: int,
    party_size: int,
) -> bool:
    return any(
        total_capacity - table.capacity >= party_size for table in tables
    )


def single_table_sort_key(
    table: TableData,
    party_size: int,
    preferred_features: AbstractSet[str] = frozenset(),
) -> tuple:
    """Ключ сортировки одиночных столов: наименьшие потери мест."""
    return (
        table.capacity - party_size,
        -_feature_matches([table], preferred_features),
        -table.priority_score,
        table.number,
    )


def combination_sort_key(combination: TableCombination) -> tuple:
    """Ключ сортировки объединений: меньше столов, точнее вместимость."""
    return (
        len(combination.table_ids),
        combination.overshoot,
        -combination.feature_matches,
        -combination.priority_score,
        combination.table_numbers,
    )


class CombinationSearch:
    """Поиск одиночных столов и небольших объединений для компании."""

    def __init__(
        self,
        detector: Optional[ConflictDetector] = None,
        max_combination_size: Optional[int] = None,
        max_results: Optional[int] = None,
    ) -> None:
        """Инициализация поиска с ограничением размера объединений."""
        self.detector = detector or ConflictDetector()
        size = (
            max_combination_size
            if max_combination_size is not None
            else settings.MAX_COMBINATION_SIZE
        )
        if not 1 <= size <= MAX_COMBINATION_SIZE_CEILING:
            raise ValueError(
                'Размер объединения должен быть от 1 до '
                f'{MAX_COMBINATION_SIZE_CEILING}, получено {size}',
            )
        self.max_combination_size = size
        self.max_results = (
            max_results
            if max_results is not None
            else settings.MAX_COMBINATION_RESULTS
        )

    def free_tables(
        self,
        tables: Iterable[TableData],
        window: TimeWindow,
        reservations: Sequence[ReservationData],
    ) -> list[TableData]:
        """Активные обычные столы без занимающих броней в интервале."""
        return [
            table
            for table in tables
            if table.is_active
            and not table.is_shared
            and self.detector.is_free(table, window, reservations)
        ]

    def find_candidates(
        self,
        tables: Iterable[TableData],
        window: TimeWindow,
        party_size: int,
        reservations: Iterable[ReservationData],
        preferred_features: Iterable[str] = (),
    ) -> CandidateSet:
        """Находит столы и объединения, которые могут принять компанию.

        Сначала отбираются свободные одиночные столы, у которых
        вместимость не меньше компании, а минимум не больше. Затем среди
        всех свободных столов перебираются объединения из 2..N столов
        (N не больше трех), у которых суммарная вместимость покрывает
        компанию, а суммарный минимум ее не превышает. Объединения с
        лишним столом (без которого компания все равно помещается) не
        предлагаются.

        Args:
            tables: Все столы ресторана
            window: Запрошенный интервал
            party_size: Количество гостей
            reservations: Снимок броней ресторана
            preferred_features: Пожелания гостя (окно, диван и т.п.)

        Returns:
            CandidateSet: Одиночные столы и объединения в порядке
                          предпочтения

        """
        check_party_size(party_size)
        snapshot = list(reservations)
        preferred = frozenset(preferred_features)
        free = self.free_tables(tables, window, snapshot)

        single_tables = sorted(
            (
                table
                for table in free
                if table.capacity >= party_size
                and table.min_capacity <= party_size
            ),
            key=lambda table: single_table_sort_key(
                table,
                party_size,
                preferred,
            ),
        )
        found = self._find_combinations(free, party_size, preferred)
        logger.debug(
            f'Компания {party_size}: свободно столов {len(free)}, '
            f'одиночных {len(single_tables)}, объединений {len(found)}',
        )
        return CandidateSet(
            party_size=party_size,
            single_tables=single_tables,
            combinations=found[: self.max_results],
        )

    def _find_combinations(
        self,
        free: Sequence[TableData],
        party_size: int,
        preferred_features: AbstractSet[str],
    ) -> list[TableCombination]:
        """Перебирает объединения свободных столов ограниченного размера."""
        candidates = [table for table in free if table.is_combinable]
        candidates.sort(key=lambda table: table.number)
        found = []
        for size in range(MIN_COMBINATION_SIZE, self.max_combination_size + 1):
            for group in combinations(candidates, size):
                total_capacity = sum(table.capacity for table in group)
                if total_capacity < party_size:
                    continue
                total_min_capacity = sum(table.min_capacity for table in group)
                if total_min_capacity > party_size:
                    continue
                if _has_redundant_table(group, total_capacity, party_size):
                    continue
                if not _mutually_combinable(group):
                    continue
                found.append(
                    TableCombination(
                        table_ids=tuple(table.id for table in group),
                        table_numbers=tuple(table.number for table in group),
                        total_capacity=total_capacity,
                        total_min_capacity=total_min_capacity,
                        overshoot=total_capacity - party_size,
                        priority_score=sum(
                            table.priority_score for table in group
                        ),
                        feature_matches=_feature_matches(
                            group,
                            preferred_features,
                        ),
                    ),
                )
        found.sort(key=combination_sort_key)
        return found
