from typing import Optional

from loguru import logger

from table_engine.schemas.availability import (
    CandidateSet,
    OptimalAssignment,
)


class OptimalAssignmentSelector:
    """Выбор лучшего варианта рассадки среди кандидатов."""

    @staticmethod
    def select_optimal(
        candidates: CandidateSet,
    ) -> Optional[OptimalAssignment]:
        """Выбирает лучший стол или объединение.

        Одиночный стол всегда предпочтительнее объединения; среди
        одиночных выбирается стол с наименьшими потерями мест, среди
        объединений с наименьшим числом столов, затем с наименьшим
        превышением вместимости. При равенстве сохраняется порядок
        кандидатов (пожелания гостя и приоритет столов).

        Returns:
            OptimalAssignment | None: None, если подходящих вариантов нет
                                      (штатный исход, например, для листа
                                      ожидания)

        """
        if candidates.single_tables:
            table = min(
                candidates.single_tables,
                key=lambda item: item.capacity - candidates.party_size,
            )
            logger.debug(
                f'Оптимальный стол {table.number} '
                f'для компании {candidates.party_size}',
            )
            return OptimalAssignment(
                table_ids=[table.id],
                table_numbers=[table.number],
                requires_combination=False,
                total_capacity=table.capacity,
            )
        if candidates.combinations:
            combination = min(
                candidates.combinations,
                key=lambda item: (len(item.table_ids), item.overshoot),
            )
            logger.debug(
                'Оптимальное объединение столов '
                f'{", ".join(combination.table_numbers)} '
                f'для компании {candidates.party_size}',
            )
            return OptimalAssignment(
                table_ids=list(combination.table_ids),
                table_numbers=list(combination.table_numbers),
                requires_combination=True,
                total_capacity=combination.total_capacity,
            )
        logger.debug(
            f'Нет подходящих столов для компании {candidates.party_size}',
        )
        return None
