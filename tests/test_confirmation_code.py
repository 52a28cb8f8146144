import pytest

from table_engine.core.constants import CONFIRMATION_CODE_ALPHABET
from table_engine.core.exceptions import ConfirmationCodeExhaustedError
from table_engine.services.confirmation_code import (
    generate_confirmation_code,
    make_code,
)


def test_code_uses_expected_alphabet_and_length():
    code = make_code(6)

    assert len(code) == 6
    assert set(code) <= set(CONFIRMATION_CODE_ALPHABET)


async def test_free_code_is_returned_immediately():
    seen = []

    async def code_exists(code):
        seen.append(code)
        return False

    code = await generate_confirmation_code(code_exists, attempts=5)

    assert seen == [code]


async def test_collisions_are_retried():
    answers = iter([True, True, False])

    async def code_exists(code):
        return next(answers)

    code = await generate_confirmation_code(code_exists, attempts=5)

    assert len(code) == 6


async def test_retries_are_bounded():
    calls = 0

    async def code_exists(code):
        nonlocal calls
        calls += 1
        return True

    with pytest.raises(ConfirmationCodeExhaustedError):
        await generate_confirmation_code(code_exists, attempts=5)

    assert calls == 5
