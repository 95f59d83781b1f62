from __future__ import annotations

from typing import List, Optional

from .errors import UnclosedBracket, UnknownOperator, UnopenedBracket, ValidationError

OPERATORS = frozenset("><+-.,[]")


def validate(sequence: str) -> None:
    """Check that ``sequence`` only holds Brainfuck operators and balanced brackets.

    Raises the first problem found. When several brackets stay open at the end
    of the scan, only the most recently opened one is reported.
    """
    brackets: List[int] = []
    for index, operator in enumerate(sequence):
        if operator not in OPERATORS:
            raise UnknownOperator(operator, index)
        if operator == "[":
            brackets.append(index)
        elif operator == "]":
            if not brackets:
                raise UnopenedBracket(index)
            brackets.pop()
    if brackets:
        raise UnclosedBracket(brackets.pop())


def find_error(sequence: str) -> Optional[ValidationError]:
    try:
        validate(sequence)
    except ValidationError as exc:
        return exc
    return None


def is_valid(sequence: str) -> bool:
    return find_error(sequence) is None


__all__ = ["OPERATORS", "find_error", "is_valid", "validate"]
