from __future__ import annotations

from typing import Optional


class ValidationError(Exception):
    """Base class for problems found in a Brainfuck program before generation."""

    kind = "validation"

    def __init__(self, message: str, index: int, character: Optional[str] = None) -> None:
        super().__init__(message)
        self.index = index
        self.character = character

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "index": self.index,
            "character": self.character,
            "message": str(self),
        }


class UnknownOperator(ValidationError):
    kind = "unknown_operator"

    def __init__(self, character: str, index: int) -> None:
        super().__init__(f"Operator '{character}' at index {index} is not known", index, character)


class UnopenedBracket(ValidationError):
    kind = "unopened_bracket"

    def __init__(self, index: int) -> None:
        super().__init__(f"Bracket at index {index} is not opened", index, "]")


class UnclosedBracket(ValidationError):
    kind = "unclosed_bracket"

    def __init__(self, index: int) -> None:
        super().__init__(f"Bracket at index {index} is not closed", index, "[")


class GenerationError(RuntimeError):
    """Raised when no pattern accepts a non-empty suffix of a validated program."""


class TemplateError(ValueError):
    pass


__all__ = [
    "GenerationError",
    "TemplateError",
    "UnclosedBracket",
    "UnknownOperator",
    "UnopenedBracket",
    "ValidationError",
]
