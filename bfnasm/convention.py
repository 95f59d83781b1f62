from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TargetConvention:
    """Registers and sizes shared by the generated code and the program template.

    The tape lives on the machine stack; ``pointer_register`` holds the address
    of the current cell and ``cache_register`` is the byte register used to move
    cell values into the output buffer.
    """

    pointer_register: str = "rbx"
    cache_register: str = "cl"
    stack_size_register: str = "rcx"
    stack_size: int = 30000

    @property
    def stack_size_literal(self) -> str:
        return hex(self.stack_size)


DEFAULT_CONVENTION = TargetConvention()


__all__ = ["DEFAULT_CONVENTION", "TargetConvention"]
