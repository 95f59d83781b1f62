from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from .validator import validate


class StepLimitExceeded(RuntimeError):
    """Raised when execution exceeds the configured step budget."""


@dataclass
class ExecutionState:
    step: int
    pc: int
    command: Optional[str]
    pointer: int
    tape_start: int
    tape: List[int]
    output: bytes


@dataclass
class BrainfuckInterpreter:
    """Reference interpreter with 8-bit wrapping cells.

    ``eof_value`` is stored by ``,`` once the input is exhausted; ``None``
    leaves the cell untouched, which is what the ``read`` system call does.
    """

    tape_length: int = 30000
    eof_value: Optional[int] = 0

    tape: List[int] = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    output_buffer: bytearray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.tape = [0] * self.tape_length
        self.pointer = 0
        self.output_buffer = bytearray()

    def run(
        self,
        code: str,
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
    ) -> bytes:
        for _ in self.step(code, input_data=input_data, max_steps=max_steps):
            pass
        return bytes(self.output_buffer)

    def step(
        self,
        code: str,
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
        tape_window: int = 10,
    ) -> Iterator[ExecutionState]:
        validate(code)
        self.reset()
        input_iter = iter(list(input_data or []))
        jump_map = self._build_jump_map(code)
        pc = 0
        steps = 0

        while pc < len(code):
            if max_steps is not None and steps >= max_steps:
                raise StepLimitExceeded("Brainfuck program exceeded allowed step count")

            command = code[pc]
            pc = self._execute(command, pc, jump_map, input_iter)
            steps += 1
            yield self._snapshot(pc, command, steps, tape_window)

        yield self._snapshot(pc, None, steps, tape_window)

    def _execute(self, command: str, pc: int, jump_map: Dict[int, int], input_iter: Iterator[int]) -> int:
        new_pc = pc + 1
        if command == ">":
            self.pointer += 1
            if self.pointer >= self.tape_length:
                raise IndexError("Pointer moved beyond the tape length.")
        elif command == "<":
            self.pointer -= 1
            if self.pointer < 0:
                raise IndexError("Pointer moved before start of tape.")
        elif command == "+":
            self.tape[self.pointer] = (self.tape[self.pointer] + 1) % 256
        elif command == "-":
            self.tape[self.pointer] = (self.tape[self.pointer] - 1) % 256
        elif command == ".":
            self.output_buffer.append(self.tape[self.pointer])
        elif command == ",":
            value = next(input_iter, None)
            if value is None:
                value = self.eof_value
            if value is not None:
                self.tape[self.pointer] = value % 256
        elif command == "[":
            if self.tape[self.pointer] == 0:
                new_pc = jump_map[pc] + 1
        elif command == "]":
            if self.tape[self.pointer] != 0:
                new_pc = jump_map[pc] + 1
        return new_pc

    def _snapshot(self, pc: int, command: Optional[str], step: int, tape_window: int) -> ExecutionState:
        start = max(0, self.pointer - tape_window)
        end = min(self.tape_length, self.pointer + tape_window + 1)
        return ExecutionState(
            step=step,
            pc=pc,
            command=command,
            pointer=self.pointer,
            tape_start=start,
            tape=self.tape[start:end].copy(),
            output=bytes(self.output_buffer),
        )

    @staticmethod
    def _build_jump_map(code: str) -> Dict[int, int]:
        jump_map: Dict[int, int] = {}
        stack: List[int] = []
        for index, char in enumerate(code):
            if char == "[":
                stack.append(index)
            elif char == "]":
                start = stack.pop()
                jump_map[start] = index
                jump_map[index] = start
        return jump_map


__all__ = [
    "BrainfuckInterpreter",
    "ExecutionState",
    "StepLimitExceeded",
]
