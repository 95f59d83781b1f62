from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .bf_interpreter import StepLimitExceeded
from .convention import DEFAULT_CONVENTION, TargetConvention

logger = logging.getLogger(__name__)

MASK64 = (1 << 64) - 1

REGISTERS = ("rax", "rbx", "rcx", "rdx", "rsi", "rdi", "rsp", "rbp", "r8", "r9", "r10", "r11", "r12", "r13", "r14", "r15")
BYTE_REGISTERS = {
    "al": "rax",
    "bl": "rbx",
    "cl": "rcx",
    "dl": "rdx",
    "sil": "rsi",
    "dil": "rdi",
}
DIRECTIVES = frozenset({"global", "section", "bits", "default", "extern"})

SYS_READ = 0
SYS_WRITE = 1
SYS_EXIT = 60


class EmulationError(RuntimeError):
    pass


@dataclass
class Instruction:
    mnemonic: str
    operands: List[str]
    line: int


@dataclass
class EmulationResult:
    output: bytes
    tape: List[int]
    pointer: int
    steps: int
    exit_status: Optional[int] = None


def parse_program(lines: Iterable[str]) -> Tuple[List[Instruction], Dict[str, int]]:
    """Parse NASM lines into instructions and a label -> instruction index map."""
    instructions: List[Instruction] = []
    labels: Dict[str, int] = {}
    for number, raw in enumerate(lines, start=1):
        line = raw.split(";", 1)[0].strip()
        if not line:
            continue
        if line.endswith(":"):
            labels[line[:-1]] = len(instructions)
            continue
        parts = line.split(None, 1)
        mnemonic = parts[0].lower()
        if mnemonic in DIRECTIVES:
            continue
        operands = [operand.strip() for operand in parts[1].split(",")] if len(parts) > 1 else []
        instructions.append(Instruction(mnemonic=mnemonic, operands=operands, line=number))
    return instructions, labels


@dataclass
class AssemblyEmulator:
    """Executes the x86-64 subset emitted by the generator and the program template.

    Memory is a flat byte array whose top is the initial stack pointer; the
    tape occupies ``convention.stack_size`` bytes, as the template allocates it.
    """

    memory_size: int = 1 << 20
    convention: TargetConvention = DEFAULT_CONVENTION
    max_steps: Optional[int] = None

    registers: Dict[str, int] = field(init=False, repr=False)
    memory: bytearray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.memory_size <= self.convention.stack_size:
            raise ValueError("memory_size must leave room for the tape")
        self.reset()

    def reset(self, input_data: Optional[Iterable[int]] = None) -> None:
        self.registers = {name: 0 for name in REGISTERS}
        self.registers["rsp"] = self.memory_size
        self.memory = bytearray(self.memory_size)
        self.zero_flag = False
        self.output_buffer = bytearray()
        self.input_buffer = bytearray(value % 256 for value in (input_data or []))
        self.exit_status: Optional[int] = None

    @property
    def tape_base(self) -> int:
        return self.memory_size - self.convention.stack_size

    def run_program(self, text: str, input_data: Optional[Iterable[int]] = None) -> EmulationResult:
        """Run a complete program rendered from the bundled template."""
        self.reset(input_data)
        return self._execute(*parse_program(text.splitlines()))

    def run_instructions(self, lines: Iterable[str], input_data: Optional[Iterable[int]] = None) -> EmulationResult:
        """Run bare generated instructions with the pointer on cell 0 of a zeroed tape."""
        self.reset(input_data)
        self.registers["rsp"] = self.tape_base
        self.registers[self.convention.pointer_register] = self.tape_base
        return self._execute(*parse_program(lines))

    def _execute(self, instructions: List[Instruction], labels: Dict[str, int]) -> EmulationResult:
        pc = 0
        steps = 0
        while pc < len(instructions) and self.exit_status is None:
            if self.max_steps is not None and steps >= self.max_steps:
                raise StepLimitExceeded("Assembly program exceeded allowed step count")
            pc = self._step(instructions[pc], pc, labels)
            steps += 1
        logger.debug("Emulation finished after %d step(s)", steps)
        pointer = self.registers[self.convention.pointer_register] - self.tape_base
        return EmulationResult(
            output=bytes(self.output_buffer),
            tape=list(self.memory[self.tape_base : self.tape_base + self.convention.stack_size]),
            pointer=pointer,
            steps=steps,
            exit_status=self.exit_status,
        )

    def _step(self, instruction: Instruction, pc: int, labels: Dict[str, int]) -> int:
        mnemonic = instruction.mnemonic
        operands = instruction.operands
        if mnemonic == "mov":
            self._write(instruction, operands[0], self._read(instruction, operands[1]))
        elif mnemonic in ("add", "sub", "xor"):
            left = self._read(instruction, operands[0])
            right = self._read(instruction, operands[1])
            if mnemonic == "add":
                result = left + right
            elif mnemonic == "sub":
                result = left - right
            else:
                result = left ^ right
            self.zero_flag = self._write(instruction, operands[0], result) == 0
        elif mnemonic == "cmp":
            width = self._width(operands[0])
            difference = self._read(instruction, operands[0]) - self._read(instruction, operands[1])
            self.zero_flag = difference & ((1 << width) - 1) == 0
        elif mnemonic in ("je", "jz", "jne", "jnz", "jmp"):
            target = operands[0]
            if target not in labels:
                raise EmulationError(f"line {instruction.line}: unknown label '{target}'")
            if mnemonic == "jmp" or self.zero_flag == (mnemonic in ("je", "jz")):
                return labels[target]
        elif mnemonic == "syscall":
            self._syscall(instruction)
            self.registers["rcx"] = pc + 1
        elif mnemonic == "nop":
            pass
        else:
            raise EmulationError(f"line {instruction.line}: unsupported instruction '{mnemonic}'")
        return pc + 1

    def _syscall(self, instruction: Instruction) -> None:
        number = self.registers["rax"]
        if number == SYS_READ:
            address, count = self.registers["rsi"], self.registers["rdx"]
            chunk = self.input_buffer[:count]
            del self.input_buffer[:count]
            self._check_address(instruction, address, len(chunk))
            self.memory[address : address + len(chunk)] = chunk
            self.registers["rax"] = len(chunk)
        elif number == SYS_WRITE:
            address, count = self.registers["rsi"], self.registers["rdx"]
            self._check_address(instruction, address, count)
            self.output_buffer += self.memory[address : address + count]
            self.registers["rax"] = count
        elif number == SYS_EXIT:
            self.exit_status = self.registers["rdi"] & 0xFF
        else:
            raise EmulationError(f"line {instruction.line}: unsupported system call {number}")

    # --- Operands ---

    @staticmethod
    def _width(operand: str) -> int:
        if operand in BYTE_REGISTERS or operand.startswith("byte") or operand.startswith("["):
            return 8
        return 64

    def _address(self, instruction: Instruction, operand: str) -> int:
        expression = operand.replace("byte", "", 1).strip()
        if not (expression.startswith("[") and expression.endswith("]")):
            raise EmulationError(f"line {instruction.line}: malformed memory operand '{operand}'")
        expression = expression[1:-1].replace(" ", "")
        address = 0
        sign = 1
        term = ""
        for char in expression + "+":
            if char in "+-":
                if term:
                    value = self.registers[term] if term in self.registers else int(term, 0)
                    address += sign * value
                    term = ""
                sign = 1 if char == "+" else -1
            else:
                term += char
        self._check_address(instruction, address, 1)
        return address

    def _check_address(self, instruction: Instruction, address: int, length: int) -> None:
        if address < 0 or address + length > self.memory_size:
            raise EmulationError(f"line {instruction.line}: memory access out of range at {address:#x}")

    def _read(self, instruction: Instruction, operand: str) -> int:
        if operand in self.registers:
            return self.registers[operand]
        if operand in BYTE_REGISTERS:
            return self.registers[BYTE_REGISTERS[operand]] & 0xFF
        if "[" in operand:
            return self.memory[self._address(instruction, operand)]
        try:
            return int(operand, 0)
        except ValueError:
            raise EmulationError(f"line {instruction.line}: unsupported operand '{operand}'") from None

    def _write(self, instruction: Instruction, operand: str, value: int) -> int:
        if operand in self.registers:
            self.registers[operand] = value & MASK64
            return self.registers[operand]
        if operand in BYTE_REGISTERS:
            name = BYTE_REGISTERS[operand]
            self.registers[name] = (self.registers[name] & ~0xFF & MASK64) | (value & 0xFF)
            return value & 0xFF
        if "[" in operand:
            self.memory[self._address(instruction, operand)] = value & 0xFF
            return value & 0xFF
        raise EmulationError(f"line {instruction.line}: cannot write to operand '{operand}'")


__all__ = [
    "AssemblyEmulator",
    "EmulationError",
    "EmulationResult",
    "Instruction",
    "parse_program",
]
