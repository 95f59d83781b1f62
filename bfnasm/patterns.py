from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

if TYPE_CHECKING:
    from .generator import GenerationContext

CELL_WIDTH = 256


def _hex(value: int) -> str:
    return f"0x{value:x}"


def _class_run(sequence: str, start: int, allowed: str) -> Optional[str]:
    end = start
    while end < len(sequence) and sequence[end] in allowed:
        end += 1
    if end == start:
        return None
    return sequence[start:end]


def _anchored_run(sequence: str, start: int, anchor: str, allowed: str) -> Optional[str]:
    # Longest prefix that starts and ends with ``anchor`` using only ``allowed``.
    if start >= len(sequence) or sequence[start] != anchor:
        return None
    end = start + 1
    index = start + 1
    while index < len(sequence) and sequence[index] in allowed:
        if sequence[index] == anchor:
            end = index + 1
        index += 1
    return sequence[start:end]


def split_fragments(slice: str, operator: str) -> List[str]:
    """Split ``slice`` so that every ``operator`` stands alone between the other fragments."""
    fragments: List[str] = []
    current: List[str] = []
    for char in slice:
        if char == operator:
            if current:
                fragments.append("".join(current))
                current = []
            fragments.append(char)
        else:
            current.append(char)
    if current:
        fragments.append("".join(current))
    return fragments


def net_delta(fragment: str, up: str, down: str) -> int:
    delta = 0
    for char in fragment:
        if char == up:
            delta += 1
        elif char == down:
            delta -= 1
    return delta


class Pattern:
    """A rule that recognizes a prefix of the remaining program and translates it."""

    name = "pattern"

    def match(self, sequence: str, start: int = 0) -> Optional[str]:
        """Return the longest prefix of ``sequence[start:]`` this rule handles, or ``None``."""
        raise NotImplementedError

    def translate(self, slice: str, context: "GenerationContext") -> List[str]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class PrintRun(Pattern):
    """Consecutive output operators share one ``write`` system call.

    Pointer and cell changes between two ``.`` only change which values end up
    in the buffer, so they are emitted in place while the buffer is filled and
    the whole buffer is written once at the end of the run.
    """

    name = "print"

    def match(self, sequence: str, start: int = 0) -> Optional[str]:
        return _anchored_run(sequence, start, ".", ".><+-")

    def translate(self, slice: str, context: "GenerationContext") -> List[str]:
        convention = context.convention
        size = _hex(slice.count("."))
        transpiled = [f"\tsub\trsp, {size}"]
        slot = 0
        for fragment in split_fragments(slice, "."):
            if fragment == ".":
                transpiled.append(f"\tmov\t{convention.cache_register}, [{convention.pointer_register}]")
                transpiled.append(f"\tmov\t[rsp+{_hex(slot)}], {convention.cache_register}")
                slot += 1
            else:
                transpiled.extend(context.generate(fragment))
        transpiled.extend(
            [
                "\tmov\trsi, rsp",
                f"\tmov\trdx, {size}",
                "\tmov\trdi, 0x1",
                "\tmov\trax, 0x1",
                "\tsyscall",
                f"\tadd\trsp, {size}",
            ]
        )
        return transpiled


def is_read_gap(fragment: str) -> bool:
    """True when ``fragment`` only moves the pointer one cell to the right.

    Arithmetic is tolerated on the target cell, since the following read
    overwrites it. That only holds while input lasts: a short read leaves the
    cell as it was, so the dropped arithmetic would have been visible.
    """
    offset = 0
    for operator in fragment:
        if operator == ">":
            offset += 1
        elif operator == "<":
            offset -= 1
        elif offset != 1:
            return False
    return offset == 1


class ReadRun(Pattern):
    """Reads into contiguous cells share one ``read`` system call.

    The run stops before the first gap that is not a single right shift, so
    the rest of the program goes back to the driver.
    """

    name = "read"

    def match(self, sequence: str, start: int = 0) -> Optional[str]:
        if start >= len(sequence) or sequence[start] != ",":
            return None
        end = start + 1
        while True:
            gap = _class_run(sequence, end, "><+-") or ""
            following = end + len(gap)
            if following >= len(sequence) or sequence[following] != "," or not is_read_gap(gap):
                break
            end = following + 1
        return sequence[start:end]

    def translate(self, slice: str, context: "GenerationContext") -> List[str]:
        pointer = context.convention.pointer_register
        count = slice.count(",")
        transpiled = [
            f"\tmov\trsi, {pointer}",
            f"\tmov\trdx, {_hex(count)}",
            "\tmov\trdi, 0x0",
            "\tmov\trax, 0x0",
            "\tsyscall",
        ]
        if count > 1:
            transpiled.append(f"\tadd\t{pointer}, {_hex(count - 1)}")
        return transpiled


class ArithmeticRun(Pattern):
    name = "arithmetic"

    def match(self, sequence: str, start: int = 0) -> Optional[str]:
        return _class_run(sequence, start, "+-")

    def translate(self, slice: str, context: "GenerationContext") -> List[str]:
        delta = net_delta(slice, "+", "-")
        magnitude = abs(delta) % CELL_WIDTH
        if not magnitude:
            return []
        operation = "add" if delta > 0 else "sub"
        return [f"\t{operation}\tbyte [{context.convention.pointer_register}], {_hex(magnitude)}"]


class PointerShiftRun(Pattern):
    name = "shift"

    def match(self, sequence: str, start: int = 0) -> Optional[str]:
        return _class_run(sequence, start, "><")

    def translate(self, slice: str, context: "GenerationContext") -> List[str]:
        delta = net_delta(slice, ">", "<")
        if not delta:
            return []
        operation = "add" if delta > 0 else "sub"
        return [f"\t{operation}\t{context.convention.pointer_register}, {_hex(abs(delta))}"]


class Loop(Pattern):
    """A bracketed span, located by counting nesting depth.

    A loop whose body generates no instructions is dropped together with its
    labels and branches.
    """

    name = "loop"

    def match(self, sequence: str, start: int = 0) -> Optional[str]:
        if start >= len(sequence) or sequence[start] != "[":
            return None
        depth = 0
        for index in range(start, len(sequence)):
            operator = sequence[index]
            if operator == "[":
                depth += 1
            elif operator == "]":
                depth -= 1
                if depth == 0:
                    return sequence[start : index + 1]
        return None

    def translate(self, slice: str, context: "GenerationContext") -> List[str]:
        body = slice[1:-1]
        if not body:
            return []
        parsed = context.generate(body)
        if not parsed:
            return []
        label = context.next_label()
        pointer = context.convention.pointer_register
        return [
            f".loop_{label}:",
            f"\tcmp\tbyte [{pointer}], 0x0",
            f"\tje\t.exit_{label}",
            *parsed,
            f"\tjmp\t.loop_{label}",
            f".exit_{label}:",
        ]


@dataclass(frozen=True)
class PatternSet:
    """Ordered, immutable collection of rules; earlier rules win ties."""

    patterns: Tuple[Pattern, ...]

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def names(self) -> List[str]:
        return [pattern.name for pattern in self.patterns]


def default_patterns() -> PatternSet:
    return PatternSet((PrintRun(), ReadRun(), ArithmeticRun(), PointerShiftRun(), Loop()))


__all__ = [
    "ArithmeticRun",
    "Loop",
    "Pattern",
    "PatternSet",
    "PointerShiftRun",
    "PrintRun",
    "ReadRun",
    "default_patterns",
    "is_read_gap",
    "net_delta",
    "split_fragments",
]
