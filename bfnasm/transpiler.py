from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .convention import DEFAULT_CONVENTION, TargetConvention
from .generator import CodeGenerator
from .patterns import PatternSet
from .template import load_template, render
from .validator import validate

logger = logging.getLogger(__name__)


class BrainfuckTranspiler:
    """Brainfuck to NASM (x86-64 Linux) transpiler.

    ``generate`` returns the bare instruction lines; ``transpile`` splices them
    into the program template. Invalid programs raise a ``ValidationError``
    before any code is generated.
    """

    def __init__(
        self,
        convention: Optional[TargetConvention] = None,
        patterns: Optional[PatternSet] = None,
        template: Optional[str] = None,
    ) -> None:
        self.convention = convention or DEFAULT_CONVENTION
        self.generator = CodeGenerator(patterns=patterns, convention=self.convention)
        self._template = template

    @property
    def template(self) -> str:
        if self._template is None:
            self._template = load_template()
        return self._template

    @staticmethod
    def normalize(source: str) -> str:
        return source.replace("\r", "").replace("\n", "")

    def generate(self, source: str) -> List[str]:
        sequence = self.normalize(source)
        if not sequence:
            return []
        validate(sequence)
        instructions = self.generator.generate(sequence)
        logger.info("Translated %d operator(s) into %d instruction(s)", len(sequence), len(instructions))
        return instructions

    def transpile(self, source: str) -> str:
        return render(self.template, self.generate(source), self.convention)

    def transpile_file(self, path: str) -> str:
        source_path = Path(path)
        if not source_path.exists():
            raise FileNotFoundError(f"Source file not found: {path}")
        return self.transpile(source_path.read_text(encoding="latin-1"))


__all__ = ["BrainfuckTranspiler"]
