from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .convention import DEFAULT_CONVENTION, TargetConvention
from .errors import GenerationError
from .patterns import Pattern, PatternSet, default_patterns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    text: str
    pattern: Pattern


@dataclass
class GenerationContext:
    """State owned by a single ``CodeGenerator.generate`` call."""

    generator: "CodeGenerator"
    convention: TargetConvention
    labels: Iterator[int] = field(default_factory=itertools.count)

    def generate(self, fragment: str) -> List[str]:
        return self.generator._generate(fragment, self)

    def next_label(self) -> int:
        return next(self.labels)


class CodeGenerator:
    """Translates a validated operator sequence into NASM instruction lines.

    Each step asks every pattern for its longest prefix of the remaining
    sequence and keeps the longest one; on equal length the pattern registered
    first wins. Only loop bodies and fragments embedded in I/O runs are
    generated recursively.
    """

    def __init__(
        self,
        patterns: Optional[PatternSet] = None,
        convention: Optional[TargetConvention] = None,
    ) -> None:
        self.patterns = patterns if patterns is not None else default_patterns()
        self.convention = convention or DEFAULT_CONVENTION

    def select(self, sequence: str, start: int = 0) -> Optional[MatchResult]:
        best: Optional[MatchResult] = None
        for pattern in self.patterns:
            prefix = pattern.match(sequence, start)
            if prefix and (best is None or len(prefix) > len(best.text)):
                best = MatchResult(text=prefix, pattern=pattern)
        return best

    def generate(self, sequence: str) -> List[str]:
        context = GenerationContext(generator=self, convention=self.convention)
        return self._generate(sequence, context)

    def _generate(self, sequence: str, context: GenerationContext) -> List[str]:
        transpiled: List[str] = []
        position = 0
        while position < len(sequence):
            match = self.select(sequence, position)
            if match is None:
                raise GenerationError(
                    f"No pattern matches the sequence at offset {position}: {sequence[position:position + 16]!r}"
                )
            logger.debug("%s matched %d operator(s) at offset %d", match.pattern.name, len(match.text), position)
            transpiled.extend(match.pattern.translate(match.text, context))
            position += len(match.text)
        return transpiled


__all__ = ["CodeGenerator", "GenerationContext", "MatchResult"]
