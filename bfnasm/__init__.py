from .bf_interpreter import BrainfuckInterpreter, ExecutionState, StepLimitExceeded
from .convention import DEFAULT_CONVENTION, TargetConvention
from .emulator import AssemblyEmulator, EmulationError, EmulationResult
from .errors import (
    GenerationError,
    TemplateError,
    UnclosedBracket,
    UnknownOperator,
    UnopenedBracket,
    ValidationError,
)
from .generator import CodeGenerator
from .patterns import PatternSet, default_patterns
from .transpiler import BrainfuckTranspiler
from .validator import validate

__all__ = [
    "AssemblyEmulator",
    "BrainfuckInterpreter",
    "BrainfuckTranspiler",
    "CodeGenerator",
    "DEFAULT_CONVENTION",
    "EmulationError",
    "EmulationResult",
    "ExecutionState",
    "GenerationError",
    "PatternSet",
    "StepLimitExceeded",
    "TargetConvention",
    "TemplateError",
    "UnclosedBracket",
    "UnknownOperator",
    "UnopenedBracket",
    "ValidationError",
    "default_patterns",
    "validate",
]
