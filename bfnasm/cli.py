from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from .bf_interpreter import StepLimitExceeded
from .emulator import AssemblyEmulator, EmulationError
from .errors import TemplateError, ValidationError
from .template import load_template
from .transpiler import BrainfuckTranspiler

logger = logging.getLogger(__name__)


def _write_output(path: str, data: str) -> None:
    output_path = Path(path)
    output_path.write_text(data, encoding="utf-8")


def _to_input_bytes(data: str) -> Iterable[int]:
    return [ord(ch) for ch in data]


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Translate Brainfuck into NASM assembly (x86-64 Linux)")
    parser.add_argument("source", help="Path to the Brainfuck source file")
    parser.add_argument(
        "-o",
        "--output",
        help="Destination file for the emitted assembly (default: print to stdout)",
    )
    parser.add_argument("--template", help="Use a custom program template instead of the bundled one")
    parser.add_argument(
        "--run",
        action="store_true",
        help="Execute the emitted assembly in the built-in emulator",
    )
    parser.add_argument(
        "--input",
        help="Input string supplied to the program when running",
        default="",
    )
    parser.add_argument("--max-steps", type=int, default=None, help="Step budget for --run")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        template = load_template(args.template)
        transpiler = BrainfuckTranspiler(template=template)
        assembly = transpiler.transpile_file(args.source)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (ValidationError, TemplateError) as exc:
        print(f"Transpilation error: {exc}", file=sys.stderr)
        return 1

    if args.output:
        _write_output(args.output, assembly)
        logger.info("Wrote assembly to %s", args.output)
    elif not args.run:
        sys.stdout.write(assembly)
        if not assembly.endswith("\n"):
            sys.stdout.write("\n")

    if args.run:
        emulator = AssemblyEmulator(convention=transpiler.convention, max_steps=args.max_steps)
        try:
            result = emulator.run_program(assembly, input_data=_to_input_bytes(args.input))
        except (EmulationError, StepLimitExceeded) as exc:
            print(f"Execution error: {exc}", file=sys.stderr)
            return 1
        sys.stdout.write(result.output.decode("latin-1"))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
