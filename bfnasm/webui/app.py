from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from bfnasm.bf_interpreter import StepLimitExceeded
from bfnasm.emulator import AssemblyEmulator, EmulationError
from bfnasm.errors import ValidationError
from bfnasm.template import load_template, render
from bfnasm.transpiler import BrainfuckTranspiler
from bfnasm.validator import find_error


def _string_to_input_bytes(data: str) -> List[int]:
    return [ord(ch) % 256 for ch in data]


class ProgramRequest(BaseModel):
    code: str = ""

    @field_validator("code")
    @classmethod
    def strip_newlines(cls, value: str) -> str:
        return BrainfuckTranspiler.normalize(value)


class TranspileRequest(ProgramRequest):
    template: bool = True


class RunRequest(ProgramRequest):
    input: str = ""
    max_steps: int = Field(default=1_000_000, ge=1)
    tape_window: int = Field(default=10, ge=0)


class ErrorPayload(BaseModel):
    kind: str
    index: int
    character: Optional[str]
    message: str


class ValidationPayload(BaseModel):
    valid: bool
    error: Optional[ErrorPayload] = None


class TranspilePayload(BaseModel):
    instructions: List[str]
    instruction_count: int
    assembly: Optional[str] = None


class RunPayload(BaseModel):
    output: str
    pointer: int
    tape_start: int
    tape: List[int]
    steps: int


def create_app(transpiler: Optional[BrainfuckTranspiler] = None) -> FastAPI:
    active_transpiler = transpiler or BrainfuckTranspiler(template=load_template())
    app = FastAPI(title="bfnasm API", version="0.1.0")

    def _generate(code: str) -> List[str]:
        try:
            return active_transpiler.generate(code)
        except ValidationError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.as_dict()) from exc

    @app.post("/api/validate", response_model=ValidationPayload)
    def validate_program(payload: ProgramRequest) -> ValidationPayload:
        error = find_error(payload.code)
        if error is None:
            return ValidationPayload(valid=True)
        return ValidationPayload(valid=False, error=ErrorPayload(**error.as_dict()))

    @app.post("/api/transpile", response_model=TranspilePayload)
    def transpile_program(payload: TranspileRequest) -> TranspilePayload:
        instructions = _generate(payload.code)
        assembly = None
        if payload.template:
            assembly = render(active_transpiler.template, instructions, active_transpiler.convention)
        return TranspilePayload(
            instructions=instructions,
            instruction_count=len(instructions),
            assembly=assembly,
        )

    @app.post("/api/run", response_model=RunPayload)
    def run_program(payload: RunRequest) -> RunPayload:
        instructions = _generate(payload.code)
        emulator = AssemblyEmulator(convention=active_transpiler.convention, max_steps=payload.max_steps)
        try:
            result = emulator.run_instructions(instructions, input_data=_string_to_input_bytes(payload.input))
        except StepLimitExceeded as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        except EmulationError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

        start = max(0, result.pointer - payload.tape_window)
        end = min(len(result.tape), result.pointer + payload.tape_window + 1)
        return RunPayload(
            output=result.output.decode("latin-1"),
            pointer=result.pointer,
            tape_start=start,
            tape=result.tape[start:end],
            steps=result.steps,
        )

    return app


__all__ = ["create_app"]
