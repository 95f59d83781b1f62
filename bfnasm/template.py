from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from .convention import DEFAULT_CONVENTION, TargetConvention
from .errors import TemplateError

DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parent / "templates" / "template.asm"
SOURCE_PLACEHOLDER = "%SOURCE%"


def load_template(path: Optional[str] = None) -> str:
    template_path = Path(path) if path else DEFAULT_TEMPLATE_PATH
    if not template_path.exists():
        raise FileNotFoundError(f"Template file not found: {template_path}")
    return template_path.read_text(encoding="utf-8")


def render(
    template: str,
    instructions: Iterable[str],
    convention: Optional[TargetConvention] = None,
) -> str:
    """Splice generated instructions and register names into ``template``."""
    if SOURCE_PLACEHOLDER not in template:
        raise TemplateError(f"Template has no {SOURCE_PLACEHOLDER} placeholder")
    convention = convention or DEFAULT_CONVENTION
    rendered = (
        template.replace("%STACK_SIZE_REGISTER%", convention.stack_size_register)
        .replace("%STACK_SIZE%", convention.stack_size_literal)
        .replace("%POINTER_REGISTER%", convention.pointer_register)
    )
    source = "\n".join(instructions)
    return rendered.replace(SOURCE_PLACEHOLDER, source)


__all__ = ["DEFAULT_TEMPLATE_PATH", "SOURCE_PLACEHOLDER", "load_template", "render"]
