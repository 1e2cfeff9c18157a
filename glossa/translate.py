"""Translate a typed syntax tree into target-language source text."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .backend.csharp import CSharpVisitor
from .diagnostics import Diagnostic, UnknownTargetError
from .renderer import Renderer
from .syntax import Node
from .types import TypeChecker
from .visitor import DefaultVisitor

logger = logging.getLogger(__name__)

BACKENDS: dict[str, type[DefaultVisitor[Any]]] = {
    "csharp": CSharpVisitor,
}


@dataclass
class Translation:
    """Rendered text plus every diagnostic reported along the way."""

    text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def make_visitor(target: str, **options: Any) -> DefaultVisitor[Any]:
    """Instantiate the backend registered for target."""
    visitor_class = BACKENDS.get(target)
    if visitor_class is None:
        known = ", ".join(sorted(BACKENDS))
        raise UnknownTargetError(f"unknown target {target!r} (expected one of: {known})")
    return visitor_class(**options)


def translate(
    root: Node, target: str = "csharp", checker: TypeChecker | None = None, **options: Any
) -> Translation:
    """Render root for target. Keyword options configure the backend visitor."""
    visitor = make_visitor(target, **options)
    renderer = Renderer(visitor, checker)
    text = renderer.convert(root).render()
    diagnostics = renderer.diagnostics
    logger.info("translated %s to %s: %d diagnostic(s)", root.kind.value, target, len(diagnostics))
    return Translation(text, diagnostics)
