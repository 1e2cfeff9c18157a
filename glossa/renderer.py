"""Renderer - drives a visitor over a syntax tree.

A Renderer is a view: a visitor, a type checker, a diagnostics list and one
immutable context. update_context() returns a sibling view on a derived
context that shares the checker and the diagnostics; the view it was called
on is unaffected, so a rule can render one child with special flags and the
next child with its own.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, Iterable, TypeVar

from .context import RenderContext
from .diagnostics import Diagnostic
from .otree import EMPTY, OTree
from .syntax import Node, source_text
from .types import TypeChecker, TypeRef

if TYPE_CHECKING:
    from .visitor import DefaultVisitor

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=RenderContext)


class Renderer(Generic[C]):
    def __init__(
        self,
        visitor: DefaultVisitor[C],
        checker: TypeChecker | None = None,
        context: C | None = None,
        diagnostics: list[Diagnostic] | None = None,
    ) -> None:
        self.visitor: DefaultVisitor[C] = visitor
        self.checker: TypeChecker = checker if checker is not None else TypeChecker()
        self._context: C = context if context is not None else visitor.default_context
        self._diagnostics: list[Diagnostic] = diagnostics if diagnostics is not None else []

    @property
    def current_context(self) -> C:
        return self._context

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """Diagnostics reported so far by this view and every view derived from it."""
        return list(self._diagnostics)

    def update_context(self, **update: Any) -> Renderer[C]:
        """View of this renderer on a context with the given fields replaced."""
        context = self.visitor.merge_context(self._context, update)
        return Renderer(self.visitor, self.checker, context, self._diagnostics)

    def convert(self, node: Node | None) -> OTree:
        """Render one subtree in the current context."""
        if node is None:
            return EMPTY
        return self.visitor.visit(node, self)

    def convert_all(self, nodes: Iterable[Node]) -> list[OTree]:
        return [self.convert(n) for n in nodes]

    def text_of(self, node: Node) -> str:
        return source_text(node)

    def type_of_type(self, node: Node) -> TypeRef | None:
        return self.checker.type_of_type_node(node)

    def type_of_expression(self, node: Node) -> TypeRef | None:
        return self.checker.type_of_expression(node)

    def report(self, node: Node, message: str) -> None:
        """Record a diagnostic and keep going."""
        diagnostic = Diagnostic(node, message)
        logger.debug("diagnostic on %s: %s", node.kind.value, diagnostic)
        self._diagnostics.append(diagnostic)
