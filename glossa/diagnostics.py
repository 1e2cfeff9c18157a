"""Diagnostics and errors raised during translation."""

from __future__ import annotations

from dataclasses import dataclass

from .syntax import Node


@dataclass(frozen=True)
class Diagnostic:
    """A problem found while rendering a node. Never stops the traversal."""

    node: Node
    message: str

    @property
    def line(self) -> int:
        return self.node.pos.line

    @property
    def col(self) -> int:
        return self.node.pos.col

    def __str__(self) -> str:
        if self.line > 0:
            return f"{self.line}:{self.col}: {self.message}"
        return self.message


class GlossaError(Exception):
    """Base for all glossa errors."""


class UnsupportedNodeError(GlossaError):
    """A node reached a visitor with no rule for its kind.

    This is a defect in the visitor's rule table, not in the input, and it
    aborts the whole translation.
    """

    def __init__(self, node: Node, msg: str):
        self.node: Node = node
        self.msg: str = msg
        self.line: int = node.pos.line
        self.col: int = node.pos.col
        super().__init__(msg + " at line " + str(self.line) + " col " + str(self.col))


class UnknownTargetError(GlossaError):
    """Requested a backend that is not registered."""


class SerializationError(GlossaError):
    """A dict does not describe a valid syntax tree or type."""
