"""Rendering context - immutable flags threaded down the traversal."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

C = TypeVar("C", bound="RenderContext")


@dataclass(frozen=True)
class RenderContext:
    """Base for backend contexts. Abstract.

    A context is never modified. Deriving one for a subtree produces a new
    value; the parent's context stays valid for its other children.
    """

    def merge(self: C, **update: Any) -> C:
        """Copy of this context with the given fields replaced."""
        return dataclasses.replace(self, **update)


def merge(old: C, update: Mapping[str, Any]) -> C:
    """Derive a context from old, overriding exactly the fields in update.

    Raises TypeError for a field the context does not have.
    """
    if not update:
        return old
    return old.merge(**update)
