"""glossa - render typed example code in other languages."""

from .context import RenderContext, merge
from .diagnostics import (
    Diagnostic,
    GlossaError,
    SerializationError,
    UnknownTargetError,
    UnsupportedNodeError,
)
from .otree import EMPTY, OTree
from .renderer import Renderer
from .translate import BACKENDS, Translation, translate
from .types import TypeChecker
from .visitor import DefaultVisitor

__all__ = [
    "BACKENDS",
    "DefaultVisitor",
    "Diagnostic",
    "EMPTY",
    "GlossaError",
    "OTree",
    "RenderContext",
    "Renderer",
    "SerializationError",
    "Translation",
    "TypeChecker",
    "UnknownTargetError",
    "UnsupportedNodeError",
    "merge",
    "translate",
]
