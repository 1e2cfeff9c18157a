"""Pytest configuration for the glossa test suite."""

import pytest

from glossa.backend.csharp import CSharpVisitor
from glossa.renderer import Renderer


@pytest.fixture
def csharp() -> Renderer:
    """Fresh C# renderer on the default context."""
    return Renderer(CSharpVisitor())


@pytest.fixture
def render_csharp():
    """Render a node to C#, returning (text, diagnostic messages)."""

    def render(node, **options) -> tuple[str, list[str]]:
        renderer = Renderer(CSharpVisitor(**options))
        text = renderer.convert(node).render()
        return text, [d.message for d in renderer.diagnostics]

    return render
