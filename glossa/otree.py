"""Output tree - generated code as structure, laid out into text in a second pass.

Rendering rules build OTree nodes and never think about columns: a node only
says how much its children are indented relative to itself, what separates
them, and whether they may start on a fresh line. OTreeSink turns the finished
tree into text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Union

Fragment = Union[str, "OTree", None]


@dataclass(frozen=True)
class OTree:
    """One node of generated output.

    prefix: fragments written before the children
    children: fragments written between prefix and suffix, joined by separator
    indent: columns added to every line break inside the children
    separator: text between consecutive children (None = block layout)
    suffix: fragment written after the children
    can_break_line: in block layout, start this node on a fresh line

    None fragments are dropped. Lists are stored as tuples.
    """

    prefix: tuple[Fragment, ...] = ()
    children: tuple[Fragment, ...] = ()
    indent: int = 0
    separator: str | None = None
    suffix: str | None = None
    can_break_line: bool = False

    def __init__(
        self,
        prefix: Iterable[Fragment] = (),
        children: Iterable[Fragment] = (),
        *,
        indent: int = 0,
        separator: str | None = None,
        suffix: str | None = None,
        can_break_line: bool = False,
    ) -> None:
        object.__setattr__(self, "prefix", tuple(p for p in prefix if p is not None))
        object.__setattr__(self, "children", tuple(c for c in children if _meaningful(c)))
        object.__setattr__(self, "indent", indent)
        object.__setattr__(self, "separator", separator)
        object.__setattr__(self, "suffix", suffix)
        object.__setattr__(self, "can_break_line", can_break_line)

    def write(self, sink: OTreeSink) -> None:
        for fragment in self.prefix:
            sink.write(fragment)
        pop_indent = sink.request_indent_change(self.indent if self.children else 0)
        block_layout = self.separator is None
        first = True
        for child in self.children:
            if not first and self.separator:
                sink.write(self.separator)
            if block_layout and isinstance(child, OTree) and child.can_break_line:
                sink.ensure_new_line()
            sink.write(child)
            first = False
        pop_indent()
        if self.suffix:
            sink.write(self.suffix)

    def is_empty(self) -> bool:
        return not self.prefix and not self.children and not self.suffix

    def render(self) -> str:
        """Flatten this tree into final text."""
        sink = OTreeSink()
        sink.write(self)
        return sink.text()

    def __str__(self) -> str:
        return self.render()


def _meaningful(fragment: Fragment) -> bool:
    if fragment is None:
        return False
    if isinstance(fragment, OTree):
        return not fragment.is_empty()
    return fragment != ""


EMPTY = OTree()


@dataclass
class OTreeSink:
    """Accumulates text fragments while tracking indentation."""

    _indent_levels: list[int] = field(default_factory=lambda: [0])
    _fragments: list[str] = field(default_factory=list)
    _line: str = ""  # Text written to the current line so far

    @property
    def current_indent(self) -> int:
        return self._indent_levels[-1]

    def write(self, fragment: Fragment) -> None:
        if fragment is None:
            return
        if isinstance(fragment, OTree):
            fragment.write(self)
            return
        lines = fragment.split("\n")
        self._append(lines[0])
        for line in lines[1:]:
            self._fragments.append("\n")
            self._line = ""
            self._append(" " * self.current_indent + line)

    def ensure_new_line(self) -> None:
        """Break the line unless nothing but whitespace is on it yet."""
        if self._line.strip():
            self.write("\n")

    def request_indent_change(self, delta: int) -> Callable[[], None]:
        """Push an indent level; returns the function that pops it."""
        self._indent_levels.append(self.current_indent + delta)

        def pop() -> None:
            self._indent_levels.pop()

        return pop

    def text(self) -> str:
        return _TRAILING_WS.sub("", "".join(self._fragments))

    def _append(self, text: str) -> None:
        if text:
            self._fragments.append(text)
            self._line += text


_TRAILING_WS = re.compile(r"[ \t]+$", re.MULTILINE)
