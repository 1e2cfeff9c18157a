"""Shared utilities for backend visitors."""

from __future__ import annotations


def upper_first(s: str) -> str:
    """Uppercase the first character of a string."""
    return (s[0].upper() + s[1:]) if s else ""


def escape_string(value: str) -> str:
    """Escape a string for use in a C-family string literal (without quotes)."""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
        .replace("\f", "\\f")
        .replace("\v", "\\v")
        .replace("\x00", "\\0")
    )


def quote_string(value: str) -> str:
    """A complete double-quoted string literal."""
    return '"' + escape_string(value) + '"'
