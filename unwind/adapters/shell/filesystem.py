"""
Filesystem discovery — pattern matching for the planning phase.

Read-only: nothing in this module creates, changes or removes a path.
Matching uses ``Path.glob`` from the longest literal prefix of the
pattern. Like shell globbing, a wildcard never matches a name starting
with ``.`` unless that pattern component starts with ``.`` itself.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

_MAGIC_CHARS = "*?["


class PatternError(ValueError):
    """A glob pattern is malformed."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid glob pattern {pattern!r}: {reason}")


def validate_pattern(pattern: str) -> None:
    """Reject patterns the matcher would otherwise treat as literals.

    Character classes follow fnmatch rules: a ``]`` right after ``[``
    or ``[!`` is a literal member, so ``[]]`` and ``[[]`` are valid.

    Raises:
        PatternError: Empty, relative, NUL-containing, or with an
            unterminated ``[`` character class.
    """
    if not pattern:
        raise PatternError(pattern, "pattern is empty")
    if "\x00" in pattern:
        raise PatternError(pattern, "pattern contains a NUL byte")
    if not pattern.startswith("/"):
        raise PatternError(pattern, "pattern must be absolute")

    i, n = 0, len(pattern)
    while i < n:
        if pattern[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < n and pattern[j] == "!":
            j += 1
        if j < n and pattern[j] == "]":
            j += 1
        close = pattern.find("]", j)
        if close == -1:
            raise PatternError(pattern, "unterminated character class")
        i = close + 1


def glob_paths(pattern: str) -> Iterator[Path]:
    """Lazily yield paths matching ``pattern`` in lexicographic order.

    The pattern is validated eagerly, so a bad pattern fails at call
    time rather than on first iteration.

    Raises:
        PatternError: If the pattern is malformed.
    """
    validate_pattern(pattern)
    return _iter_matches(pattern)


def _has_magic(part: str) -> bool:
    return any(char in part for char in _MAGIC_CHARS)


def _iter_matches(pattern: str) -> Iterator[Path]:
    parts = Path(pattern).parts
    split = next((i for i, part in enumerate(parts) if _has_magic(part)), len(parts))
    root = Path(*parts[:split])
    wildcards = parts[split:]

    if not wildcards:
        if root.exists():
            yield root
        return

    if not root.is_dir():
        logger.debug("Glob root %s is not a directory", root)
        return

    for match in sorted(root.glob("/".join(wildcards))):
        names = match.parts[split:]
        if any(
            name.startswith(".") and not part.startswith(".")
            for name, part in zip(names, wildcards)
        ):
            continue
        yield match
