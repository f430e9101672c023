"""Shape type naming - the double-underscore fallback convention.

A binding name such as ``Content__Summary__Blog`` falls back to
``Content__Summary`` and then ``Content`` when no more specific binding
exists. The chain is a naming convention, not a type hierarchy.
"""

from __future__ import annotations

from typing import Iterator, Optional

DELIMITER = "__"


def parent_shape_type(name: str) -> Optional[str]:
    """Return ``name`` cut at its last delimiter, or None if it has no parent.

    A delimiter at position 0 does not count, so ``__Foo`` has no parent.
    """
    index = name.rfind(DELIMITER)
    if index > 0:
        return name[:index]
    return None


def shape_type_chain(name: str) -> Iterator[str]:
    """Yield ``name`` followed by each successively shorter parent."""
    scan: Optional[str] = name
    while scan is not None:
        yield scan
        scan = parent_shape_type(scan)


def base_shape_type(name: str) -> str:
    """Return the part of a binding name before its first delimiter."""
    index = name.find(DELIMITER)
    if index < 0:
        return name
    return name[:index]
