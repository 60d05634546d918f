"""Block resolvers: turn identifiers into fully realized ``Block`` objects.

The navigation engine only depends on the ``BlockResolver`` protocol.
Concrete resolvers live in submodules and are imported lazily.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ..model import ReferenceKind

if TYPE_CHECKING:
    from ..model import Block

RESOLVER_NAMES: tuple[str, ...] = ("python", "nu")


class ResolutionError(Exception):
    """Raised when a resolver cannot produce a block for an identifier."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class BlockResolver(Protocol):
    """Anything that can turn an identifier into a realized ``Block``."""

    def resolve(self, identifier: object, kind: ReferenceKind) -> Block:
        """Return the block for ``identifier``.

        Raises ``ResolutionError`` with a user-facing reason on any failure.
        """
        ...


def make_resolver(name: str, **options) -> BlockResolver:
    """Return a resolver by CLI name (``python`` or ``nu``)."""
    if name == "python":
        from .bytecode import BytecodeResolver

        return BytecodeResolver()
    if name == "nu":
        from .nushell import NuResolver

        return NuResolver(**options)
    raise ValueError(f"unknown resolver: {name!r} (expected one of {', '.join(RESOLVER_NAMES)})")


__all__ = [
    "BlockResolver",
    "RESOLVER_NAMES",
    "ReferenceKind",
    "ResolutionError",
    "make_resolver",
]
