"""Key-token to action dispatch table."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class KeyComboBinding:
    """One action reachable through any of ``combos``."""

    combos: tuple[str, ...]
    handler: Callable[[], None]
    description: str = ""


class KeyComboRegistry:
    """Exact-match key table; a later binding wins for a shared token."""

    def __init__(self) -> None:
        self._by_token: dict[str, KeyComboBinding] = {}
        self._order: list[KeyComboBinding] = []

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        """Add ``bindings`` in order and return ``self`` so calls can chain."""
        for binding in bindings:
            self._order.append(binding)
            self._by_token.update(dict.fromkeys(binding.combos, binding))
        return self

    def dispatch(self, key: str) -> bool:
        """Run the action bound to ``key``; ``False`` when nothing is bound."""
        binding = self._by_token.get(key)
        if binding is None:
            return False
        binding.handler()
        return True

    @property
    def bindings(self) -> tuple[KeyComboBinding, ...]:
        """Registered bindings in registration order."""
        return tuple(self._order)
