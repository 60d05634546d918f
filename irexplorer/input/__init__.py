"""Input-layer public API for key decoding and session key dispatch.

Exports are split between low-level terminal decoding (`read_key`) and the
mode-aware handler used by the runtime loop.
"""

from .key_registry import KeyComboBinding, KeyComboRegistry
from .keys import handle_key, normal_key_registry
from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_key

__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "handle_key",
    "normal_key_registry",
    "read_key",
]
