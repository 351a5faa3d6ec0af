"""Interface the lookup engine expects from the host pinyin editor."""

from __future__ import annotations

from typing import Protocol

# Markers left in the auxiliary text of double pinyin editors: syllable
# separators and the cursor bar.
DOUBLE_PINYIN_MARKERS = " |"


class PhoneticEditor(Protocol):
    @property
    def text(self) -> str:
        """Raw phonetic text typed so far."""

    def full_pinyin_buffer(self) -> str:
        """Recompute and return the full pinyin spelling of a double pinyin input."""

    def refresh_candidates(self) -> None:
        """Rebuild the visible candidate list, keeping the cursor row."""


def normalize_double_pinyin(buffer: str) -> str:
    """Strip separators and cursor markers from a recomputed pinyin buffer."""

    return "".join(ch for ch in buffer if ch not in DOUBLE_PINYIN_MARKERS)


__all__ = ["DOUBLE_PINYIN_MARKERS", "PhoneticEditor", "normalize_double_pinyin"]
